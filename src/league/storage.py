"""
YAML persistence for the ledger, the standings cache and the matchday session.
"""
import logging
import os
from typing import List

import yaml
from filelock import FileLock

logger = logging.getLogger(__name__)


def _convert_to_serializable(obj):
    """Convert tuples to lists recursively for YAML serialization."""
    if isinstance(obj, dict):
        return {k: _convert_to_serializable(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [_convert_to_serializable(item) for item in obj]
    else:
        return obj


def read_yaml(path, default=None):
    """Load a YAML file, returning default when it is missing or empty."""
    if not os.path.exists(path):
        return default
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)
    return default if data is None else data


def write_yaml(path, data):
    """Write data to a YAML file through a temporary file and rename."""
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    tmp_path = f'{path}.tmp'
    with open(tmp_path, 'w', encoding='utf-8') as f:
        yaml.safe_dump(_convert_to_serializable(data), f, default_flow_style=False, sort_keys=False)
    os.replace(tmp_path, path)


class YamlLedgerStore:
    """Ledger persisted as YAML: the event dicts plus the next event id."""

    def __init__(self, path, lock=None):
        self.path = path
        self.lock = lock or FileLock(f'{path}.lock', timeout=10)

    def load(self) -> List:
        data = read_yaml(self.path, default={'events': []})
        if isinstance(data, list):
            return data
        if not isinstance(data, dict) or not isinstance(data.get('events', []), list):
            raise ValueError(f'{self.path} does not contain an events list')
        return data.get('events', [])

    def load_next_id(self):
        data = read_yaml(self.path, default=None)
        if isinstance(data, dict) and isinstance(data.get('next_id'), int):
            return data['next_id']
        return None

    def save(self, events: List, next_id=None):
        os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
        data = {'events': events}
        if next_id is not None:
            data['next_id'] = next_id
        with self.lock:
            write_yaml(self.path, data)
        logger.debug('Saved %s events to %s', len(events), self.path)


class MemoryLedgerStore:
    """In-memory store for tests and one-off computations."""

    def __init__(self, events=None, next_id=None):
        self.events = list(events or [])
        self.next_id = next_id
        self.saves = 0

    def load(self) -> List:
        return list(self.events)

    def load_next_id(self):
        return self.next_id

    def save(self, events: List, next_id=None):
        self.events = list(events)
        self.next_id = next_id
        self.saves += 1


def save_standings_cache(path, rows, lock=None):
    """Write the derived standings; rebuilt from the ledger on every change."""
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    lock = lock or FileLock(f'{path}.lock', timeout=10)
    with lock:
        write_yaml(path, {'standings': rows})


def load_matchday(path):
    """Load the saved matchday session dict, or None."""
    return read_yaml(path, default=None)


def save_matchday(path, state_dict, lock=None):
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    lock = lock or FileLock(f'{path}.lock', timeout=10)
    with lock:
        write_yaml(path, state_dict)


def clear_matchday(path):
    if os.path.exists(path):
        os.remove(path)
