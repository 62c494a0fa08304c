"""
League settings stored in settings.yaml inside the data directory.
"""
import logging
import os

import yaml

logger = logging.getLogger(__name__)

SETTINGS_FILENAME = 'settings.yaml'


def get_default_settings():
    """Return default settings values."""
    return {
        'score_warnings': True,
        'seeding_method': 'standings',
        'ledger_file': 'events.yaml',
        'standings_cache_file': 'standings.yaml',
        'matchday_file': 'matchday.yaml',
    }


def load_settings(data_dir):
    """Load settings from YAML, filling anything missing with defaults."""
    settings = get_default_settings()
    path = os.path.join(data_dir, SETTINGS_FILENAME)
    if not os.path.exists(path):
        return settings
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.warning('Failed to parse %s: %s', path, e)
        return settings
    if isinstance(data, dict):
        settings.update({k: v for k, v in data.items() if k in settings})
    return settings


def save_settings(data_dir, settings):
    """Save settings to YAML file."""
    os.makedirs(data_dir, exist_ok=True)
    with open(os.path.join(data_dir, SETTINGS_FILENAME), 'w', encoding='utf-8') as f:
        yaml.dump(settings, f, default_flow_style=False)
