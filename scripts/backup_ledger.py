#!/usr/bin/env python3
"""
League Ledger Backup Tool

Downloads the events ledger from a running league server and writes it to a
timestamped JSON file. The ledger is the only data that needs backing up;
standings are always recomputed from it.

Usage:
    python scripts/backup_ledger.py --url http://localhost:5000
    python scripts/backup_ledger.py --url http://localhost:5000 --output /path/to/ledger.json

Exit codes:
    0: Success
    2: Server unreachable or returned an error
    3: Response is not a valid events ledger
    4: Backup write failure
"""
import argparse
import json
import os
import sys
from datetime import datetime

import requests

EXPORT_PATH = '/api/export/events'


def fetch_ledger(base_url: str, timeout: int = 30):
    """Download the ledger. Returns the parsed list, or None on failure."""
    url = base_url.rstrip('/') + EXPORT_PATH
    print(f"Downloading ledger from {url}...")
    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException as e:
        print(f"Error: Failed to reach {url}: {e}", file=sys.stderr)
        return None

    if response.status_code != 200:
        print(f"Error: Server returned HTTP {response.status_code}", file=sys.stderr)
        return None

    try:
        return response.json()
    except ValueError:
        print("Error: Server response is not JSON", file=sys.stderr)
        return False


def validate_ledger(events) -> bool:
    """Check the downloaded payload looks like an events ledger."""
    if not isinstance(events, list):
        print("Error: Expected a list of events", file=sys.stderr)
        return False
    for i, event in enumerate(events):
        if not isinstance(event, dict) or 'size' not in event or 'placements' not in event:
            print(f"Error: Entry {i + 1} is not an event", file=sys.stderr)
            return False
    return True


def default_output_path() -> str:
    timestamp = datetime.now().strftime('%Y%m%d-%H%M%S')
    return os.path.join('backups', f'league-ledger-{timestamp}.json')


def write_backup(events, output_path: str) -> bool:
    try:
        directory = os.path.dirname(os.path.abspath(output_path))
        os.makedirs(directory, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(events, f, indent=2)
    except OSError as e:
        print(f"Error: Failed to write backup: {e}", file=sys.stderr)
        return False
    return True


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Back up the league events ledger from a running server',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument('--url', required=True, help='Base URL of the league server')
    parser.add_argument('--output', help='Output file (default: backups/league-ledger-<timestamp>.json)')
    parser.add_argument('--timeout', type=int, default=30, help='Request timeout in seconds')
    args = parser.parse_args(argv)

    events = fetch_ledger(args.url, timeout=args.timeout)
    if events is None:
        return 2
    if events is False or not validate_ledger(events):
        return 3

    output_path = args.output or default_output_path()
    if not write_backup(events, output_path):
        return 4

    print(f"Backup complete: {output_path} ({len(events)} events)")
    return 0


if __name__ == '__main__':
    sys.exit(main())
