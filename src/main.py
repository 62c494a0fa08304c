# Command line entry point for the doubles league

import argparse
import json
import os
import sys

from league.csv_import import parse_event_csv
from league.exceptions import ImportFormatError
from league.ledger import Ledger
from league.schedule import describe_entry, generate_bracket_schedule, generate_pool_schedule
from league.settings import load_settings
from league.storage import YamlLedgerStore
from league.templates import structural_places

STANDINGS_COLUMNS = [
    ('Rank', 'rank'),
    ('Player', 'player'),
    ('Points', 'points'),
    ('W', 'wins'),
    ('L', 'losses'),
    ('PF', 'points_for'),
    ('PA', 'points_against'),
    ('Slam', 'slam_wins'),
    ('Sig', 'signature_wins'),
    ('Chal', 'challenger_wins'),
    ('AvgDiff', 'avg_diff'),
]


def default_data_dir():
    script_dir = os.path.dirname(__file__)
    base_dir = os.path.dirname(script_dir)
    return os.environ.get('LEAGUE_DATA_DIR', os.path.join(base_dir, 'data'))


def open_ledger(data_dir):
    settings = load_settings(data_dir)
    return Ledger(YamlLedgerStore(os.path.join(data_dir, settings['ledger_file'])))


def format_table(rows, columns):
    """Render rows of dicts as a fixed-width text table."""
    widths = []
    for title, key in columns:
        cells = [str(row.get(key, '')) for row in rows]
        widths.append(max([len(title)] + [len(c) for c in cells]))
    lines = ['  '.join(title.ljust(w) for (title, _), w in zip(columns, widths))]
    for row in rows:
        lines.append('  '.join(str(row.get(key, '')).ljust(w) for (_, key), w in zip(columns, widths)))
    return '\n'.join(lines)


def print_standings(ledger):
    rows = ledger.standings()
    if not rows:
        print("No events recorded yet.")
        return
    print(format_table(rows, STANDINGS_COLUMNS))


def print_events(ledger):
    events = ledger.events
    if not events:
        print("No events yet.")
        return
    for i, event in enumerate(events):
        placements = ', '.join(f"{rank}: {' & '.join(players)}" for rank, players in event.placements.items())
        print(f"#{i + 1} (id {event.id}) size {event.size} - {placements} - {len(event.games)} games")


def print_schedule(size):
    print(f"# Pool ({size} players)")
    for entry in generate_pool_schedule(size):
        print(describe_entry(entry))
    print()
    print("# Bracket")
    for entry in generate_bracket_schedule(size):
        print(describe_entry(entry))
    for rank, letter in structural_places(size).items():
        print(f"{letter} is placed {rank} by structure")


def build_parser():
    parser = argparse.ArgumentParser(description='Doubles league standings and matchday tools')
    parser.add_argument('--data-dir', default=None, help='Directory holding events.yaml and settings.yaml')
    sub = parser.add_subparsers(dest='command', required=True)

    sub.add_parser('standings', help='Print season standings')
    sub.add_parser('events', help='List ledger events')

    schedule = sub.add_parser('schedule', help='Print the pool and bracket design for a size')
    schedule.add_argument('size', type=int, choices=[4, 5, 6, 7, 8])

    import_csv = sub.add_parser('import-csv', help='Append one event from a CSV of games (4 or 8 players)')
    import_csv.add_argument('file')
    import_csv.add_argument('--size', type=int, default=None)

    import_json = sub.add_parser('import-json', help='Replace the ledger with a JSON export')
    import_json.add_argument('file')

    export_json = sub.add_parser('export-json', help='Write the ledger as JSON')
    export_json.add_argument('file')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    data_dir = args.data_dir or default_data_dir()

    if args.command == 'schedule':
        print_schedule(args.size)
        return 0

    ledger = open_ledger(data_dir)

    if args.command == 'standings':
        print_standings(ledger)
    elif args.command == 'events':
        print_events(ledger)
    elif args.command == 'import-csv':
        with open(args.file, mode='r', encoding='utf-8-sig') as file:
            text = file.read()
        try:
            event = ledger.append(parse_event_csv(text, size=args.size))
        except ImportFormatError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print(f"CSV event imported as id {event.id}")
    elif args.command == 'import-json':
        try:
            with open(args.file, mode='r', encoding='utf-8') as file:
                payload = json.load(file)
            ledger.replace_all(payload)
        except (json.JSONDecodeError, ImportFormatError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print(f"Events ledger imported ({len(ledger.events)} events)")
    elif args.command == 'export-json':
        with open(args.file, mode='w', encoding='utf-8') as file:
            json.dump(ledger.export_all(), file, indent=2)
        print(f"Exported {len(ledger.events)} events to {args.file}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
