"""
Single-event import from a CSV of game scores.

Each row is: team1 player1, team1 player2, team2 player1, team2 player2,
score1, score2. An optional first row starting with EVENT carries the event
size in its fourth cell. Placements are inferred from the last games, which
only works for the 4-player (final) and 8-player (bronze, final) formats.
"""
import csv
import io

from league.exceptions import ImportFormatError, UnsupportedImportSizeError
from league.models import Event, GameRecord, Placements

CSV_IMPORT_SIZES = (4, 8)


def _parse_row(row, line):
    try:
        s1 = int(str(row[4]).strip())
        s2 = int(str(row[5]).strip())
    except ValueError:
        raise ImportFormatError(f'Row {line}: scores must be whole numbers')
    names = [str(cell).strip() for cell in row[:4]]
    if not all(names):
        raise ImportFormatError(f'Row {line}: every game needs four player names')
    if s1 < 0 or s2 < 0:
        raise ImportFormatError(f'Row {line}: scores cannot be negative')
    return GameRecord(names[:2], names[2:4], s1, s2, stage='manual')


def _decided(game, line):
    if game.winning_team() is None:
        raise ImportFormatError(f'Game {line} is tied and cannot decide a placement')
    return list(game.winning_team()), list(game.losing_team())


def parse_event_csv(text: str, size=None) -> Event:
    """
    Build an unsaved event from CSV text.

    Args:
        text: CSV content
        size: event size; required unless the file has an EVENT header row

    Raises:
        ImportFormatError: empty file, bad scores, missing size
        UnsupportedImportSizeError: size other than 4 or 8
    """
    rows = [r for r in csv.reader(io.StringIO(text)) if r and len(r) >= 6]
    if not rows:
        raise ImportFormatError('CSV seems empty')

    if str(rows[0][0]).strip().upper() == 'EVENT':
        try:
            size = int(str(rows[0][3]).strip())
        except ValueError:
            raise ImportFormatError('EVENT row must carry the event size in its fourth column')
        rows = rows[1:]

    if size is None:
        raise ImportFormatError('Event size is missing (add an EVENT row or pass the size)')
    if size not in CSV_IMPORT_SIZES:
        raise UnsupportedImportSizeError(
            f'CSV auto-placements are supported for 4 and 8 players; use the guided matchday for size {size}'
        )

    games = [_parse_row(row, i + 1) for i, row in enumerate(rows)]

    if size == 4:
        if not games:
            raise ImportFormatError('A 4-player CSV needs at least the final game')
        champions, runners_up = _decided(games[-1], len(games))
        placements = {1: champions, 2: runners_up}
    else:
        if len(games) < 2:
            raise ImportFormatError('An 8-player CSV needs the bronze game and the final as its last two rows')
        third, fourth = _decided(games[-2], len(games) - 1)
        champions, runners_up = _decided(games[-1], len(games))
        placements = {1: champions, 2: runners_up, 3: third, 4: fourth}

    return Event(None, size, Placements(size, placements), games)
