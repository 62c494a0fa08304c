"""
Validation of ledger payloads (imported JSON, the YAML ledger file, API input).

A payload is checked completely before anything is built from it, so a bad
entry rejects the whole import.
"""
from typing import Dict, List

from league.exceptions import ImportFormatError, InvalidPlacementError
from league.models import Event, GameRecord, clean_name
from league.points import is_supported_size


def _require_int(value, what: str, minimum=None) -> int:
    if isinstance(value, bool):
        raise ImportFormatError(f'{what} must be a whole number, got {value!r}')
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    elif isinstance(value, str) and value.strip().lstrip('-').isdigit():
        value = int(value.strip())
    if not isinstance(value, int):
        raise ImportFormatError(f'{what} must be a whole number, got {value!r}')
    if minimum is not None and value < minimum:
        raise ImportFormatError(f'{what} must be at least {minimum}, got {value}')
    return value


def _parse_team(team, what: str):
    if not isinstance(team, (list, tuple)) or len(team) != 2:
        raise ImportFormatError(f'{what} must list exactly two players')
    names = []
    for player in team:
        if not isinstance(player, str) or not clean_name(player):
            raise ImportFormatError(f'{what} has an invalid player name: {player!r}')
        names.append(clean_name(player))
    return names


def parse_game(data, where: str = 'game') -> GameRecord:
    """Build a GameRecord from its dict form, or raise ImportFormatError."""
    if not isinstance(data, dict):
        raise ImportFormatError(f'{where} must be an object')
    for key in ('team1', 'team2', 's1', 's2'):
        if key not in data:
            raise ImportFormatError(f'{where} is missing "{key}"')
    stage = data.get('stage')
    if stage is not None and not isinstance(stage, str):
        raise ImportFormatError(f'{where} has an invalid stage: {stage!r}')
    label = data.get('label')
    if label is not None and not isinstance(label, str):
        raise ImportFormatError(f'{where} has an invalid label: {label!r}')
    return GameRecord(
        _parse_team(data['team1'], f'{where} team1'),
        _parse_team(data['team2'], f'{where} team2'),
        _require_int(data['s1'], f'{where} s1', minimum=0),
        _require_int(data['s2'], f'{where} s2', minimum=0),
        stage=stage,
        label=label,
    )


def _parse_pool_audit(audit, where: str):
    if audit is None:
        return None
    if not isinstance(audit, dict):
        raise ImportFormatError(f'{where} poolAudit must be an object')
    rows = audit.get('rows', [])
    notes = audit.get('notes', [])
    if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
        raise ImportFormatError(f'{where} poolAudit rows must be a list of objects')
    if not isinstance(notes, list) or not all(isinstance(n, str) for n in notes):
        raise ImportFormatError(f'{where} poolAudit notes must be a list of strings')
    return {'rows': rows, 'notes': notes}


def parse_event(data, where: str = 'event') -> Event:
    """Build an Event from its dict form, or raise ImportFormatError."""
    if not isinstance(data, dict):
        raise ImportFormatError(f'{where} must be an object')
    if 'size' not in data:
        raise ImportFormatError(f'{where} is missing "size"')
    size = _require_int(data['size'], f'{where} size', minimum=1)

    placements = data.get('placements')
    if placements is None:
        placements = {}
    if not isinstance(placements, dict):
        raise ImportFormatError(f'{where} placements must be an object')
    for rank, players in placements.items():
        if not isinstance(players, list) or not all(isinstance(p, str) for p in players):
            raise ImportFormatError(f'{where} placement {rank} must be a list of names')

    games = data.get('gameStats')
    if games is None:
        games = []
    if not isinstance(games, list):
        raise ImportFormatError(f'{where} gameStats must be a list')
    records = [parse_game(g, f'{where} game {i + 1}') for i, g in enumerate(games)]

    event_id = data.get('id')
    if event_id is not None:
        event_id = _require_int(event_id, f'{where} id')

    try:
        return Event(event_id, size, placements, records, pool_audit=_parse_pool_audit(data.get('poolAudit'), where))
    except InvalidPlacementError as e:
        raise ImportFormatError(f'{where}: {e}')


def parse_events(payload, first_id: int = 1) -> List[Event]:
    """
    Validate a full ledger payload and build its events in order.

    Events without an id are numbered from first_id, or after the largest id
    present if that is higher. Duplicate ids are rejected.
    """
    if not isinstance(payload, list):
        raise ImportFormatError('Events ledger must be a list of events')

    events = [parse_event(item, f'event {i + 1}') for i, item in enumerate(payload)]

    seen = set()
    for event in events:
        if event.id is None:
            continue
        if event.id in seen:
            raise ImportFormatError(f'Duplicate event id: {event.id}')
        seen.add(event.id)

    next_id = max([first_id] + [i + 1 for i in seen])
    numbered = []
    for event in events:
        if event.id is None:
            event = event.with_id(next_id)
            next_id += 1
        numbered.append(event)
    return numbered


def event_from_request(data: Dict) -> Event:
    """Build an unsaved manual event from API input; any id given is ignored."""
    if not isinstance(data, dict):
        raise ImportFormatError('Request body must be an object')
    payload = dict(data)
    payload['id'] = None
    games = payload.get('gameStats')
    if isinstance(games, list):
        payload['gameStats'] = [
            dict(g, stage=g.get('stage') or 'manual') if isinstance(g, dict) else g
            for g in games
        ]
    event = parse_event(payload, 'manual event')
    if not is_supported_size(event.size):
        raise ImportFormatError(f'Unsupported event size: {event.size}')
    return event
