"""
Flask web application for the doubles league.

Serves standings, the events ledger and the guided matchday as a JSON API.
"""
import os
import json
from datetime import datetime
from filelock import FileLock
from flask import Flask, request, jsonify, Response
from league.exceptions import (
    ImportFormatError,
    InvalidScoreError,
    LeagueError,
    MatchdayStateError,
    RosterError,
    ScoreConfirmationRequired,
)
from league.csv_import import parse_event_csv
from league.ledger import Ledger
from league.matchday import MatchdayState, current_match, finish, start_matchday, submit_score, FINISHED
from league.points import POINTS_TABLE, is_supported_size
from league.schedule import describe_entry, generate_bracket_schedule, generate_pool_schedule
from league.settings import load_settings
from league.storage import (
    YamlLedgerStore,
    clear_matchday,
    load_matchday,
    save_matchday,
    save_standings_cache,
)
from league.templates import structural_places
from league.validation import event_from_request

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('LEAGUE_DATA_DIR', os.path.join(BASE_DIR, 'data'))

MAX_UPLOAD_SIZE = 10 * 1024 * 1024  # 10 MB
app.config['MAX_CONTENT_LENGTH'] = MAX_UPLOAD_SIZE


_locks = {}


def _data_lock() -> FileLock:
    """One file lock per data directory, shared by every write."""
    os.makedirs(DATA_DIR, exist_ok=True)
    if DATA_DIR not in _locks:
        _locks[DATA_DIR] = FileLock(os.path.join(DATA_DIR, '.lock'), timeout=10)
    return _locks[DATA_DIR]


def _settings() -> dict:
    return load_settings(DATA_DIR)


def _file_path(setting: str) -> str:
    return os.path.join(DATA_DIR, _settings()[setting])


def load_ledger() -> Ledger:
    """Load the events ledger from YAML and fold the standings."""
    return Ledger(YamlLedgerStore(_file_path('ledger_file'), lock=_data_lock()))


def save_standings(ledger: Ledger):
    """Refresh the derived standings cache after a ledger change."""
    save_standings_cache(_file_path('standings_cache_file'), ledger.standings(), lock=_data_lock())


def load_matchday_state() -> MatchdayState:
    """Load the in-progress matchday, or an idle state."""
    path = _file_path('matchday_file')
    try:
        return MatchdayState.from_dict(load_matchday(path))
    except (KeyError, TypeError, ValueError) as e:
        app.logger.warning(f'Failed to parse {path}: {e}')
        return MatchdayState.idle()


def save_matchday_state(state: MatchdayState):
    save_matchday(_file_path('matchday_file'), state.to_dict(), lock=_data_lock())


def matchday_payload(state: MatchdayState) -> dict:
    """Describe a matchday session for the client."""
    return {
        'phase': state.phase,
        'size': state.size,
        'method': state.method,
        'pool_letters': state.pool_letters,
        'bracket_letters': state.bracket_letters,
        'current_match': current_match(state),
        'results': [r.to_dict() for r in state.results],
        'pool_audit': state.pool_audit,
    }


def _read_upload_text():
    """Return text from an uploaded 'file' field, or the raw request body."""
    file = request.files.get('file')
    if file and file.filename:
        return file.read().decode('utf-8-sig')
    return request.get_data(as_text=True)


@app.route('/api/standings')
def api_standings():
    """Season standings, best first."""
    ledger = load_ledger()
    return jsonify({'standings': ledger.standings()})


@app.route('/api/events', methods=['GET'])
def api_events():
    ledger = load_ledger()
    return jsonify({'events': ledger.export_all()})


@app.route('/api/events', methods=['POST'])
def api_add_event():
    """API endpoint to add a manual placement event."""
    data = request.get_json(silent=True)
    try:
        event = event_from_request(data)
    except ImportFormatError as e:
        return jsonify({'error': str(e)}), 400

    with _data_lock():
        ledger = load_ledger()
        stored = ledger.append(event)
        save_standings(ledger)
    app.logger.info(f'Manual event {stored.id} added (size {stored.size})')
    return jsonify({'success': True, 'event': stored.to_dict(), 'standings': ledger.standings()})


@app.route('/api/events/<int:event_id>', methods=['GET'])
def api_get_event(event_id):
    event = load_ledger().get(event_id)
    if event is None:
        return jsonify({'error': f'Event {event_id} not found'}), 404
    return jsonify(event.to_dict())


@app.route('/api/events/<int:event_id>', methods=['DELETE'])
def api_delete_event(event_id):
    """Delete one event; standings are recomputed from the rest."""
    with _data_lock():
        ledger = load_ledger()
        if not ledger.delete_by_id(event_id):
            return jsonify({'error': f'Event {event_id} not found'}), 404
        save_standings(ledger)
    app.logger.info(f'Event {event_id} deleted')
    return jsonify({'success': True, 'standings': ledger.standings()})


@app.route('/api/events/undo', methods=['POST'])
def api_undo_event():
    """Remove the most recent event."""
    with _data_lock():
        ledger = load_ledger()
        removed = ledger.undo_last()
        if removed is None:
            return jsonify({'error': 'Nothing to undo'}), 400
        save_standings(ledger)
    app.logger.info(f'Event {removed.id} undone')
    return jsonify({'success': True, 'removed': removed.to_dict(), 'standings': ledger.standings()})


@app.route('/api/export/events')
def api_export_events():
    """Download the events ledger as JSON."""
    ledger = load_ledger()
    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    return Response(
        json.dumps(ledger.export_all(), indent=2),
        mimetype='application/json',
        headers={'Content-Disposition': f'attachment; filename=league-events-ledger_{timestamp}.json'},
    )


@app.route('/api/import/events', methods=['POST'])
def api_import_events():
    """Replace the events ledger with an uploaded JSON list."""
    try:
        payload = json.loads(_read_upload_text() or 'null')
    except (json.JSONDecodeError, UnicodeDecodeError):
        return jsonify({'error': 'Invalid JSON'}), 400

    with _data_lock():
        ledger = load_ledger()
        try:
            ledger.replace_all(payload)
        except ImportFormatError as e:
            app.logger.warning(f'Rejected events import: {e}')
            return jsonify({'error': str(e)}), 400
        save_standings(ledger)
    app.logger.info(f'Events ledger imported: {len(ledger.events)} events')
    return jsonify({'success': True, 'count': len(ledger.events), 'standings': ledger.standings()})


@app.route('/api/import/csv', methods=['POST'])
def api_import_csv():
    """Append one event built from a CSV of game scores (4 or 8 players)."""
    size = request.values.get('size')
    try:
        size = int(size) if size else None
    except ValueError:
        return jsonify({'error': f'Invalid size: {size}'}), 400

    try:
        event = parse_event_csv(_read_upload_text(), size=size)
    except UnicodeDecodeError:
        return jsonify({'error': 'CSV parse failed'}), 400
    except ImportFormatError as e:
        return jsonify({'error': str(e)}), 400

    with _data_lock():
        ledger = load_ledger()
        stored = ledger.append(event)
        save_standings(ledger)
    app.logger.info(f'CSV event {stored.id} imported (size {stored.size})')
    return jsonify({'success': True, 'event': stored.to_dict(), 'standings': ledger.standings()})


@app.route('/api/schedule/<int:size>')
def api_schedule(size):
    """Show the pool and bracket design for a roster size."""
    if not is_supported_size(size):
        return jsonify({'error': f'Unsupported event size: {size}'}), 400
    return jsonify({
        'size': size,
        'tier': POINTS_TABLE[size]['label'],
        'awards': POINTS_TABLE[size]['awards'],
        'pool': [describe_entry(e) for e in generate_pool_schedule(size)],
        'bracket': [describe_entry(e) for e in generate_bracket_schedule(size)],
        'structural_places': structural_places(size),
    })


@app.route('/api/matchday', methods=['GET'])
def api_matchday():
    return jsonify(matchday_payload(load_matchday_state()))


@app.route('/api/matchday/start', methods=['POST'])
def api_matchday_start():
    """Seed a roster and start a guided matchday."""
    data = request.get_json(silent=True) or {}
    roster = data.get('roster', [])
    if isinstance(roster, str):
        roster = [name for name in roster.split(',') if name.strip()]
    method = data.get('method') or _settings()['seeding_method']
    try:
        size = int(data.get('size'))
    except (TypeError, ValueError):
        return jsonify({'error': 'Missing or invalid event size'}), 400

    with _data_lock():
        state = load_matchday_state()
        if state.is_active:
            return jsonify({'error': 'A matchday is already in progress; abandon it first'}), 409
        ledger = load_ledger()
        try:
            state = start_matchday(roster, ledger.aggregates, size, method)
        except (RosterError, ValueError) as e:
            return jsonify({'error': str(e)}), 400
        save_matchday_state(state)
    app.logger.info(f'Matchday started: size {size}, letters {state.pool_letters}')
    return jsonify(matchday_payload(state))


@app.route('/api/matchday/score', methods=['POST'])
def api_matchday_score():
    """Submit the score of the current match."""
    data = request.get_json(silent=True) or {}
    confirm = bool(data.get('confirm', False))

    with _data_lock():
        state = load_matchday_state()
        try:
            state = submit_score(state, data.get('s1'), data.get('s2'), confirm=confirm,
                                 warnings_enabled=_settings()['score_warnings'])
        except ScoreConfirmationRequired as e:
            return jsonify({'confirm_required': True, 'warnings': e.warnings}), 409
        except (InvalidScoreError, MatchdayStateError) as e:
            return jsonify({'error': str(e)}), 400

        if state.phase != FINISHED:
            save_matchday_state(state)
            return jsonify(matchday_payload(state))

        idle, event = finish(state)
        ledger = load_ledger()
        stored = ledger.append(event)
        save_standings(ledger)
        clear_matchday(_file_path('matchday_file'))

    app.logger.info(f'Matchday event {stored.id} added: {stored.placements.to_dict()}')
    payload = matchday_payload(idle)
    payload.update({'finished': True, 'event': stored.to_dict(), 'standings': ledger.standings()})
    return jsonify(payload)


@app.route('/api/matchday/abandon', methods=['POST'])
def api_matchday_abandon():
    """Discard the matchday in progress; the ledger is not touched."""
    with _data_lock():
        clear_matchday(_file_path('matchday_file'))
    return jsonify({'success': True, 'phase': 'idle'})


@app.errorhandler(LeagueError)
def handle_league_error(e):
    app.logger.warning(f'Unhandled league error: {e}')
    return jsonify({'error': str(e)}), 400


if __name__ == '__main__':
    app.run(debug=True, port=5000)
