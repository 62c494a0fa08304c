"""
Guided matchday: one score at a time, pool phase then bracket.

A matchday is an immutable MatchdayState value moved along by pure
functions. Phases:

    idle -> pool -> reseeding -> bracket -> finished -> (idle)

Nothing here touches storage. The caller persists the session between
requests and appends the finished event to the ledger.
"""
import logging
from typing import Dict, List, Optional

from league.exceptions import InvalidScoreError, MatchdayStateError, ScoreConfirmationRequired
from league.models import Event, MatchResult, ScheduleEntry
from league.placements import compute_placements
from league.pool_standings import calculate_pool_standings, reseed_letters
from league.schedule import generate_bracket_schedule, generate_pool_schedule, resolve_teams
from league.seeding import assign_letters

logger = logging.getLogger(__name__)

IDLE = 'idle'
POOL = 'pool'
RESEEDING = 'reseeding'
BRACKET = 'bracket'
FINISHED = 'finished'
PHASES = (IDLE, POOL, RESEEDING, BRACKET, FINISHED)

TIE_WARNING = 'Games cannot end tied; confirm to give the match to team 2.'


class MatchdayState:
    """Snapshot of a guided matchday."""

    def __init__(self, phase=IDLE, size=None, roster=None, method=None,
                 pool_letters=None, bracket_letters=None, schedule=None,
                 index=0, results=None, pool_audit=None, event=None):
        if phase not in PHASES:
            raise ValueError(f'Unknown matchday phase: {phase}')
        self.phase = phase
        self.size = size
        self.roster = list(roster or [])
        self.method = method
        self.pool_letters = dict(pool_letters or {})
        self.bracket_letters = dict(bracket_letters or {})
        self.schedule = list(schedule or [])
        self.index = index
        self.results = list(results or [])
        self.pool_audit = pool_audit
        self.event = event

    @classmethod
    def idle(cls) -> 'MatchdayState':
        return cls()

    def replace(self, **changes) -> 'MatchdayState':
        values = {
            'phase': self.phase,
            'size': self.size,
            'roster': self.roster,
            'method': self.method,
            'pool_letters': self.pool_letters,
            'bracket_letters': self.bracket_letters,
            'schedule': self.schedule,
            'index': self.index,
            'results': self.results,
            'pool_audit': self.pool_audit,
            'event': self.event,
        }
        values.update(changes)
        return MatchdayState(**values)

    @property
    def is_active(self) -> bool:
        return self.phase in (POOL, BRACKET)

    @property
    def pool_length(self) -> int:
        return sum(1 for e in self.schedule if e.phase == 'pool')

    @property
    def total_matches(self) -> int:
        """Matches in the whole day, including bracket entries not yet expanded."""
        if self.phase in (IDLE, POOL):
            return len(self.schedule) + len(generate_bracket_schedule(self.size)) if self.size else 0
        return len(self.schedule)

    def results_by_label(self) -> Dict[str, MatchResult]:
        return {r.label: r for r in self.results if r.label}

    def letters_for(self, entry: ScheduleEntry) -> Dict[str, str]:
        return self.pool_letters if entry.phase == 'pool' else self.bracket_letters

    def current_entry(self) -> Optional[ScheduleEntry]:
        if not self.is_active or self.index >= len(self.schedule):
            return None
        return self.schedule[self.index]

    def game_records(self):
        return [r.to_game_record() for r in self.results]

    def to_dict(self) -> Dict:
        return {
            'phase': self.phase,
            'size': self.size,
            'roster': list(self.roster),
            'method': self.method,
            'pool_letters': dict(self.pool_letters),
            'bracket_letters': dict(self.bracket_letters),
            'schedule': [e.to_dict() for e in self.schedule],
            'index': self.index,
            'results': [r.to_dict() for r in self.results],
            'pool_audit': self.pool_audit,
            'event': self.event.to_dict() if self.event else None,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> 'MatchdayState':
        if not data:
            return cls.idle()
        return cls(
            phase=data.get('phase', IDLE),
            size=data.get('size'),
            roster=data.get('roster'),
            method=data.get('method'),
            pool_letters=data.get('pool_letters'),
            bracket_letters=data.get('bracket_letters'),
            schedule=[ScheduleEntry.from_dict(e) for e in data.get('schedule') or []],
            index=data.get('index', 0),
            results=[MatchResult.from_dict(r) for r in data.get('results') or []],
            pool_audit=data.get('pool_audit'),
            event=Event.from_dict(data['event']) if data.get('event') else None,
        )

    def __repr__(self):
        return f"MatchdayState(phase={self.phase}, size={self.size}, index={self.index}/{len(self.schedule)})"


def start_matchday(roster, aggregates, size: int, method: str = 'standings') -> MatchdayState:
    """Seed the roster and lay out the pool schedule.

    Raises RosterError / RosterSizeError before any state exists.
    """
    pool_letters = assign_letters(roster, aggregates, size, method)
    logger.info('Matchday started: size %s, letters %s', size, pool_letters)
    return MatchdayState(
        phase=POOL,
        size=size,
        roster=list(pool_letters.values()),
        method=method,
        pool_letters=pool_letters,
        schedule=generate_pool_schedule(size),
    )


def current_match(state: MatchdayState) -> Optional[Dict]:
    """Describe the match waiting for a score, or None when nothing is pending."""
    entry = state.current_entry()
    if entry is None:
        return None
    team1, team2 = resolve_teams(entry, state.letters_for(entry), state.results_by_label())
    return {
        'index': state.index,
        'number': state.index + 1,
        'total': state.total_matches,
        'phase': entry.phase,
        'label': entry.label,
        'side1': entry.side1,
        'side2': entry.side2,
        'team1': list(team1),
        'team2': list(team2),
        'target': entry.target,
        'win_by': entry.win_by,
    }


def parse_score(value) -> int:
    """Accept a non-negative integer (or its string form) as a game score."""
    if isinstance(value, bool):
        raise InvalidScoreError(f'Invalid score: {value!r}')
    if isinstance(value, str):
        value = value.strip()
        if not value.isdigit():
            raise InvalidScoreError(f'Invalid score: {value!r}')
        return int(value)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or value < 0:
        raise InvalidScoreError(f'Invalid score: {value!r}')
    return value


def score_warnings(entry: ScheduleEntry, s1: int, s2: int) -> List[str]:
    """Advisory checks against the entry's target and win-by margin."""
    warnings = []
    kind = 'Pool' if entry.phase == 'pool' else 'Bracket'
    if max(s1, s2) < entry.target:
        warnings.append(f'{kind} games are typically to {entry.target}.')
    if entry.phase != 'pool' and abs(s1 - s2) < entry.win_by:
        warnings.append(f'{kind} games are win-by-{entry.win_by}.')
    return warnings


def submit_score(state: MatchdayState, s1, s2, confirm: bool = False,
                 warnings_enabled: bool = True) -> MatchdayState:
    """
    Record the score of the current match and advance.

    A tied score always needs confirm, even with warnings disabled; once
    confirmed, team 2 is taken as the winner.

    Raises:
        MatchdayStateError: no match is waiting for a score
        InvalidScoreError: negative or non-integer score
        ScoreConfirmationRequired: unusual score submitted without confirm
    """
    entry = state.current_entry()
    if entry is None:
        raise MatchdayStateError(f'No match is waiting for a score (phase: {state.phase})')

    s1 = parse_score(s1)
    s2 = parse_score(s2)
    warnings = [TIE_WARNING] if s1 == s2 else []
    if warnings_enabled:
        warnings += score_warnings(entry, s1, s2)
    if warnings and not confirm:
        raise ScoreConfirmationRequired(warnings)

    team1, team2 = resolve_teams(entry, state.letters_for(entry), state.results_by_label())
    result = MatchResult(team1, team2, s1, s2, entry.phase, entry.label)
    logger.debug('Match %s/%s recorded: %r', state.index + 1, state.total_matches, result)

    next_state = state.replace(results=state.results + [result], index=state.index + 1)

    if entry.phase == 'pool' and next_state.index == state.pool_length:
        next_state = _reseed(next_state.replace(phase=RESEEDING))
    elif next_state.index >= len(next_state.schedule):
        next_state = _finish(next_state)
    return next_state


def _reseed(state: MatchdayState) -> MatchdayState:
    """Rank the pool, assign bracket letters and append the bracket schedule."""
    if state.phase != RESEEDING:
        raise MatchdayStateError(f'Cannot reseed during phase {state.phase}')
    standings = calculate_pool_standings(state.game_records(), state.roster)
    bracket_letters = reseed_letters(standings['rows'])
    logger.info('Pool complete; bracket letters %s', bracket_letters)
    for note in standings['notes']:
        logger.info('Pool tie-break: %s', note)
    return state.replace(
        phase=BRACKET,
        bracket_letters=bracket_letters,
        schedule=state.schedule + generate_bracket_schedule(state.size),
        pool_audit=standings,
    )


def _finish(state: MatchdayState) -> MatchdayState:
    placements = compute_placements(state.size, state.results_by_label(), state.bracket_letters)
    event = Event(None, state.size, placements, state.game_records(), pool_audit=state.pool_audit)
    logger.info('Matchday finished: placements %s', placements.to_dict())
    return state.replace(phase=FINISHED, event=event)


def finish(state: MatchdayState):
    """Hand over the finished event and return to idle.

    Returns: (MatchdayState.idle(), Event)
    """
    if state.phase != FINISHED or state.event is None:
        raise MatchdayStateError(f'Matchday is not finished (phase: {state.phase})')
    return MatchdayState.idle(), state.event
