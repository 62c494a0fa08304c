"""
Season ledger: the ordered list of events and the standings folded from it.

Standings are never updated in place. Every change to the event list is
followed by a full recomputation from the first event.
"""
import logging
from typing import Dict, Iterable, List

from league.models import Event, PlayerAggregate, clean_name
from league.points import POINTS_TABLE, TITLE_FIELDS
from league.ranking import rank_players
from league.validation import parse_events

logger = logging.getLogger(__name__)


def _aggregate(season: Dict[str, PlayerAggregate], name: str) -> PlayerAggregate:
    if name not in season:
        season[name] = PlayerAggregate(name)
    return season[name]


def apply_event(season: Dict[str, PlayerAggregate], event: Event) -> Dict[str, PlayerAggregate]:
    """Return a new season dict with one event folded in.

    Events whose size has no entry in the points table are skipped entirely:
    no points and no game statistics.
    """
    info = POINTS_TABLE.get(event.size)
    if not info:
        return season
    next_season = {name: agg.copy() for name, agg in season.items()}
    title_field = TITLE_FIELDS[info['label']]

    for rank, players in event.placements.items():
        points = info['awards'].get(rank)
        if not points:
            continue
        for player in players:
            name = clean_name(player)
            if not name:
                continue
            agg = _aggregate(next_season, name)
            agg.points += points
            if rank == 1:
                setattr(agg, title_field, getattr(agg, title_field) + 1)

    for game in event.games:
        for team, own, other in ((game.team1, game.s1, game.s2), (game.team2, game.s2, game.s1)):
            for player in team:
                agg = _aggregate(next_season, player)
                agg.points_for += own
                agg.points_against += other
        winners, losers = game.winning_team(), game.losing_team()
        if winners is not None:
            for player in winners:
                next_season[player].wins += 1
            for player in losers:
                next_season[player].losses += 1

    return next_season


def reduce_events(events: Iterable[Event]) -> Dict[str, PlayerAggregate]:
    """Fold events left to right into {name: PlayerAggregate}."""
    season = {}
    for event in events:
        season = apply_event(season, event)
    return season


class Ledger:
    """The event list plus its derived aggregates, persisted through a store.

    The store needs load() -> list of event dicts, save(list, next_id) and
    load_next_id() -> the saved id counter or None.

    Ids come from a counter that only moves forward, so an id freed by a
    delete or an undo is never handed out again.
    """

    def __init__(self, store):
        self.store = store
        self._events = parse_events(store.load() or [])
        self._next_id = max(store.load_next_id() or 1, self._max_id() + 1)
        self._recompute()

    @property
    def events(self) -> List[Event]:
        return list(self._events)

    @property
    def aggregates(self) -> Dict[str, PlayerAggregate]:
        return {name: agg.copy() for name, agg in self._aggregates.items()}

    def standings(self) -> List[Dict]:
        return rank_players(self._aggregates)

    def _max_id(self) -> int:
        ids = [e.id for e in self._events if isinstance(e.id, int)]
        return max(ids) if ids else 0

    def next_id(self) -> int:
        return self._next_id

    def get(self, event_id):
        for event in self._events:
            if event.id == event_id:
                return event
        return None

    def append(self, event: Event) -> Event:
        """Add an event at the end of the ledger with a fresh id."""
        stored = event.with_id(self._next_id)
        self._commit(self._events + [stored], next_id=stored.id + 1)
        logger.info('Event %s appended (size %s)', stored.id, stored.size)
        return stored

    def delete_by_id(self, event_id) -> bool:
        """Remove one event. Returns False when no event has that id."""
        remaining = [e for e in self._events if e.id != event_id]
        if len(remaining) == len(self._events):
            return False
        self._commit(remaining)
        logger.info('Event %s deleted', event_id)
        return True

    def undo_last(self):
        """Remove the most recent event and return it, or None if empty."""
        if not self._events:
            return None
        last = self._events[-1]
        self._commit(self._events[:-1])
        logger.info('Event %s undone', last.id)
        return last

    def replace_all(self, payload) -> List[Event]:
        """Replace the whole ledger from an imported payload.

        The payload is validated in full first; on ImportFormatError the
        current ledger is left as it was.
        """
        events = parse_events(payload, first_id=self._next_id)
        self._commit(events, next_id=max([self._next_id] + [e.id + 1 for e in events]))
        logger.info('Ledger replaced with %s events', len(events))
        return self.events

    def export_all(self) -> List[Dict]:
        return [e.to_dict() for e in self._events]

    def _commit(self, events: List[Event], next_id=None):
        next_id = next_id or self._next_id
        self.store.save([e.to_dict() for e in events], next_id)
        self._next_id = next_id
        self._events = list(events)
        self._recompute()

    def _recompute(self):
        self._aggregates = reduce_events(self._events)
