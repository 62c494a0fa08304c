"""
Pre-pool letter assignment.

Players with season standings are seeded by the season ranking; newcomers
follow in deterministic hash order.
"""
from typing import Dict, List, Optional

from league.exceptions import RosterError, RosterSizeError
from league.hashing import order_deterministically
from league.models import clean_name
from league.points import is_supported_size
from league.ranking import sort_aggregates
from league.templates import LETTERS

SEEDING_METHODS = ('standings', 'random')


def normalize_roster(roster, size: int) -> List[str]:
    """Trim names and check the roster fits the declared size.

    Raises:
        RosterError: unsupported size, non-text, empty or duplicate names
        RosterSizeError: roster length differs from size
    """
    if not is_supported_size(size):
        raise RosterError(f'Unsupported event size: {size}')
    if not isinstance(roster, (list, tuple)):
        raise RosterError('Roster must be a list of player names')
    bad = [n for n in roster if n is not None and not isinstance(n, str)]
    if bad:
        raise RosterError(f'Roster entries must be names, got {bad[0]!r}')
    names = [clean_name(n) for n in roster]
    if any(not n for n in names):
        raise RosterError('Roster contains an empty player name')
    if len(names) != size:
        raise RosterSizeError(size, len(names))
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise RosterError(f"Roster lists players more than once: {', '.join(duplicates)}")
    return names


def assign_letters(roster, aggregates: Optional[Dict], size: int, method: str = 'standings') -> Dict[str, str]:
    """
    Map letters A.. to roster players.

    Known players (present in the season aggregates) come first, best season
    rank first. Unknown players follow in hash order. The method flag is
    recorded by callers but both methods order newcomers the same way.

    Returns: {'A': name, 'B': name, ...}
    """
    if method not in SEEDING_METHODS:
        raise ValueError(f'Unknown seeding method: {method}')
    names = normalize_roster(roster, size)
    aggregates = aggregates or {}

    known = [aggregates[n] for n in names if n in aggregates]
    unknown = [n for n in names if n not in aggregates]

    ordered = [a.name for a in sort_aggregates(known)] + order_deterministically(unknown)
    return {LETTERS[i]: name for i, name in enumerate(ordered)}
