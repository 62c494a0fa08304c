"""
Schedule generation for a matchday.

Entries keep letters (and match references); names are substituted only
when a match is about to be played, through the letter map of its phase.
"""
from typing import Dict, List, Tuple

from league.models import ScheduleEntry, is_reference, parse_reference
from league.points import BRACKET_TARGET, BRACKET_WIN_BY, POOL_TARGET, POOL_WIN_BY
from league.templates import bracket_template, pool_template


def generate_pool_schedule(size: int) -> List[ScheduleEntry]:
    """Expand the pool design for a size into ordered schedule entries."""
    return [
        ScheduleEntry('pool', side1, side2, target=POOL_TARGET, win_by=POOL_WIN_BY)
        for side1, side2 in pool_template(size)
    ]


def generate_bracket_schedule(size: int) -> List[ScheduleEntry]:
    """Expand the bracket topology for a size into ordered schedule entries."""
    return [
        ScheduleEntry('bracket', side1, side2, label=label, target=BRACKET_TARGET, win_by=BRACKET_WIN_BY)
        for label, side1, side2 in bracket_template(size)
    ]


def generate_full_schedule(size: int) -> List[ScheduleEntry]:
    return generate_pool_schedule(size) + generate_bracket_schedule(size)


def letter_pair_to_names(pair: str, letters: Dict[str, str]) -> Tuple[str, str]:
    return tuple(letters[ch] for ch in pair)


def resolve_side(side: str, letters: Dict[str, str], results_by_label: Dict) -> Tuple[str, str]:
    """Resolve one side of an entry to two player names.

    Args:
        side: 'AB' style letter pair, or 'Winner <label>' / 'Loser <label>'
        letters: letter -> name map of the entry's phase
        results_by_label: label -> MatchResult for matches already played
    """
    if is_reference(side):
        kind, label = parse_reference(side)
        result = results_by_label.get(label)
        # Schedule order guarantees referenced matches are played first
        assert result is not None, f'{side} referenced before match {label} was played'
        return result.winner if kind == 'winner' else result.loser
    return letter_pair_to_names(side, letters)


def resolve_teams(entry: ScheduleEntry, letters: Dict[str, str], results_by_label: Dict):
    """Return (team1, team2) name tuples for a schedule entry."""
    return (
        resolve_side(entry.side1, letters, results_by_label),
        resolve_side(entry.side2, letters, results_by_label),
    )


def describe_entry(entry: ScheduleEntry) -> str:
    """Human readable line like 'SF: CD vs EF (to 15, win by 2)'."""
    prefix = f"{entry.label}: " if entry.label else ''
    return f"{prefix}{entry.side1} vs {entry.side2} (to {entry.target}, win by {entry.win_by})"
