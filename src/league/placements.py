"""
Final placements from completed bracket results.
"""
from typing import Dict

from league.models import Placements
from league.templates import check_size, structural_places


def _winner(results_by_label, label):
    result = results_by_label.get(label)
    return list(result.winner) if result else []


def _loser(results_by_label, label):
    result = results_by_label.get(label)
    return list(result.loser) if result else []


def compute_placements(size: int, results_by_label: Dict, bracket_letters: Dict[str, str]) -> Placements:
    """
    Derive rank -> players for a finished matchday.

    Args:
        size: roster size (4-8)
        results_by_label: bracket label -> MatchResult
        bracket_letters: post-pool letter -> name map

    Ranks that end up empty are left out.
    """
    check_size(size)
    ranks = {
        1: _winner(results_by_label, 'Final'),
        2: _loser(results_by_label, 'Final'),
    }
    if size in (6, 7):
        ranks[3] = _loser(results_by_label, 'SF')
    elif size == 8:
        ranks[3] = _winner(results_by_label, 'Bronze')
        ranks[4] = _loser(results_by_label, 'Bronze')

    for rank, letter in structural_places(size).items():
        name = bracket_letters.get(letter)
        ranks[rank] = [name] if name else []

    return Placements(size, {rank: players for rank, players in ranks.items() if players})
