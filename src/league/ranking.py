"""
Season ranking: Points -> Wins -> Points For -> Avg Diff -> name.
"""
from typing import Dict, Iterable, List

from league.models import PlayerAggregate


def ranking_key(aggregate: PlayerAggregate):
    return (
        -aggregate.points,
        -aggregate.wins,
        -aggregate.points_for,
        -aggregate.avg_diff,
        aggregate.name,
    )


def sort_aggregates(aggregates: Iterable[PlayerAggregate]) -> List[PlayerAggregate]:
    """Order aggregates best first."""
    return sorted(aggregates, key=ranking_key)


def rank_players(aggregates) -> List[Dict]:
    """
    Build standings rows from player aggregates.

    Accepts a {name: PlayerAggregate} dict or an iterable of aggregates.

    Returns: [{'rank': 1, 'player': name, 'points': n, 'wins': n, 'losses': n,
               'points_for': n, 'points_against': n, 'slam_wins': n,
               'signature_wins': n, 'challenger_wins': n, 'avg_diff': x}, ...]
    """
    if isinstance(aggregates, dict):
        aggregates = aggregates.values()
    rows = []
    for i, aggregate in enumerate(sort_aggregates(aggregates)):
        row = {'rank': i + 1}
        row.update(aggregate.to_dict())
        # Rounded for display only; ordering uses the exact value
        row['avg_diff'] = round(aggregate.avg_diff, 2)
        rows.append(row)
    return rows
