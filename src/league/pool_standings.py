"""
Pool phase standings and the reseed that feeds the bracket.
"""
from typing import Dict, Iterable, List, Optional

from league.hashing import order_deterministically
from league.templates import LETTERS


def _tally(games, roster=None) -> Dict[str, Dict]:
    player_stats = {}

    def stats_for(name):
        if name not in player_stats:
            player_stats[name] = {
                'player': name,
                'wins': 0,
                'losses': 0,
                'points_for': 0,
                'points_against': 0,
                'games_played': 0,
            }
        return player_stats[name]

    for name in roster or []:
        stats_for(name)

    for game in games:
        if game.stage != 'pool':
            continue
        for team, own, other in ((game.team1, game.s1, game.s2), (game.team2, game.s2, game.s1)):
            for name in team:
                stats = stats_for(name)
                stats['points_for'] += own
                stats['points_against'] += other
                stats['games_played'] += 1
                if own > other:
                    stats['wins'] += 1
                elif own < other:
                    stats['losses'] += 1

    for stats in player_stats.values():
        stats['diff'] = stats['points_for'] - stats['points_against']
    return player_stats


def head_to_head(games, player1: str, player2: str):
    """
    Count pool games where the two players were on opposing teams.

    Returns: (player1_wins, player2_wins)
    """
    p1_wins = 0
    p2_wins = 0
    for game in games:
        if game.stage != 'pool':
            continue
        if player1 in game.team1 and player2 in game.team2:
            mine, theirs = game.s1, game.s2
        elif player1 in game.team2 and player2 in game.team1:
            mine, theirs = game.s2, game.s1
        else:
            continue
        if mine > theirs:
            p1_wins += 1
        elif theirs > mine:
            p2_wins += 1
    return p1_wins, p2_wins


def _tie_key(stats):
    return (stats['wins'], stats['diff'], stats['points_for'])


def _tied_blocks(sorted_stats: List[Dict]):
    """Yield (start, end) index ranges of consecutive rows with equal keys."""
    start = 0
    while start < len(sorted_stats):
        end = start + 1
        while end < len(sorted_stats) and _tie_key(sorted_stats[end]) == _tie_key(sorted_stats[start]):
            end += 1
        yield start, end
        start = end


def _resolve_pair(games, block, notes):
    first, second = block[0]['player'], block[1]['player']
    first_wins, second_wins = head_to_head(games, first, second)
    if first_wins > second_wins:
        notes.append(f"{first} ranked above {second} on head-to-head ({first_wins}-{second_wins})")
        return block
    if second_wins > first_wins:
        notes.append(f"{second} ranked above {first} on head-to-head ({second_wins}-{first_wins})")
        return [block[1], block[0]]
    order = order_deterministically([first, second])
    by_name = {s['player']: s for s in block}
    if first_wins or second_wins:
        reason = f"split head-to-head {first_wins}-{second_wins}"
    else:
        reason = 'no head-to-head meeting'
    notes.append(f"{first} and {second} tied ({reason}); deterministic draw: {', '.join(order)}")
    return [by_name[n] for n in order]


def _resolve_block(block, notes):
    names = [s['player'] for s in block]
    order = order_deterministically(names)
    by_name = {s['player']: s for s in block}
    notes.append(
        f"{len(names)}-way tie between {', '.join(sorted(names))} "
        f"(wins {block[0]['wins']}, diff {block[0]['diff']:+d}, points for {block[0]['points_for']}); "
        f"deterministic draw: {', '.join(order)}"
    )
    return [by_name[n] for n in order]


def calculate_pool_standings(games: Iterable, roster: Optional[List[str]] = None) -> Dict:
    """
    Rank pool participants from pool-phase game records.

    Sorted by wins, point differential and points for (all descending), then
    name. Players still level on all three are separated as follows: a pair
    by head-to-head, falling back to a deterministic draw; three or more
    directly by deterministic draw. Each separation adds an audit note.

    Returns: {'rows': [{'rank': n, 'player': name, 'wins': n, 'losses': n,
                        'points_for': n, 'points_against': n, 'diff': n,
                        'games_played': n}, ...],
              'notes': [str, ...]}
    """
    games = list(games)
    player_stats = _tally(games, roster)

    sorted_stats = sorted(
        player_stats.values(),
        key=lambda x: (-x['wins'], -x['diff'], -x['points_for'], x['player'])
    )

    notes = []
    ordered = []
    for start, end in _tied_blocks(sorted_stats):
        block = sorted_stats[start:end]
        if len(block) == 2:
            block = _resolve_pair(games, block, notes)
        elif len(block) > 2:
            block = _resolve_block(block, notes)
        ordered.extend(block)

    rows = []
    for i, stats in enumerate(ordered):
        row = {'rank': i + 1}
        row.update(stats)
        rows.append(row)
    return {'rows': rows, 'notes': notes}


def reseed_letters(rows: List[Dict]) -> Dict[str, str]:
    """Map pool finish order to bracket letters: rank 1 -> 'A', rank 2 -> 'B', ..."""
    return {LETTERS[i]: row['player'] for i, row in enumerate(rows)}
