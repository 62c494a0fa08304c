"""
Value objects for the league: game records, placements, events, aggregates
and schedule entries.

The dict forms use the keys of the exported events ledger (team1, team2, s1,
s2, stage, label, gameStats, poolAudit) so a ledger round-trips through JSON
or YAML unchanged.
"""
from typing import Dict, List, Optional

from league.exceptions import InvalidPlacementError
from league.points import get_awards, is_supported_size

STAGES = ('pool', 'bracket', 'manual')


def clean_name(name) -> str:
    """Trim a player name; None becomes an empty string."""
    return (name or '').strip()


class GameRecord:
    """One played game between two teams of two players."""

    def __init__(self, team1, team2, s1, s2, stage=None, label=None):
        self.team1 = tuple(team1)
        self.team2 = tuple(team2)
        if len(self.team1) != 2 or len(self.team2) != 2:
            raise ValueError('Each team must have exactly two players')
        self.s1 = s1
        self.s2 = s2
        self.stage = stage
        self.label = label or None

    @property
    def players(self):
        return self.team1 + self.team2

    def winning_team(self):
        """Return the higher-scoring team, or None on a tie."""
        if self.s1 > self.s2:
            return self.team1
        if self.s2 > self.s1:
            return self.team2
        return None

    def losing_team(self):
        if self.s1 > self.s2:
            return self.team2
        if self.s2 > self.s1:
            return self.team1
        return None

    def to_dict(self) -> Dict:
        data = {
            'team1': list(self.team1),
            'team2': list(self.team2),
            's1': self.s1,
            's2': self.s2,
        }
        if self.stage:
            data['stage'] = self.stage
        if self.label:
            data['label'] = self.label
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> 'GameRecord':
        return cls(
            [clean_name(p) for p in data['team1']],
            [clean_name(p) for p in data['team2']],
            int(data['s1']),
            int(data['s2']),
            stage=data.get('stage'),
            label=data.get('label'),
        )

    def __eq__(self, other):
        if not isinstance(other, GameRecord):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f"GameRecord(team1={list(self.team1)}, team2={list(self.team2)}, "
                f"s1={self.s1}, s2={self.s2}, stage={self.stage}, label={self.label})")


class Placements:
    """Final ranks of a matchday, restricted to the ranks its size awards.

    Ranks with no players are dropped. For sizes outside the points table the
    mapping is kept as given; such events never award anything.
    """

    def __init__(self, size, ranks: Optional[Dict] = None):
        self.size = size
        self._ranks = {}
        legal = self.legal_ranks(size)
        for rank, players in (ranks or {}).items():
            try:
                rank = int(rank)
            except (TypeError, ValueError):
                raise InvalidPlacementError(f'Placement rank {rank!r} is not a number')
            names = [clean_name(p) for p in (players or [])]
            names = [n for n in names if n]
            if not names:
                continue
            if len(names) > 2:
                raise InvalidPlacementError(f'Rank {rank} lists {len(names)} players; at most 2 are allowed')
            if legal is not None and rank not in legal:
                raise InvalidPlacementError(f'Size {size} does not award rank {rank} (awards {sorted(legal)})')
            self._ranks[rank] = names

    @staticmethod
    def legal_ranks(size):
        """Ranks a size can award, or None for an unsupported size."""
        if not is_supported_size(size):
            return None
        return set(get_awards(size))

    def ranks(self) -> List[int]:
        return sorted(self._ranks)

    def get(self, rank, default=None):
        return self._ranks.get(rank, default)

    def items(self):
        return [(rank, list(self._ranks[rank])) for rank in self.ranks()]

    def __contains__(self, rank):
        return rank in self._ranks

    def __len__(self):
        return len(self._ranks)

    def to_dict(self) -> Dict[int, List[str]]:
        return {rank: list(players) for rank, players in self.items()}

    def __eq__(self, other):
        if isinstance(other, Placements):
            return self.size == other.size and self._ranks == other._ranks
        if isinstance(other, dict):
            return self._ranks == {int(k): list(v) for k, v in other.items()}
        return NotImplemented

    def __repr__(self):
        return f"Placements(size={self.size}, ranks={self.to_dict()})"


class Event:
    """An entry of the season ledger. Never mutated once created."""

    def __init__(self, id, size, placements, games=None, pool_audit=None):
        self.id = id
        self.size = size
        if not isinstance(placements, Placements):
            placements = Placements(size, placements)
        self.placements = placements
        self.games = tuple(games or ())
        self.pool_audit = pool_audit

    def with_id(self, new_id) -> 'Event':
        return Event(new_id, self.size, self.placements, self.games, self.pool_audit)

    def to_dict(self) -> Dict:
        data = {
            'id': self.id,
            'size': self.size,
            'placements': self.placements.to_dict(),
            'gameStats': [g.to_dict() for g in self.games],
        }
        if self.pool_audit:
            data['poolAudit'] = {
                'rows': [dict(r) for r in self.pool_audit.get('rows', [])],
                'notes': list(self.pool_audit.get('notes', [])),
            }
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> 'Event':
        return cls(
            data.get('id'),
            data['size'],
            data.get('placements') or {},
            [GameRecord.from_dict(g) for g in data.get('gameStats') or []],
            pool_audit=data.get('poolAudit'),
        )

    def __repr__(self):
        return f"Event(id={self.id}, size={self.size}, placements={self.placements.to_dict()}, games={len(self.games)})"


class PlayerAggregate:
    """Season totals for one player, rebuilt from the ledger."""

    FIELDS = ('points', 'wins', 'losses', 'points_for', 'points_against',
              'slam_wins', 'signature_wins', 'challenger_wins')

    def __init__(self, name, **totals):
        self.name = name
        for field in self.FIELDS:
            setattr(self, field, totals.get(field, 0))

    @property
    def games_played(self) -> int:
        return self.wins + self.losses

    @property
    def avg_diff(self) -> float:
        """Average point differential per game (0 when no games played)."""
        if not self.games_played:
            return 0
        return (self.points_for - self.points_against) / self.games_played

    def copy(self) -> 'PlayerAggregate':
        return PlayerAggregate(self.name, **{f: getattr(self, f) for f in self.FIELDS})

    def to_dict(self) -> Dict:
        data = {'player': self.name}
        for field in self.FIELDS:
            data[field] = getattr(self, field)
        return data

    def __eq__(self, other):
        if not isinstance(other, PlayerAggregate):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f"PlayerAggregate(name={self.name}, points={self.points}, wins={self.wins}, "
                f"losses={self.losses}, pf={self.points_for}, pa={self.points_against})")


class ScheduleEntry:
    """One scheduled match, expressed in letters rather than names.

    Each side is either a letter pair such as 'AB', or a reference to an
    earlier labelled match: 'Winner SF1' / 'Loser SF1'.
    """

    def __init__(self, phase, side1, side2, label=None, target=None, win_by=None):
        self.phase = phase
        self.side1 = side1
        self.side2 = side2
        self.label = label
        self.target = target
        self.win_by = win_by

    @property
    def sides(self):
        return (self.side1, self.side2)

    @property
    def is_derived(self) -> bool:
        return any(is_reference(side) for side in self.sides)

    def references(self) -> List[str]:
        """Labels of the matches this entry depends on."""
        return [parse_reference(side)[1] for side in self.sides if is_reference(side)]

    def to_dict(self) -> Dict:
        return {
            'phase': self.phase,
            'side1': self.side1,
            'side2': self.side2,
            'label': self.label,
            'target': self.target,
            'win_by': self.win_by,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'ScheduleEntry':
        return cls(data['phase'], data['side1'], data['side2'], data.get('label'),
                   data.get('target'), data.get('win_by'))

    def __eq__(self, other):
        if not isinstance(other, ScheduleEntry):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        label = f" [{self.label}]" if self.label else ''
        return f"ScheduleEntry({self.phase}: {self.side1} vs {self.side2}{label})"


def is_reference(side: str) -> bool:
    return side.startswith('Winner ') or side.startswith('Loser ')


def parse_reference(side: str):
    """Split 'Winner SF' into ('winner', 'SF')."""
    kind, _, label = side.partition(' ')
    return kind.lower(), label


class MatchResult:
    """Outcome of one scheduled match, with resolved player names."""

    def __init__(self, team1, team2, s1, s2, phase, label=None):
        self.team1 = tuple(team1)
        self.team2 = tuple(team2)
        self.s1 = s1
        self.s2 = s2
        self.phase = phase
        self.label = label
        # A confirmed tie goes to team 2
        self.winner = self.team1 if s1 > s2 else self.team2
        self.loser = self.team2 if s1 > s2 else self.team1

    def to_game_record(self) -> GameRecord:
        return GameRecord(self.team1, self.team2, self.s1, self.s2, stage=self.phase, label=self.label)

    def to_dict(self) -> Dict:
        return {
            'team1': list(self.team1),
            'team2': list(self.team2),
            's1': self.s1,
            's2': self.s2,
            'phase': self.phase,
            'label': self.label,
            'winner': list(self.winner),
            'loser': list(self.loser),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'MatchResult':
        return cls(data['team1'], data['team2'], data['s1'], data['s2'], data['phase'], data.get('label'))

    def __repr__(self):
        return f"MatchResult({list(self.team1)} {self.s1}-{self.s2} {list(self.team2)}, label={self.label})"
