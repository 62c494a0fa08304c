"""
Unit tests for the guided matchday state machine.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from league.exceptions import (
    InvalidScoreError,
    MatchdayStateError,
    RosterSizeError,
    ScoreConfirmationRequired,
)
from league.ledger import reduce_events
from league.matchday import (
    BRACKET,
    FINISHED,
    IDLE,
    POOL,
    TIE_WARNING,
    MatchdayState,
    current_match,
    finish,
    parse_score,
    start_matchday,
    submit_score,
)

ROSTERS = {
    4: ['Al', 'Bo', 'Cy', 'Di'],
    5: ['Al', 'Bo', 'Cy', 'Di', 'Ed'],
    6: ['Al', 'Bo', 'Cy', 'Di', 'Ed', 'Fy'],
    7: ['Al', 'Bo', 'Cy', 'Di', 'Ed', 'Fy', 'Gu'],
    8: ['Al', 'Bo', 'Cy', 'Di', 'Ed', 'Fy', 'Gu', 'Hy'],
}
POOL_LENGTHS = {4: 3, 5: 5, 6: 6, 7: 7, 8: 6}
BRACKET_LENGTHS = {4: 1, 5: 1, 6: 2, 7: 2, 8: 4}


def play_pool(state):
    while state.phase == POOL:
        state = submit_score(state, 11, 7)
    return state


class TestStart:
    """Tests for start_matchday."""

    def test_starts_in_pool(self):
        """Test a new matchday waits for the first pool score."""
        state = start_matchday(ROSTERS[4], {}, 4)
        assert state.phase == POOL
        assert state.pool_letters == {'A': 'Al', 'B': 'Bo', 'C': 'Cy', 'D': 'Di'}
        assert state.bracket_letters == {}
        match = current_match(state)
        assert match['number'] == 1
        assert match['total'] == 4
        assert match['team1'] == ['Al', 'Bo']
        assert match['team2'] == ['Cy', 'Di']
        assert match['target'] == 11

    def test_roster_mismatch(self):
        """Test a roster of the wrong length creates no session."""
        with pytest.raises(RosterSizeError):
            start_matchday(ROSTERS[5], {}, 4)

    def test_idle_has_no_match(self):
        """Test an idle session has nothing to score."""
        state = MatchdayState.idle()
        assert state.phase == IDLE
        assert current_match(state) is None
        with pytest.raises(MatchdayStateError):
            submit_score(state, 11, 5)


class TestScores:
    """Tests for score parsing and confirmation."""

    def test_parse_score(self):
        """Test accepted score forms."""
        assert parse_score(11) == 11
        assert parse_score('15') == 15
        assert parse_score(' 9 ') == 9
        assert parse_score(7.0) == 7

    @pytest.mark.parametrize('value', [-1, 'abc', '', None, 7.5, True, '-3'])
    def test_invalid_scores(self, value):
        """Test rejected score forms."""
        with pytest.raises(InvalidScoreError):
            parse_score(value)

    def test_tie_needs_confirmation(self):
        """Test a tied score does not advance the session unconfirmed."""
        state = start_matchday(ROSTERS[4], {}, 4)
        with pytest.raises(ScoreConfirmationRequired) as exc_info:
            submit_score(state, 11, 11)
        assert exc_info.value.warnings == [TIE_WARNING]
        assert state.index == 0

    def test_tie_needs_confirmation_with_warnings_disabled(self):
        """Test switching warnings off does not let a tie through silently."""
        state = start_matchday(ROSTERS[4], {}, 4)
        with pytest.raises(ScoreConfirmationRequired):
            submit_score(state, 11, 11, warnings_enabled=False)

    def test_confirmed_tie_goes_to_team2(self):
        """Test a confirmed tie is recorded with team 2 as winner."""
        state = start_matchday(ROSTERS[4], {}, 4)
        state = submit_score(state, 10, 10, confirm=True)
        assert state.index == 1
        result = state.results[0]
        assert (result.s1, result.s2) == (10, 10)
        assert result.winner == ('Cy', 'Di')
        assert result.loser == ('Al', 'Bo')

    def test_confirmed_tied_final(self):
        """Test a confirmed tied final places team 2 first."""
        state = play_pool(start_matchday(ROSTERS[4], {}, 4))
        final = current_match(state)
        with pytest.raises(ScoreConfirmationRequired) as exc_info:
            submit_score(state, 15, 15)
        assert TIE_WARNING in exc_info.value.warnings
        state = submit_score(state, 15, 15, confirm=True)
        assert state.phase == FINISHED
        assert state.event.placements.get(1) == final['team2']
        assert state.event.placements.get(2) == final['team1']

    def test_low_pool_score_needs_confirmation(self):
        """Test a pool game short of 11 raises a warning."""
        state = start_matchday(ROSTERS[4], {}, 4)
        with pytest.raises(ScoreConfirmationRequired) as exc_info:
            submit_score(state, 5, 3)
        assert exc_info.value.warnings == ['Pool games are typically to 11.']

    def test_confirmed_score_accepted(self):
        """Test confirming an unusual score records it."""
        state = start_matchday(ROSTERS[4], {}, 4)
        state = submit_score(state, 5, 3, confirm=True)
        assert state.index == 1
        assert state.results[0].s1 == 5

    def test_warnings_disabled(self):
        """Test unusual scores pass when warnings are off."""
        state = start_matchday(ROSTERS[4], {}, 4)
        state = submit_score(state, 5, 3, warnings_enabled=False)
        assert state.index == 1

    def test_pool_win_by_one_is_fine(self):
        """Test pool games only need a one point margin."""
        state = start_matchday(ROSTERS[4], {}, 4)
        state = submit_score(state, 11, 10)
        assert state.index == 1

    def test_bracket_win_by_two(self):
        """Test a one point bracket win needs confirmation."""
        state = play_pool(start_matchday(ROSTERS[4], {}, 4))
        assert state.phase == BRACKET
        with pytest.raises(ScoreConfirmationRequired) as exc_info:
            submit_score(state, 15, 14)
        assert exc_info.value.warnings == ['Bracket games are win-by-2.']

    def test_bracket_short_and_close(self):
        """Test both bracket warnings are reported together."""
        state = play_pool(start_matchday(ROSTERS[4], {}, 4))
        with pytest.raises(ScoreConfirmationRequired) as exc_info:
            submit_score(state, 12, 11)
        assert len(exc_info.value.warnings) == 2


class TestReseed:
    """Tests for the switch from pool letters to bracket letters."""

    def test_bracket_uses_pool_standings(self, play_matchday):
        """Test bracket letters follow the pool result, not the pre-pool seed."""
        state = start_matchday(ROSTERS[4], {}, 4)
        # Di wins every pool game; the others finish level
        prefer = ['Di', 'Cy', 'Bo', 'Al']
        for _ in range(3):
            match = current_match(state)
            if 'Di' in match['team1']:
                state = submit_score(state, 11, 7)
            else:
                state = submit_score(state, 7, 11)
        assert state.phase == BRACKET
        assert state.bracket_letters == {'A': 'Di', 'B': 'Al', 'C': 'Bo', 'D': 'Cy'}
        assert len(state.pool_audit['notes']) == 1
        assert state.pool_audit['notes'][0].startswith('3-way tie')

        final = current_match(state)
        assert final['label'] == 'Final'
        assert final['team1'] == ['Di', 'Al']
        assert final['team2'] == ['Bo', 'Cy']

        state = play_matchday(state, prefer)
        assert state.event.placements == {1: ['Di', 'Al'], 2: ['Bo', 'Cy']}

    def test_derived_final(self):
        """Test the 6-player final takes the semifinal winner."""
        state = play_pool(start_matchday(ROSTERS[6], {}, 6))
        sf = current_match(state)
        assert sf['label'] == 'SF'
        state = submit_score(state, 10, 15)
        final = current_match(state)
        assert final['label'] == 'Final'
        assert final['side2'] == 'Winner SF'
        assert final['team2'] == sf['team2']


class TestFullMatchday:
    """Tests for complete matchdays of every size."""

    @pytest.mark.parametrize('size', [4, 5, 6, 7, 8])
    def test_runs_to_completion(self, size, play_matchday):
        """Test every size finishes with one event covering every game."""
        state = play_matchday(start_matchday(ROSTERS[size], {}, size))
        assert state.phase == FINISHED
        assert current_match(state) is None

        idle, event = finish(state)
        assert idle.phase == IDLE
        assert event.id is None
        assert event.size == size
        assert len(event.games) == POOL_LENGTHS[size] + BRACKET_LENGTHS[size]
        assert [g.stage for g in event.games].count('pool') == POOL_LENGTHS[size]
        assert event.pool_audit is not None

    @pytest.mark.parametrize('size,ranks', [
        (4, [1, 2]),
        (5, [1, 2, 5]),
        (6, [1, 2, 3]),
        (7, [1, 2, 3, 7]),
        (8, [1, 2, 3, 4]),
    ])
    def test_placement_ranks(self, size, ranks, play_matchday):
        """Test each size places the ranks it awards, no player twice."""
        state = play_matchday(start_matchday(ROSTERS[size], {}, size))
        placements = state.event.placements
        assert placements.ranks() == ranks
        placed = [p for _, players in placements.items() for p in players]
        assert len(placed) == len(set(placed))
        if size in (6, 8):
            assert sorted(placed) == sorted(ROSTERS[size])

    def test_five_player_structural_award(self, play_matchday):
        """Test bracket letter E is placed 5th and earns exactly 50 points."""
        state = play_matchday(start_matchday(ROSTERS[5], {}, 5))
        fifth = state.bracket_letters['E']
        assert state.event.placements.get(5) == [fifth]
        assert fifth not in state.event.placements.get(1)
        assert fifth not in state.event.placements.get(2)
        season = reduce_events([state.event])
        assert season[fifth].points == 50

    def test_seven_player_structural_award(self, play_matchday):
        """Test bracket letter G is placed 7th."""
        state = play_matchday(start_matchday(ROSTERS[7], {}, 7))
        assert state.event.placements.get(7) == [state.bracket_letters['G']]

    def test_score_after_finish(self, play_matchday):
        """Test a finished session accepts no more scores."""
        state = play_matchday(start_matchday(ROSTERS[4], {}, 4))
        with pytest.raises(MatchdayStateError):
            submit_score(state, 15, 10)

    def test_finish_before_end(self):
        """Test finish requires a finished session."""
        state = start_matchday(ROSTERS[4], {}, 4)
        with pytest.raises(MatchdayStateError):
            finish(state)


class TestStateSerialization:
    """Tests for persisting a session between requests."""

    def test_resume_mid_bracket(self):
        """Test a saved session resumes at the same match."""
        state = play_pool(start_matchday(ROSTERS[8], {}, 8))
        state = submit_score(state, 15, 9)
        restored = MatchdayState.from_dict(state.to_dict())
        assert restored.phase == BRACKET
        assert restored.index == state.index
        assert current_match(restored) == current_match(state)

    def test_empty_dict_is_idle(self):
        """Test a missing session loads as idle."""
        assert MatchdayState.from_dict(None).phase == IDLE
        assert MatchdayState.from_dict({}).phase == IDLE
