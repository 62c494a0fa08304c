"""
Shared pytest fixtures for league tests.

Running tests:
    pytest tests/
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from league.matchday import current_match, submit_score
from league.models import Event, GameRecord, PlayerAggregate


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Point the app at an empty temporary data directory."""
    import app as app_module

    data_dir = tmp_path / "data"
    data_dir.mkdir()
    monkeypatch.setattr(app_module, 'DATA_DIR', str(data_dir))
    return data_dir


@pytest.fixture
def client(temp_data_dir):
    """Create a test client backed by the temporary data directory."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def play_matchday():
    """Return a function that scores every remaining match of a matchday.

    With a preference list, the team holding the better-placed player wins;
    otherwise team 1 always wins. Pool games end 11-7, bracket games 15-10.
    """
    def _play(state, prefer=None):
        while state.phase in ('pool', 'bracket'):
            match = current_match(state)
            if prefer:
                team1_wins = (min(prefer.index(p) for p in match['team1'])
                              < min(prefer.index(p) for p in match['team2']))
            else:
                team1_wins = True
            high = 11 if match['phase'] == 'pool' else 15
            low = high - 4 if match['phase'] == 'pool' else high - 5
            if team1_wins:
                state = submit_score(state, high, low)
            else:
                state = submit_score(state, low, high)
        return state
    return _play


@pytest.fixture
def slam_event():
    """A completed 8-player event with bronze and final games."""
    return Event(1, 8, {1: ['Ann', 'Ben'], 2: ['Cal', 'Dee'], 3: ['Eve', 'Fay'], 4: ['Gus', 'Hal']}, [
        GameRecord(['Ann', 'Ben'], ['Gus', 'Hal'], 15, 8, stage='bracket', label='SF1'),
        GameRecord(['Cal', 'Dee'], ['Eve', 'Fay'], 15, 12, stage='bracket', label='SF2'),
        GameRecord(['Eve', 'Fay'], ['Gus', 'Hal'], 15, 11, stage='bracket', label='Bronze'),
        GameRecord(['Ann', 'Ben'], ['Cal', 'Dee'], 16, 14, stage='bracket', label='Final'),
    ])


@pytest.fixture
def challenger_event():
    """A 4-player event with one pool game and the final."""
    return Event(2, 4, {1: ['Ann', 'Cal'], 2: ['Ben', 'Ivy']}, [
        GameRecord(['Ann', 'Ben'], ['Cal', 'Ivy'], 11, 9, stage='pool'),
        GameRecord(['Ann', 'Cal'], ['Ben', 'Ivy'], 15, 10, stage='bracket', label='Final'),
    ])


@pytest.fixture
def season_aggregates():
    """Aggregates for two players with season history."""
    return {
        'Bill': PlayerAggregate('Bill', points=250, wins=3, losses=1, points_for=50, points_against=40),
        'Alex': PlayerAggregate('Alex', points=100, wins=1, losses=3, points_for=40, points_against=50),
    }
