"""
Unit tests for YAML storage and settings.
"""
import pytest
import sys
import os
import yaml

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from league.ledger import Ledger
from league.settings import get_default_settings, load_settings, save_settings
from league.storage import (
    YamlLedgerStore,
    clear_matchday,
    load_matchday,
    read_yaml,
    save_matchday,
    save_standings_cache,
    write_yaml,
)


class TestYamlHelpers:
    """Tests for read_yaml and write_yaml."""

    def test_missing_file(self, tmp_path):
        """Test a missing file returns the default."""
        assert read_yaml(str(tmp_path / 'nope.yaml'), default=[]) == []

    def test_write_converts_tuples(self, tmp_path):
        """Test tuples are written as lists."""
        path = str(tmp_path / 'data.yaml')
        write_yaml(path, {'team': ('Ann', 'Ben')})
        assert read_yaml(path) == {'team': ['Ann', 'Ben']}
        assert not os.path.exists(path + '.tmp')


class TestYamlLedgerStore:
    """Tests for the YAML ledger store."""

    def test_empty_store(self, tmp_path):
        """Test a new store loads no events."""
        store = YamlLedgerStore(str(tmp_path / 'events.yaml'))
        assert store.load() == []

    def test_ledger_persists(self, tmp_path, slam_event, challenger_event):
        """Test standings rebuilt from the saved file match the original."""
        path = str(tmp_path / 'events.yaml')
        ledger = Ledger(YamlLedgerStore(path))
        ledger.append(slam_event)
        ledger.append(challenger_event)

        reloaded = Ledger(YamlLedgerStore(path))
        assert reloaded.export_all() == ledger.export_all()
        assert reloaded.standings() == ledger.standings()

    def test_id_counter_persists(self, tmp_path, slam_event, challenger_event):
        """Test an undone id stays used after reloading the file."""
        path = str(tmp_path / 'events.yaml')
        ledger = Ledger(YamlLedgerStore(path))
        ledger.append(slam_event)
        ledger.append(challenger_event)
        ledger.undo_last()
        assert read_yaml(path)['next_id'] == 3

        reloaded = Ledger(YamlLedgerStore(path))
        assert reloaded.append(challenger_event).id == 3

    def test_plain_list_file(self, tmp_path):
        """Test a bare list of events is accepted."""
        path = tmp_path / 'events.yaml'
        path.write_text(yaml.safe_dump([{'id': 1, 'size': 4, 'placements': {1: ['Ann', 'Ben']}}]))
        ledger = Ledger(YamlLedgerStore(str(path)))
        assert ledger.aggregates['Ann'].points == 250

    def test_invalid_file(self, tmp_path):
        """Test a file without an events list is refused."""
        path = tmp_path / 'events.yaml'
        path.write_text('events: 5\n')
        with pytest.raises(ValueError):
            YamlLedgerStore(str(path)).load()


class TestSessionFiles:
    """Tests for the standings cache and the matchday session file."""

    def test_standings_cache(self, tmp_path):
        """Test the cache is written under a standings key."""
        path = str(tmp_path / 'standings.yaml')
        save_standings_cache(path, [{'rank': 1, 'player': 'Ann'}])
        assert read_yaml(path) == {'standings': [{'rank': 1, 'player': 'Ann'}]}

    def test_matchday_round_trip_and_clear(self, tmp_path):
        """Test the session file is saved, loaded and removed."""
        path = str(tmp_path / 'matchday.yaml')
        assert load_matchday(path) is None
        save_matchday(path, {'phase': 'pool', 'index': 2})
        assert load_matchday(path) == {'phase': 'pool', 'index': 2}
        clear_matchday(path)
        assert load_matchday(path) is None
        clear_matchday(path)


class TestSettings:
    """Tests for settings.yaml."""

    def test_defaults(self, tmp_path):
        """Test a missing file yields defaults."""
        assert load_settings(str(tmp_path)) == get_default_settings()

    def test_merge(self, tmp_path):
        """Test known keys override defaults and unknown keys are dropped."""
        save_settings(str(tmp_path), {'score_warnings': False, 'colour': 'blue'})
        settings = load_settings(str(tmp_path))
        assert settings['score_warnings'] is False
        assert settings['ledger_file'] == 'events.yaml'
        assert 'colour' not in settings

    def test_invalid_yaml(self, tmp_path):
        """Test a broken file falls back to defaults."""
        (tmp_path / 'settings.yaml').write_text('score_warnings: [unclosed\n')
        assert load_settings(str(tmp_path)) == get_default_settings()
