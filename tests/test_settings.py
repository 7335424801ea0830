"""Tests for game modes, settings and lifecycle transitions."""

import pytest

from safenuked.engine.modes import (
    ConfigurationError,
    GameMode,
    GameSettings,
    GeneratedDeck,
    HandWrittenDeck,
    get_mode,
)
from safenuked.engine.phases import GameStatus, PhaseManager


class TestModes:
    """Mode lookup and rules."""

    def test_get_mode_accepts_names_and_members(self):
        assert get_mode(" party ").mode == GameMode.PARTY
        assert get_mode(GameMode.TIMED).timed
        assert get_mode("custom").requires_topic

    def test_unknown_mode(self):
        with pytest.raises(ConfigurationError, match="Unknown mode"):
            get_mode("blitz")

    def test_only_timed_mode_is_timed(self):
        assert [m for m in GameMode if get_mode(m).timed] == [GameMode.TIMED]


class TestGameSettings:
    """Validation and config loading."""

    def test_defaults_are_valid(self):
        settings = GameSettings()
        settings.validate()
        assert settings.deck_size == 12
        assert settings.trap_count == 4
        assert not settings.manual_traps
        assert not settings.hand_written

    @pytest.mark.parametrize("deck_size", [12, 16, 20, 24])
    def test_trap_range_per_deck_size(self, deck_size):
        settings = GameSettings(deck_size=deck_size, trap_count=1)
        assert settings.max_traps == min(8, deck_size - 4)
        settings.validate()
        GameSettings(deck_size=deck_size, trap_count=settings.max_traps).validate()

    @pytest.mark.parametrize("kwargs", [
        {"deck_size": 10},
        {"trap_count": 0},
        {"trap_count": 9},
        {"mode": GameMode.CUSTOM},
        {"mode": GameMode.CUSTOM, "topic": "   "},
        {"turn_time_limit": 0},
        {"deck": "manual_traps"},
    ])
    def test_invalid_settings(self, kwargs):
        with pytest.raises(ConfigurationError):
            GameSettings(**kwargs).validate()

    def test_deck_setups_are_exclusive(self):
        assert GameSettings(deck=GeneratedDeck(manual_traps=True)).manual_traps
        hand_written = GameSettings(deck=HandWrittenDeck())
        assert hand_written.hand_written
        assert not hand_written.manual_traps

    def test_hand_written_custom_deck_needs_no_topic(self):
        GameSettings(mode=GameMode.CUSTOM, deck=HandWrittenDeck()).validate()
        GameSettings(mode=GameMode.CUSTOM, deck=HandWrittenDeck(), topic="  ").validate()

    def test_from_dict(self):
        settings = GameSettings.from_dict({
            "mode": "custom",
            "deck_size": 16,
            "trap_count": 6,
            "topic": "Cheese",
            "deck": "manual_traps",
            "turn_time_limit": 15,
        })
        assert settings.mode == GameMode.CUSTOM
        assert settings.deck_size == 16
        assert settings.trap_count == 6
        assert settings.topic == "Cheese"
        assert settings.manual_traps
        assert settings.turn_time_limit == 15
        settings.validate()

    def test_from_dict_defaults(self):
        settings = GameSettings.from_dict({})
        assert settings.mode == GameMode.CLASSIC
        assert isinstance(settings.deck, GeneratedDeck)

    def test_from_dict_unknown_deck(self):
        with pytest.raises(ConfigurationError, match="Unknown deck setup"):
            GameSettings.from_dict({"deck": "both"})


class TestPhaseManager:
    """Lifecycle transitions."""

    def test_legal_path(self):
        phases = PhaseManager()
        assert phases.transition(GameStatus.LOADING_ROUND)
        assert phases.transition(GameStatus.PLAYING)
        assert phases.state.phase_name == "round_1_playing"
        assert phases.transition(GameStatus.GAME_OVER)
        assert phases.state.phase_name == "game_over"

    def test_illegal_transition_is_refused(self):
        phases = PhaseManager()
        assert not phases.transition(GameStatus.PLAYING)
        assert phases.status == GameStatus.LOBBY

    def test_game_over_is_terminal_until_reset(self):
        phases = PhaseManager()
        phases.transition(GameStatus.LOADING_ROUND)
        phases.transition(GameStatus.PLAYING)
        phases.next_round()
        phases.transition(GameStatus.GAME_OVER)

        assert not phases.transition(GameStatus.PLAYING)
        assert phases.round_number == 2

        phases.reset()
        assert phases.status == GameStatus.LOBBY
        assert phases.round_number == 1

    def test_reset_outside_game_over_does_nothing(self):
        phases = PhaseManager()
        phases.transition(GameStatus.LOADING_ROUND)
        phases.reset()
        assert phases.status == GameStatus.LOADING_ROUND
