"""Tests for environment configuration validation"""
import pytest

from habit_engine import config
from habit_engine.exceptions import ConfigurationError


class TestConfigValidation:
    """Test validate_config() against module settings"""

    def test_defaults_are_valid(self, monkeypatch):
        monkeypatch.setattr(config, "LOG_LEVEL", "INFO")
        monkeypatch.setattr(config, "HABIT_TIMEZONE", "UTC")
        monkeypatch.setattr(config, "REMINDER_TICK_SECONDS", 60.0)
        monkeypatch.setattr(config, "RECENT_ACTIVITY_DAYS", 14)
        monkeypatch.setattr(config, "REWARD_RANDOM_SEED", "")

        config.validate_config()

    def test_valid_timezone_and_seed(self, monkeypatch):
        monkeypatch.setattr(config, "HABIT_TIMEZONE", "Europe/Stockholm")
        monkeypatch.setattr(config, "REWARD_RANDOM_SEED", "42")

        config.validate_config()

    def test_invalid_log_level(self, monkeypatch):
        monkeypatch.setattr(config, "LOG_LEVEL", "VERBOSE")

        with pytest.raises(ConfigurationError) as exc_info:
            config.validate_config()

        assert exc_info.value.config_key == "LOG_LEVEL"

    def test_invalid_timezone(self, monkeypatch):
        monkeypatch.setattr(config, "HABIT_TIMEZONE", "Mars/Olympus_Mons")

        with pytest.raises(ConfigurationError) as exc_info:
            config.validate_config()

        assert exc_info.value.config_key == "HABIT_TIMEZONE"

    @pytest.mark.parametrize("seconds", [0, -5, 61])
    def test_tick_interval_bounds(self, monkeypatch, seconds):
        monkeypatch.setattr(config, "REMINDER_TICK_SECONDS", seconds)

        with pytest.raises(ConfigurationError):
            config.validate_config()

    def test_recent_days_at_least_one(self, monkeypatch):
        monkeypatch.setattr(config, "RECENT_ACTIVITY_DAYS", 0)

        with pytest.raises(ConfigurationError):
            config.validate_config()

    def test_seed_must_be_integer(self, monkeypatch):
        monkeypatch.setattr(config, "REWARD_RANDOM_SEED", "abc")

        with pytest.raises(ConfigurationError):
            config.validate_config()
