"""Configuration management"""
import os
from pathlib import Path
from dotenv import load_dotenv
import pytz

from habit_engine.exceptions import ConfigurationError

load_dotenv()

# Storage
DATA_PATH: Path = Path(os.getenv("DATA_PATH", "./data"))

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# Day boundaries are computed in this timezone (IANA name)
HABIT_TIMEZONE: str = os.getenv("HABIT_TIMEZONE", "UTC")

# Reminder loop interval. Reminders match on HH:MM, so anything above 60
# risks skipping a minute slot entirely.
REMINDER_TICK_SECONDS: float = float(os.getenv("REMINDER_TICK_SECONDS", "60"))

# Length of the consistency bitmap shown on the dashboard
RECENT_ACTIVITY_DAYS: int = int(os.getenv("RECENT_ACTIVITY_DAYS", "14"))

# Optional seed for the variable reward draws (empty = system entropy)
REWARD_RANDOM_SEED: str = os.getenv("REWARD_RANDOM_SEED", "")


# Validation
def validate_config() -> None:
    """Validate configuration"""
    if LOG_LEVEL.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ConfigurationError(f"Invalid LOG_LEVEL: {LOG_LEVEL}", config_key="LOG_LEVEL")
    try:
        pytz.timezone(HABIT_TIMEZONE)
    except pytz.exceptions.UnknownTimeZoneError:
        raise ConfigurationError(
            f"Invalid HABIT_TIMEZONE: '{HABIT_TIMEZONE}'. "
            f"Use IANA timezone (e.g., 'Europe/Stockholm', 'America/New_York')",
            config_key="HABIT_TIMEZONE"
        )
    if not 0 < REMINDER_TICK_SECONDS <= 60:
        raise ConfigurationError(
            "REMINDER_TICK_SECONDS must be in (0, 60]",
            config_key="REMINDER_TICK_SECONDS"
        )
    if RECENT_ACTIVITY_DAYS < 1:
        raise ConfigurationError(
            "RECENT_ACTIVITY_DAYS must be at least 1",
            config_key="RECENT_ACTIVITY_DAYS"
        )
    if REWARD_RANDOM_SEED and not REWARD_RANDOM_SEED.lstrip("-").isdigit():
        raise ConfigurationError(
            "REWARD_RANDOM_SEED must be an integer",
            config_key="REWARD_RANDOM_SEED"
        )
