"""Unit tests for custom exception hierarchy"""
import json
import logging
import pytest
from datetime import datetime

from habit_engine.exceptions import (
    HabitEngineError,
    ValidationError,
    InvalidReminder,
    AlreadyCheckedInToday,
    InvalidChallengeState,
    RecordNotFoundError,
    RewardNotFound,
    PersistenceUnavailable,
    ConfigurationError,
    wrap_external_exception,
)


class TestHabitEngineError:
    """Test base exception class"""

    def test_basic_exception(self):
        """Test basic exception creation"""
        error = HabitEngineError("Test error")
        assert error.message == "Test error"
        assert error.user_message == "An error occurred. Please try again."
        assert error.request_id is not None
        assert isinstance(error.timestamp, datetime)

    def test_exception_with_context(self):
        """Test exception with full context"""
        error = HabitEngineError(
            message="Save failed",
            operation="record_check_in",
            context={"key": "streak"},
            user_message="Could not save your check-in"
        )
        assert error.operation == "record_check_in"
        assert error.context["key"] == "streak"
        assert error.user_message == "Could not save your check-in"

    def test_exception_with_cause(self):
        """Test exception wrapping another exception"""
        original_error = ValueError("Invalid value")
        error = HabitEngineError(message="Validation failed", cause=original_error)
        assert error.cause == original_error

    def test_to_dict(self):
        """Test exception serialization"""
        error = HabitEngineError(message="Test error", user_message="User-friendly message")
        error_dict = error.to_dict()

        assert error_dict["error"] == "HabitEngineError"
        assert error_dict["message"] == "Test error"
        assert error_dict["user_message"] == "User-friendly message"
        assert "request_id" in error_dict
        assert "timestamp" in error_dict

    def test_logged_on_creation(self, caplog):
        with caplog.at_level(logging.INFO, logger="habit_engine.exceptions"):
            HabitEngineError("boom")

        assert caplog.records[-1].levelno == logging.ERROR
        assert "HabitEngineError: boom" in caplog.records[-1].getMessage()


class TestEngineErrors:
    """Test engine-specific error classes"""

    def test_validation_error_fields(self):
        error = ValidationError(message="Title cannot be empty", field="title", value="")
        assert error.field == "title"
        assert error.context == {"field": "title", "value": ""}
        assert error.user_message == "Invalid title: Title cannot be empty"

    def test_invalid_reminder_is_validation_error(self):
        error = InvalidReminder(message="Select at least one day", field="days", value=[])
        assert isinstance(error, ValidationError)
        assert error.log_level == logging.WARNING

    def test_already_checked_in_logs_info(self, caplog):
        with caplog.at_level(logging.INFO, logger="habit_engine.exceptions"):
            error = AlreadyCheckedInToday("2024-01-15")

        assert error.day == "2024-01-15"
        assert "already checked in" in error.user_message
        assert caplog.records[-1].levelno == logging.INFO

    def test_invalid_challenge_state(self):
        error = InvalidChallengeState("Challenge 'x' not found", challenge_id="x")
        assert error.challenge_id == "x"
        assert error.to_dict()["error"] == "InvalidChallengeState"

    def test_reward_not_found(self):
        error = RewardNotFound(7, operation="claim_reward")
        assert isinstance(error, RecordNotFoundError)
        assert error.record_id == 7
        assert error.user_message == "Reward not found."
        assert error.operation == "claim_reward"

    def test_persistence_unavailable_merges_context(self):
        error = PersistenceUnavailable("disk full", key="streak", context={"path": "/tmp/x"})
        assert error.context == {"key": "streak", "path": "/tmp/x"}

    def test_configuration_error(self):
        error = ConfigurationError("Invalid LOG_LEVEL", config_key="LOG_LEVEL")
        assert error.config_key == "LOG_LEVEL"


class TestWrapExternalException:
    """Test adapter exception wrapping"""

    def test_os_error_becomes_persistence_unavailable(self):
        wrapped = wrap_external_exception(OSError("disk full"), operation="save", key="streak")
        assert isinstance(wrapped, PersistenceUnavailable)
        assert wrapped.key == "streak"
        assert wrapped.operation == "save"

    def test_decode_error_becomes_persistence_unavailable(self):
        try:
            json.loads("{not json")
        except json.JSONDecodeError as e:
            wrapped = wrap_external_exception(e, operation="load", key="rewards")

        assert isinstance(wrapped, PersistenceUnavailable)
        assert "unreadable" in wrapped.message

    def test_engine_error_passes_through(self):
        original = InvalidChallengeState("nope")
        assert wrap_external_exception(original, operation="load") is original

    def test_unknown_error_becomes_base_error(self):
        wrapped = wrap_external_exception(KeyError("x"), operation="load")
        assert type(wrapped) is HabitEngineError
