"""
Standardized exception hierarchy for habit-engine
Provides rich context, consistent logging, and user-friendly error messages
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import json
import logging

logger = logging.getLogger(__name__)


class HabitEngineError(Exception):
    """
    Base exception for all habit-engine errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - User-friendly messages
    - Structured context
    - Automatic logging

    Components raise these; EngagementService converts them into
    OperationResult values so the host never sees a traceback.

    Example:
        raise HabitEngineError(
            message="Failed to save streak state",
            operation="record_check_in",
            context={"key": "streak"}
        )
    """

    # Expected, user-facing outcomes override this with logging.INFO
    log_level: int = logging.ERROR

    def __init__(
        self,
        message: str,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.user_message = user_message or "An error occurred. Please try again."
        self.timestamp = datetime.now(timezone.utc)

        # Auto-log on creation
        self._log_error()

    def _log_error(self) -> None:
        """Log error with full context"""
        log_data = {
            "error_type": self.__class__.__name__,
            "error_message": self.message,  # Avoid conflict with logging's 'message' field
            "request_id": self.request_id,
            "operation": self.operation,
            "error_context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

        if self.cause:
            log_data["cause"] = str(self.cause)
            logger.log(self.log_level, f"{self.__class__.__name__}: {self.message}", extra=log_data, exc_info=self.cause)
        else:
            logger.log(self.log_level, f"{self.__class__.__name__}: {self.message}", extra=log_data)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for host-facing results"""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "user_message": self.user_message,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat()
        }


# ==========================================
# Validation Errors (User Input)
# ==========================================

class ValidationError(HabitEngineError):
    """
    Raised when user input fails validation

    Example:
        raise ValidationError(
            message="Title cannot be empty",
            field="title",
            value=""
        )
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        kwargs.setdefault("user_message", f"Invalid {field}: {message}" if field else message)
        super().__init__(
            message=message,
            context={"field": field, "value": value, **(kwargs.pop("context", None) or {})},
            **kwargs
        )


class InvalidReminder(ValidationError):
    """Reminder failed validation on save; nothing was persisted"""
    log_level = logging.WARNING


# ==========================================
# Engine State Errors
# ==========================================

class AlreadyCheckedInToday(HabitEngineError):
    """A check-in already exists for this calendar day"""
    log_level = logging.INFO

    def __init__(self, day: Any, **kwargs):
        self.day = day
        super().__init__(
            message=f"Already checked in on {day}",
            user_message="You've already checked in today. Come back tomorrow!",
            context={"day": str(day)},
            **kwargs
        )


class InvalidChallengeState(HabitEngineError):
    """Challenge transition is not allowed from its current state"""
    log_level = logging.WARNING

    def __init__(
        self,
        message: str,
        challenge_id: Optional[str] = None,
        **kwargs
    ):
        self.challenge_id = challenge_id
        super().__init__(
            message=message,
            user_message="That challenge action isn't available right now.",
            context={"challenge_id": challenge_id},
            **kwargs
        )


class RecordNotFoundError(HabitEngineError):
    """Requested record does not exist"""
    log_level = logging.WARNING

    def __init__(
        self,
        message: str,
        record_type: Optional[str] = None,
        record_id: Optional[Any] = None,
        **kwargs
    ):
        self.record_type = record_type
        self.record_id = record_id
        super().__init__(
            message=message,
            user_message=f"{record_type or 'Record'} not found.",
            context={"record_type": record_type, "record_id": record_id},
            **kwargs
        )


class RewardNotFound(RecordNotFoundError):
    """Reward id is not in the available-rewards inbox"""

    def __init__(self, reward_id: Any, **kwargs):
        super().__init__(
            message=f"Reward {reward_id} not found",
            record_type="Reward",
            record_id=reward_id,
            **kwargs
        )


# ==========================================
# Persistence Errors
# ==========================================

class PersistenceUnavailable(HabitEngineError):
    """
    The load/save collaborator failed

    Fatal for the current operation. In-memory state is left untouched.
    """

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        **kwargs
    ):
        self.key = key
        super().__init__(
            message=message,
            user_message="We couldn't save your progress. Please try again.",
            context={"key": key, **(kwargs.pop("context", None) or {})},
            **kwargs
        )


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(HabitEngineError):
    """System configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            user_message="The system is not properly configured. Check your environment settings.",
            context={"config_key": config_key},
            **kwargs
        )


# ==========================================
# Helper Functions
# ==========================================

def wrap_external_exception(
    error: Exception,
    operation: str,
    key: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None
) -> HabitEngineError:
    """
    Wrap storage adapter exceptions into our exception hierarchy

    Args:
        error: Original exception
        operation: What operation was being performed
        key: Storage key involved, if any
        context: Additional context

    Returns:
        Appropriate HabitEngineError subclass

    Example:
        try:
            path.write_text(payload)
        except OSError as e:
            raise wrap_external_exception(e, operation="save", key="streak")
    """
    if isinstance(error, HabitEngineError):
        return error

    # Filesystem / IO errors
    if isinstance(error, OSError):
        return PersistenceUnavailable(
            message=f"Storage I/O failed: {str(error)}",
            key=key,
            operation=operation,
            context=context,
            cause=error
        )

    # Corrupt or unserializable blobs
    elif isinstance(error, (json.JSONDecodeError, TypeError, ValueError)):
        return PersistenceUnavailable(
            message=f"Stored data for '{key}' is unreadable: {str(error)}",
            key=key,
            operation=operation,
            context=context,
            cause=error
        )

    # Generic fallback
    else:
        return HabitEngineError(
            message=f"{operation} failed: {str(error)}",
            operation=operation,
            context=context,
            cause=error
        )
