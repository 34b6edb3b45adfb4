"""Host-facing operation result"""
from typing import Any, Generic, Optional, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class OperationResult(BaseModel, Generic[T]):
    """Success value or serialized engine error

    Engine errors are returned to the host as values, never raised across
    the EngagementService boundary.
    """
    success: bool
    value: Optional[T] = None
    error: Optional[dict[str, Any]] = None

    @classmethod
    def ok(cls, value: Any = None) -> "OperationResult":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: Any) -> "OperationResult":
        return cls(success=False, error=error.to_dict())

    @property
    def error_type(self) -> Optional[str]:
        return self.error["error"] if self.error else None
