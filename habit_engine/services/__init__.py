"""
Service Layer Package

EngagementService is the facade hosts (the CLI, a UI) drive; it owns the
engine components and converts engine errors into OperationResult values.
"""

from habit_engine.services.engagement_service import EngagementService

__all__ = [
    "EngagementService",
]
