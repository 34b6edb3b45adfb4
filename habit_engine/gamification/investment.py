"""
Investment Stage

The user "invests" in the app by telling it about themselves (interests,
preferred check-in time) and tailoring their reminders. Those investments
feed back into personalized rewards, and the suggestions below nudge users
who haven't made them yet.
"""

import logging
from typing import List

from pydantic import ValidationError as PydanticValidationError

from habit_engine.exceptions import ValidationError
from habit_engine.models.user import InvestmentOpportunity, UserPreferences
from habit_engine.storage.base import StateStore, PREFERENCES_KEY
from habit_engine.storage.entities import load_model, save_model

logger = logging.getLogger(__name__)

PERSONALIZE_OPPORTUNITY = InvestmentOpportunity(
    type="personalize",
    title="PERSONALIZE YOUR SYSTEM",
    description="Set your preferences to get personalized recommendations",
    benefit="More relevant rewards and challenges",
    action="set_preferences",
)

REMINDERS_OPPORTUNITY = InvestmentOpportunity(
    type="reminders",
    title="OPTIMIZE YOUR ROUTINE",
    description="Set up smart reminders to stay on track",
    benefit="Never miss a session again",
    action="setup_reminders",
)

CHALLENGE_OPPORTUNITY = InvestmentOpportunity(
    type="challenge",
    title="JOIN PROGRESSIVE CHALLENGES",
    description="Select challenges that align with your goals",
    benefit="Structured approach to reaching your fitness goals",
    action="browse_challenges",
)


def investment_opportunities(
    has_set_preferences: bool,
    has_set_reminders: bool
) -> List[InvestmentOpportunity]:
    """
    Suggestions for increasing future engagement, in display order

    Joining challenges is always on offer.
    """
    opportunities = []
    if not has_set_preferences:
        opportunities.append(PERSONALIZE_OPPORTUNITY)
    if not has_set_reminders:
        opportunities.append(REMINDERS_OPPORTUNITY)
    opportunities.append(CHALLENGE_OPPORTUNITY)
    return opportunities


class PreferenceStore:
    """Owns the UserPreferences entity"""

    def __init__(self, store: StateStore):
        self.store = store
        self._preferences = load_model(store, PREFERENCES_KEY, UserPreferences)

    @property
    def preferences(self) -> UserPreferences:
        return self._preferences

    def update(self, **changes) -> UserPreferences:
        """
        Merge changes into the stored preferences

        Any update counts as completing onboarding.

        Raises:
            ValidationError: unknown field or malformed value
            PersistenceUnavailable: save failed (preferences unchanged)
        """
        unknown = set(changes) - set(UserPreferences.model_fields)
        if unknown:
            field = sorted(unknown)[0]
            raise ValidationError(
                message=f"Unknown preference '{field}'",
                field=field,
                value=changes[field],
                operation="update_preferences",
            )

        merged = {
            **self._preferences.model_dump(),
            **changes,
            "has_completed_onboarding": True,
        }
        try:
            updated = UserPreferences.model_validate(merged)
        except PydanticValidationError as e:
            first = e.errors()[0]
            raise ValidationError(
                message=first["msg"],
                field=".".join(str(part) for part in first["loc"]) or None,
                value=first.get("input"),
                operation="update_preferences",
            )

        save_model(self.store, PREFERENCES_KEY, updated)
        self._preferences = updated
        logger.info(f"Updated preferences: {', '.join(sorted(changes)) or 'none'}")
        return updated
