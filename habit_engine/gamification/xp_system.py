"""
XP and Leveling System

Manages XP awards, level calculations, and tier progression.

Leveling Curve:
- Level 1-5 (Bronze): 100 XP per level
- Level 6-15 (Silver): 200 XP per level
- Level 16-30 (Gold): 500 XP per level
- Level 31+ (Platinum): 1000 XP per level

XP Sources:
- Claimed rewards whose value reads "+N XP"
- Completed challenges (challenge xp_reward)
"""

from typing import Dict
import logging

from habit_engine.models.user import XPState
from habit_engine.storage.base import StateStore, XP_KEY
from habit_engine.storage.entities import load_model, save_model

logger = logging.getLogger(__name__)


def calculate_level_from_xp(total_xp: int) -> Dict[str, any]:
    """
    Calculate level and tier from total XP

    Returns:
        {
            'current_level': int,
            'level_tier': str (bronze/silver/gold/platinum),
            'xp_in_current_level': int,
            'xp_to_next_level': int,
            'total_xp_for_next_level': int
        }
    """
    level = 1
    xp_needed = 0
    xp_remaining = total_xp

    # Bronze tier (Levels 1-5): 100 XP per level
    while level < 5 and xp_remaining >= 100:
        xp_remaining -= 100
        level += 1
        xp_needed += 100

    # Silver tier (Levels 6-15): 200 XP per level
    while level < 15 and xp_remaining >= 200:
        xp_remaining -= 200
        level += 1
        xp_needed += 200

    # Gold tier (Levels 16-30): 500 XP per level
    while level < 30 and xp_remaining >= 500:
        xp_remaining -= 500
        level += 1
        xp_needed += 500

    # Platinum tier (Levels 31+): 1000 XP per level
    while xp_remaining >= 1000:
        xp_remaining -= 1000
        level += 1
        xp_needed += 1000

    if level <= 5:
        tier = "bronze"
        xp_for_next_level = 100
    elif level <= 15:
        tier = "silver"
        xp_for_next_level = 200
    elif level <= 30:
        tier = "gold"
        xp_for_next_level = 500
    else:
        tier = "platinum"
        xp_for_next_level = 1000

    return {
        "current_level": level,
        "level_tier": tier,
        "xp_in_current_level": xp_remaining,
        "xp_to_next_level": xp_for_next_level - xp_remaining,
        "total_xp_for_next_level": xp_needed + xp_for_next_level,
    }


class XPLedger:
    """Running XP total for the user"""

    def __init__(self, store: StateStore):
        self.store = store
        self._state = load_model(store, XP_KEY, XPState)

    @property
    def total_xp(self) -> int:
        return self._state.total_xp

    def award_xp(self, amount: int, source_type: str, reason: str = "") -> Dict[str, any]:
        """
        Add XP and report level changes

        Args:
            amount: XP to add (non-negative)
            source_type: reward / challenge
            reason: Human-readable description

        Returns:
            {
                'xp_awarded': int,
                'new_total_xp': int,
                'old_total_xp': int,
                'leveled_up': bool,
                'new_level': int,
                'old_level': int,
                'new_tier': str,
                'tier_changed': bool
            }
        """
        if amount < 0:
            raise ValueError("XP awards must be non-negative")

        old_total_xp = self._state.total_xp
        old_info = calculate_level_from_xp(old_total_xp)
        new_total_xp = old_total_xp + amount
        new_info = calculate_level_from_xp(new_total_xp)

        if amount:
            updated = XPState(total_xp=new_total_xp)
            save_model(self.store, XP_KEY, updated)
            self._state = updated

        leveled_up = new_info["current_level"] > old_info["current_level"]

        logger.info(
            f"Awarded {amount} XP for {source_type}{f' ({reason})' if reason else ''}. "
            f"Total: {new_total_xp} XP, Level: {new_info['current_level']}, Tier: {new_info['level_tier']}"
        )
        if leveled_up:
            logger.info(f"Leveled up from {old_info['current_level']} to {new_info['current_level']}!")

        return {
            "xp_awarded": amount,
            "new_total_xp": new_total_xp,
            "old_total_xp": old_total_xp,
            "leveled_up": leveled_up,
            "new_level": new_info["current_level"],
            "old_level": old_info["current_level"],
            "new_tier": new_info["level_tier"],
            "tier_changed": new_info["level_tier"] != old_info["level_tier"],
        }

    def get_user_xp(self) -> Dict[str, any]:
        """Current XP and level information"""
        level_info = calculate_level_from_xp(self._state.total_xp)
        return {
            "total_xp": self._state.total_xp,
            **level_info,
        }
