"""Unit tests for Variable Reward System (habit_engine/gamification/variable_rewards.py)"""
import random
import pytest
from datetime import datetime, timedelta
from unittest.mock import Mock
from zoneinfo import ZoneInfo

from habit_engine.exceptions import PersistenceUnavailable, RewardNotFound
from habit_engine.gamification.variable_rewards import (
    MAX_AVAILABLE_REWARDS,
    RewardEngine,
    build_candidates,
    evaluate_rewards,
    filter_recent_repeats,
)
from habit_engine.models.reward import ClaimedReward, RewardType
from habit_engine.storage.base import REWARDS_KEY

CLAIMED_AT = datetime(2024, 1, 14, 12, 0, tzinfo=ZoneInfo("UTC"))


def scripted_rng(draws, choice_index=0):
    """Random source returning the given draws in order"""
    rng = Mock(spec=random.Random)
    rng.random.side_effect = list(draws)
    rng.choice.side_effect = lambda seq: seq[choice_index]
    return rng


def claims(*types):
    """Claim log (newest first) with the given types"""
    return [
        ClaimedReward(id=i + 1, type=t, title=t.value, claimed_at=CLAIMED_AT - timedelta(days=i))
        for i, t in enumerate(types)
    ]


# ============================================================================
# Candidate Catalog Tests
# ============================================================================

def test_short_streak_only_progress():
    candidates = build_candidates(1, [], scripted_rng([0.99]))

    assert [c.type for c in candidates] == [RewardType.PROGRESS]
    assert candidates[0].value == "+50 XP"
    assert candidates[0].probability == 0.7


def test_streak_candidate_from_three_days():
    candidates = build_candidates(4, [], scripted_rng([0.99]))

    streak = candidates[1]
    assert streak.type == RewardType.STREAK
    assert streak.value == "+40 XP"
    assert streak.probability == pytest.approx(0.4)


def test_streak_probability_capped():
    candidates = build_candidates(20, [], scripted_rng([0.99]))

    assert candidates[1].probability == 0.8


@pytest.mark.parametrize("streak", [5, 10, 30, 100])
def test_milestone_candidate(streak):
    candidates = build_candidates(streak, [], scripted_rng([0.99]))

    types = [c.type for c in candidates]
    assert types == [RewardType.PROGRESS, RewardType.STREAK, RewardType.MILESTONE]
    assert candidates[2].title == f"{streak}-DAY THRESHOLD"
    assert candidates[2].probability == 0.9


def test_personalized_candidates_follow_interests():
    candidates = build_candidates(0, ["Cardio", "strength", "yoga"], scripted_rng([0.99]))

    titles = [c.title for c in candidates if c.type == RewardType.PERSONALIZED]
    assert titles == ["STRENGTH PROTOCOL UNLOCKED", "CARDIO EFFICIENCY MATRIX"]


def test_surprise_candidate_on_low_roll():
    candidates = build_candidates(0, [], scripted_rng([0.01]))

    assert candidates[-1].type == RewardType.SURPRISE
    assert candidates[-1].probability == 1.0


# ============================================================================
# Anti-Repetition Tests
# ============================================================================

def test_filter_blocks_type_of_three_identical_claims():
    candidates = build_candidates(4, [], scripted_rng([0.99]))
    recent = claims(RewardType.PROGRESS, RewardType.PROGRESS, RewardType.PROGRESS)

    filtered = filter_recent_repeats(candidates, recent)

    assert [c.type for c in filtered] == [RewardType.STREAK]


def test_filter_allows_mixed_history():
    candidates = build_candidates(4, [], scripted_rng([0.99]))
    recent = claims(RewardType.PROGRESS, RewardType.STREAK, RewardType.PROGRESS)

    assert filter_recent_repeats(candidates, recent) == candidates


def test_filter_needs_three_claims():
    """Test two identical claims aren't enough to block a type"""
    candidates = build_candidates(1, [], scripted_rng([0.99]))
    recent = claims(RewardType.PROGRESS, RewardType.PROGRESS)

    assert filter_recent_repeats(candidates, recent) == candidates


def test_filter_only_looks_at_last_three():
    candidates = build_candidates(1, [], scripted_rng([0.99]))
    recent = claims(RewardType.STREAK, RewardType.PROGRESS, RewardType.PROGRESS, RewardType.PROGRESS)

    assert filter_recent_repeats(candidates, recent) == candidates


def test_evaluate_returns_none_when_everything_filtered():
    recent = claims(RewardType.PROGRESS, RewardType.PROGRESS, RewardType.PROGRESS)

    assert evaluate_rewards(1, [], recent, scripted_rng([0.99])) is None


@pytest.mark.parametrize("seed", range(25))
def test_evaluate_never_returns_filtered_type(seed):
    """Test selection never picks a type the anti-repetition filter excluded"""
    recent = claims(RewardType.STREAK, RewardType.STREAK, RewardType.STREAK)

    reward = evaluate_rewards(7, ["strength"], recent, random.Random(seed))

    assert reward is not None
    assert reward.type != RewardType.STREAK


# ============================================================================
# Selection Tests
# ============================================================================

def test_first_successful_draw_wins():
    # surprise roll, progress draw misses, streak draw hits
    rng = scripted_rng([0.99, 0.95, 0.1])

    reward = evaluate_rewards(4, [], [], rng)

    assert reward.type == RewardType.STREAK


def test_uniform_fallback_when_no_draw_hits():
    rng = scripted_rng([0.99, 0.99, 0.99], choice_index=1)

    reward = evaluate_rewards(4, [], [], rng)

    assert reward.type == RewardType.STREAK
    rng.choice.assert_called_once()


def test_seeded_rng_is_reproducible():
    first = evaluate_rewards(10, ["cardio"], [], random.Random(99))
    second = evaluate_rewards(10, ["cardio"], [], random.Random(99))

    assert first == second


# ============================================================================
# RewardEngine Tests
# ============================================================================

def test_check_for_rewards_fills_inbox(store, now):
    engine = RewardEngine(store, scripted_rng([0.99, 0.1]))

    reward = engine.check_for_rewards(1, [], now)

    assert reward.id == 1
    assert reward.type == RewardType.PROGRESS
    assert reward.generated_at == now
    assert engine.available == [reward]
    assert store.load(REWARDS_KEY)["next_id"] == 2


def test_claim_moves_reward_to_log(store, now):
    engine = RewardEngine(store, scripted_rng([0.99, 0.1]))
    reward = engine.check_for_rewards(1, [], now)

    claimed = engine.claim(reward.id, now)

    assert claimed.id == reward.id
    assert claimed.xp_gained == 50
    assert engine.available == []
    assert engine.claimed == [claimed]


def test_inbox_drops_oldest_unclaimed_past_cap(store, now):
    checks = MAX_AVAILABLE_REWARDS + 2
    engine = RewardEngine(store, scripted_rng([0.99, 0.1] * checks))

    rewards = [engine.check_for_rewards(1, [], now) for _ in range(checks)]

    assert len(engine.available) == MAX_AVAILABLE_REWARDS
    assert [r.id for r in engine.available] == [r.id for r in reversed(rewards)][:MAX_AVAILABLE_REWARDS]
    assert len(store.load(REWARDS_KEY)["available"]) == MAX_AVAILABLE_REWARDS
    with pytest.raises(RewardNotFound):
        engine.claim(rewards[0].id, now)


def test_claim_twice_raises(store, now):
    engine = RewardEngine(store, scripted_rng([0.99, 0.1]))
    reward = engine.check_for_rewards(1, [], now)
    engine.claim(reward.id, now)

    with pytest.raises(RewardNotFound):
        engine.claim(reward.id, now)

    assert len(engine.claimed) == 1


def test_claim_unknown_id(store, now):
    engine = RewardEngine(store)

    with pytest.raises(RewardNotFound):
        engine.claim(42, now)


def test_claim_log_newest_first(store, now):
    engine = RewardEngine(store, scripted_rng([0.99, 0.1, 0.99, 0.1]))
    first = engine.check_for_rewards(1, [], now)
    second = engine.check_for_rewards(1, [], now)

    engine.claim(first.id, now)
    engine.claim(second.id, now + timedelta(minutes=1))

    assert [c.id for c in engine.claimed] == [second.id, first.id]


def test_claim_save_failure_keeps_inbox(failing_store, now):
    engine = RewardEngine(failing_store, scripted_rng([0.99, 0.1]))
    reward = engine.check_for_rewards(1, [], now)
    failing_store.fail_saves = True

    with pytest.raises(PersistenceUnavailable):
        engine.claim(reward.id, now)

    assert engine.available == [reward]
    assert engine.claimed == []
