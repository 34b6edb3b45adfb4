"""Command-line entry point for the habit engine"""
import argparse
import asyncio
import logging
import random
import sys
from typing import List, Optional

from habit_engine.config import (
    validate_config,
    DATA_PATH,
    HABIT_TIMEZONE,
    LOG_LEVEL,
    REMINDER_TICK_SECONDS,
    REWARD_RANDOM_SEED,
)
from habit_engine.exceptions import HabitEngineError
from habit_engine.models.result import OperationResult
from habit_engine.services.engagement_service import EngagementService
from habit_engine.storage.json_store import JsonFileStore
from habit_engine.utils.datetime_helpers import SystemClock

logger = logging.getLogger(__name__)

DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="habit-engine", description="Daily habit check-ins, rewards and challenges")
    parser.add_argument("--data-path", default=str(DATA_PATH), help=f"State directory (default: {DATA_PATH})")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("checkin", help="Record today's check-in")
    commands.add_parser("status", help="Show streak and consistency panel")
    commands.add_parser("trigger", help="Should the user be prompted right now?")
    commands.add_parser("xp", help="Show XP and level")
    commands.add_parser("invest", help="List investment suggestions")

    reminders = commands.add_parser("reminders", help="Manage reminders")
    reminder_actions = reminders.add_subparsers(dest="action", required=True)
    reminder_actions.add_parser("list")
    add = reminder_actions.add_parser("add")
    add.add_argument("title")
    add.add_argument("time", help="HH:MM")
    add.add_argument("--days", type=int, nargs="+", default=[1, 2, 3, 4, 5],
                     help="Weekdays, Sunday=0 (default: Mon-Fri)")
    add.add_argument("--description")
    for name in ("toggle", "delete"):
        action = reminder_actions.add_parser(name)
        action.add_argument("id", type=int)

    rewards = commands.add_parser("rewards", help="Variable rewards")
    reward_actions = rewards.add_subparsers(dest="action", required=True)
    reward_actions.add_parser("check")
    reward_actions.add_parser("list")
    claim = reward_actions.add_parser("claim")
    claim.add_argument("id", type=int)

    challenges = commands.add_parser("challenges", help="Challenge progression")
    challenge_actions = challenges.add_subparsers(dest="action", required=True)
    listing = challenge_actions.add_parser("list")
    listing.add_argument("category", choices=["strength", "cardio", "flexibility"])
    for name in ("start", "complete"):
        action = challenge_actions.add_parser(name)
        action.add_argument("id")

    prefs = commands.add_parser("preferences", help="Show or update preferences")
    prefs.add_argument("--interests", nargs="+")
    prefs.add_argument("--check-in-time", help="Preferred check-in time HH:MM")
    prefs.add_argument("--notifications", choices=["on", "off"])

    commands.add_parser("run-reminders", help="Fire reminders until Ctrl+C")
    return parser


def _report(result: OperationResult, success_text: str) -> int:
    if result.success:
        print(f"✅ {success_text}")
        return 0
    print(f"❌ {result.error['message']}")
    return 1


def run_command(service: EngagementService, args: argparse.Namespace) -> int:
    """Execute one parsed command, returning the process exit code"""
    if args.command == "checkin":
        result = service.record_check_in()
        if result.success:
            return _report(result, f"Checked in! Streak: {result.value.current_streak} days "
                                   f"(longest {result.value.longest_streak})")
        return _report(result, "")

    elif args.command == "status":
        summary = service.get_streak_summary()
        panel = "".join("■" if day else "□" for day in summary["recent_activity"])
        print(f"🔥 Current streak: {summary['current_streak']} days")
        print(f"🏆 Longest streak: {summary['longest_streak']} days")
        print(f"📅 Last {len(summary['recent_activity'])} days: {panel}")
        print(f"🎯 Next milestone: {summary['next_milestone']} days ({summary['days_to_milestone']} to go)")
        print(summary["message"])
        return 0

    elif args.command == "trigger":
        decision = service.evaluate_trigger()
        if decision.should_trigger:
            print(f"🔔 [{decision.kind.value}] {decision.message}")
        else:
            print("No prompt needed right now")
        return 0

    elif args.command == "xp":
        info = service.get_xp()
        print(f"⭐ {info['total_xp']} XP - Level {info['current_level']} ({info['level_tier']})")
        print(f"   {info['xp_to_next_level']} XP to next level")
        return 0

    elif args.command == "invest":
        for opportunity in service.investment_opportunities():
            print(f"• {opportunity.title}: {opportunity.description} ({opportunity.benefit})")
        return 0

    elif args.command == "reminders":
        return _reminders_command(service, args)

    elif args.command == "rewards":
        return _rewards_command(service, args)

    elif args.command == "challenges":
        return _challenges_command(service, args)

    elif args.command == "preferences":
        changes = {}
        if args.interests is not None:
            changes["interests"] = args.interests
        if args.check_in_time is not None:
            changes["preferred_check_in_time"] = args.check_in_time
        if args.notifications is not None:
            changes["notifications"] = args.notifications == "on"
        if changes:
            result = service.update_preferences(**changes)
            if not result.success:
                return _report(result, "")
        prefs = service.get_preferences()
        print(f"Interests: {', '.join(prefs.interests) or 'none'}")
        print(f"Preferred check-in time: {prefs.preferred_check_in_time or 'not set'}")
        print(f"Notifications: {'on' if prefs.notifications else 'off'}")
        return 0

    elif args.command == "run-reminders":
        asyncio.run(run_reminders(service))
        return 0

    return 2


def _reminders_command(service: EngagementService, args: argparse.Namespace) -> int:
    if args.action == "list":
        reminders = service.list_reminders()
        if not reminders:
            print("No reminders")
        for reminder in reminders:
            days = ",".join(DAY_NAMES[d] for d in reminder.days)
            state = "on" if reminder.enabled else "off"
            print(f"[{reminder.id}] {reminder.time} {reminder.title} ({days}) [{state}]")
        return 0

    elif args.action == "add":
        result = service.save_reminder({
            "title": args.title,
            "time": args.time,
            "days": args.days,
            "description": args.description,
        })
        if result.success:
            return _report(result, f"Reminder {result.value.id} saved")
        return _report(result, "")

    elif args.action == "toggle":
        result = service.toggle_reminder(args.id)
        if result.success:
            return _report(result, f"Reminder {args.id} {'enabled' if result.value.enabled else 'disabled'}")
        return _report(result, "")

    result = service.delete_reminder(args.id)
    return _report(result, f"Reminder {args.id} deleted")


def _rewards_command(service: EngagementService, args: argparse.Namespace) -> int:
    if args.action == "check":
        result = service.check_for_rewards()
        if result.success and result.value is None:
            print("No reward this time. Keep going!")
            return 0
        if result.success:
            reward = result.value
            return _report(result, f"🎁 [{reward.id}] {reward.title}: {reward.description} ({reward.value})")
        return _report(result, "")

    elif args.action == "list":
        available = service.list_available_rewards()
        if not available:
            print("No unclaimed rewards")
        for reward in available:
            print(f"[{reward.id}] {reward.title} ({reward.value})")
        return 0

    result = service.claim_reward(args.id)
    if result.success:
        return _report(result, f"Claimed {result.value.title} (+{result.value.xp_gained} XP)")
    return _report(result, "")


def _challenges_command(service: EngagementService, args: argparse.Namespace) -> int:
    if args.action == "list":
        result = service.list_challenges(args.category)
        if not result.success:
            return _report(result, "")
        for view in result.value:
            hint = f" - {view.unlocks_at}" if view.unlocks_at else ""
            print(f"[{view.challenge.id}] {view.challenge.name} ({view.status.value}, "
                  f"+{view.challenge.xp_reward} XP){hint}")
        return 0

    elif args.action == "start":
        result = service.start_challenge(args.id)
        return _report(result, f"Challenge {args.id} started")

    result = service.complete_challenge(args.id)
    if result.success:
        return _report(result, f"Challenge {args.id} completed (+{result.value.xp_awarded} XP)")
    return _report(result, "")


async def run_reminders(service: EngagementService) -> None:
    """Run the reminder ticker in the foreground until cancelled"""
    ticker = service.create_ticker(REMINDER_TICK_SECONDS)
    ticker.start()
    logger.info("Reminder loop is running. Press Ctrl+C to stop.")
    try:
        await asyncio.Event().wait()
    finally:
        await ticker.stop()


def cli(argv: Optional[List[str]] = None) -> int:
    """Console script entry point"""
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO)
    )
    args = build_parser().parse_args(argv)

    try:
        validate_config()
        rng = random.Random(int(REWARD_RANDOM_SEED)) if REWARD_RANDOM_SEED else random.Random()
        service = EngagementService(
            store=JsonFileStore(args.data_path),
            clock=SystemClock(HABIT_TIMEZONE),
            rng=rng,
        )
        return run_command(service, args)
    except KeyboardInterrupt:
        logger.info("Shutting down...")
        return 0
    except HabitEngineError as e:
        print(f"❌ {e.user_message}")
        return 1


if __name__ == "__main__":
    sys.exit(cli())
