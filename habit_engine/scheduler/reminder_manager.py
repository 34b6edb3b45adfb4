"""Recurring reminders evaluated on a periodic tick"""
import asyncio
import logging
from datetime import datetime
from time import monotonic
from typing import Callable, Optional

from pydantic import ValidationError as PydanticValidationError

from habit_engine.exceptions import InvalidReminder, RecordNotFoundError
from habit_engine.models.reminder import Reminder, ReminderSet
from habit_engine.scheduler.notifier import Notifier
from habit_engine.storage.base import StateStore, REMINDERS_KEY
from habit_engine.storage.entities import load_model, save_model
from habit_engine.utils.datetime_helpers import Clock, format_hhmm, sunday_weekday

logger = logging.getLogger(__name__)

REMINDER_BODY = "Time to keep your habit going."


def default_reminders() -> ReminderSet:
    """Starter reminders for a brand-new user"""
    return ReminderSet(reminders=[
        Reminder(id=1, title="MORNING CARDIO", time="07:00", days=[1, 2, 3, 4, 5]),
        Reminder(id=2, title="NUTRITION CHECK", time="12:30", days=[1, 2, 3, 4, 5]),
        Reminder(id=3, title="STRENGTH SESSION", time="18:00", days=[1, 3, 5]),
    ])


def is_due(reminder: Reminder, now: datetime) -> bool:
    """Enabled, scheduled for today's weekday, and exactly this minute"""
    return (
        reminder.enabled
        and sunday_weekday(now.date()) in reminder.days
        and reminder.time == format_hhmm(now)
    )


class ReminderScheduler:
    """Manage the reminder set and fire due reminders on tick()"""

    def __init__(
        self,
        store: StateStore,
        notifier: Notifier,
        notifications_enabled: Optional[Callable[[], bool]] = None
    ):
        self.store = store
        self.notifier = notifier
        self.notifications_enabled = notifications_enabled or (lambda: True)
        self._reminders = load_model(store, REMINDERS_KEY, ReminderSet, default_reminders)

    @property
    def customized(self) -> bool:
        """True once the user has saved, toggled or deleted a reminder"""
        return self._reminders.customized

    def list_reminders(self) -> list[Reminder]:
        return [r.model_copy() for r in self._reminders.reminders]

    def get(self, reminder_id: int) -> Reminder:
        reminder = self._reminders.find(reminder_id)
        if reminder is None:
            raise RecordNotFoundError(
                message=f"Reminder {reminder_id} not found",
                record_type="Reminder",
                record_id=reminder_id,
            )
        return reminder

    def save(self, reminder: Reminder | dict) -> Reminder:
        """
        Create or update a reminder

        New reminders (id None or unknown) are appended; known ids are replaced.

        Raises:
            InvalidReminder: blank title, no days, or malformed fields
            PersistenceUnavailable: save failed (set unchanged)
        """
        if isinstance(reminder, dict):
            try:
                reminder = Reminder.model_validate(reminder)
            except PydanticValidationError as e:
                first = e.errors()[0]
                field = ".".join(str(part) for part in first["loc"]) or None
                raise InvalidReminder(
                    message=first["msg"],
                    field=field,
                    value=first.get("input"),
                    operation="save_reminder",
                )

        if not reminder.title or not reminder.title.strip():
            raise InvalidReminder(
                message="Title cannot be empty",
                field="title",
                value=reminder.title,
                operation="save_reminder",
            )
        if not reminder.days:
            raise InvalidReminder(
                message="Select at least one day",
                field="days",
                value=reminder.days,
                operation="save_reminder",
            )

        updated = self._reminders.model_copy(deep=True)
        cleaned = reminder.model_copy(update={"title": reminder.title.strip()})
        existing = updated.find(cleaned.id) if cleaned.id is not None else None

        if existing is None:
            if cleaned.id is None:
                cleaned = cleaned.model_copy(update={"id": updated.next_id()})
            updated.reminders.append(cleaned)
            action = "Created"
        else:
            # Keys embed the time, so an edit that moves the slot is not blocked
            cleaned = cleaned.model_copy(update={"last_triggered_key": existing.last_triggered_key})
            updated.reminders = [cleaned if r.id == cleaned.id else r for r in updated.reminders]
            action = "Updated"

        updated.customized = True
        self._commit(updated)
        logger.info(f"{action} reminder {cleaned.id}: {cleaned.title} at {cleaned.time} on days {cleaned.days}")
        return cleaned

    def delete(self, reminder_id: int) -> None:
        """Delete a reminder; there is no automatic expiry"""
        self.get(reminder_id)

        updated = self._reminders.model_copy(deep=True)
        updated.reminders = [r for r in updated.reminders if r.id != reminder_id]
        updated.customized = True
        self._commit(updated)
        logger.info(f"Deleted reminder {reminder_id}")

    def toggle(self, reminder_id: int) -> Reminder:
        """Flip enabled ⇄ disabled"""
        current = self.get(reminder_id)

        updated = self._reminders.model_copy(deep=True)
        toggled = current.model_copy(update={"enabled": not current.enabled})
        updated.reminders = [toggled if r.id == reminder_id else r for r in updated.reminders]
        updated.customized = True
        self._commit(updated)
        logger.info(f"Reminder {reminder_id} {'enabled' if toggled.enabled else 'disabled'}")
        return toggled

    def tick(self, now: datetime) -> list[Reminder]:
        """
        Fire every reminder due at exactly this minute, once

        Each reminder is re-read from the live set at tick time, so a toggle
        or delete that lands between ticks is honoured. Missed minutes are not
        backfilled. New trigger keys are saved before anything is sent; if
        the save fails nothing is sent and the error propagates.

        Returns:
            Reminders that fired on this tick

        Raises:
            PersistenceUnavailable: trigger keys couldn't be saved
        """
        if not self.notifications_enabled():
            logger.debug("Notifications are off, skipping reminder tick")
            return []

        day_key = now.date().isoformat()
        fired: list[Reminder] = []

        for reminder_id in [r.id for r in self._reminders.reminders]:
            reminder = self._reminders.find(reminder_id)
            if reminder is None or not is_due(reminder, now):
                continue

            key = reminder.trigger_key(day_key)
            if reminder.last_triggered_key == key:
                continue

            fired.append(reminder.model_copy(update={"last_triggered_key": key}))

        if not fired:
            return fired

        updated = self._reminders.model_copy(deep=True)
        keys = {r.id: r.last_triggered_key for r in fired}
        updated.reminders = [
            r.model_copy(update={"last_triggered_key": keys[r.id]}) if r.id in keys else r
            for r in updated.reminders
        ]
        self._commit(updated)

        for reminder in fired:
            try:
                self.notifier.send(reminder.title, reminder.description or REMINDER_BODY)
                logger.info(f"Sent reminder {reminder.id}: {reminder.title} ({reminder.last_triggered_key})")
            except Exception as e:
                logger.error(f"Failed to send reminder {reminder.id}: {e}", exc_info=True)

        return fired

    def _commit(self, updated: ReminderSet) -> None:
        save_model(self.store, REMINDERS_KEY, updated)
        self._reminders = updated


class ReminderTicker:
    """
    Background loop that calls ReminderScheduler.tick() once per interval

    Runs as an asyncio task on the host's loop. stop() cancels the task and
    waits for it, so nothing fires after teardown.
    """

    def __init__(self, scheduler: ReminderScheduler, clock: Clock, interval: float = 60.0):
        self.scheduler = scheduler
        self.clock = clock
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start ticking (no-op if already running)"""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name="reminder-ticker")
        logger.info(f"Reminder ticker started (every {self.interval}s)")

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish"""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Reminder ticker stopped")

    async def _run(self) -> None:
        # Ticks are scheduled against fixed deadlines so tick runtime and
        # sleep overshoot don't accumulate into a skipped minute
        next_at = monotonic()
        while True:
            try:
                self.scheduler.tick(self.clock.now())
            except Exception as e:
                # One failed tick (e.g. store down) must not kill the loop
                logger.error(f"Reminder tick failed: {e}", exc_info=True)

            next_at += self.interval
            delay = next_at - monotonic()
            if delay < 0:
                logger.warning(f"Reminder tick ran {-delay:.1f}s late")
                next_at -= delay
                delay = 0.0
            await asyncio.sleep(delay)
