"""Daily activity streak reconciliation."""
import logging
from dataclasses import replace
from datetime import date, datetime, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

from farsiflow.config import settings
from farsiflow.models.progress_models import LearnerProgress

logger = logging.getLogger(__name__)

UNCHANGED = "unchanged"
INCREMENTED = "incremented"
RESET = "reset"


def get_streak_timezone() -> Optional[tzinfo]:
    """Timezone that decides calendar days; None means system local time."""
    if settings.progression.streak_timezone:
        return ZoneInfo(settings.progression.streak_timezone)
    return None


def calendar_day(moment: datetime, tz: Optional[tzinfo] = None) -> date:
    """Calendar date of a timestamp in the given timezone.

    Naive timestamps are taken as wall-clock time already.
    """
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(tz).date()


def days_between(last: datetime, now: datetime, tz: Optional[tzinfo] = None) -> int:
    """Number of calendar days between two timestamps, ignoring direction."""
    return abs((calendar_day(now, tz) - calendar_day(last, tz)).days)


def streak_outcome(progress: LearnerProgress, now: datetime, tz: Optional[tzinfo] = None) -> str:
    """Classify what a reconciliation at ``now`` does to the streak."""
    if progress.last_activity_date is None:
        return RESET

    diff_days = days_between(progress.last_activity_date, now, tz)
    if diff_days == 0:
        return UNCHANGED
    if diff_days == 1:
        return INCREMENTED
    return RESET


def reconcile(
    progress: LearnerProgress,
    now: datetime,
    tz: Optional[tzinfo] = None,
) -> LearnerProgress:
    """Update the streak for a session resume at ``now``.

    The same calendar day leaves the streak alone, the next calendar day
    extends it and any longer gap resets it to 1. ``last_activity_date`` is
    stamped with ``now`` on every call, so repeated calls on one day never
    extend the streak twice.
    """
    streak = max(progress.streak, 1)
    outcome = streak_outcome(progress, now, tz)

    if outcome == INCREMENTED:
        streak += 1
    elif outcome == RESET:
        streak = 1

    logger.debug(f"Streak {outcome}: {progress.streak} -> {streak}")
    return replace(progress, streak=streak, last_activity_date=now)
