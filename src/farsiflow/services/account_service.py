"""Account service for learner sessions and progress updates."""
import logging
import random
import uuid
from dataclasses import replace
from datetime import UTC, datetime, tzinfo
from typing import Iterable, List, Optional

from farsiflow.config import STAGES_PER_LEVEL
from farsiflow.models.progress_models import (
    LeaderboardEntry,
    LearnerAccount,
    LearnerProgress,
    VocabularyMetadata,
)
from farsiflow.monitoring import (
    accounts_created,
    levels_unlocked,
    sessions_resumed,
    stage_xp,
    stages_completed,
    streak_transitions,
    words_added,
    xp_awarded,
)
from farsiflow.services import leaderboard_service, streak_service
from farsiflow.services.progress_store import ProgressStore
from farsiflow.services.progression_service import StageOutcome, apply_stage_completion

# Configure logging
logger = logging.getLogger(__name__)


class AccountExistsError(Exception):
    """Raised when an account with the same contact handle already exists."""


class AuthenticationError(Exception):
    """Raised when no account matches the given credentials."""


class AccountService:
    """Service for learner accounts, session resumes and stage completions.

    Every operation names its account explicitly. The store's session pointer
    is only read by ``resume_active``.
    """

    def __init__(self, store: ProgressStore, tz: Optional[tzinfo] = None):
        """Initialize the service with a progress store.

        Args:
            store: Where accounts are read from and written to
            tz: Timezone deciding calendar days for streaks (default: configured zone)
        """
        self.store = store
        self.tz = tz if tz is not None else streak_service.get_streak_timezone()

    def get_account(self, account_id: str) -> LearnerAccount:
        """Get an account by id."""
        account = self.store.get(account_id)
        if not account:
            raise ValueError(f"Account {account_id} not found")
        return account

    def create_account(
        self,
        name: str,
        contact_handle: str,
        now: Optional[datetime] = None,
    ) -> LearnerAccount:
        """Create an account with fresh progress and make it the active session."""
        now = now or datetime.now(UTC)
        if self.store.find_by_handle(contact_handle):
            raise AccountExistsError(f"Account {contact_handle} already exists")

        account = LearnerAccount(
            id=uuid.uuid4().hex,
            name=name,
            contact_handle=contact_handle,
            joined_at=now,
            progress=LearnerProgress.fresh(now),
        )
        self.store.put(account)
        self.store.set_active_account_id(account.id)
        accounts_created.inc()
        logger.info(f"Account created: {account.id} ({contact_handle})")
        return account

    def login(self, contact_handle: str, now: Optional[datetime] = None) -> LearnerAccount:
        """Open a session for an existing account.

        Verifying credentials is left to the caller; this only resolves the
        handle, points the session at the account and resumes it.
        """
        account = self.store.find_by_handle(contact_handle)
        if not account:
            raise AuthenticationError(f"No account for {contact_handle}")

        self.store.set_active_account_id(account.id)
        return self.resume(account.id, now)

    def get_or_create_account(
        self,
        name: str,
        contact_handle: str,
        now: Optional[datetime] = None,
    ) -> LearnerAccount:
        """Resume the account for a handle, creating it on first contact."""
        try:
            return self.login(contact_handle, now)
        except AuthenticationError:
            return self.create_account(name, contact_handle, now)

    def logout(self) -> None:
        """Close the active session."""
        self.store.clear_active_account_id()

    def resume(self, account_id: str, now: Optional[datetime] = None) -> LearnerAccount:
        """Reconcile the streak of an account and persist it."""
        now = now or datetime.now(UTC)
        account = self.get_account(account_id)

        outcome = streak_service.streak_outcome(account.progress, now, self.tz)
        progress = streak_service.reconcile(account.progress, now, self.tz)
        account = replace(account, progress=progress)
        self.store.put(account)

        sessions_resumed.inc()
        streak_transitions.labels(outcome=outcome).inc()
        logger.info(f"Session resumed for {account_id}: streak {outcome}, now {progress.streak}")
        return account

    def resume_active(self, now: Optional[datetime] = None) -> Optional[LearnerAccount]:
        """Resume the account of the active session, if there is one."""
        account_id = self.store.get_active_account_id()
        if not account_id:
            return None
        try:
            return self.resume(account_id, now)
        except ValueError:
            logger.warning(f"Active session points at missing account {account_id}")
            return None

    def record_stage_completion(
        self,
        account_id: str,
        level_id: int,
        stage: int,
        xp_gained: int,
        candidate_words: Iterable[VocabularyMetadata] = (),
        now: Optional[datetime] = None,
    ) -> StageOutcome:
        """Apply a completed stage to an account and persist the whole record."""
        now = now or datetime.now(UTC)
        account = self.get_account(account_id)

        before = account.progress
        after = apply_stage_completion(before, level_id, stage, xp_gained, candidate_words, now)
        self.store.put(replace(account, progress=after))

        outcome = StageOutcome.compare(before, after, level_id, stage)
        stages_completed.labels(level_id=str(level_id)).inc()
        xp_awarded.inc(outcome.xp_gained)
        stage_xp.observe(outcome.xp_gained)
        words_added.inc(outcome.words_added)
        if outcome.level_unlocked:
            levels_unlocked.inc()
        logger.info(
            f"Stage {outcome.stage} of level {level_id} completed by {account_id}: "
            f"+{outcome.xp_gained} xp, {outcome.words_added} new words"
            + (f", level {after.current_level} unlocked" if outcome.level_unlocked else "")
        )
        return outcome

    def get_statistics(self, account_id: str) -> dict:
        """Get learner statistics."""
        progress = self.get_account(account_id).progress
        milestone = leaderboard_service.next_milestone(progress.xp)

        return {
            "xp": progress.xp,
            "streak": progress.streak,
            "current_level": progress.current_level,
            "levels_completed": sum(
                1 for stages in progress.level_progress.values() if stages >= STAGES_PER_LEVEL
            ),
            "stages_completed": sum(progress.level_progress.values()),
            "vocabulary_size": len(progress.vocabulary),
            "next_milestone_xp": milestone.next_xp,
            "xp_to_next_milestone": milestone.remaining,
            "milestone_percent": milestone.percent,
        }

    def get_leaderboard(
        self,
        account_id: str,
        rng: Optional[random.Random] = None,
    ) -> List[LeaderboardEntry]:
        """Synthesize the leaderboard for an account."""
        account = self.get_account(account_id)
        return leaderboard_service.synthesize(account.name, account.progress.xp, rng)
