"""Keyed repository of learner accounts."""
import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Dict, Iterable, Iterator, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from farsiflow.models.models import (
    Account,
    LevelProgress,
    Progress,
    SessionPointer,
    VocabularyRecord,
)
from farsiflow.models.progress_models import (
    LearnerAccount,
    LearnerProgress,
    VocabularyEntry,
)
from farsiflow.monitoring import db_errors
from farsiflow.services.streak_service import get_streak_timezone

logger = logging.getLogger(__name__)

SESSION_SLOT = 1


class StorageError(Exception):
    """Raised when learner state cannot be read from or written to storage."""


class ProgressStore(ABC):
    """Repository of learner accounts addressed by account id.

    Besides the accounts it keeps a single-slot pointer naming the account of
    the active session.
    """

    @abstractmethod
    def get_all(self) -> List[LearnerAccount]:
        """Get all accounts."""

    @abstractmethod
    def get(self, account_id: str) -> Optional[LearnerAccount]:
        """Get an account by id."""

    @abstractmethod
    def put_all(self, accounts: Iterable[LearnerAccount]) -> None:
        """Insert or replace accounts. Each account is written as a whole."""

    def put(self, account: LearnerAccount) -> None:
        """Insert or replace a single account."""
        self.put_all([account])

    def find_by_handle(self, contact_handle: str) -> Optional[LearnerAccount]:
        """Find an account by contact handle, ignoring case."""
        key = contact_handle.lower()
        for account in self.get_all():
            if account.contact_handle.lower() == key:
                return account
        return None

    @abstractmethod
    def get_active_account_id(self) -> Optional[str]:
        """Get the account id of the active session."""

    @abstractmethod
    def set_active_account_id(self, account_id: str) -> None:
        """Point the active session at an account."""

    @abstractmethod
    def clear_active_account_id(self) -> None:
        """Clear the active session pointer."""


class InMemoryProgressStore(ProgressStore):
    """Progress store kept in process memory."""

    def __init__(self, accounts: Optional[Iterable[LearnerAccount]] = None):
        self._accounts: Dict[str, LearnerAccount] = {}
        self._active_account_id: Optional[str] = None
        if accounts:
            self.put_all(accounts)

    def get_all(self) -> List[LearnerAccount]:
        return list(self._accounts.values())

    def get(self, account_id: str) -> Optional[LearnerAccount]:
        return self._accounts.get(account_id)

    def put_all(self, accounts: Iterable[LearnerAccount]) -> None:
        for account in accounts:
            self._accounts[account.id] = account

    def get_active_account_id(self) -> Optional[str]:
        return self._active_account_id

    def set_active_account_id(self, account_id: str) -> None:
        self._active_account_id = account_id

    def clear_active_account_id(self) -> None:
        self._active_account_id = None


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite drops tzinfo; stored timestamps are UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def _to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Timestamps are written in UTC.

    Naive timestamps are wall-clock time in the streak timezone.
    """
    if value is None:
        return value
    if value.tzinfo is None:
        tz = get_streak_timezone()
        if tz is not None:
            value = value.replace(tzinfo=tz)
    return value.astimezone(UTC)


def _to_account(row: Account) -> LearnerAccount:
    """Convert database rows to a domain account."""
    progress_row = row.progress
    progress = LearnerProgress(
        current_level=progress_row.current_level,
        level_progress={lp.level_id: lp.completed_stages for lp in row.level_progress},
        xp=progress_row.xp,
        streak=progress_row.streak,
        last_activity_date=_as_utc(progress_row.last_activity_date),
        vocabulary=tuple(
            VocabularyEntry(
                word=record.word,
                transliteration=record.transliteration,
                meaning=record.meaning,
                learned_at_level=record.learned_at_level,
                learned_at=_as_utc(record.learned_at),
            )
            for record in row.vocabulary
        ),
    )
    return LearnerAccount(
        id=row.id,
        name=row.name,
        contact_handle=row.contact_handle,
        joined_at=_as_utc(row.joined_at),
        progress=progress,
    )


class SqlAlchemyProgressStore(ProgressStore):
    """Progress store backed by a SQLAlchemy session."""

    def __init__(self, db: Session):
        """Initialize the store with a database session."""
        self.db = db

    @contextmanager
    def _storage_operation(self, operation: str) -> Iterator[None]:
        """Roll back and re-raise database failures as StorageError."""
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            db_errors.labels(operation=operation).inc()
            logger.error(f"Storage error during {operation}: {e}")
            raise StorageError(f"Could not {operation.replace('_', ' ')}: {e}") from e

    def get_all(self) -> List[LearnerAccount]:
        with self._storage_operation("get_all"):
            rows = self.db.query(Account).order_by(Account.joined_at).all()
            return [_to_account(row) for row in rows]

    def get(self, account_id: str) -> Optional[LearnerAccount]:
        with self._storage_operation("get"):
            row = self.db.query(Account).filter(Account.id == account_id).first()
            return _to_account(row) if row else None

    def find_by_handle(self, contact_handle: str) -> Optional[LearnerAccount]:
        with self._storage_operation("find_by_handle"):
            row = (
                self.db.query(Account)
                .filter(Account.handle_key == contact_handle.lower())
                .first()
            )
            return _to_account(row) if row else None

    def put_all(self, accounts: Iterable[LearnerAccount]) -> None:
        with self._storage_operation("put_all"):
            for account in accounts:
                self._write(account)
            self.db.commit()

    def _write(self, account: LearnerAccount) -> None:
        """Stage the rows of one account in the session."""
        row = self.db.query(Account).filter(Account.id == account.id).first()
        if row is None:
            row = Account(id=account.id)
            self.db.add(row)

        row.name = account.name
        row.contact_handle = account.contact_handle
        row.handle_key = account.contact_handle.lower()
        row.joined_at = _to_utc(account.joined_at)

        progress = account.progress
        if row.progress is None:
            row.progress = Progress()
        row.progress.current_level = progress.current_level
        row.progress.xp = progress.xp
        row.progress.streak = progress.streak
        row.progress.last_activity_date = _to_utc(progress.last_activity_date)

        existing_levels = {record.level_id: record for record in row.level_progress}
        for level_id, completed_stages in progress.level_progress.items():
            record = existing_levels.pop(level_id, None)
            if record is None:
                row.level_progress.append(
                    LevelProgress(level_id=level_id, completed_stages=completed_stages)
                )
            else:
                record.completed_stages = completed_stages
        for stale in existing_levels.values():
            row.level_progress.remove(stale)

        existing_words = {record.word: record for record in row.vocabulary}
        for position, entry in enumerate(progress.vocabulary):
            record = existing_words.pop(entry.word, None)
            if record is None:
                record = VocabularyRecord(word=entry.word)
                row.vocabulary.append(record)
            record.position = position
            record.transliteration = entry.transliteration
            record.meaning = entry.meaning
            record.learned_at_level = entry.learned_at_level
            record.learned_at = _to_utc(entry.learned_at)
        for stale in existing_words.values():
            row.vocabulary.remove(stale)

    def _get_pointer(self) -> Optional[SessionPointer]:
        return self.db.query(SessionPointer).filter(SessionPointer.slot == SESSION_SLOT).first()

    def get_active_account_id(self) -> Optional[str]:
        with self._storage_operation("get_active_account_id"):
            pointer = self._get_pointer()
            return pointer.account_id if pointer else None

    def set_active_account_id(self, account_id: str) -> None:
        with self._storage_operation("set_active_account_id"):
            pointer = self._get_pointer()
            if pointer is None:
                pointer = SessionPointer(slot=SESSION_SLOT)
                self.db.add(pointer)
            pointer.account_id = account_id
            self.db.commit()

    def clear_active_account_id(self) -> None:
        with self._storage_operation("clear_active_account_id"):
            pointer = self._get_pointer()
            if pointer is not None:
                pointer.account_id = None
                self.db.commit()
