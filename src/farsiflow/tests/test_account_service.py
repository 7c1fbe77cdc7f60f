"""Tests for account service."""
import random
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from unittest.mock import Mock

import pytest
from faker import Faker
from sqlalchemy.orm import Session

from farsiflow.models.progress_models import VocabularyMetadata
from farsiflow.services.account_service import (
    AccountExistsError,
    AccountService,
    AuthenticationError,
)
from farsiflow.services.progress_store import InMemoryProgressStore, SqlAlchemyProgressStore

fake = Faker()

NOW = datetime(2024, 3, 14, 12, 0, tzinfo=UTC)


@pytest.fixture
def store() -> InMemoryProgressStore:
    """Create an empty in-memory store."""
    return InMemoryProgressStore()


@pytest.fixture
def account_service(store: InMemoryProgressStore) -> AccountService:
    """Create an account service instance."""
    return AccountService(store, tz=UTC)


def test_create_account(account_service: AccountService, store: InMemoryProgressStore) -> None:
    """Test account creation."""
    name = fake.first_name()
    handle = fake.email()

    account = account_service.create_account(name, handle, NOW)

    assert account.name == name
    assert account.contact_handle == handle
    assert account.joined_at == NOW
    assert account.progress.current_level == 1
    assert account.progress.level_progress == {}
    assert account.progress.xp == 0
    assert account.progress.streak == 1
    assert account.progress.vocabulary == ()
    assert store.get(account.id) == account
    assert store.get_active_account_id() == account.id


def test_create_account_ids_are_unique(account_service: AccountService) -> None:
    """Test that every account gets its own id."""
    first = account_service.create_account(fake.first_name(), fake.unique.email(), NOW)
    second = account_service.create_account(fake.first_name(), fake.unique.email(), NOW)

    assert first.id != second.id


def test_create_duplicate_account(account_service: AccountService) -> None:
    """Test that a handle differing only in case is rejected."""
    account_service.create_account("Sara", "Sara@Example.com", NOW)

    with pytest.raises(AccountExistsError):
        account_service.create_account("Another Sara", "sara@example.COM", NOW)


def test_account_exists_is_not_authentication_error() -> None:
    """Test that the two failures are distinguishable."""
    assert not issubclass(AccountExistsError, AuthenticationError)
    assert not issubclass(AuthenticationError, AccountExistsError)


def test_login_unknown_handle(account_service: AccountService) -> None:
    """Test that logging in with an unknown handle fails."""
    with pytest.raises(AuthenticationError):
        account_service.login(fake.email(), NOW)


def test_login_resumes_session(account_service: AccountService, store: InMemoryProgressStore) -> None:
    """Test that logging in the next day extends the streak."""
    account = account_service.create_account("Reza", "reza@example.com", NOW)
    account_service.logout()

    resumed = account_service.login("REZA@example.com", NOW + timedelta(days=1))

    assert resumed.id == account.id
    assert resumed.progress.streak == 2
    assert store.get_active_account_id() == account.id
    assert store.get(account.id).progress.streak == 2


def test_logout(account_service: AccountService, store: InMemoryProgressStore) -> None:
    """Test that logging out clears only the session pointer."""
    account = account_service.create_account(fake.first_name(), fake.email(), NOW)

    account_service.logout()

    assert store.get_active_account_id() is None
    assert store.get(account.id) is not None


def test_get_or_create_account(account_service: AccountService) -> None:
    """Test that the same handle resolves to the same account."""
    created = account_service.get_or_create_account("Mina", "telegram:42", NOW)
    again = account_service.get_or_create_account("Mina", "telegram:42", NOW + timedelta(hours=1))

    assert again.id == created.id
    assert again.progress.streak == 1


def test_get_account_missing(account_service: AccountService) -> None:
    """Test that an unknown account id is an error."""
    with pytest.raises(ValueError):
        account_service.get_account("missing")


@pytest.mark.parametrize(
    "days,streak",
    [(0, 5), (1, 6), (3, 1)],
)
def test_resume_reconciles_streak(
    account_service: AccountService,
    store: InMemoryProgressStore,
    days: int,
    streak: int,
) -> None:
    """Test streak reconciliation on resume."""
    account = account_service.create_account(fake.first_name(), fake.email(), NOW)
    store.put(replace(account, progress=replace(account.progress, streak=5, last_activity_date=NOW)))

    resumed = account_service.resume(account.id, NOW + timedelta(days=days))

    assert resumed.progress.streak == streak
    assert store.get(account.id).progress.last_activity_date == NOW + timedelta(days=days)


def test_resume_active(account_service: AccountService) -> None:
    """Test resuming the account of the active session."""
    assert account_service.resume_active(NOW) is None

    account = account_service.create_account(fake.first_name(), fake.email(), NOW)
    resumed = account_service.resume_active(NOW + timedelta(days=1))

    assert resumed.id == account.id
    assert resumed.progress.streak == 2


def test_resume_active_reads_account_once(
    account_service: AccountService,
    store: InMemoryProgressStore,
) -> None:
    """Test that resuming the active session loads the account a single time."""
    account = account_service.create_account(fake.first_name(), fake.email(), NOW)
    store.get = Mock(wraps=store.get)

    account_service.resume_active(NOW)

    store.get.assert_called_once_with(account.id)


def test_resume_active_with_dangling_pointer(
    account_service: AccountService,
    store: InMemoryProgressStore,
) -> None:
    """Test that a pointer to a missing account is ignored."""
    store.set_active_account_id("gone")

    assert account_service.resume_active(NOW) is None


def test_record_stage_completion(account_service: AccountService, store: InMemoryProgressStore) -> None:
    """Test that a completed stage is applied and persisted."""
    account = account_service.create_account(fake.first_name(), fake.email(), NOW)
    words = [VocabularyMetadata("سلام", "salâm", "hello"), VocabularyMetadata("آب", "âb", "water")]

    outcome = account_service.record_stage_completion(account.id, 1, 1, 70, words, NOW)

    assert outcome.xp_gained == 70
    assert outcome.words_added == 2
    assert outcome.stage_advanced
    assert not outcome.level_unlocked
    stored = store.get(account.id).progress
    assert stored == outcome.progress
    assert stored.level_progress == {1: 1}
    assert stored.xp == 70


def test_record_stage_completion_unlocks_level(account_service: AccountService) -> None:
    """Test finishing a whole level stage by stage."""
    account = account_service.create_account(fake.first_name(), fake.email(), NOW)

    for stage in range(1, 11):
        outcome = account_service.record_stage_completion(account.id, 1, stage, 80, now=NOW)

    assert outcome.level_unlocked
    assert outcome.progress.current_level == 2
    assert outcome.progress.level_progress == {1: 10}
    assert outcome.progress.xp == 800


def test_record_stage_completion_for_other_account(account_service: AccountService) -> None:
    """Test that completions are applied to the named account, not the active one."""
    first = account_service.create_account(fake.first_name(), fake.unique.email(), NOW)
    second = account_service.create_account(fake.first_name(), fake.unique.email(), NOW)

    account_service.record_stage_completion(first.id, 1, 1, 30, now=NOW)

    assert account_service.get_account(first.id).progress.xp == 30
    assert account_service.get_account(second.id).progress.xp == 0


def test_get_statistics(account_service: AccountService) -> None:
    """Test learner statistics."""
    account = account_service.create_account(fake.first_name(), fake.email(), NOW)
    for stage in range(1, 11):
        account_service.record_stage_completion(account.id, 1, stage, 20, now=NOW)
    account_service.record_stage_completion(
        account.id, 2, 1, 50, [VocabularyMetadata("نان", "nân", "bread")], NOW
    )

    stats = account_service.get_statistics(account.id)

    assert stats["xp"] == 250
    assert stats["streak"] == 1
    assert stats["current_level"] == 2
    assert stats["levels_completed"] == 1
    assert stats["stages_completed"] == 11
    assert stats["vocabulary_size"] == 1
    assert stats["next_milestone_xp"] == 300
    assert stats["xp_to_next_milestone"] == 50
    assert stats["milestone_percent"] == 50


def test_get_leaderboard(account_service: AccountService) -> None:
    """Test that the learner appears on their leaderboard."""
    account = account_service.create_account("Dara", fake.email(), NOW)
    account_service.record_stage_completion(account.id, 1, 1, 60, now=NOW)
    rng = Mock(spec=random.Random)
    rng.random.return_value = 0.5

    entries = account_service.get_leaderboard(account.id, rng)

    learner = [e for e in entries if e.is_user]
    assert len(learner) == 1
    assert learner[0].name == "Dara"
    assert learner[0].xp == 60
    assert entries[-1].is_user


def test_account_service_with_database(db: Session) -> None:
    """Test the account lifecycle against the database store."""
    account_service = AccountService(SqlAlchemyProgressStore(db), tz=UTC)

    account = account_service.create_account("Laleh", "laleh@example.com", NOW)
    account_service.record_stage_completion(
        account.id, 1, 1, 40, [VocabularyMetadata("گل", "gol", "flower")], NOW
    )
    resumed = account_service.login("Laleh@Example.com", NOW + timedelta(days=1))

    assert resumed.progress.xp == 40
    assert resumed.progress.streak == 2
    assert [entry.word for entry in resumed.progress.vocabulary] == ["گل"]
    with pytest.raises(AccountExistsError):
        account_service.create_account("Laleh", "LALEH@example.com", NOW)


if __name__ == "__main__":
    pytest.main([__file__])
