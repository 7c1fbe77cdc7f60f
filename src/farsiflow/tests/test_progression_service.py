"""Tests for level progression."""
from datetime import UTC, datetime

import pytest
from faker import Faker

from farsiflow.models.progress_models import (
    LearnerProgress,
    VocabularyEntry,
    VocabularyMetadata,
)
from farsiflow.services.progression_service import (
    StageOutcome,
    apply_stage_completion,
    clamp_stage,
)

fake = Faker()

NOW = datetime(2024, 3, 14, 12, 0, tzinfo=UTC)


@pytest.fixture
def fresh_progress() -> LearnerProgress:
    """Progress of a new learner."""
    return LearnerProgress.fresh(NOW)


def test_fresh_progress(fresh_progress: LearnerProgress) -> None:
    """Test the initial state of a new learner."""
    assert fresh_progress.current_level == 1
    assert fresh_progress.level_progress == {}
    assert fresh_progress.xp == 0
    assert fresh_progress.streak == 1
    assert fresh_progress.vocabulary == ()
    assert fresh_progress.last_activity_date == NOW


def test_first_stage_completion(fresh_progress: LearnerProgress) -> None:
    """Test completing the first stage of the first level."""
    word = VocabularyMetadata("سلام", "salâm", "hello")

    result = apply_stage_completion(fresh_progress, 1, 1, 70, [word], NOW)

    assert result.level_progress == {1: 1}
    assert result.current_level == 1
    assert result.xp == 70
    assert [entry.word for entry in result.vocabulary] == ["سلام"]
    assert result.vocabulary[0].learned_at_level == 1


def test_last_stage_unlocks_next_level() -> None:
    """Test that finishing stage 10 of the frontier level unlocks the next."""
    progress = LearnerProgress(current_level=1, level_progress={1: 9}, xp=200)

    result = apply_stage_completion(progress, 1, 10, 80, now=NOW)

    assert result.level_progress[1] == 10
    assert result.current_level == 2
    assert result.xp == 280


def test_replay_keeps_stage_and_awards_xp() -> None:
    """Test that replaying an earlier stage earns XP but no progress."""
    known = VocabularyEntry("آب", "âb", "water", 1, NOW)
    progress = LearnerProgress(
        current_level=2,
        level_progress={1: 10},
        xp=500,
        vocabulary=(known,),
    )

    result = apply_stage_completion(
        progress, 1, 3, 30, [VocabularyMetadata("آب", "âb", "water")], NOW
    )

    assert result.level_progress[1] == 10
    assert result.current_level == 2
    assert result.xp == 530
    assert len(result.vocabulary) == 1


def test_replaying_last_stage_of_completed_level_does_not_unlock() -> None:
    """Test that a completed level cannot unlock a second time."""
    progress = LearnerProgress(current_level=2, level_progress={1: 10, 2: 4})

    result = apply_stage_completion(progress, 1, 10, 50, now=NOW)

    assert result.current_level == 2


def test_last_stage_of_non_frontier_level_does_not_unlock() -> None:
    """Test that only the current level can unlock the next one."""
    progress = LearnerProgress(current_level=3, level_progress={1: 10, 2: 6, 3: 2})

    result = apply_stage_completion(progress, 2, 10, 50, now=NOW)

    assert result.level_progress[2] == 10
    assert result.current_level == 3


def test_stage_progress_is_running_maximum() -> None:
    """Test that recorded stages never move backwards."""
    progress = LearnerProgress(level_progress={1: 6})

    result = apply_stage_completion(progress, 1, 2, 10, now=NOW)
    result = apply_stage_completion(result, 1, 8, 10, now=NOW)

    assert result.level_progress[1] == 8


def test_skipping_ahead_records_the_stage() -> None:
    """Test that completing a later stage records it directly."""
    progress = LearnerProgress(level_progress={1: 2})

    result = apply_stage_completion(progress, 1, 7, 10, now=NOW)

    assert result.level_progress[1] == 7


@pytest.mark.parametrize("stage,expected", [(0, 1), (-3, 1), (1, 1), (10, 10), (11, 10), (99, 10)])
def test_clamp_stage(stage: int, expected: int) -> None:
    """Test clamping stage numbers into a level."""
    assert clamp_stage(stage) == expected


def test_out_of_range_stage_is_clamped() -> None:
    """Test that an out-of-range stage is treated as the last stage."""
    progress = LearnerProgress(current_level=1, level_progress={1: 9})

    result = apply_stage_completion(progress, 1, 15, 10, now=NOW)

    assert result.level_progress[1] == 10
    assert result.current_level == 2


def test_negative_xp_is_ignored(fresh_progress: LearnerProgress) -> None:
    """Test that XP never decreases."""
    result = apply_stage_completion(fresh_progress, 1, 1, -50, now=NOW)

    assert result.xp == 0


def test_completion_stamps_last_activity(fresh_progress: LearnerProgress) -> None:
    """Test that completing a stage counts as activity."""
    later = datetime(2024, 3, 15, 9, 0, tzinfo=UTC)

    result = apply_stage_completion(fresh_progress, 1, 1, 10, now=later)

    assert result.last_activity_date == later
    assert result.streak == fresh_progress.streak


def test_input_progress_is_not_mutated() -> None:
    """Test that a new record is returned."""
    progress = LearnerProgress(level_progress={1: 3}, xp=40)

    apply_stage_completion(progress, 1, 4, 10, [VocabularyMetadata("نه", "na", "no")], NOW)

    assert progress.level_progress == {1: 3}
    assert progress.xp == 40
    assert progress.vocabulary == ()


def test_stage_outcome_compare() -> None:
    """Test describing what a completion changed."""
    before = LearnerProgress(current_level=1, level_progress={1: 9}, xp=100)
    words = [VocabularyMetadata(fake.unique.word(), "x", "y") for _ in range(3)]
    after = apply_stage_completion(before, 1, 10, 80, words, NOW)

    outcome = StageOutcome.compare(before, after, 1, 10)

    assert outcome.progress is after
    assert outcome.xp_gained == 80
    assert outcome.stage_advanced
    assert outcome.level_unlocked
    assert outcome.words_added == 3


def test_stage_outcome_for_replay() -> None:
    """Test the outcome of a replay."""
    before = LearnerProgress(current_level=2, level_progress={1: 10}, xp=100)
    after = apply_stage_completion(before, 1, 3, 30, now=NOW)

    outcome = StageOutcome.compare(before, after, 1, 3)

    assert outcome.xp_gained == 30
    assert not outcome.stage_advanced
    assert not outcome.level_unlocked
    assert outcome.words_added == 0


if __name__ == "__main__":
    pytest.main([__file__])
