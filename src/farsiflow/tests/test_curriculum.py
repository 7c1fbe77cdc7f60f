"""Tests for the curriculum."""
import pytest

from farsiflow import curriculum
from farsiflow.models.progress_models import LearnerProgress


def test_levels_are_numbered_in_order() -> None:
    """Test that level ids run from 1 without gaps."""
    assert [level.id for level in curriculum.LEVELS] == list(range(1, len(curriculum.LEVELS) + 1))


def test_levels_use_known_tiers() -> None:
    """Test that every level has a difficulty tier."""
    for level in curriculum.LEVELS:
        assert level.difficulty in curriculum.DIFFICULTY_TIERS
        assert level.topic


def test_get_level() -> None:
    """Test looking up levels."""
    assert curriculum.get_level(3).title == "Greetings"
    with pytest.raises(ValueError):
        curriculum.get_level(99)
    assert curriculum.find_level(99) is None


def test_level_map() -> None:
    """Test the status of each level on the map."""
    progress = LearnerProgress(current_level=2, level_progress={1: 10, 2: 4})

    statuses = curriculum.level_map(progress)

    assert len(statuses) == len(curriculum.LEVELS)
    first, second, third = statuses[:3]
    assert first.completed and first.unlocked and not first.current
    assert first.percent == 100
    assert second.current and second.unlocked and not second.completed
    assert second.stages_completed == 4
    assert second.percent == 40
    assert not third.unlocked
    assert third.stages_completed == 0


def test_is_unlocked() -> None:
    """Test that levels up to the current one may be played."""
    progress = LearnerProgress(current_level=3)

    assert curriculum.is_unlocked(progress, 1)
    assert curriculum.is_unlocked(progress, 3)
    assert not curriculum.is_unlocked(progress, 4)


@pytest.mark.parametrize("completed,expected", [(0, 1), (4, 5), (9, 10), (10, 10)])
def test_default_start_stage(completed: int, expected: int) -> None:
    """Test picking the next unplayed stage."""
    progress = LearnerProgress(level_progress={1: completed})

    assert curriculum.default_start_stage(progress, 1) == expected


if __name__ == "__main__":
    pytest.main([__file__])
