"""Level progression rules for completed practice stages."""
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Iterable, Optional

from farsiflow.config import STAGES_PER_LEVEL
from farsiflow.models.progress_models import LearnerProgress, VocabularyMetadata
from farsiflow.services import vocabulary_service


def clamp_stage(stage: int) -> int:
    """Clamp a stage number to the range of a level."""
    return min(max(stage, 1), STAGES_PER_LEVEL)


def apply_stage_completion(
    progress: LearnerProgress,
    level_id: int,
    completed_stage: int,
    xp_gained: int,
    candidate_words: Iterable[VocabularyMetadata] = (),
    now: Optional[datetime] = None,
) -> LearnerProgress:
    """Apply the outcome of a completed practice stage.

    Recorded stage progress only moves forward, so replaying an earlier stage
    leaves it as is. Finishing the last stage of the current frontier level
    unlocks the next level. XP is added for every completion, replays included.
    Out-of-range stage numbers and negative XP are clamped, never rejected.
    """
    now = now or datetime.now(UTC)
    completed_stage = clamp_stage(completed_stage)
    xp_gained = max(xp_gained, 0)

    prior_stage = progress.stages_completed(level_id)
    current_level = progress.current_level
    if (
        completed_stage == STAGES_PER_LEVEL
        and prior_stage < STAGES_PER_LEVEL
        and level_id == current_level
    ):
        current_level += 1

    level_progress = dict(progress.level_progress)
    level_progress[level_id] = max(prior_stage, completed_stage)

    return replace(
        progress,
        current_level=current_level,
        level_progress=level_progress,
        xp=progress.xp + xp_gained,
        vocabulary=vocabulary_service.merge(progress.vocabulary, candidate_words, level_id, now),
        last_activity_date=now,
    )


@dataclass(frozen=True)
class StageOutcome:
    """What a stage completion changed, for reporting back to the learner."""
    progress: LearnerProgress
    level_id: int
    stage: int
    xp_gained: int
    stage_advanced: bool
    level_unlocked: bool
    words_added: int

    @classmethod
    def compare(
        cls,
        before: LearnerProgress,
        after: LearnerProgress,
        level_id: int,
        stage: int,
    ) -> "StageOutcome":
        """Describe the difference between two progress records."""
        return cls(
            progress=after,
            level_id=level_id,
            stage=clamp_stage(stage),
            xp_gained=after.xp - before.xp,
            stage_advanced=after.stages_completed(level_id) > before.stages_completed(level_id),
            level_unlocked=after.current_level > before.current_level,
            words_added=len(after.vocabulary) - len(before.vocabulary),
        )
