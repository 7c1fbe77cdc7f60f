"""Domain records for learner accounts and their progress."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class VocabularyMetadata:
    """A word taught by a quiz item or handout, not yet in any ledger."""
    word: str
    transliteration: str
    meaning: str


@dataclass(frozen=True)
class VocabularyEntry:
    """A word in the learner's vocabulary ledger."""
    word: str
    transliteration: str
    meaning: str
    learned_at_level: int
    learned_at: datetime


@dataclass(frozen=True)
class LearnerProgress:
    """Progress state of a single learner.

    Records are never mutated in place; services return a new record built
    with ``dataclasses.replace``.
    """
    current_level: int = 1  # highest level unlocked for play
    level_progress: Dict[int, int] = field(default_factory=dict)  # level id -> completed stages
    xp: int = 0
    streak: int = 1
    last_activity_date: Optional[datetime] = None
    vocabulary: Tuple[VocabularyEntry, ...] = ()

    @classmethod
    def fresh(cls, now: datetime) -> "LearnerProgress":
        """Progress of a newly created account."""
        return cls(last_activity_date=now)

    def stages_completed(self, level_id: int) -> int:
        """Number of stages completed for a level."""
        return self.level_progress.get(level_id, 0)


@dataclass(frozen=True)
class LearnerAccount:
    """A learner and the progress they own."""
    id: str
    name: str
    contact_handle: str
    joined_at: datetime
    progress: LearnerProgress


@dataclass(frozen=True)
class LevelDescriptor:
    """Static curriculum metadata for one level."""
    id: int
    title: str
    topic: str
    difficulty: str
    stage_label: str
    icon: str = "star"
    description: str = ""


@dataclass(frozen=True)
class LeaderboardEntry:
    """One row of a synthesized leaderboard. Never persisted."""
    rank: int
    name: str
    xp: int
    is_user: bool
    avatar_color: str
