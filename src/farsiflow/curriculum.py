"""Static curriculum: levels and their status on the level map."""
from dataclasses import dataclass
from typing import List, Optional

from farsiflow.config import STAGES_PER_LEVEL
from farsiflow.models.progress_models import LearnerProgress, LevelDescriptor

FOUNDATION = "Foundation"
BEGINNER = "Beginner"
INTERMEDIATE = "Intermediate"
ADVANCED = "Advanced"
FLUENCY = "Fluency"

DIFFICULTY_TIERS = [FOUNDATION, BEGINNER, INTERMEDIATE, ADVANCED, FLUENCY]

LEVELS = (
    LevelDescriptor(1, "The Alphabet I", "Persian alphabet: letters alef to jim", FOUNDATION, "Foundation", "type"),
    LevelDescriptor(2, "The Alphabet II", "Persian alphabet: letters che to ye and vowels", FOUNDATION, "Foundation", "type"),
    LevelDescriptor(3, "Greetings", "Greetings and polite expressions (taarof)", FOUNDATION, "Foundation", "hand"),
    LevelDescriptor(4, "Numbers", "Numbers, counting and telling time", BEGINNER, "Beginner", "hash"),
    LevelDescriptor(5, "Family", "Family members and introducing yourself", BEGINNER, "Beginner", "users"),
    LevelDescriptor(6, "Food", "Persian food, ordering and table manners", BEGINNER, "Beginner", "coffee"),
    LevelDescriptor(7, "Travel", "Directions, transport and places in the city", INTERMEDIATE, "Intermediate", "map"),
    LevelDescriptor(8, "At the Bazaar", "Shopping, bargaining and colors", INTERMEDIATE, "Intermediate", "shopping-bag"),
    LevelDescriptor(9, "Daily Life", "Routines, past tense and telling stories", ADVANCED, "Advanced", "sun"),
    LevelDescriptor(10, "Work and Study", "Professions, plans and the future tense", ADVANCED, "Advanced", "briefcase"),
    LevelDescriptor(11, "Poetry", "Hafez, Rumi and classical poetic vocabulary", FLUENCY, "Fluency", "feather"),
    LevelDescriptor(12, "Idioms", "Colloquial speech and everyday idioms", FLUENCY, "Fluency", "message-circle"),
)


@dataclass(frozen=True)
class LevelStatus:
    """A level as seen on the learner's level map."""
    level: LevelDescriptor
    unlocked: bool
    completed: bool
    current: bool
    stages_completed: int

    @property
    def percent(self) -> int:
        return self.stages_completed * 100 // STAGES_PER_LEVEL


def get_level(level_id: int) -> LevelDescriptor:
    """Get a level by id."""
    for level in LEVELS:
        if level.id == level_id:
            return level
    raise ValueError(f"Level {level_id} not found")


def find_level(level_id: int) -> Optional[LevelDescriptor]:
    """Get a level by id, or None if the curriculum has no such level."""
    try:
        return get_level(level_id)
    except ValueError:
        return None


def level_map(progress: LearnerProgress) -> List[LevelStatus]:
    """Status of every level for the given progress."""
    return [
        LevelStatus(
            level=level,
            unlocked=level.id <= progress.current_level,
            completed=level.id < progress.current_level,
            current=level.id == progress.current_level,
            stages_completed=progress.stages_completed(level.id),
        )
        for level in LEVELS
    ]


def is_unlocked(progress: LearnerProgress, level_id: int) -> bool:
    """Whether the learner may play the level."""
    return level_id <= progress.current_level


def default_start_stage(progress: LearnerProgress, level_id: int) -> int:
    """Stage to start when the learner does not pick one: the next unplayed one."""
    return min(progress.stages_completed(level_id) + 1, STAGES_PER_LEVEL)
