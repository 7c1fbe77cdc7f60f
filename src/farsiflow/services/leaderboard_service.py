"""Synthetic leaderboard around the learner's XP."""
import math
import random
from dataclasses import dataclass
from typing import List, Optional

from farsiflow.config import settings
from farsiflow.models.progress_models import LeaderboardEntry


@dataclass(frozen=True)
class Competitor:
    """A synthetic competitor on the leaderboard."""
    name: str
    base_xp: int  # offset added to the learner's xp
    avatar_color: str


COMPETITORS = (
    Competitor("Sarah K.", 50, "blue"),
    Competitor("Amir M.", 120, "green"),
    Competitor("John D.", 300, "purple"),
    Competitor("Elena R.", 450, "orange"),
    Competitor("Wei L.", 80, "red"),
)

USER_AVATAR_COLOR = "emerald"

_default_rng = random.Random()


@dataclass(frozen=True)
class Milestone:
    """Progress towards the next XP rank."""
    next_xp: int
    remaining: int
    percent: int


def synthesize(
    learner_name: str,
    learner_xp: int,
    rng: Optional[random.Random] = None,
) -> List[LeaderboardEntry]:
    """Rank the learner against the competitor roster.

    Each competitor scores ``learner_xp + jitter + base_xp`` (at least the
    configured minimum), with jitter drawn from ``rng`` so the board changes
    between calls. The learner keeps their exact xp. Entries are ordered by
    xp, highest first; ties keep roster order with the learner last.
    """
    rng = rng or _default_rng
    jitter = settings.leaderboard.jitter
    min_xp = settings.leaderboard.min_xp

    scored = [
        (
            competitor.name,
            max(min_xp, math.floor(learner_xp + (rng.random() * 2 * jitter - jitter) + competitor.base_xp)),
            False,
            competitor.avatar_color,
        )
        for competitor in COMPETITORS
    ]
    scored.append((learner_name, learner_xp, True, USER_AVATAR_COLOR))

    ordered = sorted(scored, key=lambda row: row[1], reverse=True)
    return [
        LeaderboardEntry(rank=rank, name=name, xp=xp, is_user=is_user, avatar_color=color)
        for rank, (name, xp, is_user, color) in enumerate(ordered, start=1)
    ]


def next_milestone(xp: int) -> Milestone:
    """XP needed to reach the next rank boundary."""
    step = settings.progression.milestone_xp
    next_xp = math.ceil((xp + 1) / step) * step
    return Milestone(next_xp=next_xp, remaining=next_xp - xp, percent=(xp % step) * 100 // step)
