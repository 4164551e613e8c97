"""Static badge catalog and the rules for unlocking badges.

Badges are identified by name.  The catalog is seeded into the ``badge``
table on startup, but qualification is decided here from plain numbers so
it can be reasoned about without a database.
"""

from typing import Iterable, Optional
from pydantic import BaseModel, ConfigDict

STARS_TOTAL = "stars_total"
GOALS_COMPLETED = "goals_completed"
STREAK_DAYS = "streak_days"

REQUIREMENT_TYPES = [STARS_TOTAL, GOALS_COMPLETED, STREAK_DAYS]


class BadgeDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    icon_name: str
    emoji: str
    requirement_type: str
    requirement_value: int
    color: str


# Thresholds ascend within each requirement type.
BADGE_DEFINITIONS = [
    BadgeDefinition(
        name="First Star",
        description="Earned your very first star!",
        icon_name="star",
        emoji="⭐",
        requirement_type=STARS_TOTAL,
        requirement_value=1,
        color="#FFD700",
    ),
    BadgeDefinition(
        name="Star Collector",
        description="Collected 10 stars",
        icon_name="star-circle",
        emoji="🌟",
        requirement_type=STARS_TOTAL,
        requirement_value=10,
        color="#FFB300",
    ),
    BadgeDefinition(
        name="Star Explorer",
        description="Collected 25 stars",
        icon_name="star-four-points",
        emoji="✨",
        requirement_type=STARS_TOTAL,
        requirement_value=25,
        color="#FFA000",
    ),
    BadgeDefinition(
        name="Rising Star",
        description="Collected 50 stars",
        icon_name="star-shooting",
        emoji="🌠",
        requirement_type=STARS_TOTAL,
        requirement_value=50,
        color="#FF8F00",
    ),
    BadgeDefinition(
        name="Star Champion",
        description="Collected 100 stars",
        icon_name="trophy-award",
        emoji="🏆",
        requirement_type=STARS_TOTAL,
        requirement_value=100,
        color="#FF6F00",
    ),
    BadgeDefinition(
        name="Super Star",
        description="Collected 250 stars",
        icon_name="medal",
        emoji="🥇",
        requirement_type=STARS_TOTAL,
        requirement_value=250,
        color="#E65100",
    ),
    BadgeDefinition(
        name="Star Legend",
        description="Collected 500 stars",
        icon_name="crown",
        emoji="👑",
        requirement_type=STARS_TOTAL,
        requirement_value=500,
        color="#9C27B0",
    ),
    BadgeDefinition(
        name="Goal Getter",
        description="Completed your first goal",
        icon_name="target",
        emoji="🎯",
        requirement_type=GOALS_COMPLETED,
        requirement_value=1,
        color="#4CAF50",
    ),
    BadgeDefinition(
        name="Goal Crusher",
        description="Completed 5 goals",
        icon_name="target-account",
        emoji="💪",
        requirement_type=GOALS_COMPLETED,
        requirement_value=5,
        color="#2E7D32",
    ),
    BadgeDefinition(
        name="Goal Master",
        description="Completed 10 goals",
        icon_name="check-decagram",
        emoji="🏅",
        requirement_type=GOALS_COMPLETED,
        requirement_value=10,
        color="#1B5E20",
    ),
    BadgeDefinition(
        name="Goal Champion",
        description="Completed 25 goals",
        icon_name="shield-check",
        emoji="🛡️",
        requirement_type=GOALS_COMPLETED,
        requirement_value=25,
        color="#00695C",
    ),
    BadgeDefinition(
        name="Getting Started",
        description="3 day streak",
        icon_name="fire",
        emoji="🔥",
        requirement_type=STREAK_DAYS,
        requirement_value=3,
        color="#FF5722",
    ),
    BadgeDefinition(
        name="On Fire",
        description="7 day streak",
        icon_name="fire-circle",
        emoji="💥",
        requirement_type=STREAK_DAYS,
        requirement_value=7,
        color="#F4511E",
    ),
    BadgeDefinition(
        name="Committed",
        description="14 day streak",
        icon_name="calendar-check",
        emoji="📅",
        requirement_type=STREAK_DAYS,
        requirement_value=14,
        color="#E64A19",
    ),
    BadgeDefinition(
        name="Dedication",
        description="30 day streak",
        icon_name="calendar-star",
        emoji="🗓️",
        requirement_type=STREAK_DAYS,
        requirement_value=30,
        color="#D84315",
    ),
    BadgeDefinition(
        name="Unstoppable",
        description="60 day streak",
        icon_name="lightning-bolt",
        emoji="⚡",
        requirement_type=STREAK_DAYS,
        requirement_value=60,
        color="#BF360C",
    ),
]


def get_badge_by_name(name: str) -> Optional[BadgeDefinition]:
    for badge in BADGE_DEFINITIONS:
        if badge.name == name:
            return badge
    return None


def get_badges_by_type(requirement_type: str) -> list[BadgeDefinition]:
    return [b for b in BADGE_DEFINITIONS if b.requirement_type == requirement_type]


def get_next_badge(
    requirement_type: str, current_value: int
) -> Optional[BadgeDefinition]:
    """Return the lowest-threshold badge of a type not yet reached."""
    badges = sorted(
        get_badges_by_type(requirement_type), key=lambda b: b.requirement_value
    )
    for badge in badges:
        if current_value < badge.requirement_value:
            return badge
    return None


def evaluate_new_badges(
    total_stars: int,
    goals_completed: int,
    streak_days: int,
    earned: Iterable[str],
) -> list[BadgeDefinition]:
    """Return catalog badges the statistics qualify for that are not yet earned.

    ``earned`` holds the names of badges the child already has.  The result
    keeps catalog order.
    """
    stats = {
        STARS_TOTAL: total_stars,
        GOALS_COMPLETED: goals_completed,
        STREAK_DAYS: streak_days,
    }
    earned_names = set(earned)
    return [
        badge
        for badge in BADGE_DEFINITIONS
        if badge.name not in earned_names
        and stats[badge.requirement_type] >= badge.requirement_value
    ]
