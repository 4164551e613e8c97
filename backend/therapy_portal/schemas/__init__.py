"""Convenience imports for all schema classes used by the API."""

from .user import (
    UserCreate,
    UserResponse,
    UserUpdate,
    UserMeResponse,
    UserLogin,
)
from .child import ChildCreate, ChildRead, ChildUpdate
from .share import ShareCodeCreate, ShareCodeRead, TeamMember
from .settings import SettingsRead, SettingsUpdate
from .screening import (
    QuestionRead,
    ScreeningSubmit,
    ScoreResult,
    ScreeningRead,
    ScreeningCreated,
)
from .badge import (
    BadgeDefinitionRead,
    EarnedBadgeRead,
    MilestoneRead,
    StarAward,
    StarAwardResult,
    GamificationSummary,
)
from .goal import (
    GoalCreate,
    GoalRead,
    GoalUpdate,
    DailyLogCreate,
    DailyLogRead,
    DailyLogResult,
    GoalCompleteResult,
)

__all__ = [
    "UserCreate",
    "UserResponse",
    "UserMeResponse",
    "UserUpdate",
    "UserLogin",
    "ChildCreate",
    "ChildRead",
    "ChildUpdate",
    "ShareCodeCreate",
    "ShareCodeRead",
    "TeamMember",
    "SettingsRead",
    "SettingsUpdate",
    "QuestionRead",
    "ScreeningSubmit",
    "ScoreResult",
    "ScreeningRead",
    "ScreeningCreated",
    "BadgeDefinitionRead",
    "EarnedBadgeRead",
    "MilestoneRead",
    "StarAward",
    "StarAwardResult",
    "GamificationSummary",
    "GoalCreate",
    "GoalRead",
    "GoalUpdate",
    "DailyLogCreate",
    "DailyLogRead",
    "DailyLogResult",
    "GoalCompleteResult",
]
