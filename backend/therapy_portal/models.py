"""Database models used by the therapy portal.

The models are defined with SQLModel (built on SQLAlchemy and Pydantic)
and represent parents, therapists, children, screenings, goals, progress
logs and earned badges.  Comments are kept concise to avoid distracting
from the field definitions.
"""

from typing import Optional, List, Dict
from datetime import datetime, date, timezone
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, JSON, UniqueConstraint


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserPermissionLink(SQLModel, table=True):
    """Association table linking users and their granted permissions."""

    user_id: int = Field(foreign_key="user.id", primary_key=True)
    permission_id: int = Field(foreign_key="permission.id", primary_key=True)

    user: "User" = Relationship(back_populates="permission_links")
    permission: "Permission" = Relationship(back_populates="user_links")


class Permission(SQLModel, table=True):
    """Named permission that can be assigned to users."""
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    user_links: List["UserPermissionLink"] = Relationship(
        back_populates="permission"
    )
    users: List["User"] = Relationship(
        back_populates="permissions",
        link_model=UserPermissionLink,
        sa_relationship_kwargs={"overlaps": "user_links,permission,user"},
    )


class User(SQLModel, table=True):
    """Adult user of the system (parent, therapist or admin)."""
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str
    password_hash: str
    role: str  # 'parent', 'therapist', 'admin'
    status: str = "active"  # 'active' or 'pending'
    phone: Optional[str] = None

    children: List["ChildUserLink"] = Relationship(back_populates="user")
    permission_links: List["UserPermissionLink"] = Relationship(
        back_populates="user",
        sa_relationship_kwargs={"overlaps": "users"},
    )
    permissions: List[Permission] = Relationship(
        back_populates="users",
        link_model=UserPermissionLink,
        sa_relationship_kwargs={"overlaps": "permission_links,user"},
    )


class Child(SQLModel, table=True):
    """Child receiving therapy."""
    id: Optional[int] = Field(default=None, primary_key=True)
    first_name: str
    birth_date: date
    gender: Optional[str] = None
    avatar_seed: Optional[str] = None
    total_stars: int = 0
    created_at: datetime = Field(default_factory=utcnow)

    members: List["ChildUserLink"] = Relationship(back_populates="child")


class ChildUserLink(SQLModel, table=True):
    """Care-team membership: which users may see and act for a child."""

    user_id: int = Field(foreign_key="user.id", primary_key=True)
    child_id: int = Field(foreign_key="child.id", primary_key=True)
    permissions: List[str] = Field(sa_column=Column(JSON), default_factory=list)
    is_owner: bool = False

    user: User = Relationship(back_populates="children")
    child: Child = Relationship(back_populates="members")


class ShareCode(SQLModel, table=True):
    """One‑time code inviting another user onto a child's care team."""

    id: Optional[int] = Field(default=None, primary_key=True)
    code: str = Field(unique=True, index=True)
    child_id: int = Field(foreign_key="child.id")
    created_by: int = Field(foreign_key="user.id")
    permissions: List[str] = Field(sa_column=Column(JSON), default_factory=list)
    used_by: Optional[int] = Field(default=None, foreign_key="user.id")
    created_at: datetime = Field(default_factory=utcnow)


class Screening(SQLModel, table=True):
    """Completed M-CHAT-R questionnaire; never edited after creation."""

    id: Optional[int] = Field(default=None, primary_key=True)
    child_id: int = Field(foreign_key="child.id", index=True)
    parent_id: Optional[int] = Field(default=None, foreign_key="user.id")
    answers: Dict[str, bool] = Field(sa_column=Column(JSON), default_factory=dict)
    total_score: int
    risk_level: str  # low, medium, high
    critical_items_count: int = 0
    follow_up_requested: bool = False
    completed_at: datetime = Field(default_factory=utcnow)


class Goal(SQLModel, table=True):
    """Therapy goal tracked for a child."""

    id: Optional[int] = Field(default=None, primary_key=True)
    child_id: int = Field(foreign_key="child.id", index=True)
    created_by: Optional[int] = Field(default=None, foreign_key="user.id")
    title: str
    description: Optional[str] = None
    category: str = "communication"
    priority: str = "medium"  # low, medium, high
    target_frequency: int = 1
    frequency_period: str = "daily"  # daily, weekly, monthly
    target_value: Optional[float] = None
    unit: Optional[str] = None
    status: str = "active"  # active, paused, completed
    start_date: date = Field(default_factory=date.today)
    end_date: Optional[date] = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow)
    completed_at: Optional[datetime] = None

    logs: List["DailyLog"] = Relationship(back_populates="goal")


class DailyLog(SQLModel, table=True):
    """One progress entry against a goal."""

    id: Optional[int] = Field(default=None, primary_key=True)
    goal_id: int = Field(foreign_key="goal.id", index=True)
    child_id: int = Field(foreign_key="child.id", index=True)
    logged_by: Optional[int] = Field(default=None, foreign_key="user.id")
    achieved_value: Optional[float] = None
    notes: Optional[str] = None
    mood: Optional[str] = None
    stars_earned: int = 0
    log_date: date = Field(default_factory=date.today)
    created_at: datetime = Field(default_factory=utcnow)

    goal: Goal = Relationship(back_populates="logs")


class Badge(SQLModel, table=True):
    """Persisted copy of a catalog badge definition."""

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(unique=True, index=True)
    description: Optional[str] = None
    icon_name: Optional[str] = None
    emoji: Optional[str] = None
    requirement_type: str  # stars_total, goals_completed, streak_days
    requirement_value: int
    color: Optional[str] = None


class ChildBadge(SQLModel, table=True):
    """Badge earned by a child."""

    __table_args__ = (UniqueConstraint("child_id", "badge_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    child_id: int = Field(foreign_key="child.id", index=True)
    badge_id: int = Field(foreign_key="badge.id")
    earned_at: datetime = Field(default_factory=utcnow)

    badge: Badge = Relationship()


class Settings(SQLModel, table=True):
    """Singleton table storing site‑wide configuration values."""
    id: Optional[int] = Field(default=1, primary_key=True)
    site_name: str = "Therapy Portal"
    require_account_approval: bool = False
    public_registration_disabled: bool = False
