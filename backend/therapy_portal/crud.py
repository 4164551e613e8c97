"""Asynchronous CRUD helpers for the application's data models.

Each function in this module encapsulates a specific database operation
using SQLModel and SQLAlchemy.  Centralizing the logic keeps route
handlers light and makes behavior easier to test.  The scoring and badge
rules themselves live in ``mchat``, ``badges`` and ``gamification``; the
helpers here feed them data and persist what they return.
"""

import logging
import uuid
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy import func, update
from sqlmodel import select, delete

from therapy_portal.models import (
    User,
    Child,
    ChildUserLink,
    ShareCode,
    Permission,
    UserPermissionLink,
    Settings,
    Screening,
    Goal,
    DailyLog,
    Badge,
    ChildBadge,
    utcnow,
)
from therapy_portal.auth import get_password_hash
from therapy_portal.acl import get_default_permissions_for_role, ALL_PERMISSIONS
from therapy_portal.badges import (
    BADGE_DEFINITIONS,
    BadgeDefinition,
    evaluate_new_badges,
)
from therapy_portal.gamification import calculate_streak, stars_for_log
from therapy_portal.mchat import MChatResult, score_mchat_r

logger = logging.getLogger(__name__)


async def ensure_permissions_exist(db: AsyncSession, names: list[str]) -> None:
    """Ensure that a set of permission records exists in the database."""

    for name in names:
        result = await db.execute(
            select(Permission).where(Permission.name == name)
        )
        perm = result.scalar_one_or_none()
        if not perm:
            db.add(Permission(name=name))
    await db.commit()


async def assign_permissions_by_names(
    db: AsyncSession, user: User, names: list[str]
) -> None:
    """Assign named permissions to a user if not already granted."""
    for name in names:
        result = await db.execute(
            select(Permission).where(Permission.name == name)
        )
        perm = result.scalar_one_or_none()
        if perm:
            link_result = await db.execute(
                select(UserPermissionLink)
                    .where(
                        UserPermissionLink.user_id == user.id,
                        UserPermissionLink.permission_id == perm.id,
                    )
            )
            link = link_result.scalar_one_or_none()
            if not link:
                db.add(
                    UserPermissionLink(user_id=user.id, permission_id=perm.id)
                )
    await db.commit()


async def get_settings(db: AsyncSession) -> Settings:
    """Fetch the singleton settings record, creating it if necessary."""
    result = await db.execute(select(Settings).where(Settings.id == 1))
    settings = result.scalar_one_or_none()
    if not settings:
        settings = Settings()
        db.add(settings)
        await db.commit()
        await db.refresh(settings)
    return settings


async def save_settings(db: AsyncSession, settings: Settings) -> Settings:
    """Persist settings changes and return the refreshed object."""

    db.add(settings)
    await db.commit()
    await db.refresh(settings)
    return settings


# --- users -----------------------------------------------------------------


async def create_user(db: AsyncSession, user: User):
    """Create a new user, hashing the password and assigning defaults."""

    if not user.password_hash.startswith("$2b$"):
        user.password_hash = get_password_hash(user.password_hash)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    defaults = get_default_permissions_for_role(user.role)
    if defaults:
        await assign_permissions_by_names(db, user, defaults)
    return user


async def get_user_by_email(db: AsyncSession, email: str):
    """Return a user by email or ``None`` if not found."""
    result = await db.execute(
        select(User)
        .where(User.email == email)
        .options(selectinload(User.permissions))
    )
    return result.scalar_one_or_none()


async def get_user(db: AsyncSession, user_id: int) -> User | None:
    """Load a user by primary key."""
    result = await db.execute(
        select(User)
        .where(User.id == user_id)
        .options(selectinload(User.permissions))
    )
    return result.scalar_one_or_none()


async def get_all_users(db: AsyncSession) -> list[User]:
    """Return all users with permissions eagerly loaded."""

    result = await db.execute(
        select(User).options(selectinload(User.permissions)).order_by(User.id)
    )
    return result.scalars().all()


async def save_user(db: AsyncSession, user: User) -> User:
    """Persist changes to an existing user."""

    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def get_owned_child_ids(db: AsyncSession, user_id: int) -> list[int]:
    result = await db.execute(
        select(ChildUserLink.child_id).where(
            ChildUserLink.user_id == user_id, ChildUserLink.is_owner == True  # noqa: E712
        )
    )
    return result.scalars().all()


async def delete_user(db: AsyncSession, user: User) -> None:
    """Remove a user with their permission grants and care-team links.

    Owners must delete their children first.  Screenings, goals and logs the
    user recorded stay with the child and lose their author.
    """
    if await get_owned_child_ids(db, user.id):
        raise ValueError("User still owns children")
    await db.execute(
        update(Screening).where(Screening.parent_id == user.id).values(parent_id=None)
    )
    await db.execute(
        update(Goal).where(Goal.created_by == user.id).values(created_by=None)
    )
    await db.execute(
        update(DailyLog).where(DailyLog.logged_by == user.id).values(logged_by=None)
    )
    await db.execute(
        delete(ShareCode).where(
            (ShareCode.created_by == user.id) | (ShareCode.used_by == user.id)
        )
    )
    await db.execute(
        delete(UserPermissionLink).where(UserPermissionLink.user_id == user.id)
    )
    await db.execute(delete(ChildUserLink).where(ChildUserLink.user_id == user.id))
    # links are gone already; skip relationship cascades
    await db.execute(delete(User).where(User.id == user.id))
    await db.commit()


# --- children and care teams ----------------------------------------------


async def create_child_for_user(db: AsyncSession, child: Child, user_id: int):
    """Create a child and make ``user_id`` the owning member of its care team."""
    db.add(child)
    await db.flush()  # ensure child.id is populated

    link = ChildUserLink(
        user_id=user_id,
        child_id=child.id,
        permissions=ALL_PERMISSIONS,
        is_owner=True,
    )
    db.add(link)

    await db.commit()
    await db.refresh(child)
    return child


async def get_children_by_user(db: AsyncSession, user_id: int):
    """Return all children on a user's care teams, newest first."""
    query = (
        select(Child)
        .join(ChildUserLink)
        .where(ChildUserLink.user_id == user_id)
        .order_by(Child.created_at.desc(), Child.id.desc())
    )
    result = await db.execute(query)
    return result.scalars().all()


async def get_child(db: AsyncSession, child_id: int) -> Child | None:
    """Fetch a child by id or ``None`` if not found."""
    result = await db.execute(select(Child).where(Child.id == child_id))
    return result.scalar_one_or_none()


async def get_all_children(db: AsyncSession) -> list[Child]:
    """Return all children ordered by id."""

    result = await db.execute(select(Child).order_by(Child.id))
    return result.scalars().all()


async def save_child(db: AsyncSession, child: Child) -> Child:
    """Persist changes to a child record."""

    db.add(child)
    await db.commit()
    await db.refresh(child)
    return child


async def delete_child(db: AsyncSession, child: Child) -> None:
    """Remove a child and everything recorded for them."""
    await db.execute(delete(ChildBadge).where(ChildBadge.child_id == child.id))
    await db.execute(delete(DailyLog).where(DailyLog.child_id == child.id))
    await db.execute(delete(Goal).where(Goal.child_id == child.id))
    await db.execute(delete(Screening).where(Screening.child_id == child.id))
    await db.execute(delete(ShareCode).where(ShareCode.child_id == child.id))
    await db.execute(
        delete(ChildUserLink).where(ChildUserLink.child_id == child.id)
    )
    await db.delete(child)
    await db.commit()


async def get_child_user_link(
    db: AsyncSession, user_id: int, child_id: int
) -> ChildUserLink | None:
    result = await db.execute(
        select(ChildUserLink).where(
            ChildUserLink.user_id == user_id,
            ChildUserLink.child_id == child_id,
        )
    )
    return result.scalar_one_or_none()


async def link_child_to_user(
    db: AsyncSession, child_id: int, user_id: int, permissions: list[str], is_owner=False
) -> ChildUserLink:
    link = ChildUserLink(
        user_id=user_id,
        child_id=child_id,
        permissions=permissions,
        is_owner=is_owner,
    )
    db.add(link)
    await db.commit()
    await db.refresh(link)
    return link


async def remove_child_link(db: AsyncSession, child_id: int, user_id: int) -> None:
    await db.execute(
        delete(ChildUserLink).where(
            ChildUserLink.child_id == child_id,
            ChildUserLink.user_id == user_id,
        )
    )
    await db.commit()


async def get_members_for_child(
    db: AsyncSession, child_id: int
) -> list[ChildUserLink]:
    result = await db.execute(
        select(ChildUserLink)
        .where(ChildUserLink.child_id == child_id)
        .options(selectinload(ChildUserLink.user))
    )
    return result.scalars().all()


async def create_share_code(
    db: AsyncSession, child_id: int, creator_id: int, permissions: list[str]
) -> ShareCode:
    code = uuid.uuid4().hex[:8]
    share = ShareCode(
        code=code, child_id=child_id, created_by=creator_id, permissions=permissions
    )
    db.add(share)
    await db.commit()
    await db.refresh(share)
    return share


async def get_share_code(db: AsyncSession, code: str) -> ShareCode | None:
    result = await db.execute(select(ShareCode).where(ShareCode.code == code))
    return result.scalar_one_or_none()


async def mark_share_code_used(
    db: AsyncSession, share: ShareCode, user_id: int
) -> ShareCode:
    share.used_by = user_id
    db.add(share)
    await db.commit()
    await db.refresh(share)
    return share


# --- screenings ------------------------------------------------------------


async def create_screening(
    db: AsyncSession, child_id: int, parent_id: int, answers: dict
) -> tuple[Screening, MChatResult]:
    """Score an answer set and store the outcome for a child."""
    result = score_mchat_r(answers)
    screening = Screening(
        child_id=child_id,
        parent_id=parent_id,
        answers={str(k): bool(v) for k, v in answers.items()},
        total_score=result.total_score,
        risk_level=result.risk_level,
        critical_items_count=result.critical_items_count,
        follow_up_requested=result.follow_up_needed,
    )
    db.add(screening)
    await db.commit()
    await db.refresh(screening)
    logger.info(
        "Screening %s stored for child %s: score %s (%s risk)",
        screening.id,
        child_id,
        result.total_score,
        result.risk_level,
    )
    return screening, result


async def get_screening(db: AsyncSession, screening_id: int) -> Screening | None:
    result = await db.execute(select(Screening).where(Screening.id == screening_id))
    return result.scalar_one_or_none()


async def get_screenings_by_child(
    db: AsyncSession, child_id: int
) -> list[Screening]:
    """Return a child's screenings, most recent first."""
    result = await db.execute(
        select(Screening)
        .where(Screening.child_id == child_id)
        .order_by(Screening.completed_at.desc(), Screening.id.desc())
    )
    return result.scalars().all()


# --- goals and progress logs ----------------------------------------------


async def create_goal(db: AsyncSession, goal: Goal) -> Goal:
    db.add(goal)
    await db.commit()
    await db.refresh(goal)
    return goal


async def get_goal(db: AsyncSession, goal_id: int) -> Goal | None:
    result = await db.execute(select(Goal).where(Goal.id == goal_id))
    return result.scalar_one_or_none()


async def get_goals_by_child(
    db: AsyncSession, child_id: int, active_only: bool = False
) -> list[Goal]:
    query = select(Goal).where(Goal.child_id == child_id)
    if active_only:
        query = query.where(Goal.is_active == True)  # noqa: E712
    result = await db.execute(
        query.order_by(Goal.created_at.desc(), Goal.id.desc())
    )
    return result.scalars().all()


async def save_goal(db: AsyncSession, goal: Goal) -> Goal:
    db.add(goal)
    await db.commit()
    await db.refresh(goal)
    return goal


async def delete_goal(db: AsyncSession, goal: Goal) -> None:
    await db.execute(delete(DailyLog).where(DailyLog.goal_id == goal.id))
    await db.delete(goal)
    await db.commit()


async def complete_goal(
    db: AsyncSession, goal: Goal
) -> tuple[Goal, list[BadgeDefinition]]:
    """Mark a goal completed and award any goal badges it unlocks."""
    if goal.status == "completed":
        raise ValueError("Goal already completed")
    goal.status = "completed"
    goal.is_active = False
    goal.completed_at = utcnow()
    goal = await save_goal(db, goal)
    new_badges = await check_and_award_badges(db, goal.child_id)
    return goal, new_badges


async def get_logs_by_goal(db: AsyncSession, goal_id: int) -> list[DailyLog]:
    result = await db.execute(
        select(DailyLog)
        .where(DailyLog.goal_id == goal_id)
        .order_by(DailyLog.log_date.desc(), DailyLog.id.desc())
    )
    return result.scalars().all()


async def create_daily_log(
    db: AsyncSession,
    goal: Goal,
    logged_by: int,
    completed: bool = True,
    achieved_value: float | None = None,
    notes: str | None = None,
    mood: str | None = None,
    log_date: date | None = None,
) -> tuple[DailyLog, list[BadgeDefinition]]:
    """Record progress on a goal and award the stars it earns."""
    stars = stars_for_log(completed, achieved_value, goal.target_value, mood)
    if achieved_value is None:
        achieved_value = 1 if completed else 0
    log = DailyLog(
        goal_id=goal.id,
        child_id=goal.child_id,
        logged_by=logged_by,
        achieved_value=achieved_value,
        notes=notes,
        mood=mood,
        stars_earned=stars,
        log_date=log_date or date.today(),
    )
    db.add(log)
    await db.commit()
    await db.refresh(log)
    logger.info(
        "Progress logged on goal %s by user %s (%s stars)", goal.id, logged_by, stars
    )
    if stars > 0:
        _, new_badges = await award_stars(db, goal.child_id, stars)
    else:
        # a log still extends the streak
        new_badges = await check_and_award_badges(db, goal.child_id)
    return log, new_badges


# --- stars and badges ------------------------------------------------------


async def ensure_badge_catalog(db: AsyncSession) -> dict[str, Badge]:
    """Seed the badge table from the static catalog; return rows by name."""
    result = await db.execute(select(Badge))
    rows = {b.name: b for b in result.scalars().all()}
    missing = [d for d in BADGE_DEFINITIONS if d.name not in rows]
    if missing:
        for definition in missing:
            badge = Badge(**definition.model_dump())
            db.add(badge)
            rows[definition.name] = badge
        await db.commit()
    return rows


async def get_child_badges(db: AsyncSession, child_id: int) -> list[ChildBadge]:
    """Return badges earned by a child, most recent first."""
    result = await db.execute(
        select(ChildBadge)
        .where(ChildBadge.child_id == child_id)
        .options(selectinload(ChildBadge.badge))
        .order_by(ChildBadge.earned_at.desc(), ChildBadge.id.desc())
    )
    return result.scalars().all()


async def get_earned_badge_names(db: AsyncSession, child_id: int) -> set[str]:
    result = await db.execute(
        select(Badge.name)
        .join(ChildBadge, ChildBadge.badge_id == Badge.id)
        .where(ChildBadge.child_id == child_id)
    )
    return set(result.scalars().all())


async def count_completed_goals(db: AsyncSession, child_id: int) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(Goal)
        .where(Goal.child_id == child_id, Goal.status == "completed")
    )
    return result.scalar() or 0


async def get_streak(
    db: AsyncSession, child_id: int, today: date | None = None
) -> int:
    result = await db.execute(
        select(DailyLog.log_date).where(DailyLog.child_id == child_id).distinct()
    )
    return calculate_streak(result.scalars().all(), today)


async def get_child_stats(
    db: AsyncSession, child_id: int, today: date | None = None
) -> dict:
    """Collect the statistics badges are judged on."""
    child = await get_child(db, child_id)
    if not child:
        raise ValueError("Child not found")
    return {
        "total_stars": child.total_stars,
        "goals_completed": await count_completed_goals(db, child_id),
        "streak_days": await get_streak(db, child_id, today),
    }


async def check_and_award_badges(
    db: AsyncSession, child_id: int, today: date | None = None
) -> list[BadgeDefinition]:
    """Award every badge the child newly qualifies for.

    Returns the newly earned definitions in catalog order.
    """
    stats = await get_child_stats(db, child_id, today)
    earned = await get_earned_badge_names(db, child_id)
    new_badges = evaluate_new_badges(
        stats["total_stars"], stats["goals_completed"], stats["streak_days"], earned
    )
    if not new_badges:
        return []
    rows = await ensure_badge_catalog(db)
    for definition in new_badges:
        db.add(ChildBadge(child_id=child_id, badge_id=rows[definition.name].id))
    await db.commit()
    logger.info(
        "Child %s earned badges: %s",
        child_id,
        ", ".join(b.name for b in new_badges),
    )
    return new_badges


async def award_stars(
    db: AsyncSession, child_id: int, stars: int
) -> tuple[Child, list[BadgeDefinition]]:
    """Add stars to a child's running total and check for new badges."""
    child = await get_child(db, child_id)
    if not child:
        raise ValueError("Child not found")
    child.total_stars = (child.total_stars or 0) + stars
    child = await save_child(db, child)
    logger.info(
        "Awarded %s stars to child %s (total %s)", stars, child_id, child.total_stars
    )
    new_badges = await check_and_award_badges(db, child_id)
    return child, new_badges
