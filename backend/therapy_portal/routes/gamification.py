"""Stars, badges and milestone progress for children."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from therapy_portal.database import get_session
from therapy_portal.models import User
from therapy_portal.auth import get_current_user, ensure_child_access
from therapy_portal.acl import PERM_AWARD_STARS
from therapy_portal.badges import (
    BADGE_DEFINITIONS,
    GOALS_COMPLETED,
    STARS_TOTAL,
    STREAK_DAYS,
    get_next_badge,
)
from therapy_portal.gamification import get_next_milestone
from therapy_portal.schemas import (
    BadgeDefinitionRead,
    EarnedBadgeRead,
    GamificationSummary,
    StarAward,
    StarAwardResult,
)
from therapy_portal.crud import (
    get_child,
    get_child_stats,
    get_child_badges,
    award_stars,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/gamification", tags=["gamification"])


def _badge_read(definition):
    if definition is None:
        return None
    return BadgeDefinitionRead.model_validate(definition.model_dump())


@router.get("/badges", response_model=list[BadgeDefinitionRead])
async def list_badge_catalog():
    return [_badge_read(b) for b in BADGE_DEFINITIONS]


@router.get("/child/{child_id}", response_model=GamificationSummary)
async def child_summary(
    child_id: int,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    if not await get_child(db, child_id):
        raise HTTPException(status_code=404, detail="Child not found")
    await ensure_child_access(db, current_user, child_id)
    stats = await get_child_stats(db, child_id)
    earned = await get_child_badges(db, child_id)
    progress = {
        STARS_TOTAL: stats["total_stars"],
        GOALS_COMPLETED: stats["goals_completed"],
        STREAK_DAYS: stats["streak_days"],
    }
    return GamificationSummary(
        child_id=child_id,
        **stats,
        badges=[
            EarnedBadgeRead(
                name=cb.badge.name,
                description=cb.badge.description,
                icon_name=cb.badge.icon_name,
                emoji=cb.badge.emoji,
                requirement_type=cb.badge.requirement_type,
                requirement_value=cb.badge.requirement_value,
                color=cb.badge.color,
                earned_at=cb.earned_at,
            )
            for cb in earned
        ],
        next_milestone=get_next_milestone(stats["total_stars"]),
        next_badges={
            kind: _badge_read(get_next_badge(kind, value))
            for kind, value in progress.items()
        },
    )


@router.post("/child/{child_id}/stars", response_model=StarAwardResult)
async def give_stars(
    child_id: int,
    data: StarAward,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    if not await get_child(db, child_id):
        raise HTTPException(status_code=404, detail="Child not found")
    await ensure_child_access(db, current_user, child_id, PERM_AWARD_STARS)
    child, new_badges = await award_stars(db, child_id, data.stars)
    logger.info(
        "User %s gave %s stars to child %s: %s",
        current_user.id,
        data.stars,
        child_id,
        data.reason or "no reason given",
    )
    return StarAwardResult(
        child_id=child.id,
        total_stars=child.total_stars,
        new_badges=[_badge_read(b) for b in new_badges],
    )
