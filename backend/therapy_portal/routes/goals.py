"""Therapy goals and daily progress logging."""

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from therapy_portal.database import get_session
from therapy_portal.models import Goal, User
from therapy_portal.auth import get_current_user, ensure_child_access
from therapy_portal.acl import PERM_MANAGE_GOALS, PERM_LOG_PROGRESS
from therapy_portal.schemas import (
    BadgeDefinitionRead,
    GoalCreate,
    GoalRead,
    GoalUpdate,
    DailyLogCreate,
    DailyLogRead,
    DailyLogResult,
    GoalCompleteResult,
)
from therapy_portal.crud import (
    get_child,
    create_goal,
    get_goal,
    get_goals_by_child,
    save_goal,
    delete_goal,
    complete_goal,
    create_daily_log,
    get_logs_by_goal,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/goals", tags=["goals"])


async def _load_goal(
    db: AsyncSession, goal_id: int, user: User, perm: str | None = None
) -> Goal:
    goal = await get_goal(db, goal_id)
    if not goal:
        raise HTTPException(status_code=404, detail="Goal not found")
    await ensure_child_access(db, user, goal.child_id, perm)
    return goal


@router.post("/child/{child_id}", response_model=GoalRead)
async def add_goal(
    child_id: int,
    data: GoalCreate,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    if not await get_child(db, child_id):
        raise HTTPException(status_code=404, detail="Child not found")
    await ensure_child_access(db, current_user, child_id, PERM_MANAGE_GOALS)
    fields = data.model_dump(exclude={"start_date"})
    goal = Goal(
        **fields,
        child_id=child_id,
        created_by=current_user.id,
        start_date=data.start_date or date.today(),
    )
    new_goal = await create_goal(db, goal)
    logger.info("Goal %s created for child %s by user %s", new_goal.id, child_id, current_user.id)
    return new_goal


@router.get("/child/{child_id}", response_model=list[GoalRead])
async def list_goals(
    child_id: int,
    active_only: bool = False,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    if not await get_child(db, child_id):
        raise HTTPException(status_code=404, detail="Child not found")
    await ensure_child_access(db, current_user, child_id)
    return await get_goals_by_child(db, child_id, active_only=active_only)


@router.get("/{goal_id}", response_model=GoalRead)
async def read_goal(
    goal_id: int,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return await _load_goal(db, goal_id, current_user)


@router.put("/{goal_id}", response_model=GoalRead)
async def update_goal(
    goal_id: int,
    data: GoalUpdate,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    goal = await _load_goal(db, goal_id, current_user, PERM_MANAGE_GOALS)
    if goal.status == "completed":
        raise HTTPException(status_code=400, detail="Goal already completed")
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(goal, field, value)
    if data.status is not None:
        goal.is_active = data.status == "active"
    updated = await save_goal(db, goal)
    logger.info("Goal %s updated by user %s", goal_id, current_user.id)
    return updated


@router.delete("/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_goal_route(
    goal_id: int,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    goal = await _load_goal(db, goal_id, current_user, PERM_MANAGE_GOALS)
    await delete_goal(db, goal)
    logger.info("Goal %s deleted by user %s", goal_id, current_user.id)


@router.post("/{goal_id}/complete", response_model=GoalCompleteResult)
async def mark_goal_complete(
    goal_id: int,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    goal = await _load_goal(db, goal_id, current_user, PERM_MANAGE_GOALS)
    try:
        goal, new_badges = await complete_goal(db, goal)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    logger.info("Goal %s completed by user %s", goal_id, current_user.id)
    return GoalCompleteResult(
        goal=GoalRead.model_validate(goal),
        new_badges=[BadgeDefinitionRead.model_validate(b.model_dump()) for b in new_badges],
    )


@router.post("/{goal_id}/logs", response_model=DailyLogResult)
async def log_progress(
    goal_id: int,
    data: DailyLogCreate,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    goal = await _load_goal(db, goal_id, current_user, PERM_LOG_PROGRESS)
    if not goal.is_active:
        raise HTTPException(status_code=400, detail="Goal is not active")
    log, new_badges = await create_daily_log(
        db,
        goal,
        current_user.id,
        completed=data.completed,
        achieved_value=data.achieved_value,
        notes=data.notes,
        mood=data.mood,
        log_date=data.log_date,
    )
    return DailyLogResult(
        log=DailyLogRead.model_validate(log),
        new_badges=[BadgeDefinitionRead.model_validate(b.model_dump()) for b in new_badges],
    )


@router.get("/{goal_id}/logs", response_model=list[DailyLogRead])
async def list_logs(
    goal_id: int,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    goal = await _load_goal(db, goal_id, current_user)
    return await get_logs_by_goal(db, goal.id)
