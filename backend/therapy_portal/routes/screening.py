"""M-CHAT-R screening endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from therapy_portal.database import get_session
from therapy_portal.models import User
from therapy_portal.auth import get_current_user, ensure_child_access
from therapy_portal.acl import PERM_RUN_SCREENING, PERM_VIEW_SCREENINGS
from therapy_portal.mchat import (
    CRITICAL_ITEM_NUMBERS,
    MCHAT_QUESTIONS,
    MChatResult,
    get_risk_color,
    get_risk_display_text,
    is_complete,
    score_mchat_r,
)
from therapy_portal.schemas import (
    QuestionRead,
    ScreeningSubmit,
    ScoreResult,
    ScreeningRead,
    ScreeningCreated,
)
from therapy_portal.crud import (
    get_child,
    create_screening,
    get_screening,
    get_screenings_by_child,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/screening", tags=["screening"])


def _score_result(result: MChatResult) -> ScoreResult:
    return ScoreResult(
        **result.model_dump(),
        risk_display_text=get_risk_display_text(result.risk_level),
        risk_color=get_risk_color(result.risk_level),
    )


@router.get("/questions", response_model=list[QuestionRead])
async def list_questions():
    """Return the questionnaire in display order."""
    return [
        QuestionRead(**q, is_critical=q["number"] in CRITICAL_ITEM_NUMBERS)
        for q in MCHAT_QUESTIONS
    ]


@router.post("/score", response_model=ScoreResult)
async def score_answers(
    submission: ScreeningSubmit,
    current_user: User = Depends(get_current_user),
):
    """Score answers without storing them; unanswered items are not counted."""
    return _score_result(score_mchat_r(submission.answers))


@router.post("/child/{child_id}", response_model=ScreeningCreated)
async def submit_screening(
    child_id: int,
    submission: ScreeningSubmit,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    child = await get_child(db, child_id)
    if not child:
        raise HTTPException(status_code=404, detail="Child not found")
    await ensure_child_access(db, current_user, child_id, PERM_RUN_SCREENING)
    if not is_complete(submission.answers):
        raise HTTPException(status_code=400, detail="Please answer all questions")
    screening, result = await create_screening(
        db, child_id, current_user.id, submission.answers
    )
    return ScreeningCreated(
        screening=ScreeningRead.model_validate(screening),
        result=_score_result(result),
    )


@router.get("/child/{child_id}", response_model=list[ScreeningRead])
async def screening_history(
    child_id: int,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    child = await get_child(db, child_id)
    if not child:
        raise HTTPException(status_code=404, detail="Child not found")
    await ensure_child_access(db, current_user, child_id, PERM_VIEW_SCREENINGS)
    return await get_screenings_by_child(db, child_id)


@router.get("/{screening_id}", response_model=ScreeningRead)
async def read_screening(
    screening_id: int,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    screening = await get_screening(db, screening_id)
    if not screening:
        raise HTTPException(status_code=404, detail="Screening not found")
    await ensure_child_access(db, current_user, screening.child_id, PERM_VIEW_SCREENINGS)
    return screening
