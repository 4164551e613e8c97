"""Routes for managing children and their care teams."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from therapy_portal.schemas import (
    ChildCreate,
    ChildRead,
    ChildUpdate,
    ShareCodeCreate,
    ShareCodeRead,
    TeamMember,
)
from therapy_portal.models import Child, User
from therapy_portal.database import get_session
from therapy_portal.crud import (
    create_child_for_user,
    get_children_by_user,
    get_child,
    save_child,
    delete_child,
    get_child_user_link,
    create_share_code,
    get_share_code,
    mark_share_code_used,
    link_child_to_user,
    get_members_for_child,
    remove_child_link,
)
from therapy_portal.auth import (
    get_current_user,
    require_role,
    require_permissions,
    ensure_child_access,
)
from therapy_portal.acl import (
    ALL_PERMISSIONS,
    PERM_ADD_CHILD,
    PERM_EDIT_CHILD,
    PERM_REMOVE_CHILD,
    PERM_SHARE_CHILD,
    THERAPIST_LINK_PERMISSIONS,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/children", tags=["children"])


async def _get_child_or_404(db: AsyncSession, child_id: int) -> Child:
    child = await get_child(db, child_id)
    if not child:
        raise HTTPException(status_code=404, detail="Child not found")
    return child


@router.post("/", response_model=ChildRead)
async def create_child_route(
    child: ChildCreate,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_permissions(PERM_ADD_CHILD)),
):
    """Create a child owned by the current parent."""
    child_model = Child(**child.model_dump())
    new_child = await create_child_for_user(db, child_model, current_user.id)
    logger.info("Child %s created by user %s", new_child.id, current_user.id)
    return new_child


@router.get("/", response_model=list[ChildRead])
async def list_children(
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """List children on the authenticated user's care teams."""
    return await get_children_by_user(db, current_user.id)


@router.get("/{child_id}", response_model=ChildRead)
async def get_child_route(
    child_id: int,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    child = await _get_child_or_404(db, child_id)
    await ensure_child_access(db, current_user, child_id)
    return child


@router.put("/{child_id}", response_model=ChildRead)
async def update_child_route(
    child_id: int,
    data: ChildUpdate,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    child = await _get_child_or_404(db, child_id)
    await ensure_child_access(db, current_user, child_id, PERM_EDIT_CHILD)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(child, field, value)
    updated = await save_child(db, child)
    logger.info("Child %s updated by user %s", child_id, current_user.id)
    return updated


@router.delete("/{child_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_child_route(
    child_id: int,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    child = await _get_child_or_404(db, child_id)
    await ensure_child_access(
        db, current_user, child_id, PERM_REMOVE_CHILD, require_owner=True
    )
    await delete_child(db, child)
    logger.info("Child %s deleted by user %s", child_id, current_user.id)


@router.post("/{child_id}/sharecode", response_model=ShareCodeRead)
async def generate_share_code(
    child_id: int,
    data: ShareCodeCreate,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_role("parent", "admin")),
):
    """Create a one-time code that adds another user to the care team."""
    await _get_child_or_404(db, child_id)
    link = await ensure_child_access(db, current_user, child_id, PERM_SHARE_CHILD)
    permissions = (
        THERAPIST_LINK_PERMISSIONS if data.permissions is None else data.permissions
    )
    unknown = set(permissions) - set(ALL_PERMISSIONS)
    if unknown:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown permissions: {', '.join(sorted(unknown))}",
        )
    # members can only pass on what their own link grants
    if link is not None and not link.is_owner:
        missing = set(permissions) - set(link.permissions)
        if missing:
            raise HTTPException(
                status_code=403,
                detail="Cannot grant permissions you do not hold: "
                + ", ".join(sorted(missing)),
            )
    share = await create_share_code(db, child_id, current_user.id, permissions)
    logger.info("Share code created for child %s by user %s", child_id, current_user.id)
    return ShareCodeRead(code=share.code)


@router.post("/sharecode/{code}", response_model=ChildRead)
async def redeem_share_code(
    code: str,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    share = await get_share_code(db, code)
    if not share or share.used_by is not None:
        raise HTTPException(status_code=404, detail="Invalid code")
    existing = await get_child_user_link(db, current_user.id, share.child_id)
    if existing:
        raise HTTPException(status_code=400, detail="Already linked")
    await link_child_to_user(db, share.child_id, current_user.id, share.permissions)
    await mark_share_code_used(db, share, current_user.id)
    logger.info("User %s joined care team of child %s", current_user.id, share.child_id)
    return await get_child(db, share.child_id)


@router.get("/{child_id}/team", response_model=list[TeamMember])
async def list_care_team(
    child_id: int,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    await _get_child_or_404(db, child_id)
    await ensure_child_access(db, current_user, child_id)
    links = await get_members_for_child(db, child_id)
    return [
        TeamMember(
            user_id=l.user.id,
            name=l.user.name,
            email=l.user.email,
            role=l.user.role,
            permissions=l.permissions,
            is_owner=l.is_owner,
        )
        for l in links
    ]


@router.delete("/{child_id}/team/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_team_member(
    child_id: int,
    user_id: int,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    await _get_child_or_404(db, child_id)
    await ensure_child_access(db, current_user, child_id, require_owner=True)
    link = await get_child_user_link(db, user_id, child_id)
    if not link or link.is_owner:
        raise HTTPException(status_code=404, detail="Team member not found")
    await remove_child_link(db, child_id, user_id)
    logger.info(
        "User %s removed from care team of child %s by user %s",
        user_id,
        child_id,
        current_user.id,
    )
