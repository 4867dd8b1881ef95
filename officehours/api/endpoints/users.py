"""
User Management Endpoints for Office Hours Queue
The caller's own profile and the admin roster.

Static paths (/me, /admins) are declared before /{userId} so they win the match.
"""

from typing import List

import structlog
from fastapi import APIRouter, Depends, HTTPException, Path, Request, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from officehours.dependencies import get_db, get_current_user, require_admin
from officehours.models.user import User, UserResponse, CurrentUserResponse
from officehours.services.auth import auth_service
from officehours.utils.logging import security_logger

logger = structlog.get_logger(__name__)
router = APIRouter()


async def _get_user_or_404(user_id: int, db: AsyncSession) -> User:
    user = await auth_service.get_user_by_id(user_id, db)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return user


@router.get("/me", response_model=CurrentUserResponse)
async def get_current_user_profile(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """The calling user, including which courses they are staff of."""
    staff_assignments = await auth_service.get_staff_assignments(current_user, db)
    
    return CurrentUserResponse(
        id=current_user.id,
        netid=current_user.netid,
        name=current_user.name,
        is_admin=current_user.is_admin,
        staff_assignments=staff_assignments,
    )


@router.get("/admins", response_model=List[UserResponse])
async def list_admins(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """All admin users, in the order they were added to the system."""
    result = await db.execute(
        select(User).where(User.is_admin.is_(True)).order_by(User.id)
    )
    return result.scalars().all()


@router.put(
    "/admins/{userId}",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED
)
async def add_admin(
    user_id: int = Path(..., alias="userId"),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Grant admin privileges. Granting to an existing admin is a no-op."""
    user = await _get_user_or_404(user_id, db)
    
    if not user.is_admin:
        user.is_admin = True
        await db.commit()
        await db.refresh(user)
        
        security_logger.log_role_change(
            actor_id=current_user.id,
            target_user_id=user.id,
            role="admin",
            granted=True,
        )
    
    return user


@router.delete("/admins/{userId}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_admin(
    request: Request,
    user_id: int = Path(..., alias="userId"),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Revoke admin privileges. Admins cannot revoke their own."""
    user = await _get_user_or_404(user_id, db)
    
    if user.id == current_user.id:
        security_logger.log_authorization_failure(
            user_id=current_user.id,
            resource=request.url.path,
            action="DELETE",
            reason="Self demotion",
            trace_id=getattr(request.state, "trace_id", None)
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You cannot remove your own admin privileges"
        )
    
    if user.is_admin:
        user.is_admin = False
        await db.commit()
        
        security_logger.log_role_change(
            actor_id=current_user.id,
            target_user_id=user.id,
            role="admin",
            granted=False,
        )
    
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("", response_model=List[UserResponse])
async def list_users(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """All users, by NetID (admin only)."""
    result = await db.execute(select(User).order_by(User.netid))
    return result.scalars().all()


@router.get("/{userId}", response_model=UserResponse)
async def get_user(
    user_id: int = Path(..., alias="userId"),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """A single user (admin only)."""
    return await _get_user_or_404(user_id, db)
