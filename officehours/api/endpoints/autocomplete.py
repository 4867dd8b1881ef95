"""
Autocomplete Endpoints for Office Hours Queue
Backs the NetID typeahead in the admin panel.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from officehours.dependencies import get_db, require_admin
from officehours.models.user import User, UserResponse

router = APIRouter()

MAX_SUGGESTIONS = 10


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@router.get("/users", response_model=List[UserResponse])
async def autocomplete_users(
    q: str = Query(..., min_length=1, max_length=64, description="NetID prefix"),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Users whose NetID starts with q, case-insensitively."""
    query = q.strip().lower()
    if not query:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Search query must not be blank"
        )
    
    prefix = _escape_like(query)
    
    result = await db.execute(
        select(User)
        .where(func.lower(User.netid).like(f"{prefix}%", escape="\\"))
        .order_by(User.netid)
        .limit(MAX_SUGGESTIONS)
    )
    return result.scalars().all()
