"""
Dependency Injection for Office Hours Queue
Provides database sessions, the calling user, resource loaders and role gates.

Resource loaders run before role gates, so a missing queue is a 404 even for a
caller who would not be allowed to act on it.
"""

from typing import AsyncGenerator, Optional

import structlog
from fastapi import Depends, HTTPException, Path, Query, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from officehours.models.course import Course
from officehours.models.database import get_async_session
from officehours.models.question import Question
from officehours.models.queue import Queue
from officehours.models.user import User
from officehours.services.auth import auth_service, AuthenticationError
from officehours.utils.logging import security_logger

logger = structlog.get_logger(__name__)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Get database session dependency.
    
    Yields:
        AsyncSession: Database session
    """
    async for session in get_async_session():
        yield session


async def get_current_user(
    request: Request,
    forceuser: Optional[str] = Query(
        None,
        description="Act as this NetID (ignored in production)"
    ),
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    Get the calling user, creating them on first sight.
    
    Raises:
        HTTPException: 401 if no identity can be established
    """
    try:
        netid = auth_service.resolve_netid(request, forceuser)
    except AuthenticationError as e:
        security_logger.log_authentication_failure(
            reason=str(e),
            ip_address=get_client_ip(request),
            trace_id=getattr(request.state, "trace_id", None)
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    
    user = await auth_service.get_or_create_user(netid, db)
    
    # Add user to request state for logging
    request.state.user = user
    
    return user


def _forbidden(request: Request, user: User, action: str, reason: str) -> HTTPException:
    security_logger.log_authorization_failure(
        user_id=user.id,
        resource=request.url.path,
        action=action,
        reason=reason,
        trace_id=getattr(request.state, "trace_id", None)
    )
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=reason
    )


async def require_admin(
    request: Request,
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Get current admin user.
    
    Raises:
        HTTPException: If user is not an admin
    """
    if not current_user.is_admin:
        raise _forbidden(request, current_user, request.method, "Admin privileges required")
    
    return current_user


async def get_course(
    course_id: int = Path(..., alias="courseId"),
    db: AsyncSession = Depends(get_db)
) -> Course:
    """Load the course named in the path or 404."""
    result = await db.execute(select(Course).where(Course.id == course_id))
    course = result.scalar_one_or_none()
    
    if not course:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Course not found"
        )
    
    return course


async def get_queue(
    queue_id: int = Path(..., alias="queueId"),
    db: AsyncSession = Depends(get_db)
) -> Queue:
    """Load the live queue named in the path or 404."""
    result = await db.execute(
        select(Queue).where(Queue.id == queue_id, Queue.deleted_at.is_(None))
    )
    queue = result.scalar_one_or_none()
    
    if not queue:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Queue not found"
        )
    
    return queue


async def get_question(
    question_id: int = Path(..., alias="questionId"),
    queue: Queue = Depends(get_queue),
    db: AsyncSession = Depends(get_db)
) -> Question:
    """Load the question named in the path, which must belong to the queue, or 404."""
    result = await db.execute(
        select(Question).where(Question.id == question_id, Question.queue_id == queue.id)
    )
    question = result.scalar_one_or_none()
    
    if not question:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Question not found"
        )
    
    return question


async def get_active_question(
    question: Question = Depends(get_question)
) -> Question:
    """Like get_question, but a question that has left the queue is a 404."""
    if not question.is_active:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Question is no longer on the queue"
        )
    
    return question


async def require_course_staff(
    request: Request,
    course: Course = Depends(get_course),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    Require staff of the course in the path (or an admin).
    
    Raises:
        HTTPException: 403 for anyone else
    """
    if not await auth_service.is_course_staff(current_user, course.id, db):
        raise _forbidden(request, current_user, request.method, "Course staff privileges required")
    
    return current_user


async def require_queue_staff(
    request: Request,
    queue: Queue = Depends(get_queue),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    Require staff of the course owning the queue in the path (or an admin).
    
    Raises:
        HTTPException: 403 for anyone else
    """
    if not await auth_service.is_course_staff(current_user, queue.course_id, db):
        raise _forbidden(request, current_user, request.method, "Course staff privileges required")
    
    return current_user


def get_client_ip(request: Request) -> str:
    """
    Extract client IP address from request.
    
    Args:
        request: FastAPI request object
        
    Returns:
        str: Client IP address
    """
    # Check for forwarded headers (behind proxy)
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    
    return request.client.host if request.client else "unknown"
