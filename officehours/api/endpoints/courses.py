"""
Course Endpoints for Office Hours Queue
Courses, their staff rosters and the queues they own.
"""

from typing import List

import structlog
from fastapi import APIRouter, Depends, HTTPException, Path, Response, status
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from officehours.dependencies import (
    get_db, get_current_user, get_course, require_admin, require_course_staff
)
from officehours.models.course import (
    Course, course_staff, CourseCreate, CourseResponse, CourseDetailResponse
)
from officehours.models.queue import Queue, QueueCreate, QueueResponse
from officehours.models.user import User, UserResponse
from officehours.services.auth import auth_service
from officehours.services.queue_service import queue_service
from officehours.utils.logging import security_logger

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("", response_model=List[CourseResponse])
async def list_courses(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """All courses, by name."""
    result = await db.execute(select(Course).order_by(Course.name))
    return result.scalars().all()


@router.post("", response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
async def create_course(
    course_data: CourseCreate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Create a course (admin only). Shortcodes are unique."""
    shortcode = course_data.shortcode.lower()
    
    existing = await db.execute(select(Course.id).where(Course.shortcode == shortcode))
    if existing.first() is not None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="A course with that shortcode already exists"
        )
    
    course = Course(name=course_data.name, shortcode=shortcode)
    db.add(course)
    await db.commit()
    await db.refresh(course)
    
    logger.info("Course created", course_id=course.id, shortcode=shortcode, user_id=current_user.id)
    
    return course


@router.get("/{courseId}", response_model=CourseDetailResponse)
async def get_course_detail(
    course: Course = Depends(get_course),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """A course and its live queues."""
    queues = await queue_service.list_live_queues(db, course_id=course.id)
    
    return CourseDetailResponse(
        id=course.id,
        name=course.name,
        shortcode=course.shortcode,
        queues=await queue_service.to_responses(db, queues),
    )


@router.get("/{courseId}/staff", response_model=List[UserResponse])
async def list_course_staff(
    course: Course = Depends(get_course),
    current_user: User = Depends(require_course_staff),
    db: AsyncSession = Depends(get_db)
):
    """Staff roster of the course."""
    result = await db.execute(
        select(User)
        .join(course_staff, course_staff.c.user_id == User.id)
        .where(course_staff.c.course_id == course.id)
        .order_by(User.netid)
    )
    return result.scalars().all()


@router.put(
    "/{courseId}/staff/{userId}",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED
)
async def add_course_staff(
    user_id: int = Path(..., alias="userId"),
    course: Course = Depends(get_course),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Add a user to the course's staff. Adding existing staff is a no-op."""
    user = await auth_service.get_user_by_id(user_id, db)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    
    existing = await db.execute(
        select(course_staff.c.user_id).where(
            course_staff.c.course_id == course.id,
            course_staff.c.user_id == user.id,
        )
    )
    if existing.first() is None:
        await db.execute(course_staff.insert().values(course_id=course.id, user_id=user.id))
        await db.commit()
        
        security_logger.log_role_change(
            actor_id=current_user.id,
            target_user_id=user.id,
            role="course_staff",
            granted=True,
            course_id=course.id,
        )
    
    return user


@router.delete("/{courseId}/staff/{userId}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_course_staff(
    user_id: int = Path(..., alias="userId"),
    course: Course = Depends(get_course),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Remove a user from the course's staff."""
    await db.execute(
        delete(course_staff).where(
            course_staff.c.course_id == course.id,
            course_staff.c.user_id == user_id,
        )
    )
    await db.commit()
    
    security_logger.log_role_change(
        actor_id=current_user.id,
        target_user_id=user_id,
        role="course_staff",
        granted=False,
        course_id=course.id,
    )
    
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{courseId}/queues", response_model=List[QueueResponse])
async def list_course_queues(
    course: Course = Depends(get_course),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Live queues of the course."""
    queues = await queue_service.list_live_queues(db, course_id=course.id)
    return await queue_service.to_responses(db, queues)


@router.post(
    "/{courseId}/queues",
    response_model=QueueResponse,
    status_code=status.HTTP_201_CREATED
)
async def create_queue(
    queue_data: QueueCreate,
    course: Course = Depends(get_course),
    current_user: User = Depends(require_course_staff),
    db: AsyncSession = Depends(get_db)
):
    """Open a new queue for the course (course staff only)."""
    queue = Queue(
        name=queue_data.name,
        location=queue_data.location,
        course_id=course.id,
        created_by_user_id=current_user.id,
    )
    db.add(queue)
    await db.commit()
    await db.refresh(queue)
    
    logger.info("Queue created", queue_id=queue.id, course_id=course.id, user_id=current_user.id)
    
    return await queue_service.to_response(db, queue)
