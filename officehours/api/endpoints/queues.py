"""
Queue Endpoints for Office Hours Queue
Listing is open to everyone; changes require staff of the owning course.
"""

from datetime import datetime, timezone
from typing import List

import structlog
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from officehours.dependencies import get_db, get_current_user, get_queue, require_queue_staff
from officehours.models.queue import Queue, QueueResponse, QueueUpdate
from officehours.models.user import User
from officehours.services.queue_service import queue_service

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("", response_model=List[QueueResponse])
async def list_queues(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """All live queues with the number of questions waiting on each."""
    queues = await queue_service.list_live_queues(db)
    return await queue_service.to_responses(db, queues)


@router.get("/{queueId}", response_model=QueueResponse)
async def get_queue_detail(
    queue: Queue = Depends(get_queue),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get a single live queue."""
    return await queue_service.to_response(db, queue)


@router.patch("/{queueId}", response_model=QueueResponse)
async def update_queue(
    update_data: QueueUpdate,
    queue: Queue = Depends(get_queue),
    current_user: User = Depends(require_queue_staff),
    db: AsyncSession = Depends(get_db)
):
    """Rename or relocate a queue."""
    updates_made = []
    
    if update_data.name is not None:
        queue.name = update_data.name
        updates_made.append("name")
    if update_data.location is not None:
        queue.location = update_data.location
        updates_made.append("location")
    
    await db.commit()
    await db.refresh(queue)
    
    logger.info(
        "Queue updated",
        queue_id=queue.id,
        user_id=current_user.id,
        updates=updates_made
    )
    
    return await queue_service.to_response(db, queue)


@router.delete("/{queueId}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_queue(
    queue: Queue = Depends(get_queue),
    current_user: User = Depends(require_queue_staff),
    db: AsyncSession = Depends(get_db)
):
    """Soft-delete a queue; it disappears from every listing."""
    queue.deleted_at = datetime.now(timezone.utc)
    await db.commit()
    
    logger.info("Queue deleted", queue_id=queue.id, user_id=current_user.id)
    
    return Response(status_code=status.HTTP_204_NO_CONTENT)
