"""
Question Endpoints for Office Hours Queue
Students ask; course staff answer and record feedback.

Mounted under /api/queues/{queueId}/questions.
"""

from typing import List

import structlog
from fastapi import APIRouter, Body, Depends, HTTPException, Path, Request, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from officehours.dependencies import (
    get_db, get_current_user, get_queue, get_question, get_active_question,
    require_queue_staff
)
from officehours.models.question import (
    Question, QuestionCreate, QuestionAnswered, QuestionResponse
)
from officehours.models.queue import Queue
from officehours.models.user import User
from officehours.services.auth import auth_service
from officehours.utils.logging import queue_logger, security_logger

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("", response_model=QuestionResponse, status_code=status.HTTP_201_CREATED)
async def create_question(
    question_data: QuestionCreate,
    queue: Queue = Depends(get_queue),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Add a question to the queue.
    
    A user may have at most one question waiting on a given queue.
    """
    existing = await db.execute(
        select(Question.id).where(
            Question.queue_id == queue.id,
            Question.asked_by_id == current_user.id,
            Question.dequeue_time.is_(None),
        )
    )
    if existing.first() is not None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="You already have a question on this queue"
        )
    
    question = Question(
        name=question_data.name,
        location=question_data.location,
        topic=question_data.topic,
        queue_id=queue.id,
        asked_by_id=current_user.id,
    )
    db.add(question)
    await db.commit()
    await db.refresh(question)
    
    queue_logger.log_question_event("asked", question.id, queue.id, current_user.id)
    
    return question


@router.get("", response_model=List[QuestionResponse])
async def list_questions(
    queue: Queue = Depends(get_queue),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Questions still waiting on the queue, oldest first."""
    result = await db.execute(
        select(Question)
        .where(Question.queue_id == queue.id, Question.dequeue_time.is_(None))
        .order_by(Question.id)
    )
    return result.scalars().all()


@router.get("/{questionId}", response_model=QuestionResponse)
async def get_question_detail(
    question: Question = Depends(get_question),
    current_user: User = Depends(get_current_user)
):
    """Get a single question on the queue."""
    return question


@router.post("/{questionId}/answering", response_model=QuestionResponse)
async def start_answering(
    question: Question = Depends(get_active_question),
    current_user: User = Depends(require_queue_staff),
    db: AsyncSession = Depends(get_db)
):
    """Mark the question as being answered by the caller."""
    question.start_answering(current_user.id)
    await db.commit()
    await db.refresh(question)
    
    queue_logger.log_question_event("answering_started", question.id, question.queue_id, current_user.id)
    
    return question


@router.delete("/{questionId}/answering", response_model=QuestionResponse)
async def stop_answering(
    question: Question = Depends(get_active_question),
    current_user: User = Depends(require_queue_staff),
    db: AsyncSession = Depends(get_db)
):
    """Put the question back in the waiting state."""
    question.stop_answering()
    await db.commit()
    await db.refresh(question)
    
    queue_logger.log_question_event("answering_cancelled", question.id, question.queue_id, current_user.id)
    
    return question


@router.post("/{questionId}/answered", response_model=QuestionResponse)
async def finish_answering(
    question: Question = Depends(get_active_question),
    current_user: User = Depends(require_queue_staff),
    feedback: QuestionAnswered = Body(...),
    db: AsyncSession = Depends(get_db)
):
    """
    Mark the question answered, record feedback and take it off the queue.
    
    The caller is recorded as the staff member who answered it.
    """
    question.finish_answering(current_user.id, feedback.preparedness, feedback.comments)
    await db.commit()
    await db.refresh(question)
    
    queue_logger.log_question_event(
        "answered",
        question.id,
        question.queue_id,
        current_user.id,
        preparedness=feedback.preparedness.value,
    )
    
    return question


@router.delete("/{questionId}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_question(
    request: Request,
    question_id: int = Path(..., alias="questionId"),
    queue: Queue = Depends(get_queue),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Take a question off the queue without answering it.
    
    Allowed for the asker and for staff of the question's own course.
    """
    result = await db.execute(select(Question).where(Question.id == question_id))
    question = result.scalar_one_or_none()
    
    if not question or not question.is_active:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Question not found"
        )
    
    if not await auth_service.can_remove_question(current_user, question, db):
        security_logger.log_authorization_failure(
            user_id=current_user.id,
            resource=request.url.path,
            action="DELETE",
            reason="Not the asker or course staff",
            trace_id=getattr(request.state, "trace_id", None)
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the asker or course staff can remove this question"
        )
    
    question.dequeue()
    await db.commit()
    
    queue_logger.log_question_event("removed", question.id, question.queue_id, current_user.id)
    
    return Response(status_code=status.HTTP_204_NO_CONTENT)
