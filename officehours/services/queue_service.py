"""
Queue Service for Office Hours Queue
Queries over live (not deleted) queues and their waiting questions.
"""

from typing import Dict, Iterable, List, Optional

import structlog
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from officehours.models.question import Question
from officehours.models.queue import Queue, QueueResponse

logger = structlog.get_logger(__name__)


class QueueService:
    """Read helpers shared by the queue and course endpoints."""
    
    async def list_live_queues(self, db: AsyncSession, course_id: Optional[int] = None) -> List[Queue]:
        query = select(Queue).where(Queue.deleted_at.is_(None))
        if course_id is not None:
            query = query.where(Queue.course_id == course_id)
        
        result = await db.execute(query.order_by(Queue.id))
        return list(result.scalars().all())
    
    async def count_active_questions(self, db: AsyncSession, queue_ids: Iterable[int]) -> Dict[int, int]:
        """Number of questions still waiting, keyed by queue id."""
        queue_ids = list(queue_ids)
        if not queue_ids:
            return {}
        
        result = await db.execute(
            select(Question.queue_id, func.count(Question.id))
            .where(Question.queue_id.in_(queue_ids), Question.dequeue_time.is_(None))
            .group_by(Question.queue_id)
        )
        return {queue_id: count for queue_id, count in result.all()}
    
    async def to_responses(self, db: AsyncSession, queues: List[Queue]) -> List[QueueResponse]:
        counts = await self.count_active_questions(db, [queue.id for queue in queues])
        
        responses = []
        for queue in queues:
            response = QueueResponse.model_validate(queue)
            response.question_count = counts.get(queue.id, 0)
            responses.append(response)
        
        return responses
    
    async def to_response(self, db: AsyncSession, queue: Queue) -> QueueResponse:
        responses = await self.to_responses(db, [queue])
        return responses[0]


# Global queue service instance
queue_service = QueueService()
