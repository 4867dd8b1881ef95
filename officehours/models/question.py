"""
Question Model for Office Hours Queue
A question waits on a queue until staff answer it or it is removed.

Lifecycle:
- enqueued: enqueue_time set, dequeue_time empty
- being answered: being_answered true, answered_by_id and answer_start_time set
- answered: answer_finish_time and dequeue_time set, feedback recorded
- removed: dequeue_time set without an answer
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import Field
from sqlalchemy import (
    Column, String, Boolean, DateTime, Text, Integer,
    ForeignKey, Enum as SQLEnum, Index
)
from sqlalchemy.orm import relationship

from officehours.models.api import APIModel
from officehours.models.database import Base


class Preparedness(str, Enum):
    """How prepared the student was, as judged by the staff member."""
    NOT = "not"
    AVERAGE = "average"
    WELL = "well"


class Question(Base):
    """A student's question on a queue."""
    __tablename__ = "questions"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    
    # What the student entered
    name = Column(String(255), nullable=False)
    location = Column(String(255), nullable=False)
    topic = Column(String(255), nullable=False)
    
    enqueue_time = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    
    being_answered = Column(
        Boolean,
        default=False,
        nullable=False,
    )
    
    answer_start_time = Column(DateTime(timezone=True), nullable=True)
    answer_finish_time = Column(DateTime(timezone=True), nullable=True)
    
    dequeue_time = Column(
        DateTime(timezone=True),
        nullable=True,
        comment="Set once the question leaves the queue"
    )
    
    # Feedback recorded when the question is answered
    preparedness = Column(
        SQLEnum(
            Preparedness,
            native_enum=False,
            length=16,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=True,
    )
    
    comments = Column(Text, nullable=True)
    
    queue_id = Column(
        Integer,
        ForeignKey("queues.id", ondelete="CASCADE"),
        nullable=False,
    )
    
    asked_by_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    
    answered_by_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    
    queue = relationship("Queue")
    asked_by = relationship("User", foreign_keys=[asked_by_id])
    answered_by = relationship("User", foreign_keys=[answered_by_id])
    
    __table_args__ = (
        Index("ix_questions_queue_dequeue", "queue_id", "dequeue_time"),
    )
    
    @property
    def is_active(self) -> bool:
        """Still waiting on the queue."""
        return self.dequeue_time is None
    
    def start_answering(self, user_id: int) -> None:
        self.being_answered = True
        self.answered_by_id = user_id
        self.answer_start_time = datetime.now(timezone.utc)
    
    def stop_answering(self) -> None:
        self.being_answered = False
        self.answered_by_id = None
        self.answer_start_time = None
    
    def finish_answering(self, user_id: int, preparedness: Preparedness, comments: Optional[str]) -> None:
        now = datetime.now(timezone.utc)
        self.being_answered = False
        self.answered_by_id = user_id
        self.answer_finish_time = now
        self.dequeue_time = now
        self.preparedness = preparedness
        self.comments = comments
    
    def dequeue(self) -> None:
        self.being_answered = False
        self.dequeue_time = datetime.now(timezone.utc)
    
    def __repr__(self) -> str:
        return f"<Question(id={self.id}, queue_id={self.queue_id}, answering={self.being_answered})>"


class QuestionCreate(APIModel):
    """Question creation request model."""
    name: str = Field(..., min_length=1, max_length=255)
    location: str = Field(..., min_length=1, max_length=255)
    topic: str = Field(..., min_length=1, max_length=255)


class QuestionAnswered(APIModel):
    """Feedback recorded when a question is answered."""
    preparedness: Preparedness
    comments: Optional[str] = None


class QuestionResponse(APIModel):
    """Question response model."""
    id: int
    name: str
    location: str
    topic: str
    enqueue_time: datetime
    being_answered: bool
    answer_start_time: Optional[datetime] = None
    answer_finish_time: Optional[datetime] = None
    dequeue_time: Optional[datetime] = None
    preparedness: Optional[Preparedness] = None
    comments: Optional[str] = None
    queue_id: int
    asked_by_id: int
    answered_by_id: Optional[int] = None
