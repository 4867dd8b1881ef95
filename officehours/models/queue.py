"""
Queue Model for Office Hours Queue
A queue belongs to a course; students post questions to it.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import Field
from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, Index
from sqlalchemy.orm import relationship

from officehours.models.api import APIModel
from officehours.models.database import Base


class Queue(Base):
    """An office-hours queue. Deleted queues are kept with deleted_at set."""
    __tablename__ = "queues"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    
    name = Column(String(255), nullable=False)
    
    location = Column(
        String(255),
        nullable=False,
        comment="Where office hours are held"
    )
    
    course_id = Column(
        Integer,
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    
    created_by_user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    
    deleted_at = Column(
        DateTime(timezone=True),
        nullable=True,
        comment="Soft delete timestamp"
    )
    
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    
    course = relationship("Course", back_populates="queues")
    
    __table_args__ = (
        Index("ix_queues_course_deleted", "course_id", "deleted_at"),
    )
    
    def __repr__(self) -> str:
        return f"<Queue(id={self.id}, course_id={self.course_id}, name={self.name})>"


class QueueCreate(APIModel):
    """Queue creation request model."""
    name: str = Field(..., min_length=1, max_length=255)
    location: str = Field(..., min_length=1, max_length=255)


class QueueUpdate(APIModel):
    """Queue update request model."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    location: Optional[str] = Field(None, min_length=1, max_length=255)


class QueueResponse(APIModel):
    """Queue response model."""
    id: int
    name: str
    location: str
    course_id: int
    created_by_user_id: Optional[int] = None
    question_count: int = 0
