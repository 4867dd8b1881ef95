"""
Course Model for Office Hours Queue
A course owns queues and has a roster of staff.
"""

from datetime import datetime, timezone
from typing import List

from pydantic import Field
from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, Table
from sqlalchemy.orm import relationship

from officehours.models.api import APIModel
from officehours.models.database import Base
from officehours.models.queue import QueueResponse


course_staff = Table(
    "course_staff",
    Base.metadata,
    Column("course_id", Integer, ForeignKey("courses.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    comment="Which users are staff of which courses",
)


class Course(Base):
    """A course offering office hours."""
    __tablename__ = "courses"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    
    name = Column(
        String(255),
        nullable=False,
        comment="Human readable course name, e.g. CS 225"
    )
    
    shortcode = Column(
        String(32),
        unique=True,
        nullable=False,
        comment="URL-friendly course code, e.g. cs225"
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
    
    staff = relationship("User", secondary=course_staff, back_populates="staffed_courses")
    queues = relationship("Queue", back_populates="course", cascade="all, delete-orphan")
    
    def __repr__(self) -> str:
        return f"<Course(id={self.id}, shortcode={self.shortcode})>"


class CourseCreate(APIModel):
    """Course creation request model."""
    name: str = Field(..., min_length=1, max_length=255)
    shortcode: str = Field(..., min_length=1, max_length=32)


class CourseResponse(APIModel):
    """Course response model."""
    id: int
    name: str
    shortcode: str


class CourseDetailResponse(CourseResponse):
    """Course with its live queues."""
    queues: List[QueueResponse] = []
