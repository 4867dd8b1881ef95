"""
User Model for Office Hours Queue
Users are identified by campus NetID; privileges are admin or per-course staff.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import Column, String, Boolean, DateTime, Integer, CheckConstraint
from sqlalchemy.orm import relationship

from officehours.models.api import APIModel
from officehours.models.database import Base


class User(Base):
    """A person known to the queue: student, course staff or admin."""
    __tablename__ = "users"
    
    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment="Unique user identifier"
    )
    
    netid = Column(
        String(64),
        unique=True,
        nullable=False,
        index=True,
        comment="Campus NetID (lowercase, unique)"
    )
    
    name = Column(
        String(255),
        nullable=True,
        comment="Display name"
    )
    
    is_admin = Column(
        Boolean,
        default=False,
        nullable=False,
        comment="Admin privileges"
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
    
    staffed_courses = relationship("Course", secondary="course_staff", back_populates="staff")
    
    __table_args__ = (
        CheckConstraint("length(netid) > 0", name="ck_users_netid_not_empty"),
        {"comment": "Users of the queue"}
    )
    
    def __repr__(self) -> str:
        return f"<User(id={self.id}, netid={self.netid}, admin={self.is_admin})>"


# Pydantic models for API
class UserResponse(APIModel):
    """User response model."""
    id: int
    netid: str
    name: Optional[str] = None
    is_admin: bool


class CurrentUserResponse(UserResponse):
    """The calling user, with the ids of the courses they staff."""
    staff_assignments: List[int] = []
