"""
Models package for Office Hours Queue
Exports all database models for easy importing.
"""

from officehours.models.database import Base, get_async_session, init_database, close_database
from officehours.models.user import User, UserResponse, CurrentUserResponse
from officehours.models.course import (
    Course, course_staff, CourseCreate, CourseResponse, CourseDetailResponse
)
from officehours.models.queue import Queue, QueueCreate, QueueUpdate, QueueResponse
from officehours.models.question import (
    Question, Preparedness, QuestionCreate, QuestionAnswered, QuestionResponse
)

__all__ = [
    # Database
    "Base",
    "get_async_session",
    "init_database",
    "close_database",
    
    # User models
    "User",
    "UserResponse",
    "CurrentUserResponse",
    
    # Course models
    "Course",
    "course_staff",
    "CourseCreate",
    "CourseResponse",
    "CourseDetailResponse",
    
    # Queue models
    "Queue",
    "QueueCreate",
    "QueueUpdate",
    "QueueResponse",
    
    # Question models
    "Question",
    "Preparedness",
    "QuestionCreate",
    "QuestionAnswered",
    "QuestionResponse",
]
