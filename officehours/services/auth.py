"""
Authentication Service for Office Hours Queue
Resolves the calling user's NetID and answers authorization questions.

Identity sources:
- Production: NetID from the SSO header set by the fronting proxy
- Elsewhere: ?forceuser=<netid>, falling back to the configured dev user
"""

from typing import List, Optional

import structlog
from fastapi import Request
from sqlalchemy import select, exists
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from officehours.config.settings import get_settings
from officehours.models.course import course_staff
from officehours.models.question import Question
from officehours.models.queue import Queue
from officehours.models.user import User

logger = structlog.get_logger(__name__)
settings = get_settings()


class AuthenticationError(Exception):
    """Authentication-related errors."""
    pass


class AuthService:
    """Identity resolution and role checks."""
    
    def __init__(self):
        self.auth_header = settings.AUTH_HEADER
        self.auth_domain = settings.AUTH_DOMAIN
        self.dev_user = settings.DEV_USER
        self.allow_force_user = settings.allow_force_user
    
    def resolve_netid(self, request: Request, forceuser: Optional[str] = None) -> str:
        """
        Work out which NetID the request acts as.
        
        Args:
            request: Incoming request
            forceuser: Value of the forceuser query parameter, if any
            
        Returns:
            str: Lowercase NetID
            
        Raises:
            AuthenticationError: If no identity can be established
        """
        if self.allow_force_user:
            netid = forceuser or self.dev_user
        else:
            if forceuser:
                logger.warning("Ignoring forceuser outside development", forceuser=forceuser)
            
            raw = request.headers.get(self.auth_header)
            if not raw:
                raise AuthenticationError(f"Missing {self.auth_header} header")
            
            netid, _, domain = raw.strip().partition("@")
            if self.auth_domain and domain and domain.lower() != self.auth_domain.lower():
                raise AuthenticationError(f"Unexpected identity domain: {domain}")
        
        netid = netid.strip().lower()
        if not netid:
            raise AuthenticationError("Empty NetID")
        
        return netid
    
    async def get_or_create_user(self, netid: str, db: AsyncSession) -> User:
        """
        Look up a user by NetID, creating them on first sight.
        
        The configured dev user is provisioned as an admin outside production.
        """
        user = await self.get_user_by_netid(netid, db)
        if user:
            return user
        
        user = User(
            netid=netid,
            is_admin=self.allow_force_user and netid == self.dev_user,
        )
        db.add(user)
        try:
            await db.commit()
        except IntegrityError:
            # A concurrent first request for the same NetID won the insert
            await db.rollback()
            existing = await self.get_user_by_netid(netid, db)
            if existing is None:
                raise
            return existing
        await db.refresh(user)
        
        logger.info("User created on first request", user_id=user.id, netid=netid, is_admin=user.is_admin)
        
        return user
    
    async def get_user_by_netid(self, netid: str, db: AsyncSession) -> Optional[User]:
        result = await db.execute(select(User).where(User.netid == netid))
        return result.scalar_one_or_none()
    
    async def get_user_by_id(self, user_id: int, db: AsyncSession) -> Optional[User]:
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()
    
    async def is_course_staff(self, user: User, course_id: int, db: AsyncSession) -> bool:
        """Admins count as staff of every course."""
        if user.is_admin:
            return True
        
        result = await db.execute(
            select(
                exists().where(
                    course_staff.c.course_id == course_id,
                    course_staff.c.user_id == user.id,
                )
            )
        )
        return bool(result.scalar())
    
    async def get_staff_assignments(self, user: User, db: AsyncSession) -> List[int]:
        """Ids of the courses the user is staff of."""
        result = await db.execute(
            select(course_staff.c.course_id)
            .where(course_staff.c.user_id == user.id)
            .order_by(course_staff.c.course_id)
        )
        return list(result.scalars().all())
    
    async def can_remove_question(self, user: User, question: Question, db: AsyncSession) -> bool:
        """The asker or staff of the question's own course may remove it."""
        if question.asked_by_id == user.id:
            return True
        
        result = await db.execute(select(Queue.course_id).where(Queue.id == question.queue_id))
        course_id = result.scalar_one()
        
        return await self.is_course_staff(user, course_id, db)


# Global auth service instance
auth_service = AuthService()
