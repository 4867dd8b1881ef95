"""
Structured Logging Configuration for Office Hours Queue
structlog processors routed through the standard library.

Loggers:
- security.audit: authentication failures, authorization denials, role changes
- queue.events: question lifecycle
"""

import logging
import sys
from typing import Optional

import structlog
from structlog.processors import JSONRenderer
from structlog.stdlib import add_log_level, add_logger_name

from officehours.config.settings import get_settings

settings = get_settings()


def setup_logging() -> None:
    """
    Configure structured logging.
    JSON in production, console rendering elsewhere.
    """
    structlog.configure(
        processors=[
            add_log_level,
            add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            JSONRenderer() if settings.is_production else structlog.dev.ConsoleRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.LOG_LEVEL),
    )
    
    # Silence noisy loggers in production
    if settings.is_production:
        logging.getLogger("uvicorn").setLevel(logging.WARNING)
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
        logging.getLogger("fastapi").setLevel(logging.WARNING)


class SecurityAuditLogger:
    """Security-focused logging for audit trails."""
    
    def __init__(self):
        self.logger = structlog.get_logger("security.audit")
    
    def log_authentication_failure(
        self,
        reason: str,
        ip_address: Optional[str] = None,
        trace_id: Optional[str] = None,
    ) -> None:
        self.logger.warning(
            "Authentication failed",
            event_type="auth_failed",
            reason=reason,
            client_ip=ip_address,
            trace_id=trace_id,
        )
    
    def log_authorization_failure(
        self,
        user_id: int,
        resource: str,
        action: str,
        reason: str,
        trace_id: Optional[str] = None,
    ) -> None:
        """Log authorization failures."""
        self.logger.warning(
            "Authorization denied",
            event_type="auth_denied",
            user_id=user_id,
            resource=resource,
            action=action,
            reason=reason,
            trace_id=trace_id,
        )
    
    def log_role_change(
        self,
        actor_id: int,
        target_user_id: int,
        role: str,
        granted: bool,
        course_id: Optional[int] = None,
    ) -> None:
        """Admin and course staff grants and revocations."""
        self.logger.info(
            "Role changed",
            event_type="role_grant" if granted else "role_revoke",
            actor_id=actor_id,
            target_user_id=target_user_id,
            role=role,
            course_id=course_id,
        )


class QueueEventLogger:
    """Question lifecycle events."""
    
    def __init__(self):
        self.logger = structlog.get_logger("queue.events")
    
    def log_question_event(
        self,
        event: str,
        question_id: int,
        queue_id: int,
        user_id: int,
        **details,
    ) -> None:
        self.logger.info(
            "Question event",
            event_type=event,
            question_id=question_id,
            queue_id=queue_id,
            user_id=user_id,
            **details,
        )


# Global logger instances
security_logger = SecurityAuditLogger()
queue_logger = QueueEventLogger()
