"""
Pytest Configuration and Fixtures.
===================================

Every test gets a freshly seeded SQLite database and a client bound to it.

Seeded data:
- users: admin (1, admin), 225staff (2), 241staff (3), student (4), otherstudent (5)
- courses: CS 225 (1, staffed by 225staff), CS 241 (2, staffed by 241staff)
- queues: 1 in CS 225, 2 in CS 241
- questions: 1 and 2 on queue 1, asked by student and otherstudent
"""

import os
import tempfile
from pathlib import Path
from typing import Generator

import pytest

# Set test environment before importing app modules
_TEST_DIR = Path(tempfile.mkdtemp(prefix="officehours-tests-"))
_TEST_DB = _TEST_DIR / "test.db"

os.environ["ENVIRONMENT"] = "testing"
os.environ["TEST_DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB}"
os.environ["DEV_USER"] = "admin"

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from main import app  # noqa: E402
from officehours.models import Base, Course, Queue, Question, User, course_staff  # noqa: E402


def populate_test_db(session: Session) -> None:
    """Insert the fixture rows every test starts from."""
    session.add_all([
        User(id=1, netid="admin", name="Admin User", is_admin=True),
        User(id=2, netid="225staff", name="225 Staff"),
        User(id=3, netid="241staff", name="241 Staff"),
        User(id=4, netid="student", name="Student"),
        User(id=5, netid="otherstudent", name="Other Student"),
    ])
    session.add_all([
        Course(id=1, name="CS 225", shortcode="cs225"),
        Course(id=2, name="CS 241", shortcode="cs241"),
    ])
    session.flush()
    
    session.execute(course_staff.insert(), [
        {"course_id": 1, "user_id": 2},
        {"course_id": 2, "user_id": 3},
    ])
    
    session.add_all([
        Queue(id=1, name="CS225 Queue", location="Siebel", course_id=1, created_by_user_id=1),
        Queue(id=2, name="CS241 Queue", location="Siebel", course_id=2, created_by_user_id=1),
    ])
    session.flush()
    
    session.add_all([
        Question(id=1, name="Nathan", location="Siebel", topic="Queue", queue_id=1, asked_by_id=4),
        Question(id=2, name="Rahel", location="Siebel 0220", topic="Trees", queue_id=1, asked_by_id=5),
    ])
    session.commit()


@pytest.fixture
def test_db() -> Generator[None, None, None]:
    """Recreate and seed the schema, then remove it after the test."""
    engine = create_engine(f"sqlite:///{_TEST_DB}")
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    
    with Session(engine) as session:
        populate_test_db(session)
    
    yield
    
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def client(test_db) -> Generator[TestClient, None, None]:
    """HTTP client with the application lifespan running."""
    with TestClient(app) as test_client:
        yield test_client
