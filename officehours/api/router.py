"""
API Router for Office Hours Queue
All resources are served under /api/.
"""

from fastapi import APIRouter

from officehours.api.endpoints import autocomplete, courses, queues, questions, users

# Create main API router
api_router = APIRouter()

api_router.include_router(
    users.router,
    prefix="/users",
    tags=["users"]
)

api_router.include_router(
    autocomplete.router,
    prefix="/autocomplete",
    tags=["autocomplete"]
)

api_router.include_router(
    courses.router,
    prefix="/courses",
    tags=["courses"]
)

api_router.include_router(
    questions.router,
    prefix="/queues/{queueId}/questions",
    tags=["questions"]
)

api_router.include_router(
    queues.router,
    prefix="/queues",
    tags=["queues"]
)


@api_router.get("/", tags=["api-info"])
async def api_info():
    """API information endpoint."""
    return {
        "status": "active",
        "endpoints": [
            "/users - Current user and admin roster",
            "/autocomplete - User search by NetID",
            "/courses - Courses, staff and course queues",
            "/queues - Queues",
            "/queues/{queueId}/questions - Questions on a queue",
        ],
        "documentation": "/api/docs",
    }
