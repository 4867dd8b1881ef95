"""
Health Check Utilities for Office Hours Queue
Database reachability and latency for the /health endpoint.
"""

import time
from datetime import datetime, timezone
from typing import Any, Dict

import structlog

from officehours.models.database import get_db_health

logger = structlog.get_logger(__name__)


class HealthChecker:
    """Runs each dependency check and folds them into one status."""
    
    def __init__(self):
        self.checks = [
            self._check_database,
        ]
    
    async def _check_database(self) -> Dict[str, Any]:
        """Check database connectivity and performance."""
        start_time = time.time()
        db_status = await get_db_health()
        response_time = (time.time() - start_time) * 1000
        
        if db_status["status"] != "healthy":
            logger.error("Database health check failed", error=db_status.get("error"))
        
        return {
            "name": "database",
            "status": db_status["status"],
            "response_time_ms": round(response_time, 2),
            "details": {
                key: value for key, value in db_status.items() if key != "status"
            }
        }
    
    async def run(self) -> Dict[str, Any]:
        results = []
        for check in self.checks:
            try:
                results.append(await check())
            except Exception as e:
                logger.error("Health check raised", check=check.__name__, error=str(e))
                results.append({
                    "name": check.__name__.replace("_check_", ""),
                    "status": "unhealthy",
                    "details": {"error": str(e)},
                })
        
        return {
            "healthy": all(result["status"] == "healthy" for result in results),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "checks": {result["name"]: result for result in results},
        }


health_checker = HealthChecker()


async def health_check() -> Dict[str, Any]:
    """Run all health checks."""
    return await health_checker.run()
