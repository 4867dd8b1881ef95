"""
Security Middleware for Office Hours Queue
Security headers and per-client rate limiting.
"""

import time
from typing import Any, Dict, List, Tuple

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from officehours.config.settings import get_settings

logger = structlog.get_logger(__name__)
settings = get_settings()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds security headers to all responses."""
    
    def __init__(self, app):
        super().__init__(app)
        self.security_headers = {
            "X-Content-Type-Options": "nosniff",
            "X-Frame-Options": "DENY",
            "Strict-Transport-Security": "max-age=31536000; includeSubDomains" if settings.is_production else "max-age=31536000",
            "Content-Security-Policy": self._get_csp_header(),
            "Referrer-Policy": "strict-origin-when-cross-origin",
        }
    
    def _get_csp_header(self) -> str:
        """Generate Content Security Policy header based on environment."""
        if settings.is_production:
            return "default-src 'self'; img-src 'self' data:; frame-ancestors 'none';"
        # Swagger UI needs inline scripts and the CDN
        return "default-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; img-src 'self' data: https:;"
    
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        
        for header, value in self.security_headers.items():
            response.headers[header] = value
        
        # Queue state changes constantly; never cache API responses
        if request.url.path.startswith("/api/"):
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate"
            response.headers["Pragma"] = "no-cache"
        
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Sliding-window rate limiting per client IP, held in process memory.
    """
    
    def __init__(self, app):
        super().__init__(app)
        self.request_counts: Dict[str, Dict[str, Any]] = {}
        self.window_size = 60  # 1 minute window
        self.max_requests = settings.RATE_LIMIT_REQUESTS_PER_MINUTE
        self._last_prune = time.time()
    
    def _get_client_identifier(self, request: Request) -> str:
        """Client IP, honouring proxy headers."""
        if "x-forwarded-for" in request.headers:
            return request.headers["x-forwarded-for"].split(",")[0].strip()
        if "x-real-ip" in request.headers:
            return request.headers["x-real-ip"]
        return request.client.host if request.client else "unknown"
    
    def _prune_idle_clients(self, window_start: float) -> None:
        """Forget clients with no requests inside the current window."""
        idle = [
            client_id for client_id, client_data in self.request_counts.items()
            if not any(req_time > window_start for req_time in client_data["requests"])
        ]
        for client_id in idle:
            del self.request_counts[client_id]
    
    def _is_rate_limited(self, client_id: str) -> Tuple[bool, Dict[str, Any]]:
        """
        Check if client is rate limited using sliding window.
        
        Returns:
            tuple: (is_limited, rate_limit_info)
        """
        current_time = time.time()
        window_start = current_time - self.window_size
        
        # Sweep at most once per window
        if current_time - self._last_prune >= self.window_size:
            self._prune_idle_clients(window_start)
            self._last_prune = current_time
        
        client_data = self.request_counts.setdefault(client_id, {"requests": []})
        
        # Remove old requests outside the window
        requests: List[float] = [
            req_time for req_time in client_data["requests"]
            if req_time > window_start
        ]
        client_data["requests"] = requests
        
        reset_time = int((requests[0] if requests else current_time) + self.window_size)
        remaining = max(0, self.max_requests - len(requests))
        
        rate_limit_info = {
            "limit": self.max_requests,
            "remaining": remaining,
            "reset": reset_time,
            "window": self.window_size
        }
        
        if len(requests) >= self.max_requests:
            return True, rate_limit_info
        
        requests.append(current_time)
        rate_limit_info["remaining"] = remaining - 1
        
        return False, rate_limit_info
    
    async def dispatch(self, request: Request, call_next):
        # Skip rate limiting for health checks and metrics
        if request.url.path in ["/health", "/metrics"]:
            return await call_next(request)
        
        client_id = self._get_client_identifier(request)
        is_limited, rate_info = self._is_rate_limited(client_id)
        
        if is_limited:
            retry_after = max(0, rate_info["reset"] - int(time.time()))
            
            logger.warning(
                "Rate limit exceeded",
                client_id=client_id,
                path=request.url.path,
                method=request.method,
                limit=rate_info["limit"],
                reset_time=rate_info["reset"]
            )
            
            return JSONResponse(
                status_code=429,
                content={
                    "error": "Rate limit exceeded",
                    "message": f"Too many requests. Limit: {rate_info['limit']} per {rate_info['window']} seconds",
                    "retry_after": retry_after
                },
                headers={
                    "X-RateLimit-Limit": str(rate_info["limit"]),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": str(rate_info["reset"]),
                    "Retry-After": str(retry_after)
                }
            )
        
        response = await call_next(request)
        
        response.headers["X-RateLimit-Limit"] = str(rate_info["limit"])
        response.headers["X-RateLimit-Remaining"] = str(rate_info["remaining"])
        response.headers["X-RateLimit-Reset"] = str(rate_info["reset"])
        
        return response
