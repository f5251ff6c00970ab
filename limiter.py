import os

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi.responses import JSONResponse

# Delhivery pushes scans in bursts, public tracking is per visitor
WEBHOOK_RATE_LIMIT = os.environ.get("WEBHOOK_RATE_LIMIT", "600/minute")
TRACKING_RATE_LIMIT = os.environ.get("TRACKING_RATE_LIMIT", "60/minute")

limiter = Limiter(key_func=get_remote_address)


def rate_limit_handler(request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={"detail": "Too many requests. Slow down!", "status": False},
    )
