import uvicorn
import asyncio
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from slowapi.errors import RateLimitExceeded

from logger import logger
from utils.exception_handler import (
    handle_validation_error,
    request_validation_exception_handler,
    custom_http_exception_handler,
)
from limiter import limiter, rate_limit_handler

from router import CommonRouter, DefaultRouter, StatusRouter, OpenRouter

from database.db import init_models  # sync DB init

app = FastAPI(title="Shipsarthi Shipping Service")

# Routers
app.include_router(CommonRouter)
app.include_router(StatusRouter)
app.include_router(DefaultRouter)
app.include_router(OpenRouter)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

# Exception handlers
app.add_exception_handler(ValidationError, handle_validation_error)
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
app.add_exception_handler(HTTPException, custom_http_exception_handler)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -------------------------------
# Startup event
# -------------------------------
@app.on_event("startup")
async def startup_event():
    loop = asyncio.get_running_loop()
    # Initialize DB safely in executor
    await loop.run_in_executor(None, init_models)
    logger.info(msg="Shipsarthi service started")


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
