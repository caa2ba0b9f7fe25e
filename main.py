"""
Main application entry point for the Media Tracker API.

This module initializes the FastAPI application, sets up logging and
middleware, configures CORS, initializes the rate limiter with Redis
backend, and includes routers for every resource.

Modules:
- FastAPI: Web framework
- CORSMiddleware: Middleware for handling CORS
- FastAPILimiter: Rate limiting
- redis.asyncio: Async Redis client
- fakeredis.aioredis: In-process Redis used when the server is unreachable
- mediatracker.database: Database engine
- mediatracker.models: SQLAlchemy models
- mediatracker.core: Application settings
"""

import logging
from contextlib import asynccontextmanager

from fakeredis.aioredis import FakeRedis
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi_limiter import FastAPILimiter
import redis.asyncio as redis

from mediatracker.database import engine
from mediatracker import (
    addresses,
    media,
    models,
    notifications,
    reviews,
    user_media,
    users,
)
from mediatracker.auth import router as auth_router
from mediatracker.core import configure_logging, get_settings

settings = get_settings()
configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger("mediatracker")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Creates missing tables and initializes the rate limiter with Redis
    backend. Falls back to FakeRedis if Redis is unavailable (e.g., during
    tests or offline).
    """
    models.Base.metadata.create_all(bind=engine)
    redis_client = redis.from_url(
        settings.REDIS_URL, encoding="utf-8", decode_responses=True
    )
    try:
        await FastAPILimiter.init(redis_client)
    except Exception as exc:
        logger.warning("Redis unavailable (%s), rate limiting in memory", exc)
        await FastAPILimiter.init(FakeRedis(decode_responses=True))
    yield


# Initialize FastAPI application
app = FastAPI(title="Media Tracker API", lifespan=lifespan)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report malformed requests as ``400 Bad Request``."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


# Include routers for application areas
app.include_router(auth_router)
app.include_router(users.router)
app.include_router(addresses.router)
app.include_router(media.router)
app.include_router(user_media.router)
app.include_router(reviews.router)
app.include_router(notifications.router)


@app.get("/")
def root():
    """
    Root endpoint for the API.

    Returns a simple JSON message directing users to the Swagger UI.

    Returns:
        dict: JSON message with information about the API
    """
    return {"msg": "Media Tracker API. Visit /docs for Swagger UI"}
