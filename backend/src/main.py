# pyright: reportMissingTypeStubs=false
"""
ZARVO Booking Backend API

A FastAPI application for booking healthcare appointments.

Features:
- Provider-published appointment slots with a race-free claim
- Bookings with immutable tickets (JSON and PDF)
- Customer cancellation up to 2 hours before the appointment
- Write-once provider ratings
- Admin moderation of provider accounts
- Live event feed over WebSocket
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api import admin, bookings, events, ratings, slots, tickets
from core.constants import CORS_ORIGINS
from core.errors import BookingError
from services.booking_completion_service import (
    start_booking_completion_scheduler, stop_booking_completion_scheduler
)
from services.event_publisher import EventHub

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()],
)

logger = logging.getLogger(__name__)
logger.info("ZARVO Booking API starting...")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    logger.info("Starting ZARVO Booking Backend API")

    # Note: Database sessions are created fresh for each scheduler run
    try:
        await start_booking_completion_scheduler()
    except Exception as e:
        logger.exception(f"Failed to start booking completion scheduler: {e}")

    yield

    try:
        await stop_booking_completion_scheduler()
    except Exception as e:
        logger.exception(f"Error stopping booking completion scheduler: {e}")

    logger.info("Shutting down ZARVO Booking Backend API")


# Create FastAPI application
app = FastAPI(
    title="ZARVO Booking Backend",
    description="Appointment booking for healthcare providers",
    version="1.0.0",
    docs_url="/docs",  # Swagger UI
    redoc_url="/redoc",  # ReDoc
    lifespan=lifespan,
)

# Fan-out for the live event feed, shared by all requests
app.state.event_hub = EventHub()

# CORS middleware for frontend integration
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(
    slots.router,
    prefix="/api/slots",
    tags=["slots"],
    responses={
        400: {"description": "Bad request"},
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Resource not found"},
        409: {"description": "Conflict"},
        429: {"description": "Too many requests"},
        500: {"description": "Internal server error"},
    },
)
app.include_router(
    bookings.router,
    prefix="/api/bookings",
    tags=["bookings"],
    responses={
        400: {"description": "Bad request"},
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Resource not found"},
        429: {"description": "Too many requests"},
        500: {"description": "Internal server error"},
    },
)
app.include_router(
    tickets.router,
    prefix="/api/tickets",
    tags=["tickets"],
    responses={
        404: {"description": "Resource not found"},
        500: {"description": "Internal server error"},
    },
)
app.include_router(
    ratings.router,
    prefix="/api/ratings",
    tags=["ratings"],
    responses={
        400: {"description": "Bad request"},
        401: {"description": "Unauthorized"},
        404: {"description": "Resource not found"},
        409: {"description": "Conflict"},
        500: {"description": "Internal server error"},
    },
)
app.include_router(
    admin.router,
    prefix="/api/admin",
    tags=["admin"],
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Resource not found"},
        500: {"description": "Internal server error"},
    },
)
app.include_router(events.router, prefix="/api/events", tags=["events"])


@app.get(
    "/",
    summary="Root endpoint",
    description="Returns basic API information",
)
async def root() -> dict[str, str]:
    """Get API information."""
    return {
        "message": "ZARVO Booking Backend API",
        "version": "1.0.0",
        "status": "running"
    }


@app.get(
    "/health",
    summary="Health check",
    description="Returns the health status of the API",
)
async def health_check() -> dict[str, str]:
    """Check if the API is healthy and responding."""
    return {"status": "healthy"}


# Global exception handlers
@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    """Render domain errors as {"detail", "type"} with the error's status code."""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__}: {exc.message}")
    else:
        logger.info(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "type": exc.kind},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions globally."""
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "type": "internal_error"},
    )


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    """Handle ValueError exceptions."""
    logger.warning(f"ValueError: {exc}")
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc), "type": "validation_error"},
    )
