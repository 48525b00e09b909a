"""
Services package for shared business logic.

This package contains service classes that encapsulate business logic
shared across the API endpoints and background jobs.
"""

from .slot_service import SlotService
from .booking_service import BookingService
from .rating_service import RatingService
from .admin_service import AdminService

__all__ = [
    "SlotService",
    "BookingService",
    "RatingService",
    "AdminService",
]
