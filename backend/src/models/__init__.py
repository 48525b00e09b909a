# Package initialization
# Import all models so they are registered on Base.metadata
from .user import User
from .doctor import Doctor
from .slot import Slot
from .booking import Booking
from .ticket import Ticket
from .rating import Rating

__all__ = [
    "User",
    "Doctor",
    "Slot",
    "Booking",
    "Ticket",
    "Rating",
]
