"""
Manual run of the booking completion job.

NOTE: Completion is normally handled by the scheduler in
services/booking_completion_service.py (runs hourly). This script is for
manual runs and testing in development.
"""
import sys
import os

# Add the parent directory to sys.path to allow imports from src
sys.path.append(os.path.join(os.path.dirname(__file__), '../src'))

from core.database import SessionLocal
from services.booking_service import BookingService


def main():
    print("Completing past bookings...")
    db = SessionLocal()
    try:
        completed = BookingService.complete_past_bookings(db)
        print(f"Marked {completed} booking(s) as completed.")
    except Exception as e:
        print(f"Error completing bookings: {e}")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
