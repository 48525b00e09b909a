"""Application constants and configuration values."""

from core.config import FRONTEND_URL

# Database field lengths
MAX_STRING_LENGTH = 255

# Database connection settings
DB_POOL_RECYCLE_SECONDS = 300  # 5 minutes

# CORS origins for development and production
_CORS_ORIGINS_RAW = [
    "http://localhost:5173",      # React dev server (Vite)
    "http://localhost:3000",
    FRONTEND_URL,
]

# Filter out None values and empty strings to avoid CORS errors
CORS_ORIGINS = [origin for origin in _CORS_ORIGINS_RAW if origin and origin.strip()]

# Roles
ROLE_CUSTOMER = "customer"
ROLE_BUSINESS = "business"
ROLE_DOCTOR = "doctor"
ROLE_ADMIN = "admin"
ROLE_SUPER_ADMIN = "super_admin"
PROVIDER_ROLES = (ROLE_BUSINESS, ROLE_DOCTOR)
ADMIN_ROLES = (ROLE_ADMIN, ROLE_SUPER_ADMIN)
ALL_ROLES = (ROLE_CUSTOMER, ROLE_BUSINESS, ROLE_DOCTOR, ROLE_ADMIN, ROLE_SUPER_ADMIN)

# Provider approval
APPROVAL_PENDING = "pending"
APPROVAL_APPROVED = "approved"
APPROVAL_REJECTED = "rejected"
APPROVAL_STATUSES = (APPROVAL_PENDING, APPROVAL_APPROVED, APPROVAL_REJECTED)

# Booking status
BOOKING_STATUS_BOOKED = "booked"
BOOKING_STATUS_COMPLETED = "completed"
BOOKING_STATUS_CANCELLED = "cancelled"
BOOKING_STATUSES = (BOOKING_STATUS_BOOKED, BOOKING_STATUS_COMPLETED, BOOKING_STATUS_CANCELLED)

CUSTOMER_GENDERS = ("Male", "Female", "Other")

# Booking numbers: "ZARVO-" followed by 8 uppercase hex characters
BOOKING_NUMBER_PREFIX = "ZARVO"
BOOKING_NUMBER_RANDOM_BYTES = 4
BOOKING_NUMBER_MAX_ATTEMPTS = 5

# Customers may cancel up to this many hours before the slot starts
CANCELLATION_CUTOFF_HOURS = 2

# Rating bounds (inclusive)
RATING_MIN_VALUE = 0
RATING_MAX_VALUE = 5

# Slot date/time string formats
SLOT_DATE_FORMAT = "%Y-%m-%d"
SLOT_TIME_FORMATS = ("%H:%M", "%H:%M:%S")

# Fixed-window rate limits (requests per window per client IP and path)
BOOKING_RATE_LIMIT_MAX_REQUESTS = 30
BOOKING_RATE_LIMIT_WINDOW_SECONDS = 10 * 60
PUBLIC_CANCEL_RATE_LIMIT_MAX_REQUESTS = 20
PUBLIC_CANCEL_RATE_LIMIT_WINDOW_SECONDS = 10 * 60

# Booking completion scheduler
BOOKING_COMPLETION_SCHEDULER_MAX_INSTANCES = 1  # Prevent overlapping scheduler runs
