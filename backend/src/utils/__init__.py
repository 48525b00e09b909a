"""
Utility modules for the booking backend.

This package contains shared helpers used across the application:
timezone handling, best-effort side effects and rate limiting.
"""
