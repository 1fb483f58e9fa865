"""API v1 Route modules."""

from backend.routers.v1 import admin, bookings, payroll, quotes, shifts

__all__ = ["admin", "bookings", "payroll", "quotes", "shifts"]
