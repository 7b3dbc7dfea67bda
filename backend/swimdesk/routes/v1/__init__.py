# backend/swimdesk/routes/v1/__init__.py
"""
API v1 Routes

Versioned API endpoints under /api/v1.
"""

from . import catch_up, dashboard, health, notifications, prometheus, sessions

__all__ = [
    "catch_up",
    "dashboard",
    "health",
    "notifications",
    "prometheus",
    "sessions",
]
