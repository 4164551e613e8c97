"""Aggregate import for all API route modules."""

from . import (
    auth,
    users,
    admin,
    children,
    screening,
    goals,
    gamification,
    settings,
)

__all__ = [
    "auth",
    "users",
    "admin",
    "children",
    "screening",
    "goals",
    "gamification",
    "settings",
]
