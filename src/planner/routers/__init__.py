"""Router package exports."""

from . import dashboard, health, plan, practice, review, timer

__all__ = [
    "dashboard",
    "health",
    "plan",
    "practice",
    "review",
    "timer",
]
