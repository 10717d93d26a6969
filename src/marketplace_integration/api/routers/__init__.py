"""Routers package."""

from . import callback, configurations, health, installations, resources, webhook

__all__ = [
    "callback",
    "configurations",
    "health",
    "installations",
    "resources",
    "webhook",
]
