"""Clients for external services."""

from .entrolytics import EntrolyticsClient, InstallationConfig
from .vercel import VercelClient

__all__ = [
    "EntrolyticsClient",
    "InstallationConfig",
    "VercelClient",
]
