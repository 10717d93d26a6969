"""Redis-backed stores."""

from .client import RedisClient
from .credentials import CredentialStore
from .events import MAX_WEBHOOK_EVENTS, WebhookEventLog
from .installations import InstallationStore
from .resources import ResourceStore

__all__ = [
    "MAX_WEBHOOK_EVENTS",
    "CredentialStore",
    "InstallationStore",
    "RedisClient",
    "ResourceStore",
    "WebhookEventLog",
]
