"""Vercel webhook ingestion.

Deliveries are authenticated by an HMAC-SHA1 hex digest of the raw body
(``x-vercel-signature``) keyed by the integration client secret. After
authentication the sender always gets 200: parse, classification, storage
and dispatch failures are logged, never surfaced, so Vercel only retries on
transport or signature failures.
"""

from collections.abc import Awaitable, Callable
import hashlib
import hmac
import json
from typing import Any

from pydantic import ValidationError
from redis.asyncio import Redis

from .clients.entrolytics import EntrolyticsClient
from .config import Settings
from .errors import InvalidSignature
from .lifecycle import LifecycleManager
from .logging_config import get_logger
from .schemas.webhook import (
    ConfigurationRemovedEvent,
    DeploymentCreatedEvent,
    DeploymentPayload,
    DeploymentRecord,
    DeploymentSucceededEvent,
    ProjectCreatedEvent,
    ProjectRemovedEvent,
    ScopeChangeConfirmedEvent,
    UnknownWebhookEvent,
    WebhookEvent,
    parse_webhook_event,
)
from .storage.events import WebhookEventLog

logger = get_logger(__name__)

SIGNATURE_HEADER = "x-vercel-signature"


def compute_signature(body: bytes, secret: str) -> str:
    return hmac.new(secret.encode(), body, hashlib.sha1).hexdigest()


def verify_signature(body: bytes, signature: str | None, secret: str) -> None:
    """Raise InvalidSignature unless ``signature`` matches the body digest."""
    expected = compute_signature(body, secret)
    if signature is None or not hmac.compare_digest(expected, signature):
        raise InvalidSignature()


class WebhookProcessor:
    """Authenticates, records and dispatches webhook deliveries."""

    def __init__(
        self,
        secret: str,
        lifecycle: LifecycleManager,
        events: WebhookEventLog,
        entrolytics: EntrolyticsClient,
    ):
        self.secret = secret
        self.lifecycle = lifecycle
        self.events = events
        self.entrolytics = entrolytics
        self._handlers: dict[str, Callable[[Any], Awaitable[None]]] = {
            "integration-configuration.removed": self._on_configuration_removed,
            "integration-configuration.scope-change-confirmed": self._on_scope_change_confirmed,
            "project.created": self._on_project_created,
            "project.removed": self._on_project_removed,
            "deployment.created": self._on_deployment_created,
            "deployment.succeeded": self._on_deployment_succeeded,
        }

    @classmethod
    def from_settings(
        cls, redis: Redis, settings: Settings, lifecycle: LifecycleManager | None = None
    ) -> "WebhookProcessor":
        lifecycle = lifecycle or LifecycleManager.from_settings(redis, settings)
        return cls(
            secret=settings.integration_client_secret,
            lifecycle=lifecycle,
            events=WebhookEventLog(redis),
            entrolytics=lifecycle.entrolytics,
        )

    async def handle(self, body: bytes, signature: str | None) -> None:
        """Process one delivery.

        Raises:
            InvalidSignature: If the signature does not match. The body is not parsed.
        """
        try:
            verify_signature(body, signature, self.secret)
        except InvalidSignature:
            logger.error("webhook_invalid_signature")
            raise

        try:
            data = json.loads(body)
        except ValueError as e:
            logger.error("webhook_json_parse_failed", error=str(e))
            return

        try:
            event = parse_webhook_event(data)
        except ValidationError:
            logger.info("webhook_unknown_event", event_type=_event_type(data))
            await self._store_unknown(data)
            return

        logger.info(
            "webhook_event_received",
            event_id=event.id,
            event_type=event.type,
            created_at=event.created_at,
        )

        try:
            await self.events.append(event)
        except Exception as e:
            logger.error("webhook_event_store_failed", event_id=event.id, error=str(e))

        await self.dispatch(event)

    async def dispatch(self, event: WebhookEvent) -> None:
        handler = self._handlers.get(event.type)
        if handler is None:
            return
        try:
            await handler(event)
        except Exception as e:
            logger.error(
                "webhook_handler_failed",
                event_id=event.id,
                event_type=event.type,
                error=str(e),
                exc_info=True,
            )

    async def _store_unknown(self, data: Any) -> None:
        try:
            await self.events.append(UnknownWebhookEvent.model_validate(data))
        except Exception as e:
            logger.error("webhook_unknown_event_store_failed", error=str(e))

    async def _on_configuration_removed(self, event: ConfigurationRemovedEvent) -> None:
        await self.lifecycle.uninstall(event.payload.configuration.id)

    async def _on_scope_change_confirmed(self, event: ScopeChangeConfirmedEvent) -> None:
        configuration = event.payload.configuration
        logger.info(
            "webhook_scope_change_confirmed",
            configuration_id=configuration.id if configuration else None,
        )

    async def _on_project_created(self, event: ProjectCreatedEvent) -> None:
        project = event.payload.project
        logger.info(
            "webhook_project_created",
            project_id=project.id if project else None,
            project_name=project.name if project else None,
        )

    async def _on_project_removed(self, event: ProjectRemovedEvent) -> None:
        # Resources linked to the project are left in place.
        project = event.payload.project
        logger.info("webhook_project_removed", project_id=project.id if project else None)

    async def _on_deployment_succeeded(self, event: DeploymentSucceededEvent) -> None:
        logger.info("webhook_deployment_succeeded", deployment_id=event.payload.deployment.id)

    async def _on_deployment_created(self, event: DeploymentCreatedEvent) -> None:
        logger.info("webhook_deployment_created", deployment_id=event.payload.deployment.id)
        await self.track_deployment(event.payload)

    async def track_deployment(self, payload: DeploymentPayload) -> None:
        """Forward a deployment to Entrolytics if the project has a tracked website."""
        project_id = payload.project.id if payload.project else None
        config = await self.lifecycle.get_installation_config(project_id)
        if config is None or not config.website_id or not config.api_key:
            logger.info("deployment_tracking_not_configured", project_id=project_id)
            return

        deployment = payload.deployment
        meta = deployment.meta
        record = DeploymentRecord(
            website=config.website_id,
            deploy_id=deployment.id,
            git_sha=meta.github_commit_sha if meta else None,
            git_branch=meta.github_commit_ref if meta else None,
            deploy_url=f"https://{deployment.url}" if deployment.url else None,
        )
        try:
            await self.entrolytics.track_deployment(config, record)
        except Exception as e:
            logger.error("deployment_tracking_failed", deploy_id=deployment.id, error=str(e))


def _event_type(data: Any) -> Any:
    return data.get("type") if isinstance(data, dict) else None
