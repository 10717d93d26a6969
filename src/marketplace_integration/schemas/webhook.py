"""Vercel webhook event schemas.

Known events form a union discriminated on ``type``. Anything that only
matches the outer envelope is an ``UnknownWebhookEvent``.

Vercel docs: https://vercel.com/docs/webhooks/webhooks-api
"""

from typing import Annotated, Any, Literal

from pydantic import ConfigDict, Field, TypeAdapter

from .base import CamelModel


class WebhookModel(CamelModel):
    # Vercel adds fields over time; keep them for the audit trail.
    model_config = ConfigDict(extra="allow")


class ConfigurationRef(WebhookModel):
    id: str


class ProjectRef(WebhookModel):
    id: str
    name: str | None = None


class DeploymentMeta(WebhookModel):
    github_commit_sha: str | None = None
    github_commit_ref: str | None = None


class Deployment(WebhookModel):
    id: str
    name: str | None = None
    url: str | None = None
    meta: DeploymentMeta | None = None


class ConfigurationRemovedPayload(WebhookModel):
    configuration: ConfigurationRef


class ScopeChangePayload(WebhookModel):
    configuration: ConfigurationRef | None = None


class ProjectPayload(WebhookModel):
    project: ProjectRef | None = None


class DeploymentPayload(WebhookModel):
    deployment: Deployment
    project: ProjectRef | None = None
    installation_ids: list[str] | None = None


class WebhookEventBase(WebhookModel):
    id: str
    created_at: int = Field(..., description="Epoch milliseconds")


class ConfigurationRemovedEvent(WebhookEventBase):
    type: Literal["integration-configuration.removed"]
    payload: ConfigurationRemovedPayload


class ScopeChangeConfirmedEvent(WebhookEventBase):
    type: Literal["integration-configuration.scope-change-confirmed"]
    payload: ScopeChangePayload


class ProjectCreatedEvent(WebhookEventBase):
    type: Literal["project.created"]
    payload: ProjectPayload


class ProjectRemovedEvent(WebhookEventBase):
    type: Literal["project.removed"]
    payload: ProjectPayload


class DeploymentCreatedEvent(WebhookEventBase):
    type: Literal["deployment.created"]
    payload: DeploymentPayload


class DeploymentSucceededEvent(WebhookEventBase):
    type: Literal["deployment.succeeded"]
    payload: DeploymentPayload


WebhookEvent = Annotated[
    ConfigurationRemovedEvent
    | ScopeChangeConfirmedEvent
    | ProjectCreatedEvent
    | ProjectRemovedEvent
    | DeploymentCreatedEvent
    | DeploymentSucceededEvent,
    Field(discriminator="type"),
]


class UnknownWebhookEvent(WebhookEventBase):
    type: str
    payload: Any = None


class DeploymentRecord(CamelModel):
    """Deployment pushed to Entrolytics for a tracked website."""

    website: str
    deploy_id: str
    git_sha: str | None = None
    git_branch: str | None = None
    deploy_url: str | None = None
    source: str = "vercel"


_webhook_event_adapter: TypeAdapter[WebhookEvent] = TypeAdapter(WebhookEvent)


def parse_webhook_event(data: Any) -> WebhookEvent:
    """Classify a decoded webhook body into a known event.

    Raises:
        pydantic.ValidationError: If the body is not a recognized event.
    """
    return _webhook_event_adapter.validate_python(data)
