"""Resource schemas.

A resource is one Entrolytics website provisioned for an installation.
"""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .base import CamelModel
from .billing import BillingPlan


class ResourceStatus(str, Enum):
    READY = "ready"
    PENDING = "pending"
    ERROR = "error"
    SUSPENDED = "suspended"


class ResourceMetadata(CamelModel):
    """Resource metadata.

    ``website_id`` identifies the website in Entrolytics; ``project_id``
    links the resource to the Vercel project receiving environment variables.
    """

    model_config = ConfigDict(extra="allow")

    website_id: str | None = None
    project_id: str | None = None
    domain: str | None = None


class NotificationAction(BaseModel):
    label: str
    url: str


class ResourceNotification(BaseModel):
    """User-facing advisory shown next to the resource in the dashboard."""

    level: Literal["info", "warning", "error"]
    message: str
    action: NotificationAction | None = None


class Resource(CamelModel):
    id: str
    status: ResourceStatus
    name: str
    product_id: str
    billing_plan: BillingPlan = Field(..., description="Plan snapshot taken at creation")
    metadata: ResourceMetadata | None = None
    notification: ResourceNotification | None = None


class ProvisionResourceRequest(CamelModel):
    """Body of ``POST /v1/installations/{installationId}/resources``."""

    product_id: str
    name: str
    metadata: ResourceMetadata | None = None
    billing_plan_id: str


class Secret(BaseModel):
    name: str
    value: str


class ProvisionedResource(Resource):
    """Freshly provisioned resource together with its dashboard secrets."""

    secrets: list[Secret]


class ResourceList(BaseModel):
    resources: list[Resource]
