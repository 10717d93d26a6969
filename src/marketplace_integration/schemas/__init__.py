"""Pydantic schemas for installations, resources, webhooks and Vercel payloads."""

from .billing import BillingPlan, BillingPlanList, PlanDetail
from .installation import (
    AcceptedPolicy,
    Credential,
    Installation,
    InstallationCredentials,
    InstallationType,
    InstallationView,
    InstallIntegrationRequest,
    UninstallResult,
)
from .resource import (
    ProvisionedResource,
    ProvisionResourceRequest,
    Resource,
    ResourceList,
    ResourceMetadata,
    ResourceNotification,
    ResourceStatus,
    Secret,
)
from .vercel import (
    EnvironmentVariable,
    StoredEnvironmentVariable,
    TokenExchangeResponse,
    UpsertResult,
    VercelAccount,
    VercelProject,
)
from .webhook import (
    DeploymentCreatedEvent,
    DeploymentRecord,
    UnknownWebhookEvent,
    WebhookEvent,
    parse_webhook_event,
)

__all__ = [
    "AcceptedPolicy",
    "BillingPlan",
    "BillingPlanList",
    "Credential",
    "DeploymentCreatedEvent",
    "DeploymentRecord",
    "EnvironmentVariable",
    "InstallIntegrationRequest",
    "Installation",
    "InstallationCredentials",
    "InstallationType",
    "InstallationView",
    "PlanDetail",
    "ProvisionResourceRequest",
    "ProvisionedResource",
    "Resource",
    "ResourceList",
    "ResourceMetadata",
    "ResourceNotification",
    "ResourceStatus",
    "Secret",
    "StoredEnvironmentVariable",
    "TokenExchangeResponse",
    "UninstallResult",
    "UnknownWebhookEvent",
    "UpsertResult",
    "VercelAccount",
    "VercelProject",
    "WebhookEvent",
    "parse_webhook_event",
]
