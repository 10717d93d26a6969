"""Installation schemas.

An installation binds one Vercel account (personal or team) to the product.
Records are soft-deleted: ``deleted_at`` marks them absent for every read.
"""

from enum import Enum

from pydantic import BaseModel, Field

from .base import CamelModel
from .billing import BillingPlan


class InstallationType(str, Enum):
    """Where the installation originated."""

    MARKETPLACE = "marketplace"
    EXTERNAL = "external"


class InstallationCredentials(BaseModel):
    """OAuth credentials delivered with the install request (snake_case on the wire)."""

    access_token: str
    refresh_token: str | None = None
    token_type: str
    installation_id: str | None = None
    user_id: str | None = None
    team_id: str | None = None


class Credential(BaseModel):
    """Access token and scope stored under ``token:{installationId}``."""

    access_token: str
    installation_id: str
    user_id: str | None = None
    team_id: str | None = None


class AcceptedPolicy(CamelModel):
    id: str
    accepted_at: str


class InstallIntegrationRequest(CamelModel):
    """Body of ``PUT /v1/installations/{installationId}``."""

    credentials: InstallationCredentials
    accepted_policies: list[AcceptedPolicy] | None = None
    billing_plan_id: str | None = None


class Installation(CamelModel):
    """Stored installation record, keyed by the installation id."""

    installation_id: str
    credentials: InstallationCredentials
    billing_plan_id: str = "free"
    type: InstallationType = InstallationType.MARKETPLACE
    accepted_policies: list[AcceptedPolicy] = Field(default_factory=list)
    created_at: int = Field(..., description="Epoch milliseconds")
    deleted_at: int | None = Field(None, description="Epoch milliseconds; set on uninstall")

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


class InstallationView(CamelModel):
    """Installation as returned to Vercel, with the resolved plan attached."""

    billing_plan: BillingPlan | None = None


class UninstallResult(BaseModel):
    """Outcome of a successful uninstall.

    ``finalized`` is true when the plan needs no payment settlement.
    """

    finalized: bool
