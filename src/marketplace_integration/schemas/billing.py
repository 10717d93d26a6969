"""Billing plan schemas.

Plans are static catalog entries. They are embedded as snapshots in
resources, so a catalog change never alters an existing resource.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .base import CamelModel


class PlanDetail(BaseModel):
    """Label/value row shown on the plan card."""

    model_config = ConfigDict(frozen=True)

    label: str
    value: str | None = None


class BillingPlan(CamelModel):
    """Billing plan offered for an installation or a resource."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Plan identifier, e.g. 'free'")
    scope: Literal["resource", "installation"]
    name: str
    cost: str = Field(..., description="Human readable cost, e.g. '$9/month'")
    description: str
    type: Literal["subscription", "prepayment"]
    payment_method_required: bool
    details: tuple[PlanDetail, ...] | None = None
    highlighted_details: tuple[PlanDetail, ...] | None = None
    max_resources: int | None = None
    effective_date: str | None = None


class BillingPlanList(BaseModel):
    plans: list[BillingPlan]
