"""Static billing plan catalog.

Built once at import time and never mutated.
"""

from types import MappingProxyType

from .schemas.billing import BillingPlan, PlanDetail

BILLING_PLANS: tuple[BillingPlan, ...] = (
    BillingPlan(
        id="free",
        scope="resource",
        name="Free",
        cost="Free",
        description="Basic analytics for personal projects",
        type="subscription",
        payment_method_required=False,
        details=(
            PlanDetail(label="Page views", value="10,000/month"),
            PlanDetail(label="Data retention", value="3 months"),
        ),
        highlighted_details=(
            PlanDetail(label="Websites", value="1"),
            PlanDetail(label="Real-time", value="Yes"),
        ),
        max_resources=1,
        effective_date="2024-01-01T00:00:00Z",
    ),
    BillingPlan(
        id="pro",
        scope="resource",
        name="Pro",
        cost="$9/month",
        description="Advanced analytics for growing projects",
        type="subscription",
        payment_method_required=True,
        details=(
            PlanDetail(label="Page views", value="100,000/month"),
            PlanDetail(label="Data retention", value="12 months"),
            PlanDetail(label="Custom events", value="Unlimited"),
        ),
        highlighted_details=(
            PlanDetail(label="Websites", value="10"),
            PlanDetail(label="Real-time", value="Yes"),
        ),
        effective_date="2024-01-01T00:00:00Z",
    ),
)

_PLANS_BY_ID = MappingProxyType({plan.id: plan for plan in BILLING_PLANS})


def get_billing_plan(plan_id: str) -> BillingPlan | None:
    return _PLANS_BY_ID.get(plan_id)


def list_billing_plans() -> list[BillingPlan]:
    return list(BILLING_PLANS)
