"""Installations router - Vercel marketplace installation lifecycle.

The installation id is always taken from the verified token claims.
"""

from fastapi import APIRouter, Depends, Response, status

from ...auth import Claims
from ...lifecycle import LifecycleManager
from ...logging_config import get_logger
from ...plans import list_billing_plans
from ...schemas import (
    BillingPlanList,
    InstallationView,
    InstallIntegrationRequest,
    UninstallResult,
)
from ..dependencies import get_claims, get_lifecycle

logger = get_logger(__name__)

router = APIRouter(prefix="/v1/installations", tags=["installations"])


@router.put("/{installationId}", status_code=status.HTTP_201_CREATED)
async def install_integration(
    body: InstallIntegrationRequest,
    claims: Claims = Depends(get_claims),
    lifecycle: LifecycleManager = Depends(get_lifecycle),
) -> Response:
    """Called by Vercel when a user installs the integration."""
    logger.info("install_requested", installation_id=claims.installation_id)
    await lifecycle.install(claims.installation_id, body)
    return Response(status_code=status.HTTP_201_CREATED)


@router.get(
    "/{installationId}",
    response_model=InstallationView,
    response_model_exclude_none=True,
)
async def get_installation(
    claims: Claims = Depends(get_claims),
    lifecycle: LifecycleManager = Depends(get_lifecycle),
) -> InstallationView:
    """Get installation details with its billing plan."""
    return await lifecycle.get_installation(claims.installation_id)


@router.delete("/{installationId}", response_model=UninstallResult)
async def uninstall_integration(
    claims: Claims = Depends(get_claims),
    lifecycle: LifecycleManager = Depends(get_lifecycle),
) -> UninstallResult | Response:
    """Called by Vercel when a user uninstalls the integration."""
    logger.info("uninstall_requested", installation_id=claims.installation_id)
    result = await lifecycle.uninstall(claims.installation_id)
    if result is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return result


@router.get(
    "/{installationId}/plans",
    response_model=BillingPlanList,
    response_model_exclude_none=True,
)
async def list_plans(claims: Claims = Depends(get_claims)) -> BillingPlanList:
    """Billing plans available to this installation."""
    return BillingPlanList(plans=list_billing_plans())
