"""Integration configurations router.

Reference: https://vercel.com/docs/rest-api/vercel-api-integrations#integration-configuration
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ...auth import Claims
from ...errors import NotFound, UpstreamCallFailed
from ...lifecycle import LifecycleManager
from ...logging_config import get_logger
from ..dependencies import get_claims, get_lifecycle

logger = get_logger(__name__)

router = APIRouter(prefix="/v1/integrations", tags=["configurations"])


@router.get("/configuration/{configurationId}")
async def get_configuration(
    claims: Claims = Depends(get_claims),
    lifecycle: LifecycleManager = Depends(get_lifecycle),
) -> dict:
    """Configuration details with account info and visible projects."""
    installation = await lifecycle.get_active_installation(claims.installation_id)
    if installation is None:
        raise NotFound("Configuration not found")

    try:
        account = await lifecycle.vercel.get_account_info(claims.installation_id)
        projects = await lifecycle.vercel.list_projects(claims.installation_id)
    except UpstreamCallFailed as e:
        logger.error(
            "configuration_load_failed", installation_id=claims.installation_id, error=str(e)
        )
        return JSONResponse({"error": "Failed to load configuration"}, status_code=500)

    return {
        "id": claims.installation_id,
        "ownerId": claims.user_id,
        "teamId": claims.team_id,
        "type": installation.type.value,
        "billingPlanId": installation.billing_plan_id,
        "createdAt": installation.created_at,
        "account": {"id": account.id, "name": account.name, "email": account.email},
        "projects": [{"id": p.id, "name": p.name, "framework": p.framework} for p in projects],
    }


@router.put("/configuration/{configurationId}")
async def update_configuration(
    request: Request,
    claims: Claims = Depends(get_claims),
    lifecycle: LifecycleManager = Depends(get_lifecycle),
) -> dict:
    """Acknowledge a configuration update. Settings are not persisted."""
    if await lifecycle.get_active_installation(claims.installation_id) is None:
        raise NotFound("Configuration not found")

    try:
        body = await request.json()
    except ValueError as e:
        logger.error(
            "configuration_update_failed", installation_id=claims.installation_id, error=str(e)
        )
        return JSONResponse({"error": "Failed to update configuration"}, status_code=500)

    logger.info(
        "configuration_update_requested", installation_id=claims.installation_id, body=body
    )
    return {
        "id": claims.installation_id,
        "updated": True,
        "message": "Configuration updated successfully",
    }


@router.delete("/configuration/{configurationId}")
async def delete_configuration(
    claims: Claims = Depends(get_claims),
    lifecycle: LifecycleManager = Depends(get_lifecycle),
) -> dict:
    """Remove the configuration (uninstall)."""
    logger.info("configuration_delete_requested", installation_id=claims.installation_id)
    result = await lifecycle.uninstall(claims.installation_id)
    if result is None:
        raise NotFound("Configuration not found")
    return {"id": claims.installation_id, "deleted": True, "finalized": result.finalized}


@router.get("/configurations")
async def list_configurations(
    claims: Claims = Depends(get_claims),
    lifecycle: LifecycleManager = Depends(get_lifecycle),
) -> dict:
    """Active configurations owned by the caller's user or team."""
    configurations = []
    for installation in await lifecycle.list_installations():
        owner_id = installation.credentials.user_id
        team_id = installation.credentials.team_id
        owned = owner_id is not None and owner_id == claims.user_id
        shared = team_id is not None and team_id == claims.team_id
        if not (owned or shared):
            continue

        try:
            account = await lifecycle.vercel.get_account_info(installation.installation_id)
        except UpstreamCallFailed as e:
            logger.error(
                "configuration_account_info_failed",
                installation_id=installation.installation_id,
                error=str(e),
            )
            continue

        configurations.append(
            {
                "id": installation.installation_id,
                "ownerId": owner_id,
                "teamId": team_id,
                "type": installation.type.value,
                "billingPlanId": installation.billing_plan_id,
                "account": {"id": account.id, "name": account.name},
            }
        )

    return {"configurations": configurations, "total": len(configurations)}
