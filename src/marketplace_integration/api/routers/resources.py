"""Resources router - Entrolytics websites provisioned for an installation."""

from fastapi import APIRouter, Depends, Path, Query, Response, status

from ...auth import Claims
from ...lifecycle import LifecycleManager
from ...logging_config import get_logger
from ...schemas import ProvisionedResource, ProvisionResourceRequest, Resource, ResourceList
from ..dependencies import get_claims, get_lifecycle

logger = get_logger(__name__)

router = APIRouter(prefix="/v1/installations/{installationId}/resources", tags=["resources"])


@router.get("", response_model=ResourceList, response_model_exclude_none=True)
async def list_resources(
    resource_ids: str | None = Query(None, alias="resourceIds"),
    claims: Claims = Depends(get_claims),
    lifecycle: LifecycleManager = Depends(get_lifecycle),
) -> ResourceList:
    """List resources, optionally filtered by comma-separated ``resourceIds``."""
    wanted = [r for r in resource_ids.split(",") if r] if resource_ids else None
    resources = await lifecycle.list_resources(claims.installation_id, wanted)
    return ResourceList(resources=resources)


@router.post(
    "",
    response_model=ProvisionedResource,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def provision_resource(
    body: ProvisionResourceRequest,
    claims: Claims = Depends(get_claims),
    lifecycle: LifecycleManager = Depends(get_lifecycle),
) -> ProvisionedResource:
    """Create a new Entrolytics website."""
    logger.info(
        "provision_requested",
        installation_id=claims.installation_id,
        product_id=body.product_id,
        billing_plan_id=body.billing_plan_id,
    )
    return await lifecycle.provision_resource(claims.installation_id, body)


@router.get("/{resourceId}", response_model=Resource, response_model_exclude_none=True)
async def get_resource(
    resource_id: str = Path(..., alias="resourceId"),
    claims: Claims = Depends(get_claims),
    lifecycle: LifecycleManager = Depends(get_lifecycle),
) -> Resource:
    return await lifecycle.get_resource(claims.installation_id, resource_id)


@router.delete("/{resourceId}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_resource(
    resource_id: str = Path(..., alias="resourceId"),
    claims: Claims = Depends(get_claims),
    lifecycle: LifecycleManager = Depends(get_lifecycle),
) -> Response:
    """Delete a resource and its injected environment variables."""
    logger.info(
        "delete_resource_requested",
        installation_id=claims.installation_id,
        resource_id=resource_id,
    )
    await lifecycle.delete_resource(claims.installation_id, resource_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
