"""Entrolytics analytics backend client.

Authenticated with the integration-level secret, not the per-installation
Vercel token.
"""

import httpx
from pydantic import BaseModel

from ..errors import UpstreamCallFailed
from ..logging_config import get_logger
from ..schemas.webhook import DeploymentRecord

logger = get_logger(__name__)


class InstallationConfig(BaseModel):
    """Where to send deployment tracking for a Vercel project."""

    website_id: str
    api_key: str
    host: str


class EntrolyticsClient:
    """Client for the Entrolytics website and deployment APIs."""

    def __init__(self, base_url: str, integration_secret: str, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.integration_secret = integration_secret
        self.timeout = timeout

    def _headers(self, api_key: str | None = None) -> dict[str, str]:
        return {"Authorization": f"Bearer {api_key or self.integration_secret}"}

    async def create_website(
        self, installation_id: str, name: str, domain: str | None = None
    ) -> str:
        """Create a website and return its id.

        Raises:
            UpstreamCallFailed: On transport errors or non-success responses.
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(
                    f"{self.base_url}/api/websites",
                    headers=self._headers(),
                    json={"name": name, "domain": domain or name, "shareId": None},
                )
        except httpx.HTTPError as e:
            raise UpstreamCallFailed(f"Entrolytics website creation error: {e}") from e

        if not resp.is_success:
            raise UpstreamCallFailed(
                f"Failed to create Entrolytics website: {resp.status_code} {resp.text}",
                upstream_status=resp.status_code,
            )

        data = resp.json()
        website_id = data.get("websiteId") or data.get("id")
        if not website_id:
            raise UpstreamCallFailed("Entrolytics website response has no id")
        logger.info(
            "entrolytics_website_created", installation_id=installation_id, website_id=website_id
        )
        return website_id

    async def track_deployment(self, config: InstallationConfig, record: DeploymentRecord) -> None:
        """Push a deployment record for a tracked website.

        Raises:
            UpstreamCallFailed: On transport errors or non-success responses.
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(
                    f"{config.host.rstrip('/')}/api/websites/{config.website_id}/deployments",
                    headers={
                        **self._headers(config.api_key),
                        "Content-Type": "application/json",
                    },
                    content=record.to_json(),
                )
        except httpx.HTTPError as e:
            raise UpstreamCallFailed(f"Entrolytics deployment tracking error: {e}") from e

        if not resp.is_success:
            raise UpstreamCallFailed(
                f"Failed to track deployment: {resp.status_code} {resp.text}",
                upstream_status=resp.status_code,
            )
        logger.info(
            "deployment_tracked", website_id=config.website_id, deploy_id=record.deploy_id
        )
