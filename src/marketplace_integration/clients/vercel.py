"""Vercel REST API client.

Every call runs on behalf of an installation using the access token from
the credential store, scoped to the team when the installation has one.

Reference: https://vercel.com/docs/rest-api
"""

from collections.abc import Sequence
from typing import Any

import httpx

from ..errors import CredentialMissing, UpstreamCallFailed
from ..logging_config import get_logger
from ..schemas.installation import Credential
from ..schemas.vercel import (
    EnvironmentVariable,
    EnvTarget,
    StoredEnvironmentVariable,
    TokenExchangeResponse,
    UpsertResult,
    VercelAccount,
    VercelProject,
)
from ..storage.credentials import CredentialStore

logger = get_logger(__name__)


class VercelClient:
    """Client for the Vercel REST API."""

    def __init__(
        self,
        credentials: CredentialStore,
        base_url: str = "https://api.vercel.com",
        client_id: str | None = None,
        client_secret: str | None = None,
        timeout: float = 10.0,
    ):
        self.credentials = credentials
        self.base_url = base_url.rstrip("/")
        self.client_id = client_id
        self.client_secret = client_secret
        self.timeout = timeout

    async def _credential(self, installation_id: str) -> Credential:
        credential = await self.credentials.get(installation_id)
        if credential is None:
            raise CredentialMissing(installation_id)
        return credential

    @staticmethod
    def _headers(credential: Credential) -> dict[str, str]:
        return {"Authorization": f"Bearer {credential.access_token}"}

    @staticmethod
    def _params(credential: Credential) -> dict[str, str]:
        return {"teamId": credential.team_id} if credential.team_id else {}

    async def exchange_code(self, code: str, redirect_uri: str) -> TokenExchangeResponse:
        """Exchange an OAuth authorization code for an access token."""
        if not self.client_id or not self.client_secret:
            raise ValueError("Vercel client_id/client_secret not configured")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(
                    f"{self.base_url}/v2/oauth/access_token",
                    data={
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "code": code,
                        "redirect_uri": redirect_uri,
                    },
                )
        except httpx.HTTPError as e:
            logger.error("vercel_token_exchange_error", error=str(e))
            raise UpstreamCallFailed(f"Token exchange error: {e}") from e
        if not resp.is_success:
            logger.error(
                "vercel_token_exchange_failed", status_code=resp.status_code, body=resp.text
            )
            raise UpstreamCallFailed(
                f"Token exchange failed: {resp.status_code}", upstream_status=resp.status_code
            )
        return TokenExchangeResponse.model_validate(resp.json())

    async def list_projects(self, installation_id: str) -> list[VercelProject]:
        """List projects visible to the installation.

        Advisory listing: a transport error or non-success response yields [].
        """
        credential = await self._credential(installation_id)
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.get(
                    f"{self.base_url}/v9/projects",
                    headers=self._headers(credential),
                    params=self._params(credential),
                )
        except httpx.HTTPError as e:
            logger.error(
                "vercel_list_projects_error", installation_id=installation_id, error=str(e)
            )
            return []
        if not resp.is_success:
            logger.error(
                "vercel_list_projects_failed",
                installation_id=installation_id,
                status_code=resp.status_code,
                body=resp.text,
            )
            return []
        return [VercelProject.model_validate(p) for p in resp.json().get("projects", [])]

    async def get_account_info(self, installation_id: str) -> VercelAccount:
        """Get team info for team installations, user info otherwise."""
        credential = await self._credential(installation_id)
        headers = self._headers(credential)

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                if credential.team_id:
                    resp = await client.get(
                        f"{self.base_url}/v2/teams/{credential.team_id}", headers=headers
                    )
                    if resp.is_success:
                        return VercelAccount.model_validate(resp.json())
                    logger.warning(
                        "vercel_team_info_failed",
                        installation_id=installation_id,
                        team_id=credential.team_id,
                        status_code=resp.status_code,
                    )

                resp = await client.get(f"{self.base_url}/v2/user", headers=headers)
        except httpx.HTTPError as e:
            logger.error(
                "vercel_account_info_error", installation_id=installation_id, error=str(e)
            )
            raise UpstreamCallFailed(f"Account info request error: {e}") from e

        if not resp.is_success:
            raise UpstreamCallFailed(
                f"Failed to get account info: {resp.status_code}",
                upstream_status=resp.status_code,
            )
        data: dict[str, Any] = resp.json()
        # /v2/user wraps the account in {"user": {...}}
        return VercelAccount.model_validate(data.get("user", data))

    async def upsert_environment_variables(
        self,
        installation_id: str,
        project_id: str,
        variables: Sequence[EnvironmentVariable],
        targets: Sequence[EnvTarget] | None = None,
    ) -> UpsertResult:
        """Create or update project environment variables in one batch.

        Reference: https://vercel.com/docs/rest-api/reference/endpoints/projects/create-one-or-more-environment-variables
        """
        credential = await self._credential(installation_id)
        payload = []
        for variable in variables:
            item = variable.model_dump(by_alias=True, exclude_none=True)
            if targets is not None:
                item["target"] = list(targets)
            item["type"] = "encrypted"
            payload.append(item)

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(
                    f"{self.base_url}/v10/projects/{project_id}/env",
                    headers=self._headers(credential),
                    params={**self._params(credential), "upsert": "true"},
                    json=payload,
                )
        except httpx.HTTPError as e:
            raise UpstreamCallFailed(f"Environment variable upsert error: {e}") from e
        if not resp.is_success:
            logger.error(
                "vercel_create_env_failed",
                installation_id=installation_id,
                project_id=project_id,
                status_code=resp.status_code,
                body=resp.text,
            )
            raise UpstreamCallFailed(
                f"Failed to create environment variables: {resp.status_code}",
                upstream_status=resp.status_code,
            )

        data = resp.json()
        return UpsertResult(
            created=len(data.get("created") or []),
            updated=len(data.get("updated") or []),
        )

    async def list_environment_variables(
        self, installation_id: str, project_id: str
    ) -> list[StoredEnvironmentVariable]:
        """List project environment variables; any failure yields []."""
        credential = await self._credential(installation_id)
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.get(
                    f"{self.base_url}/v9/projects/{project_id}/env",
                    headers=self._headers(credential),
                    params=self._params(credential),
                )
        except httpx.HTTPError as e:
            logger.error(
                "vercel_list_env_error",
                installation_id=installation_id,
                project_id=project_id,
                error=str(e),
            )
            return []
        if not resp.is_success:
            logger.error(
                "vercel_list_env_failed",
                installation_id=installation_id,
                project_id=project_id,
                status_code=resp.status_code,
                body=resp.text,
            )
            return []
        return [StoredEnvironmentVariable.model_validate(e) for e in resp.json().get("envs", [])]

    async def delete_environment_variables(
        self, installation_id: str, project_id: str, keys: Sequence[str]
    ) -> None:
        """Delete project environment variables by key.

        Each deletion is attempted independently; failures are logged and
        do not stop the remaining deletions.
        """
        credential = await self._credential(installation_id)
        existing = await self.list_environment_variables(installation_id, project_id)
        to_delete = [env for env in existing if env.key in keys]

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            for env in to_delete:
                try:
                    resp = await client.delete(
                        f"{self.base_url}/v9/projects/{project_id}/env/{env.id}",
                        headers=self._headers(credential),
                        params=self._params(credential),
                    )
                except httpx.HTTPError as e:
                    logger.warning(
                        "vercel_delete_env_error",
                        project_id=project_id,
                        key=env.key,
                        error=str(e),
                    )
                    continue
                if not resp.is_success:
                    logger.warning(
                        "vercel_delete_env_failed",
                        project_id=project_id,
                        key=env.key,
                        status_code=resp.status_code,
                    )
