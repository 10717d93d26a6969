"""Installation and resource lifecycle.

Per installation: non-existent -> active (install) -> deleted (uninstall),
and deleted -> active again on re-install. Both the authenticated API and
the webhook pipeline drive these same operations.

Failure policy: anything that would leave an installation or resource record
in a state the caller did not ask for raises. Derived side effects
(environment variable sync, credential cleanup) are logged and swallowed.

Known gaps:
- Uninstall does not cascade to resources; they stay orphaned under the
  deleted installation together with their injected environment variables.
- Uninstall racing a provision is last-writer-wins; a resource can be created
  for an installation deleted moments later.
"""

from collections.abc import Collection
import uuid

from redis.asyncio import Redis

from .clients.entrolytics import EntrolyticsClient, InstallationConfig
from .clients.vercel import VercelClient
from .config import Settings
from .errors import NotFound, UnknownBillingPlan
from .logging_config import get_logger
from .plans import get_billing_plan
from .schemas.installation import (
    Credential,
    Installation,
    InstallationType,
    InstallationView,
    InstallIntegrationRequest,
    UninstallResult,
)
from .schemas.resource import (
    ProvisionedResource,
    ProvisionResourceRequest,
    Resource,
    ResourceMetadata,
    ResourceStatus,
    Secret,
)
from .schemas.vercel import EnvironmentVariable
from .storage.credentials import CredentialStore
from .storage.installations import InstallationStore, now_ms
from .storage.resources import ResourceStore

logger = get_logger(__name__)

ENV_WEBSITE_ID = "NEXT_PUBLIC_ENTROLYTICS_NG_WEBSITE_ID"
ENV_HOST = "NEXT_PUBLIC_ENTROLYTICS_HOST"
ENV_ENDPOINT = "NEXT_PUBLIC_ENTROLYTICS_ENDPOINT"
TRACKING_ENDPOINT = "/api/send-native"

RESOURCE_ENV_KEYS = (ENV_WEBSITE_ID, ENV_HOST, ENV_ENDPOINT)


def generate_id() -> str:
    return uuid.uuid4().hex


class LifecycleManager:
    """Orchestrates install, uninstall, provision and deprovision."""

    def __init__(
        self,
        credentials: CredentialStore,
        installations: InstallationStore,
        resources: ResourceStore,
        vercel: VercelClient,
        entrolytics: EntrolyticsClient,
        analytics_host: str,
    ):
        self.credentials = credentials
        self.installations = installations
        self.resources = resources
        self.vercel = vercel
        self.entrolytics = entrolytics
        self.analytics_host = analytics_host

    @classmethod
    def from_settings(cls, redis: Redis, settings: Settings) -> "LifecycleManager":
        credentials = CredentialStore(redis)
        return cls(
            credentials=credentials,
            installations=InstallationStore(redis),
            resources=ResourceStore(redis),
            vercel=VercelClient(
                credentials,
                base_url=settings.vercel_api_url,
                client_id=settings.integration_client_id,
                client_secret=settings.integration_client_secret,
                timeout=settings.http_timeout,
            ),
            entrolytics=EntrolyticsClient(
                settings.entrolytics_api_url,
                settings.entrolytics_integration_secret,
                timeout=settings.http_timeout,
            ),
            analytics_host=settings.entrolytics_api_url,
        )

    # === Installations ===

    async def install(
        self,
        installation_id: str,
        request: InstallIntegrationRequest,
        installation_type: InstallationType = InstallationType.MARKETPLACE,
    ) -> Installation:
        """Create or overwrite the installation and store its credential."""
        creds = request.credentials
        await self.credentials.store(
            installation_id,
            Credential(
                access_token=creds.access_token,
                installation_id=installation_id,
                user_id=creds.user_id,
                team_id=creds.team_id,
            ),
        )

        installation = Installation(
            installation_id=installation_id,
            credentials=creds,
            billing_plan_id=request.billing_plan_id or "free",
            type=installation_type,
            accepted_policies=request.accepted_policies or [],
            created_at=now_ms(),
        )
        await self.installations.put(installation)
        logger.info(
            "installation_installed",
            installation_id=installation_id,
            billing_plan_id=installation.billing_plan_id,
            type=installation.type.value,
        )
        return installation

    async def get_active_installation(self, installation_id: str) -> Installation | None:
        installation = await self.installations.get(installation_id)
        if installation is None or installation.is_deleted:
            return None
        return installation

    async def get_installation(self, installation_id: str) -> InstallationView:
        """Return the installation view with its billing plan scoped to the installation.

        Raises:
            NotFound: If the installation is absent or deleted.
        """
        installation = await self.get_active_installation(installation_id)
        if installation is None:
            raise NotFound("Installation not found")

        plan = get_billing_plan(installation.billing_plan_id)
        return InstallationView(
            billing_plan=plan.model_copy(update={"scope": "installation"}) if plan else None
        )

    async def list_installations(self) -> list[Installation]:
        """Active installations, most recently installed first."""
        installations = []
        for installation_id in await self.installations.list_ids():
            installation = await self.get_active_installation(installation_id)
            if installation is not None:
                installations.append(installation)
        return installations

    async def uninstall(self, installation_id: str) -> UninstallResult | None:
        """Soft-delete the installation.

        Returns None when the installation is absent or already deleted.
        """
        installation = await self.get_active_installation(installation_id)
        if installation is None:
            logger.info("uninstall_already_handled", installation_id=installation_id)
            return None

        try:
            await self.credentials.delete(installation_id)
            logger.info("access_token_deleted", installation_id=installation_id)
        except Exception as e:
            logger.error(
                "access_token_delete_failed", installation_id=installation_id, error=str(e)
            )

        await self.installations.mark_deleted(installation)

        plan = get_billing_plan(installation.billing_plan_id)
        finalized = plan is not None and plan.payment_method_required is False
        logger.info(
            "installation_uninstalled", installation_id=installation_id, finalized=finalized
        )
        return UninstallResult(finalized=finalized)

    # === Resources ===

    def _secrets(self, website_id: str) -> list[Secret]:
        return [
            Secret(name=ENV_WEBSITE_ID, value=website_id),
            Secret(name=ENV_HOST, value=self.analytics_host),
            Secret(name=ENV_ENDPOINT, value=TRACKING_ENDPOINT),
        ]

    async def _create_website(self, installation_id: str, name: str, domain: str | None) -> str:
        try:
            return await self.entrolytics.create_website(installation_id, name, domain)
        except Exception as e:
            website_id = generate_id()
            logger.error(
                "entrolytics_website_create_failed",
                installation_id=installation_id,
                error=str(e),
                fallback_website_id=website_id,
            )
            return website_id

    async def provision_resource(
        self, installation_id: str, request: ProvisionResourceRequest
    ) -> ProvisionedResource:
        """Create an Entrolytics website and store it as a resource.

        Environment variable injection into ``metadata.project_id`` is best
        effort; the returned secrets are the same whether it succeeds or not.

        Raises:
            UnknownBillingPlan: If the plan is not in the catalog. Nothing is written.
        """
        billing_plan = get_billing_plan(request.billing_plan_id)
        if billing_plan is None:
            raise UnknownBillingPlan(request.billing_plan_id)

        requested = request.metadata or ResourceMetadata()
        website_id = await self._create_website(installation_id, request.name, requested.domain)

        resource = Resource(
            id=generate_id(),
            status=ResourceStatus.READY,
            name=request.name,
            product_id=request.product_id,
            billing_plan=billing_plan,
            metadata=requested.model_copy(update={"website_id": website_id}),
        )
        await self.resources.put(installation_id, resource)
        logger.info(
            "resource_provisioned",
            installation_id=installation_id,
            resource_id=resource.id,
            website_id=website_id,
        )

        secrets = self._secrets(website_id)
        if requested.project_id:
            await self._inject_environment(installation_id, requested.project_id, secrets)

        return ProvisionedResource(**resource.model_dump(), secrets=secrets)

    async def _inject_environment(
        self, installation_id: str, project_id: str, secrets: list[Secret]
    ) -> None:
        try:
            await self.vercel.upsert_environment_variables(
                installation_id,
                project_id,
                [EnvironmentVariable(key=s.name, value=s.value) for s in secrets],
            )
            logger.info(
                "environment_variables_injected",
                installation_id=installation_id,
                project_id=project_id,
            )
        except Exception as e:
            logger.error(
                "environment_variables_inject_failed",
                installation_id=installation_id,
                project_id=project_id,
                error=str(e),
            )

    async def get_resource(self, installation_id: str, resource_id: str) -> Resource:
        resource = await self.resources.get(installation_id, resource_id)
        if resource is None:
            raise NotFound("Resource not found")
        return resource

    async def delete_resource(self, installation_id: str, resource_id: str) -> None:
        """Remove a resource and, best effort, its project environment variables."""
        resource = await self.resources.get(installation_id, resource_id)
        project_id = resource.metadata.project_id if resource and resource.metadata else None

        if project_id:
            try:
                await self.vercel.delete_environment_variables(
                    installation_id, project_id, RESOURCE_ENV_KEYS
                )
                logger.info(
                    "environment_variables_removed",
                    installation_id=installation_id,
                    project_id=project_id,
                )
            except Exception as e:
                logger.error(
                    "environment_variables_remove_failed",
                    installation_id=installation_id,
                    project_id=project_id,
                    error=str(e),
                )

        await self.resources.delete(installation_id, resource_id)
        logger.info("resource_deleted", installation_id=installation_id, resource_id=resource_id)

    async def list_resources(
        self, installation_id: str, resource_ids: Collection[str] | None = None
    ) -> list[Resource]:
        resources = await self.resources.list(installation_id)
        if resource_ids:
            return [r for r in resources if r.id in resource_ids]
        return resources

    async def get_installation_config(self, project_id: str | None) -> InstallationConfig | None:
        """Resolve deployment tracking settings for a Vercel project.

        Takes the most recently provisioned resource linked to the project whose
        installation is still active and has a website.
        """
        if not project_id:
            return None

        for installation_id, resource in await self.resources.find_by_project(project_id):
            if not resource.metadata.website_id:
                continue
            if await self.get_active_installation(installation_id) is None:
                continue
            return InstallationConfig(
                website_id=resource.metadata.website_id,
                api_key=self.entrolytics.integration_secret,
                host=self.analytics_host,
            )
        return None
