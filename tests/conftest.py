from collections.abc import Callable

from fakeredis import FakeAsyncRedis
import pytest

from marketplace_integration.config import Settings
from marketplace_integration.lifecycle import LifecycleManager
from marketplace_integration.schemas import (
    InstallIntegrationRequest,
    ProvisionResourceRequest,
)
from marketplace_integration.storage import (
    CredentialStore,
    InstallationStore,
    ResourceStore,
    WebhookEventLog,
)
from marketplace_integration.webhooks import WebhookProcessor

CLIENT_SECRET = "test-client-secret-0123456789abcdef"  # noqa: S105
ENTROLYTICS_SECRET = "entrolytics-integration-secret"  # noqa: S105
VERCEL_URL = "https://api.vercel.test"
ENTROLYTICS_URL = "https://analytics.test"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        integration_client_id="oac_test",
        integration_client_secret=CLIENT_SECRET,
        entrolytics_integration_secret=ENTROLYTICS_SECRET,
        redis_url="redis://localhost:6379/0",
        vercel_api_url=VERCEL_URL,
        entrolytics_api_url=ENTROLYTICS_URL,
    )


@pytest.fixture
def fake_redis():
    return FakeAsyncRedis(decode_responses=True)


@pytest.fixture
def credential_store(fake_redis) -> CredentialStore:
    return CredentialStore(fake_redis)


@pytest.fixture
def installation_store(fake_redis) -> InstallationStore:
    return InstallationStore(fake_redis)


@pytest.fixture
def resource_store(fake_redis) -> ResourceStore:
    return ResourceStore(fake_redis)


@pytest.fixture
def event_log(fake_redis) -> WebhookEventLog:
    return WebhookEventLog(fake_redis)


@pytest.fixture
def lifecycle(fake_redis, settings) -> LifecycleManager:
    return LifecycleManager.from_settings(fake_redis, settings)


@pytest.fixture
def processor(fake_redis, settings, lifecycle) -> WebhookProcessor:
    return WebhookProcessor.from_settings(fake_redis, settings, lifecycle=lifecycle)


@pytest.fixture
def install_request() -> Callable[..., InstallIntegrationRequest]:
    def _make(
        token: str = "t1",
        billing_plan_id: str | None = None,
        user_id: str | None = "user_1",
        team_id: str | None = None,
    ) -> InstallIntegrationRequest:
        return InstallIntegrationRequest.model_validate(
            {
                "credentials": {
                    "access_token": token,
                    "token_type": "Bearer",
                    "user_id": user_id,
                    "team_id": team_id,
                },
                "acceptedPolicies": [{"id": "toc", "acceptedAt": "2024-05-01T00:00:00Z"}],
                "billingPlanId": billing_plan_id,
            }
        )

    return _make


@pytest.fixture
def provision_request() -> Callable[..., ProvisionResourceRequest]:
    def _make(
        name: str = "Site A",
        billing_plan_id: str = "free",
        project_id: str | None = None,
        domain: str | None = None,
    ) -> ProvisionResourceRequest:
        metadata = {}
        if project_id:
            metadata["projectId"] = project_id
        if domain:
            metadata["domain"] = domain
        return ProvisionResourceRequest.model_validate(
            {
                "productId": "p",
                "name": name,
                "billingPlanId": billing_plan_id,
                "metadata": metadata or None,
            }
        )

    return _make
