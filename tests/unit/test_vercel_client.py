import json

import httpx
import pytest
import respx

from marketplace_integration.clients import VercelClient
from marketplace_integration.errors import CredentialMissing, UpstreamCallFailed
from marketplace_integration.schemas import Credential, EnvironmentVariable


@pytest.fixture
def client(credential_store, settings) -> VercelClient:
    return VercelClient(
        credential_store,
        base_url=settings.vercel_api_url,
        client_id=settings.integration_client_id,
        client_secret=settings.integration_client_secret,
    )


@pytest.fixture
async def personal_token(credential_store):
    await credential_store.store(
        "inst_1", Credential(access_token="t1", installation_id="inst_1", user_id="user_1")
    )


@pytest.fixture
async def team_token(credential_store):
    await credential_store.store(
        "inst_1",
        Credential(access_token="t1", installation_id="inst_1", team_id="team_1"),
    )


@pytest.mark.asyncio
async def test_missing_credential_makes_no_request(client, settings):
    async with respx.mock(base_url=settings.vercel_api_url, assert_all_called=False) as mock:
        route = mock.get("/v9/projects")

        with pytest.raises(CredentialMissing):
            await client.list_projects("inst_1")

        assert not route.called


@pytest.mark.asyncio
async def test_list_projects_scoped_to_team(client, settings, team_token):
    async with respx.mock(base_url=settings.vercel_api_url) as mock:
        route = mock.get("/v9/projects").mock(
            return_value=httpx.Response(
                httpx.codes.OK,
                json={"projects": [{"id": "proj_1", "name": "web", "framework": "nextjs"}]},
            )
        )

        projects = await client.list_projects("inst_1")

        assert [p.id for p in projects] == ["proj_1"]
        request = route.calls.last.request
        assert request.url.params["teamId"] == "team_1"
        assert request.headers["Authorization"] == "Bearer t1"


@pytest.mark.asyncio
async def test_list_projects_fails_open(client, settings, personal_token):
    async with respx.mock(base_url=settings.vercel_api_url) as mock:
        route = mock.get("/v9/projects").mock(
            return_value=httpx.Response(httpx.codes.INTERNAL_SERVER_ERROR, text="boom")
        )

        assert await client.list_projects("inst_1") == []
        assert "teamId" not in route.calls.last.request.url.params


@pytest.mark.asyncio
async def test_account_info_uses_team_endpoint(client, settings, team_token):
    async with respx.mock(base_url=settings.vercel_api_url, assert_all_called=False) as mock:
        team = mock.get("/v2/teams/team_1").mock(
            return_value=httpx.Response(httpx.codes.OK, json={"id": "team_1", "name": "Acme"})
        )
        user = mock.get("/v2/user")

        account = await client.get_account_info("inst_1")

        assert account.id == "team_1"
        assert account.name == "Acme"
        assert team.called
        assert not user.called


@pytest.mark.asyncio
async def test_account_info_uses_user_endpoint(client, settings, personal_token):
    async with respx.mock(base_url=settings.vercel_api_url) as mock:
        mock.get("/v2/user").mock(
            return_value=httpx.Response(
                httpx.codes.OK,
                json={"user": {"id": "user_1", "email": "dev@example.com", "name": "Dev"}},
            )
        )

        account = await client.get_account_info("inst_1")

        assert account.id == "user_1"
        assert account.email == "dev@example.com"


@pytest.mark.asyncio
async def test_account_info_fails_hard(client, settings, personal_token):
    async with respx.mock(base_url=settings.vercel_api_url) as mock:
        mock.get("/v2/user").mock(return_value=httpx.Response(httpx.codes.FORBIDDEN))

        with pytest.raises(UpstreamCallFailed) as exc_info:
            await client.get_account_info("inst_1")

        assert exc_info.value.upstream_status == httpx.codes.FORBIDDEN


@pytest.mark.asyncio
async def test_upsert_sends_single_encrypted_batch(client, settings, team_token):
    async with respx.mock(base_url=settings.vercel_api_url) as mock:
        route = mock.post("/v10/projects/proj_1/env").mock(
            return_value=httpx.Response(
                httpx.codes.CREATED, json={"created": [{"key": "A"}, {"key": "B"}]}
            )
        )

        result = await client.upsert_environment_variables(
            "inst_1",
            "proj_1",
            [
                EnvironmentVariable(key="A", value="1"),
                EnvironmentVariable(key="B", value="2"),
            ],
        )

        assert result.created == 2  # noqa: PLR2004
        assert result.updated == 0
        assert route.call_count == 1
        body = json.loads(route.calls.last.request.content)
        assert [v["key"] for v in body] == ["A", "B"]
        assert all(v["type"] == "encrypted" for v in body)
        assert all(v["target"] == ["production", "preview", "development"] for v in body)


@pytest.mark.asyncio
async def test_upsert_target_override(client, settings, personal_token):
    async with respx.mock(base_url=settings.vercel_api_url) as mock:
        route = mock.post("/v10/projects/proj_1/env").mock(
            return_value=httpx.Response(httpx.codes.CREATED, json={})
        )

        await client.upsert_environment_variables(
            "inst_1", "proj_1", [EnvironmentVariable(key="A", value="1")], targets=["preview"]
        )

        body = json.loads(route.calls.last.request.content)
        assert body[0]["target"] == ["preview"]


@pytest.mark.asyncio
async def test_upsert_failure_raises(client, settings, personal_token):
    async with respx.mock(base_url=settings.vercel_api_url) as mock:
        mock.post("/v10/projects/proj_1/env").mock(
            return_value=httpx.Response(httpx.codes.BAD_REQUEST, text="bad")
        )

        with pytest.raises(UpstreamCallFailed):
            await client.upsert_environment_variables(
                "inst_1", "proj_1", [EnvironmentVariable(key="A", value="1")]
            )


@pytest.mark.asyncio
async def test_delete_env_continues_after_individual_failure(client, settings, personal_token):
    async with respx.mock(base_url=settings.vercel_api_url) as mock:
        mock.get("/v9/projects/proj_1/env").mock(
            return_value=httpx.Response(
                httpx.codes.OK,
                json={
                    "envs": [
                        {"id": "env_a", "key": "A"},
                        {"id": "env_b", "key": "B"},
                        {"id": "env_other", "key": "OTHER"},
                    ]
                },
            )
        )
        first = mock.delete("/v9/projects/proj_1/env/env_a").mock(
            return_value=httpx.Response(httpx.codes.INTERNAL_SERVER_ERROR)
        )
        second = mock.delete("/v9/projects/proj_1/env/env_b").mock(
            return_value=httpx.Response(httpx.codes.OK)
        )

        await client.delete_environment_variables("inst_1", "proj_1", ["A", "B"])

        assert first.called
        assert second.called


@pytest.mark.asyncio
async def test_exchange_code(client, settings):
    async with respx.mock(base_url=settings.vercel_api_url) as mock:
        route = mock.post("/v2/oauth/access_token").mock(
            return_value=httpx.Response(
                httpx.codes.OK,
                json={
                    "access_token": "fresh",
                    "token_type": "Bearer",
                    "installation_id": "icfg_1",
                    "user_id": "user_1",
                    "team_id": None,
                },
            )
        )

        token = await client.exchange_code("code_1", "https://app.test/callback")

        assert token.access_token == "fresh"  # noqa: S105
        assert token.installation_id == "icfg_1"
        assert b"code=code_1" in route.calls.last.request.content


class TestTransportErrors:
    @pytest.mark.asyncio
    async def test_account_info_raises_upstream_error(self, client, settings, team_token):
        async with respx.mock(base_url=settings.vercel_api_url) as mock:
            mock.get("/v2/teams/team_1").mock(side_effect=httpx.ConnectError("refused"))

            with pytest.raises(UpstreamCallFailed) as exc_info:
                await client.get_account_info("inst_1")

        assert exc_info.value.upstream_status is None
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_exchange_code_raises_upstream_error(self, client, settings):
        async with respx.mock(base_url=settings.vercel_api_url) as mock:
            mock.post("/v2/oauth/access_token").mock(side_effect=httpx.ReadTimeout("slow"))

            with pytest.raises(UpstreamCallFailed):
                await client.exchange_code("code_1", "https://app.test/callback")

    @pytest.mark.asyncio
    async def test_upsert_raises_upstream_error(self, client, settings, personal_token):
        async with respx.mock(base_url=settings.vercel_api_url) as mock:
            mock.post("/v10/projects/proj_1/env").mock(side_effect=httpx.ConnectError("refused"))

            with pytest.raises(UpstreamCallFailed):
                await client.upsert_environment_variables(
                    "inst_1", "proj_1", [EnvironmentVariable(key="A", value="1")]
                )

    @pytest.mark.asyncio
    async def test_list_projects_fails_open(self, client, settings, personal_token):
        async with respx.mock(base_url=settings.vercel_api_url) as mock:
            mock.get("/v9/projects").mock(side_effect=httpx.ConnectError("refused"))

            assert await client.list_projects("inst_1") == []

    @pytest.mark.asyncio
    async def test_list_env_fails_open(self, client, settings, personal_token):
        async with respx.mock(base_url=settings.vercel_api_url) as mock:
            mock.get("/v9/projects/proj_1/env").mock(side_effect=httpx.ConnectError("refused"))

            assert await client.list_environment_variables("inst_1", "proj_1") == []
