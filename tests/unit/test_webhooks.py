"""Unit tests for webhook authentication, recording and dispatch."""

import json
from typing import get_args, get_type_hints
from unittest.mock import AsyncMock, patch

import httpx
import pytest
import respx

from marketplace_integration.errors import InvalidSignature
from marketplace_integration.webhooks import compute_signature, verify_signature


def encode(event: dict) -> bytes:
    return json.dumps(event).encode()


def deployment_created(project_id: str | None = "proj_1") -> dict:
    payload = {
        "deployment": {
            "id": "dpl_1",
            "name": "web",
            "url": "web-abc.vercel.app",
            "meta": {"githubCommitSha": "abc123", "githubCommitRef": "main"},
        },
    }
    if project_id:
        payload["project"] = {"id": project_id}
    return {"id": "evt_1", "type": "deployment.created", "createdAt": 1, "payload": payload}


@pytest.fixture
def send(processor, settings):
    async def _send(body: bytes, signature: str | None = None) -> None:
        if signature is None:
            signature = compute_signature(body, settings.integration_client_secret)
        await processor.handle(body, signature)

    return _send


class TestSignature:
    def test_matching_signature(self):
        body = b'{"a":1}'
        verify_signature(body, compute_signature(body, "secret"), "secret")

    @pytest.mark.parametrize("signature", [None, "", "deadbeef"])
    def test_rejects_bad_signature(self, signature):
        with pytest.raises(InvalidSignature):
            verify_signature(b'{"a":1}', signature, "secret")

    def test_signature_is_hex_sha1(self):
        assert len(compute_signature(b"", "secret")) == 40  # noqa: PLR2004


def test_every_handler_accepts_the_event_model_for_its_type(processor):
    for event_type, handler in processor._handlers.items():
        model = get_type_hints(handler)["event"]

        assert get_args(model.model_fields["type"].annotation) == (event_type,)


class TestHandle:
    @pytest.mark.asyncio
    async def test_tampered_body_is_rejected_before_parsing(self, processor, event_log, settings):
        body = encode({"id": "evt_1", "type": "project.created", "createdAt": 1, "payload": {}})
        signature = compute_signature(body, settings.integration_client_secret)

        with patch("marketplace_integration.webhooks.parse_webhook_event") as parse:
            with pytest.raises(InvalidSignature):
                await processor.handle(body + b" ", signature)

        parse.assert_not_called()
        assert await event_log.recent() == []

    @pytest.mark.asyncio
    async def test_invalid_json_is_ignored(self, send, event_log):
        await send(b"not json")

        assert await event_log.recent() == []

    @pytest.mark.asyncio
    async def test_unknown_type_is_recorded_without_side_effects(
        self, send, processor, event_log
    ):
        event = {"id": "evt_9", "type": "marketplace.invoice.paid", "createdAt": 5, "payload": {}}

        with patch.object(processor.lifecycle, "uninstall", new_callable=AsyncMock) as uninstall:
            await send(encode(event))

        uninstall.assert_not_called()
        [stored] = await event_log.recent()
        assert stored["id"] == "evt_9"
        assert stored["type"] == "marketplace.invoice.paid"

    @pytest.mark.asyncio
    async def test_known_event_is_recorded_with_extra_fields(self, send, event_log):
        event = {
            "id": "evt_2",
            "type": "project.created",
            "createdAt": 2,
            "region": "iad1",
            "payload": {"project": {"id": "proj_1", "name": "web"}},
        }

        await send(encode(event))

        [stored] = await event_log.recent()
        assert stored["type"] == "project.created"
        assert stored["region"] == "iad1"

    @pytest.mark.asyncio
    async def test_configuration_removed_uninstalls(
        self, send, lifecycle, install_request, installation_store
    ):
        await lifecycle.install("icfg_1", install_request())
        event = {
            "id": "evt_3",
            "type": "integration-configuration.removed",
            "createdAt": 3,
            "payload": {"configuration": {"id": "icfg_1"}},
        }

        await send(encode(event))
        await send(encode(event))

        assert (await installation_store.get("icfg_1")).is_deleted
        assert await installation_store.list_ids() == []

    @pytest.mark.asyncio
    async def test_store_failure_still_dispatches(
        self, send, processor, lifecycle, install_request
    ):
        await lifecycle.install("icfg_1", install_request())
        event = {
            "id": "evt_4",
            "type": "integration-configuration.removed",
            "createdAt": 4,
            "payload": {"configuration": {"id": "icfg_1"}},
        }

        with patch.object(
            processor.events, "append", AsyncMock(side_effect=RuntimeError("redis down"))
        ):
            await send(encode(event))

        assert await lifecycle.get_active_installation("icfg_1") is None

    @pytest.mark.asyncio
    async def test_handler_failure_is_swallowed(self, send, processor):
        event = {
            "id": "evt_5",
            "type": "integration-configuration.removed",
            "createdAt": 5,
            "payload": {"configuration": {"id": "icfg_1"}},
        }

        with patch.object(
            processor.lifecycle, "uninstall", AsyncMock(side_effect=RuntimeError("boom"))
        ) as uninstall:
            await send(encode(event))

        uninstall.assert_awaited_once_with("icfg_1")


class TestDeploymentTracking:
    @pytest.fixture
    def upstream(self, settings):
        with respx.mock(assert_all_called=False) as mock:
            mock.post(f"{settings.entrolytics_api_url}/api/websites").mock(
                return_value=httpx.Response(httpx.codes.OK, json={"websiteId": "web_1"})
            )
            mock.post(f"{settings.vercel_api_url}/v10/projects/proj_1/env").mock(
                return_value=httpx.Response(httpx.codes.CREATED, json={"created": []})
            )
            mock.post(
                f"{settings.entrolytics_api_url}/api/websites/web_1/deployments",
                name="track",
            ).mock(return_value=httpx.Response(httpx.codes.CREATED))
            yield mock

    @pytest.fixture
    async def tracked_project(self, lifecycle, install_request, provision_request, upstream):
        await lifecycle.install("icfg_1", install_request())
        await lifecycle.provision_resource("icfg_1", provision_request(project_id="proj_1"))

    @pytest.mark.asyncio
    async def test_unmatched_project_makes_no_outbound_call(self, send, upstream):
        await send(encode(deployment_created("proj_unknown")))
        await send(encode(deployment_created(None)))

        assert not upstream["track"].called

    @pytest.mark.asyncio
    async def test_matched_project_posts_deployment(
        self, send, upstream, tracked_project, settings
    ):
        await send(encode(deployment_created("proj_1")))

        request = upstream["track"].calls.last.request
        secret = settings.entrolytics_integration_secret
        assert request.headers["Authorization"] == f"Bearer {secret}"
        assert json.loads(request.content) == {
            "website": "web_1",
            "deployId": "dpl_1",
            "gitSha": "abc123",
            "gitBranch": "main",
            "deployUrl": "https://web-abc.vercel.app",
            "source": "vercel",
        }

    @pytest.mark.asyncio
    async def test_uninstalled_project_is_not_tracked(
        self, send, upstream, tracked_project, lifecycle
    ):
        await lifecycle.uninstall("icfg_1")

        await send(encode(deployment_created("proj_1")))

        assert not upstream["track"].called

    @pytest.mark.asyncio
    async def test_push_failure_is_swallowed(self, send, upstream, tracked_project, event_log):
        upstream["track"].mock(return_value=httpx.Response(httpx.codes.INTERNAL_SERVER_ERROR))

        await send(encode(deployment_created("proj_1")))

        assert upstream["track"].called
        assert [e["id"] for e in await event_log.recent()] == ["evt_1"]
