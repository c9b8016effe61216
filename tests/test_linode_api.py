import asyncio
import json

import httpx
import pytest

from adapters.http_client import build_async_client
from adapters.linode_api import LinodeNodeBalancerClient
from core.domain.errors import ResolveError, UpsertError

from tests.conftest import LB_ID


def make_client(settings, handler) -> httpx.AsyncClient:
    return build_async_client(settings, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_list_follows_pages_in_order(settings) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        page = int(request.url.params["page"])
        data = {
            1: [{"id": 1, "port": 80, "protocol": "http", "algorithm": "roundrobin"}],
            2: [{"id": 2, "port": 443, "protocol": "https"}],
        }[page]
        return httpx.Response(200, json={"data": data, "page": page, "pages": 2, "results": 2})

    async with make_client(settings, handler) as client:
        configs = await LinodeNodeBalancerClient(client).list_terminators(LB_ID)

    assert [(c.id, c.port) for c in configs] == [(1, 80), (2, 443)]
    assert all(r.url.path == f"/v4/nodebalancers/{LB_ID}/configs" for r in seen)
    assert seen[0].headers["Authorization"] == "Bearer test-token"


@pytest.mark.asyncio
async def test_list_error_carries_remote_body(settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"errors": [{"reason": "Invalid Token"}]})

    async with make_client(settings, handler) as client:
        with pytest.raises(ResolveError) as info:
            await LinodeNodeBalancerClient(client).list_terminators(LB_ID)

    assert info.value.status_code == 401
    assert info.value.body == "Invalid Token"
    assert info.value.retryable


@pytest.mark.asyncio
async def test_list_transport_failure(settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with make_client(settings, handler) as client:
        with pytest.raises(ResolveError, match="ConnectError"):
            await LinodeNodeBalancerClient(client).list_terminators(LB_ID)


@pytest.mark.asyncio
async def test_create_posts_payload_and_returns_id(settings) -> None:
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["method"] = request.method
        captured["path"] = request.url.path
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": 55, "port": 443, "protocol": "https"})

    async with make_client(settings, handler) as client:
        config_id = await LinodeNodeBalancerClient(client).create_terminator(LB_ID, {"port": 443, "protocol": "https"})

    assert config_id == 55
    assert captured == {
        "method": "POST",
        "path": f"/v4/nodebalancers/{LB_ID}/configs",
        "body": {"port": 443, "protocol": "https"},
    }


@pytest.mark.asyncio
async def test_update_puts_to_config(settings) -> None:
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["method"] = request.method
        captured["path"] = request.url.path
        return httpx.Response(200, json={"id": 7})

    async with make_client(settings, handler) as client:
        await LinodeNodeBalancerClient(client).update_terminator(LB_ID, 7, {"protocol": "https"})

    assert captured == {"method": "PUT", "path": f"/v4/nodebalancers/{LB_ID}/configs/7"}


@pytest.mark.asyncio
async def test_update_error_lists_field_reasons(settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            400,
            json={"errors": [{"field": "ssl_key", "reason": "Invalid key"}, {"reason": "Bad cert"}]},
        )

    async with make_client(settings, handler) as client:
        with pytest.raises(UpsertError) as info:
            await LinodeNodeBalancerClient(client).update_terminator(LB_ID, 7, {})

    assert info.value.body == "ssl_key: Invalid key; Bad cert"
    assert "HTTP 400" in str(info.value)


@pytest.mark.asyncio
async def test_non_json_error_body(settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="upstream unavailable")

    async with make_client(settings, handler) as client:
        with pytest.raises(UpsertError) as info:
            await LinodeNodeBalancerClient(client).create_terminator(LB_ID, {})

    assert info.value.body == "upstream unavailable"


@pytest.mark.asyncio
async def test_check_load_balancer(settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200 if request.url.path.endswith(LB_ID) else 404, json={})

    async with make_client(settings, handler) as client:
        ok, detail = await LinodeNodeBalancerClient(client).check_load_balancer(LB_ID)
        bad, bad_detail = await LinodeNodeBalancerClient(client).check_load_balancer("999")

    assert (ok, detail) == (True, "HTTP 200")
    assert bad is False
    assert bad_detail == "Linode API responded with status: 404"


def test_client_uses_configured_timeouts(settings) -> None:
    client = build_async_client(settings)
    assert client.timeout.connect == 10.0
    assert client.timeout.read == 30.0
    assert str(client.base_url) == "https://api.linode.com/v4/"


@pytest.mark.asyncio
async def test_slow_response_is_cut_at_total_timeout(settings) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(5)
        return httpx.Response(200, json={"data": [], "page": 1, "pages": 1})

    async with make_client(settings, handler) as client:
        with pytest.raises(ResolveError, match="no response within 0.05s"):
            await LinodeNodeBalancerClient(client, total_timeout=0.05).list_terminators(LB_ID)
