"""
Tests for client.py
Logic testing: Decision/Branch, Path coverage
"""
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from httpx import Response

from etcd_client import Client, ClientConfig
from etcd_client.config import BasicAuth
from etcd_client.dispatch import RequestSpec, model_decoder
from etcd_client.errors import (
    ClientClosedError,
    ClusterError,
    InvalidEndpointError,
    NoEndpointsError,
    TransportError,
    UnexpectedStatusError,
)
from etcd_client.models import Health

from conftest import CLUSTER_HEADERS, ENDPOINTS, HOSTS


class TestConstruction:
    # Path: construction makes no requests
    def test_no_endpoints(self, router):
        route = router.route().mock(return_value=Response(200))

        with pytest.raises(NoEndpointsError):
            Client([])

        assert not route.called

    def test_invalid_endpoint(self):
        with pytest.raises(InvalidEndpointError):
            Client(["http://etcd1:2379", "etcd2:2379"])

    def test_default_endpoint(self):
        client = Client()

        assert [e.base for e in client.endpoints] == ["http://127.0.0.1:2379/"]

    # Decision: explicit endpoints override the config's
    def test_endpoints_override_config(self):
        auth = BasicAuth(username="root", password="secret")

        client = Client(["http://etcd9:2379"], config=ClientConfig(basic_auth=auth))

        assert [e.base for e in client.endpoints] == ["http://etcd9:2379/"]
        assert client.config.basic_auth == auth

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("ETCD_ENDPOINTS", "http://etcd1:2379,http://etcd2:2379")
        monkeypatch.setenv("ETCD_USERNAME", "root")
        monkeypatch.setenv("ETCD_PASSWORD", "secret")

        client = Client.from_env()

        assert len(client.endpoints) == 2
        assert client.config.basic_auth.username == "root"


class TestExecute:
    # Path: unreachable first member, second answers
    @pytest.mark.asyncio
    async def test_failover_to_second(self, router, client):
        first = router.get(host="etcd1", path="/health").mock(side_effect=httpx.ConnectError)
        second = router.get(host="etcd2", path="/health").mock(
            return_value=Response(200, json={"health": "true"}, headers=CLUSTER_HEADERS)
        )
        third = router.get(host="etcd3", path="/health").mock(return_value=Response(200, json={"health": "true"}))

        response = await client.execute(RequestSpec(method="GET", path="health", decode=model_decoder(Health)))

        assert response.data.is_healthy
        assert response.endpoint == client.endpoints[1]
        assert response.cluster_info.raft_term == 2
        assert first.call_count == 1
        assert second.call_count == 1
        assert not third.called

    @pytest.mark.asyncio
    async def test_all_members_down(self, router, client):
        for host in HOSTS:
            router.get(host=host, path="/health").mock(side_effect=httpx.ConnectError)

        with pytest.raises(ClusterError) as exc_info:
            await client.execute(RequestSpec(method="GET", path="health"))

        assert len(exc_info.value.errors) == 3
        assert all(isinstance(e, TransportError) for e in exc_info.value.errors)
        assert [e.endpoint for e in exc_info.value.errors] == list(client.endpoints)

    @pytest.mark.asyncio
    async def test_listener_receives_events(self, router, client):
        router.get(host="etcd1", path="/health").mock(return_value=Response(200, json={"health": "true"}))
        listener = MagicMock()
        remove = client.on(listener)

        await client.execute(RequestSpec(method="GET", path="health"))
        remove()
        await client.execute(RequestSpec(method="GET", path="health"))

        types = [call.args[0].type for call in listener.call_args_list]
        assert types == ["attempt:start", "attempt:success"]

    @pytest.mark.asyncio
    async def test_basic_auth_sent(self, router, make_client):
        auth = BasicAuth(username="root", password="secret")
        client = make_client(basic_auth=auth)
        route = router.get(host="etcd1", path="/health").mock(return_value=Response(200, json={"health": "true"}))

        await client.execute(RequestSpec(method="GET", path="health"))

        assert route.calls.last.request.headers["Authorization"] == auth.header_value


class TestFanOut:
    @pytest.mark.asyncio
    async def test_health_every_member(self, router, client):
        routes = [
            router.get(host=host, path="/health").mock(return_value=Response(200, json={"health": "true"}))
            for host in HOSTS
        ]

        responses = [response async for response in client.health()]

        assert len(responses) == 3
        assert all(r.data.is_healthy for r in responses)
        assert {r.endpoint for r in responses} == set(client.endpoints)
        assert all(route.call_count == 1 for route in routes)

    @pytest.mark.asyncio
    async def test_versions(self, router, client):
        for host in HOSTS:
            router.get(host=host, path="/version").mock(
                return_value=Response(200, json={"etcdserver": "2.3.8", "etcdcluster": "2.3.0"})
            )

        responses = [response async for response in client.versions()]

        assert [r.data.server_version for r in responses] == ["2.3.8"] * 3
        assert responses[0].data.cluster_version == "2.3.0"

    # Decision: a failing member is raised to the consumer
    @pytest.mark.asyncio
    async def test_failure_raised(self, router, client):
        router.get(host="etcd1", path="/health").mock(return_value=Response(200, json={"health": "true"}))
        router.get(host="etcd2", path="/health").mock(return_value=Response(503))
        router.get(host="etcd3", path="/health").mock(return_value=Response(200, json={"health": "true"}))

        with pytest.raises(UnexpectedStatusError) as exc_info:
            [response async for response in client.health()]

        assert exc_info.value.status_code == 503
        assert exc_info.value.endpoint == client.endpoints[1]

    # Path: consumer stops after the first response
    @pytest.mark.asyncio
    async def test_early_stop(self, router, client):
        for host in HOSTS:
            router.get(host=host, path="/health").mock(return_value=Response(200, json={"health": "false"}))

        stream = client.health()
        first = await stream.__anext__()
        await stream.aclose()

        assert first.data.is_healthy is False


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_context_manager_closes(self):
        httpx_client = AsyncMock(spec=httpx.AsyncClient)

        async with Client(ENDPOINTS, httpx_client=httpx_client) as client:
            assert not client.transport.closed

        assert client.transport.closed
        httpx_client.aclose.assert_awaited_once()

    def test_off_unknown_listener(self, client):
        listener = MagicMock()

        client.off(listener)

        listener.assert_not_called()

    # Decision: a closed client fails once, before any member is tried
    @pytest.mark.asyncio
    async def test_execute_after_close(self, router, client):
        routes = [router.get(host=host, path="/health").mock(return_value=Response(200)) for host in HOSTS]
        await client.close()

        with pytest.raises(ClientClosedError):
            await client.execute(RequestSpec(method="GET", path="health"))

        assert not any(route.called for route in routes)

    @pytest.mark.asyncio
    async def test_fan_out_after_close(self, router, client):
        route = router.get(path="/health").mock(return_value=Response(200, json={"health": "true"}))
        await client.close()

        with pytest.raises(ClientClosedError):
            async for _ in client.health():
                pass

        assert not route.called
