"""
Shared fixtures for etcd_client tests.
"""
import json
from urllib.parse import parse_qsl

import httpx
import pytest
import respx

from etcd_client import Client, ClientConfig
from etcd_client.endpoints import Endpoint

ENDPOINTS = ["http://etcd1:2379", "http://etcd2:2379", "http://etcd3:2379"]
HOSTS = ["etcd1", "etcd2", "etcd3"]

CLUSTER_HEADERS = {
    "X-Etcd-Cluster-Id": "cdf818194e3a8c32",
    "X-Etcd-Index": "7",
    "X-Raft-Index": "30",
    "X-Raft-Term": "2",
}


def api_error(message: str = "Key not found", error_code: int = 100, cause: str = "/foo", index: int = 7):
    """etcd error body."""
    return {"cause": cause, "errorCode": error_code, "index": index, "message": message}


def node_body(action: str = "get", key: str = "/foo", value: str = "bar", **extra):
    """etcd key space response body."""
    node = {"key": key, "value": value, "modifiedIndex": 7, "createdIndex": 7}
    body = {"action": action, "node": node}
    body.update(extra)
    return body


def form_of(request: httpx.Request) -> dict:
    """Decode a form-encoded request body."""
    return dict(parse_qsl(request.content.decode("utf-8")))


def json_of(request: httpx.Request):
    return json.loads(request.content.decode("utf-8"))


@pytest.fixture
def endpoints():
    """Three parsed endpoints."""
    return [Endpoint.parse(url) for url in ENDPOINTS]


@pytest.fixture
def router():
    """respx router with no routes; add routes per test."""
    return respx.MockRouter(assert_all_called=False)


@pytest.fixture
def make_client(router):
    """Factory for a Client whose requests go to the router."""
    def _make(endpoints=None, **config_kwargs):
        transport = httpx.MockTransport(router.async_handler)
        httpx_client = httpx.AsyncClient(transport=transport)
        config = ClientConfig(endpoints=endpoints or ENDPOINTS, **config_kwargs)
        client = Client(config=config, httpx_client=httpx_client)
        return client

    return _make


@pytest.fixture
def client(make_client):
    """Client for the three-member test cluster."""
    return make_client()
