"""
Tests for endpoints.py
Logic testing: Decision/Branch, Boundary coverage
"""
import pytest

from etcd_client.endpoints import Endpoint, parse_endpoints
from etcd_client.errors import ConfigurationError, InvalidEndpointError, NoEndpointsError


class TestEndpointParse:
    @pytest.mark.parametrize("url", [
        "http://127.0.0.1:2379",
        "https://etcd.example.com:2379",
        "http://etcd1:2379/",
        "http://etcd1:2379/prefix/",
    ])
    def test_valid(self, url):
        endpoint = Endpoint.parse(url)

        assert endpoint.base.endswith("/")
        assert not endpoint.base.endswith("//")

    def test_base_keeps_path_prefix(self):
        assert Endpoint.parse("http://etcd1:2379/prefix").base == "http://etcd1:2379/prefix/"

    def test_base_without_path(self):
        assert Endpoint.parse("http://etcd1:2379").base == "http://etcd1:2379/"

    def test_surrounding_whitespace_ignored(self):
        assert Endpoint.parse("  http://etcd1:2379 ").base == "http://etcd1:2379/"

    # Decision: existing Endpoint passes through
    def test_endpoint_passthrough(self):
        endpoint = Endpoint.parse("http://etcd1:2379")

        assert Endpoint.parse(endpoint) is endpoint

    @pytest.mark.parametrize("value", [
        "",
        "   ",
        "etcd1:2379",
        "ftp://etcd1:2379",
        "http://",
        "http://etcd1:2379/?x=1",
        "http://etcd1:2379/#frag",
        None,
        2379,
    ])
    def test_invalid(self, value):
        with pytest.raises(InvalidEndpointError) as exc_info:
            Endpoint.parse(value)

        assert exc_info.value.value == value
        assert isinstance(exc_info.value, ConfigurationError)

    def test_frozen(self):
        endpoint = Endpoint.parse("http://etcd1:2379")

        with pytest.raises(AttributeError):
            endpoint.url = "http://other:2379"

    def test_equality(self):
        assert Endpoint.parse("http://etcd1:2379") == Endpoint.parse("http://etcd1:2379")


class TestParseEndpoints:
    def test_order_preserved(self):
        endpoints = parse_endpoints(["http://b:2379", "http://a:2379", "http://c:2379"])

        assert [e.base for e in endpoints] == ["http://b:2379/", "http://a:2379/", "http://c:2379/"]
        assert isinstance(endpoints, tuple)

    def test_single_string(self):
        endpoints = parse_endpoints("http://etcd1:2379")

        assert len(endpoints) == 1

    # Boundary: empty list
    def test_empty(self):
        with pytest.raises(NoEndpointsError):
            parse_endpoints([])

    # Path: first invalid entry fails the whole list
    def test_one_invalid_entry(self):
        with pytest.raises(InvalidEndpointError) as exc_info:
            parse_endpoints(["http://etcd1:2379", "not a url", "http://etcd3:2379"])

        assert exc_info.value.value == "not a url"
