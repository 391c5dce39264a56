"""Tests for the external address fetcher."""

from __future__ import annotations

import httpx
import pytest

from cloudflare_ddns.address import ExternalAddressFetcher
from cloudflare_ddns.config import ExternalSourceConfig
from cloudflare_ddns.exceptions import AddressLookupError
from cloudflare_ddns.models import IPVersion


def make_fetcher(handler, *, source="ifcfg.org", use_ssl=True):
    """Create a fetcher whose HTTP calls are answered by `handler`."""
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return ExternalAddressFetcher(source, use_ssl=use_ssl, client=client)


class TestBuildUrl:
    """Tests for URL construction."""

    def test_https(self):
        fetcher = ExternalAddressFetcher("ifcfg.org", use_ssl=True)
        assert fetcher.build_url(IPVersion.V4) == "https://v4.ifcfg.org"
        assert fetcher.build_url(IPVersion.V6) == "https://v6.ifcfg.org"
        fetcher.close()

    def test_http(self):
        fetcher = ExternalAddressFetcher("example.net", use_ssl=False)
        assert fetcher.build_url(IPVersion.V4) == "http://v4.example.net"
        fetcher.close()

    def test_from_config(self):
        config = ExternalSourceConfig(host="example.net", ssl=False)
        with ExternalAddressFetcher.from_config(config) as fetcher:
            assert fetcher.build_url(IPVersion.V6) == "http://v6.example.net"


class TestGetAddress:
    """Tests for get_address."""

    def test_strips_whitespace(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, text="  1.2.3.4\n")

        fetcher = make_fetcher(handler)
        assert fetcher.get_address(IPVersion.V4) == "1.2.3.4"
        assert seen == ["https://v4.ifcfg.org"]

    def test_inner_content_unmodified(self):
        fetcher = make_fetcher(
            lambda request: httpx.Response(200, text="\t2001:db8::1 \r\n"),
        )
        assert fetcher.get_address(IPVersion.V6) == "2001:db8::1"

    def test_uses_version_subdomain_and_scheme(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append((request.url.scheme, request.url.host))
            return httpx.Response(200, text="2001:db8::1")

        fetcher = make_fetcher(handler, source="example.net", use_ssl=False)
        fetcher.get_address(IPVersion.V6)
        assert seen == [("http", "v6.example.net")]

    def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            msg = "connection refused"
            raise httpx.ConnectError(msg, request=request)

        fetcher = make_fetcher(handler)
        with pytest.raises(AddressLookupError) as exc_info:
            fetcher.get_address(IPVersion.V4)
        assert exc_info.value.url == "https://v4.ifcfg.org"
        assert "connection refused" in str(exc_info.value)

    def test_error_status(self):
        fetcher = make_fetcher(lambda request: httpx.Response(503, text="busy"))
        with pytest.raises(AddressLookupError, match="HTTP 503"):
            fetcher.get_address(IPVersion.V4)

    def test_empty_body(self):
        fetcher = make_fetcher(lambda request: httpx.Response(200, text=" \n"))
        with pytest.raises(AddressLookupError, match="Empty response"):
            fetcher.get_address(IPVersion.V6)


class TestClientOwnership:
    """Tests for client lifecycle."""

    def test_injected_client_not_closed(self):
        client = httpx.Client(
            transport=httpx.MockTransport(lambda request: httpx.Response(200)),
        )
        with ExternalAddressFetcher("ifcfg.org", client=client):
            pass
        assert client.is_closed is False
        client.close()
