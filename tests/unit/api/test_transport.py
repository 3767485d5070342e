"""Unit tests for the transport executor."""

import base64
from unittest.mock import patch

import httpx
import pytest

from pceclient.api.transport import TransportExecutor, api_base_url, parse_api_url
from pceclient.core.exceptions import TransportError, ValidationError

LABELS_URL = "https://pce.example.com:8443/api/v2/orgs/1/labels"


class TestUrlHelpers:
    """Tests for URL parsing and base URL derivation."""

    def test_base_url_keeps_port(self) -> None:
        url = parse_api_url(LABELS_URL)
        assert api_base_url(url) == "https://pce.example.com:8443/api/v2"

    def test_base_url_without_port(self) -> None:
        url = parse_api_url("https://pce.example.com/api/v2/orgs/1/labels")
        assert api_base_url(url) == "https://pce.example.com/api/v2"

    @pytest.mark.parametrize("url", ["", "/orgs/1/labels", "ftp://pce/api/v2", "https://"])
    def test_rejects_unusable_urls(self, url: str) -> None:
        with pytest.raises(ValidationError):
            parse_api_url(url)


class TestTransportExecutor:
    """Tests for a single HTTP exchange."""

    @pytest.fixture
    def executor(self, fake_pce, mock_sleep) -> TransportExecutor:
        return TransportExecutor(
            user="api_user",
            api_key="secret",
            sleep=mock_sleep,
            transport=httpx.MockTransport(fake_pce.handler),
        )

    @pytest.mark.asyncio
    async def test_sets_basic_auth(self, executor, fake_pce) -> None:
        fake_pce.add("GET", "/api/v2/orgs/1/labels", httpx.Response(200, json=[]))

        await executor.execute("GET", LABELS_URL)
        await executor.close()

        expected = base64.b64encode(b"api_user:secret").decode()
        assert fake_pce.requests[0].headers["Authorization"] == f"Basic {expected}"

    @pytest.mark.asyncio
    async def test_merges_caller_headers(self, executor, fake_pce) -> None:
        fake_pce.add("GET", "/api/v2/orgs/1/labels", httpx.Response(200, json=[]))

        await executor.execute("GET", LABELS_URL, headers={"X-Custom": "yes"})
        await executor.close()

        request = fake_pce.requests[0]
        assert request.headers["X-Custom"] == "yes"
        assert "Prefer" not in request.headers

    @pytest.mark.asyncio
    async def test_envelope_fields(self, executor, fake_pce) -> None:
        fake_pce.add(
            "GET", "/api/v2/orgs/1/labels",
            httpx.Response(200, json=[{"href": "/orgs/1/labels/1"}], headers={"X-Total-Count": "1"}),
        )

        response = await executor.execute("GET", LABELS_URL)
        await executor.close()

        assert response.ok
        assert response.status_code == 200
        assert response.headers["X-Total-Count"] == "1"
        assert response.request.method == "GET"
        assert response.json() == [{"href": "/orgs/1/labels/1"}]

    @pytest.mark.asyncio
    async def test_connect_error_becomes_transport_error(self, executor, fake_pce) -> None:
        fake_pce.add("GET", "/api/v2/orgs/1/labels", httpx.ConnectError("name resolution failed"))

        with pytest.raises(TransportError) as exc_info:
            await executor.execute("GET", LABELS_URL)
        await executor.close()

        assert exc_info.value.code == "NET_TRANSPORT_ERROR"
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_reuses_one_client(self, executor) -> None:
        first = await executor._get_client()
        second = await executor._get_client()
        assert first is second

        await executor.close()
        assert executor._client is None

    def test_rejects_bad_proxy(self) -> None:
        with pytest.raises(ValidationError):
            TransportExecutor(user="u", api_key="k", proxy="http://proxy.internal:notaport")

    @pytest.mark.parametrize("proxy", ["not-a-proxy", "ftp://proxy.internal:21", "http://"])
    def test_rejects_unusable_proxy_scheme_or_host(self, proxy: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            TransportExecutor(user="u", api_key="k", proxy=proxy)

        assert exc_info.value.code == "VAL_VALIDATION_ERROR"

    @pytest.mark.parametrize("proxy", ["http://proxy.internal:3128", "socks5://proxy.internal:1080"])
    def test_accepts_supported_proxy_schemes(self, proxy: str) -> None:
        executor = TransportExecutor(user="u", api_key="k", proxy=proxy)
        assert executor.proxy == proxy

    @pytest.mark.asyncio
    async def test_builds_client_with_tls_and_proxy_settings(self) -> None:
        executor = TransportExecutor(
            user="u",
            api_key="k",
            disable_tls_checking=True,
            proxy="http://proxy.internal:3128",
            timeout=12.5,
        )

        with patch("pceclient.api.transport.httpx.AsyncClient") as mock_client_cls:
            await executor._get_client()

        kwargs = mock_client_cls.call_args.kwargs
        assert kwargs["verify"] is False
        assert kwargs["proxy"] == "http://proxy.internal:3128"
        assert kwargs["timeout"] == 12.5

    @pytest.mark.asyncio
    async def test_verbose_mode_traces_requests(self, fake_pce, mock_sleep) -> None:
        fake_pce.add("GET", "/api/v2/orgs/1/labels", httpx.Response(200, json=[]))
        executor = TransportExecutor(
            user="u",
            api_key="k",
            verbose=True,
            sleep=mock_sleep,
            transport=httpx.MockTransport(fake_pce.handler),
        )

        with patch("pceclient.api.transport.logger") as mock_logger:
            await executor.execute("GET", LABELS_URL)
        await executor.close()

        messages = [c.args[0] for c in mock_logger.debug.call_args_list]
        assert "Making http request" in messages
        assert all(c.kwargs["source"] == "api" for c in mock_logger.debug.call_args_list)

    @pytest.mark.asyncio
    async def test_quiet_mode_does_not_trace(self, executor, fake_pce) -> None:
        fake_pce.add("GET", "/api/v2/orgs/1/labels", httpx.Response(200, json=[]))

        with patch("pceclient.api.transport.logger") as mock_logger:
            await executor.execute("GET", LABELS_URL)
        await executor.close()

        mock_logger.debug.assert_not_called()
