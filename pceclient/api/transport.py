"""
Transport Executor.

Performs a single HTTP exchange with the PCE: TLS policy, forward proxy,
basic authentication, header merging and, for async requests, the whole
job-polling protocol before the final result is fetched.

Transport failures are raised as TransportError and never retried here.
Non-2xx responses are returned as an APIResponse with `error` set.
"""

import asyncio

import httpx

from pceclient.api.polling import AsyncPoller, SleepFunc
from pceclient.api.response import APIResponse
from pceclient.core.exceptions import TransportError, ValidationError
from pceclient.core.logging import get_logger, log_verbose

logger = get_logger(__name__)

API_PATH = "/api/v2"
PREFER_ASYNC = "respond-async"
PROXY_SCHEMES = frozenset({"http", "https", "socks5", "socks5h"})


def parse_api_url(url: str) -> httpx.URL:
    """Parse an absolute API URL.

    Raises:
        ValidationError: If the URL cannot be parsed or has no scheme or host
    """
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as e:
        raise ValidationError(f"invalid url: {url!r}", details={"url": str(url)}) from e
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise ValidationError(f"invalid url: {url!r}", details={"url": str(url)})
    return parsed


def parse_proxy_url(proxy: str) -> httpx.URL:
    """Parse a forward proxy URL.

    Raises:
        ValidationError: If the URL cannot be parsed, has no host or uses a
            scheme httpx cannot proxy through
    """
    try:
        parsed = httpx.URL(proxy)
    except (httpx.InvalidURL, TypeError) as e:
        raise ValidationError(f"invalid proxy url: {proxy!r}", details={"proxy": str(proxy)}) from e
    if parsed.scheme not in PROXY_SCHEMES or not parsed.host:
        raise ValidationError(
            f"invalid proxy url: {proxy!r}",
            details={"proxy": str(proxy), "allowed_schemes": sorted(PROXY_SCHEMES)},
        )
    return parsed


def api_base_url(url: httpx.URL) -> str:
    """Return https://<host[:port]>/api/v2 for an API URL."""
    port = f":{url.port}" if url.port else ""
    return f"https://{url.host}{port}{API_PATH}"


class TransportExecutor:
    """
    Executes requests against the PCE.

    One httpx.AsyncClient is created lazily and reused for every request,
    status poll and result download.

    Usage:
        executor = TransportExecutor(user="api_1", api_key="secret")
        response = await executor.execute("GET", "https://pce:8443/api/v2/orgs/1/labels")
        await executor.close()
    """

    def __init__(
        self,
        *,
        user: str,
        api_key: str,
        disable_tls_checking: bool = False,
        proxy: str | None = None,
        timeout: float = 60.0,
        force_async: bool = False,
        verbose: bool = False,
        max_malformed_polls: int = 5,
        sleep: SleepFunc = asyncio.sleep,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if proxy:
            parse_proxy_url(proxy)

        self._auth = httpx.BasicAuth(user, api_key)
        self.disable_tls_checking = disable_tls_checking
        self.proxy = proxy
        self.timeout = timeout
        self.force_async = force_async
        self.verbose = verbose
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self.poller = AsyncPoller(
            self._get_client,
            sleep=sleep,
            max_malformed_polls=max_malformed_polls,
            verbose=verbose,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                auth=self._auth,
                verify=not self.disable_tls_checking,
                proxy=self.proxy or None,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def execute(
        self,
        method: str,
        url: str,
        body: bytes | None = None,
        headers: dict[str, str] | None = None,
        async_: bool = False,
    ) -> APIResponse:
        """
        Send one request and return the normalized response.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            url: Absolute API URL
            body: Request body, already serialized
            headers: Header overrides merged into the request
            async_: Ask the server to process the request as an async job

        Returns:
            APIResponse for the final response (the job result for async requests)

        Raises:
            ValidationError: If the URL is malformed (before any I/O)
            TransportError: If the connection fails
            AsyncProtocolError: If the async job cannot be followed
            AsyncJobFailedError: If the async job fails
        """
        target_url = parse_api_url(url)
        base_url = api_base_url(target_url)

        if self.force_async:
            async_ = True

        request_headers = dict(headers or {})
        if async_:
            request_headers["Prefer"] = PREFER_ASYNC

        log_verbose(logger, self.verbose, "Making http request", method=method, url=str(target_url), async_=async_)

        client = await self._get_client()
        try:
            response = await client.request(method, target_url, content=body, headers=request_headers)
            log_verbose(logger, self.verbose, "Http status code", status_code=response.status_code)

            # A rejected async request (429, 401, ...) never started a job
            if async_ and response.is_success:
                target = str(target_url).removeprefix(base_url)
                status = await self.poller.wait(base_url, response, target=target)

                result_url = base_url + status.result.href
                log_verbose(
                    logger, self.verbose, "Downloading async results",
                    url=result_url, target=target,
                )
                response = await client.get(result_url, headers={"Content-Type": "application/json"})
                log_verbose(logger, self.verbose, "Http status code", status_code=response.status_code)
        except httpx.TransportError as e:
            logger.error(
                "Transport error",
                extra={"method": method, "url": str(target_url), "error": str(e)},
            )
            raise TransportError(f"{method} {target_url} failed: {e}") from e

        return APIResponse.from_httpx(response, body)
