"""
PCE API Client.

Request orchestrator on top of the transport executor. Adds the fixed
backoff retry on HTTP 429 and the verb helpers the policy services use.

Usage:
    async with PCEClient.from_config() as pce:
        api, items = await pce.get_collection("/sec_policy/draft/label_groups")

A 429 response is retried after a fixed pause (30s by default), re-running
the whole call including any async polling, up to 6 times. Everything else
reaches the caller as is.
"""

import asyncio
import json
from typing import Any

import httpx
from tenacity import AsyncRetrying, retry_if_result, stop_after_attempt, wait_fixed

from pceclient.api.polling import SleepFunc
from pceclient.api.response import APIResponse
from pceclient.api.transport import API_PATH, TransportExecutor
from pceclient.core.config_schema import PCESchema
from pceclient.core.exceptions import ProtocolError, RateLimitExhaustedError
from pceclient.core.logging import get_logger
from pceclient.core.resilience import log_retry

logger = get_logger(__name__)

TOO_MANY_REQUESTS = 429


def clean_fqdn(fqdn: str) -> str:
    """Strip a trailing slash and a leading https:// from a PCE FQDN."""
    return fqdn.removesuffix("/").removeprefix("https://")


def _is_rate_limited(response: APIResponse) -> bool:
    return response.status_code == TOO_MANY_REQUESTS


class PCEClient:
    """
    Client for one PCE organization.

    Features:
    - Basic authentication with a single API user/key pair
    - TLS verification toggle and forward proxy
    - Async job protocol (Prefer: respond-async) handled transparently
    - Fixed backoff retry on 429
    - Uniform APIResponse result for every call
    """

    def __init__(
        self,
        config: PCESchema,
        *,
        user: str,
        api_key: str,
        force_async: bool = False,
        verbose: bool = False,
        sleep: SleepFunc = asyncio.sleep,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            config: PCE connection settings (pce.yaml)
            user: API user
            api_key: API key
            force_async: Send every request with Prefer: respond-async
            verbose: Emit debug diagnostics for every request
            sleep: Awaitable sleep used for rate-limit backoff and polling waits
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.config = config
        self.fqdn = clean_fqdn(config.fqdn)
        self.port = config.port
        self.org_id = config.org_id
        self.max_retries = config.rate_limit.max_retries
        self.backoff_seconds = config.rate_limit.backoff_seconds
        self._sleep = sleep
        self.executor = TransportExecutor(
            user=user,
            api_key=api_key,
            disable_tls_checking=config.disable_tls_checking,
            proxy=config.proxy,
            timeout=config.timeout_seconds,
            force_async=force_async,
            verbose=verbose,
            max_malformed_polls=config.async_jobs.max_malformed_polls,
            sleep=sleep,
            transport=transport,
        )

    @classmethod
    def from_config(cls, **kwargs: Any) -> "PCEClient":
        """Build a client from pce.yaml, config/.env and the PCE_* environment toggles."""
        from pceclient.core.config import get_app_config, get_runtime_toggles, get_settings

        settings = get_settings()
        toggles = get_runtime_toggles()
        kwargs.setdefault("force_async", toggles.force_async)
        kwargs.setdefault("verbose", toggles.verbose)
        return cls(
            get_app_config().pce,
            user=settings.pce_user,
            api_key=settings.pce_api_key,
            **kwargs,
        )

    @property
    def base_url(self) -> str:
        """API root, e.g. https://pce.example.com:8443/api/v2."""
        return f"https://{self.fqdn}:{self.port}{API_PATH}"

    @property
    def org_url(self) -> str:
        """Organization root, e.g. https://pce.example.com:8443/api/v2/orgs/1."""
        return f"{self.base_url}/orgs/{self.org_id}"

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.executor.close()

    async def __aenter__(self) -> "PCEClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def request(
        self,
        method: str,
        url: str,
        body: bytes | None = None,
        async_: bool = False,
        headers: dict[str, str] | None = None,
    ) -> APIResponse:
        """
        Make an API call, retrying on 429.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            url: Absolute API URL
            body: Serialized JSON body
            async_: Use the async job protocol
            headers: Header overrides

        Returns:
            APIResponse. Non-2xx responses other than 429 are returned with `error` set.
            Calls that needed 429 retries carry a note in `warnings`.

        Raises:
            RateLimitExhaustedError: Still 429 after max_retries retries
            ValidationError, TransportError, AsyncProtocolError, AsyncJobFailedError:
                propagated unchanged from the executor
        """

        def _exhausted(retry_state: Any) -> None:
            last = retry_state.outcome.result()
            raise RateLimitExhaustedError(
                f"received {self.max_retries} 429 errors with "
                f"{self.backoff_seconds:g} second pauses between attempts",
                response=last,
            )

        retrying = AsyncRetrying(
            retry=retry_if_result(_is_rate_limited),
            wait=wait_fixed(self.backoff_seconds),
            stop=stop_after_attempt(self.max_retries + 1),
            before_sleep=log_retry,
            retry_error_callback=_exhausted,
            sleep=self._sleep,
        )

        attempts = 0
        async for attempt in retrying:
            attempts += 1
            with attempt:
                response = await self.executor.execute(method, url, body, headers, async_)
            if not attempt.retry_state.outcome.failed:
                attempt.retry_state.set_result(response)

        if attempts > 1:
            response.warnings.append(
                f"rate limited: succeeded after {attempts - 1} retries with "
                f"{self.backoff_seconds:g} second pauses"
            )
        return response

    async def get_collection(
        self,
        endpoint: str,
        async_: bool = False,
        query: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> tuple[APIResponse, list[dict[str, Any]]]:
        """
        GET a collection below the organization.

        Args:
            endpoint: Path below /orgs/<id>, e.g. /sec_policy/draft/label_groups
            async_: Use the async job protocol (needed for more than 500 items)
            query: Query parameters for filtering
            headers: Header overrides

        Returns:
            Tuple of (APIResponse, decoded JSON array)

        Raises:
            APIStatusError: On a non-2xx response
            ProtocolError: If the body is not a JSON array
        """
        url = httpx.URL(self.org_url + "/" + endpoint.lstrip("/"), params=query or {})
        api = await self.request("GET", str(url), async_=async_, headers=headers)
        api.raise_for_status()
        try:
            items = api.json() if api.body else []
        except json.JSONDecodeError as e:
            raise ProtocolError(f"collection body is not valid JSON: {e}") from e
        if not isinstance(items, list):
            raise ProtocolError("collection body is not a JSON array")
        return api, items

    async def post(self, endpoint: str, payload: bytes) -> tuple[APIResponse, dict[str, Any]]:
        """
        POST a JSON body to an endpoint below the organization.

        Returns:
            Tuple of (APIResponse, decoded created object)

        Raises:
            APIStatusError: On a non-2xx response
        """
        url = self.org_url + "/" + endpoint.lstrip("/")
        api = await self.request(
            "POST", url, body=payload, headers={"Content-Type": "application/json"},
        )
        api.raise_for_status()
        return api, api.json() if api.body else {}

    async def put(self, href: str, payload: bytes) -> APIResponse:
        """
        PUT a JSON body to a resource href (e.g. /orgs/1/sec_policy/draft/label_groups/7).

        Raises:
            APIStatusError: On a non-2xx response
        """
        api = await self.request(
            "PUT", self.base_url + href, body=payload, headers={"Content-Type": "application/json"},
        )
        return api.raise_for_status()

    async def delete(self, href: str) -> APIResponse:
        """
        DELETE a resource href.

        Raises:
            APIStatusError: On a non-2xx response
        """
        api = await self.request("DELETE", self.base_url + href)
        return api.raise_for_status()
