"""
Async Job Poller.

Follows the PCE async protocol after a request sent with
`Prefer: respond-async`:

    initial response  → Location: /orgs/1/jobs/<id>, Retry-After: <seconds>
    GET Location      → {"status": "running", ...}   (repeat)
    GET Location      → {"status": "done", "result": {"href": ...}}

Every poll sleeps for the Retry-After of the initial response before
checking again. There is no cap on well-formed "still running" answers;
callers wanting a deadline wrap the call in asyncio.timeout(). A run of
unreadable status payloads is capped by `max_malformed_polls`.
"""

import asyncio
from collections.abc import Awaitable, Callable

import httpx
from pydantic import ValidationError as PydanticValidationError

from pceclient.api.response import AsyncJobStatus
from pceclient.core.exceptions import AsyncJobFailedError, AsyncProtocolError
from pceclient.core.logging import get_logger, log_verbose

logger = get_logger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


def parse_retry_after(response: httpx.Response) -> int:
    """Read the Retry-After header as whole seconds.

    Raises:
        AsyncProtocolError: If the header is missing, non-numeric or negative
    """
    raw = response.headers.get("Retry-After")
    if raw is None:
        raise AsyncProtocolError("async response is missing the Retry-After header")
    try:
        wait = int(raw)
    except ValueError:
        raise AsyncProtocolError(f"invalid Retry-After header: {raw!r}") from None
    if wait < 0:
        raise AsyncProtocolError(f"invalid Retry-After header: {raw!r}")
    return wait


def parse_location(response: httpx.Response) -> str:
    """Read the Location header pointing at the job-status resource."""
    location = response.headers.get("Location")
    if not location:
        raise AsyncProtocolError("async response is missing the Location header")
    return location


class AsyncPoller:
    """
    Polls a job-status resource until the job is done.

    The poller shares the transport's httpx client, so TLS, proxy and basic
    auth settings apply to status checks as well.
    """

    def __init__(
        self,
        client_factory: Callable[[], Awaitable[httpx.AsyncClient]],
        *,
        sleep: SleepFunc = asyncio.sleep,
        max_malformed_polls: int = 5,
        verbose: bool = False,
    ) -> None:
        self._client_factory = client_factory
        self._sleep = sleep
        self.max_malformed_polls = max_malformed_polls
        self.verbose = verbose

    async def poll(self, base_url: str, initial_response: httpx.Response) -> AsyncJobStatus:
        """
        Run one poll attempt: sleep for Retry-After, then read the job status.

        Args:
            base_url: API base URL (https://host:port/api/v2) the Location is relative to
            initial_response: The response that accepted the async request

        Returns:
            The decoded job status. A non-2xx answer or an unreadable body
            yields the zero-valued status.

        Raises:
            AsyncProtocolError: If Location or Retry-After is missing or invalid
            httpx.TransportError: On connection failure (wrapped by the executor)
        """
        location = parse_location(initial_response)
        wait = parse_retry_after(initial_response)
        url = base_url + location

        log_verbose(logger, self.verbose, "Sleeping for Retry-After period", seconds=wait)
        await self._sleep(wait)

        client = await self._client_factory()
        log_verbose(logger, self.verbose, "Checking async job status", url=url)
        response = await client.get(url, headers={"Content-Type": "application/json"})
        log_verbose(
            logger, self.verbose, "Async job status response",
            url=url, status_code=response.status_code,
        )

        if not 200 <= response.status_code <= 299:
            return AsyncJobStatus()
        try:
            return AsyncJobStatus.model_validate_json(response.content)
        except PydanticValidationError:
            return AsyncJobStatus()

    async def wait(self, base_url: str, initial_response: httpx.Response, target: str = "") -> AsyncJobStatus:
        """
        Poll until the job reports done.

        Args:
            base_url: API base URL the Location header is relative to
            initial_response: The response that accepted the async request
            target: Resource being fetched, for diagnostics only

        Returns:
            The terminal job status, with a result href

        Raises:
            AsyncProtocolError: Bad headers, too many unreadable statuses in a row,
                or a finished job without a result href
            AsyncJobFailedError: The server reports the job as failed
        """
        # Fail on bad hints before the first sleep
        parse_location(initial_response)
        parse_retry_after(initial_response)

        log_verbose(logger, self.verbose, "Starting async polling", target=target)
        status = AsyncJobStatus()
        attempt = 0
        malformed = 0
        while not status.is_done:
            attempt += 1
            log_verbose(
                logger, self.verbose, "Checking async results",
                target=target, attempt=attempt,
            )
            status = await self.poll(base_url, initial_response)

            if status.is_failed:
                raise AsyncJobFailedError(
                    f"async job for {target or 'request'} failed",
                    job_href=status.href or None,
                )
            if status.is_zero:
                malformed += 1
                logger.warning(
                    "Unreadable async job status",
                    extra={"target": target, "attempt": attempt, "malformed": malformed},
                )
                if malformed >= self.max_malformed_polls:
                    raise AsyncProtocolError(
                        f"async job status unreadable after {malformed} consecutive polls"
                    )
            else:
                malformed = 0

        if not status.result.href:
            raise AsyncProtocolError("async job finished without a result href")

        log_verbose(logger, self.verbose, "Async polling done", target=target, attempts=attempt)
        return status
