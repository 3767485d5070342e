"""
Resilience Infrastructure.

Retry callbacks that emit structured resilience events. The only automatic
recovery in the client is the fixed-backoff retry on HTTP 429, built with
tenacity in pceclient.api.client.

Usage:
    from tenacity import AsyncRetrying, retry_if_result, stop_after_attempt, wait_fixed
    from pceclient.core.resilience import log_retry

    retrying = AsyncRetrying(
        retry=retry_if_result(lambda r: r.status_code == 429),
        wait=wait_fixed(30),
        stop=stop_after_attempt(7),
        before_sleep=log_retry,
    )

Filter the events from the JSONL log with:
    jq 'select(.extra.resilience_event != null)' logs/pceclient.jsonl
"""

from typing import Any

from pceclient.core.logging import get_logger

logger = get_logger(__name__)


def log_retry(retry_state: Any) -> None:
    """Tenacity before_sleep callback that emits structured retry events.

    Works for both exception and result based retries. For result based
    retries the status code of the rejected response is recorded.

    Args:
        retry_state: tenacity.RetryCallState instance
    """
    duration_ms = None
    if retry_state.outcome_timestamp and retry_state.start_time:
        duration_ms = round(
            (retry_state.outcome_timestamp - retry_state.start_time) * 1000
        )

    error = None
    status_code = None
    if retry_state.outcome is not None:
        if retry_state.outcome.failed:
            error = str(retry_state.outcome.exception())
        else:
            status_code = getattr(retry_state.outcome.result(), "status_code", None)

    sleep_seconds = None
    if retry_state.next_action is not None:
        sleep_seconds = retry_state.next_action.sleep

    fn_name = getattr(retry_state.fn, "__name__", None) or "request"

    logger.warning(
        f"Retrying {fn_name} (attempt {retry_state.attempt_number})",
        extra={
            "resilience_event": "retry_attempt",
            "dependency": fn_name,
            "attempt": retry_state.attempt_number,
            "duration_ms": duration_ms,
            "status_code": status_code,
            "sleep_seconds": sleep_seconds,
            "error": error,
        },
    )
