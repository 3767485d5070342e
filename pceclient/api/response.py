"""
Response Envelopes.

Every API operation returns an APIResponse, success or failure. A response
with a status outside 200-299 is still a complete envelope: the body,
headers and originating request are kept and `error` describes the failure.

AsyncJobStatus is the decoded body of a job-status resource polled during
the async protocol.
"""

import json
from dataclasses import dataclass, field
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from pceclient.core.exceptions import APIStatusError

JOB_STATUS_DONE = "done"
JOB_STATUS_FAILED = "failed"


class ErrorDetail(BaseModel):
    """Error detail structure."""

    code: str
    message: str
    details: dict[str, Any] | None = None


@dataclass
class APIResponse:
    """Uniform result of an API call.

    Attributes:
        body: Raw response body text
        status_code: HTTP status code of the final response
        headers: Response headers
        request: The httpx.Request that produced the final response
        request_body: Body sent with the original request, decoded as text
        warnings: Non-fatal notes gathered while processing the call
        error: Set when the status code is outside 200-299
    """

    body: str
    status_code: int
    headers: httpx.Headers
    request: httpx.Request | None = None
    request_body: str = ""
    warnings: list[str] = field(default_factory=list)
    error: ErrorDetail | None = None

    @classmethod
    def from_httpx(cls, response: httpx.Response, request_body: bytes | None = None) -> "APIResponse":
        envelope = cls(
            body=response.text,
            status_code=response.status_code,
            headers=response.headers,
            request=response.request,
            request_body=request_body.decode("utf-8", errors="replace") if request_body else "",
        )
        if not envelope.is_success_status:
            envelope.error = ErrorDetail(
                code="HTTP_STATUS",
                message=f"http status code of {response.status_code}",
                details={"body": envelope.body} if envelope.body else None,
            )
        return envelope

    @property
    def is_success_status(self) -> bool:
        return 200 <= self.status_code <= 299

    @property
    def ok(self) -> bool:
        """True when the call succeeded."""
        return self.error is None

    def json(self) -> Any:
        """Decode the body as JSON."""
        return json.loads(self.body)

    def raise_for_status(self) -> "APIResponse":
        """Raise APIStatusError if this envelope carries an error, else return self."""
        if self.error is not None:
            raise APIStatusError(self, self.error.message)
        return self


class HrefRef(BaseModel):
    """A bare `{"href": ...}` reference."""

    href: str = ""

    model_config = ConfigDict(extra="ignore")

    @field_validator("href", mode="before")
    @classmethod
    def _non_string_as_empty(cls, value: Any) -> Any:
        return value if isinstance(value, str) else ""


class AsyncJobStatus(BaseModel):
    """Server-side record of a deferred operation.

    The zero value (every field empty) stands for a status that could not be
    read; it is never terminal. Only a body that is not a JSON object
    decodes to it wholesale.
    """

    href: str = ""
    job_type: str = ""
    description: str = ""
    status: str = ""
    result: HrefRef = Field(default_factory=HrefRef)
    requested_at: str = ""
    terminated_at: str = ""
    requested_by: HrefRef = Field(default_factory=HrefRef)

    model_config = ConfigDict(extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def _mismatch_as_default(cls, value: Any, info: ValidationInfo) -> Any:
        # Fields decode independently: a null or mistyped field (running jobs
        # report terminated_at as null) falls back to its default
        default = cls.model_fields[info.field_name].get_default(call_default_factory=True)
        if isinstance(default, HrefRef):
            return value if isinstance(value, (dict, HrefRef)) else default
        return value if isinstance(value, str) else default

    @property
    def is_done(self) -> bool:
        return self.status == JOB_STATUS_DONE

    @property
    def is_failed(self) -> bool:
        return self.status == JOB_STATUS_FAILED

    @property
    def is_zero(self) -> bool:
        return not self.status
