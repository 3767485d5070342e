"""
Base Service.

Base class for PCE resource services. Services wrap the API client with
resource-specific paths, input validation and model decoding.

Usage:
    from pceclient.services.base import BaseService

    class RulesetService(BaseService):
        async def get_rulesets(self, status: str) -> APIResponse:
            status = self._validate_policy_status(status)
            api, items = await self.client.get_collection(f"/sec_policy/{status}/rule_sets")
            ...
"""

from typing import Any

from pceclient.api.client import PCEClient
from pceclient.core.exceptions import ValidationError
from pceclient.core.logging import get_logger

POLICY_STATUSES = ("draft", "active")


class BaseService:
    """
    Base class for all PCE resource services.

    Provides:
    - Access to the shared PCEClient
    - Logging context
    - Common validation patterns
    """

    def __init__(self, client: PCEClient) -> None:
        """
        Initialize the service with an API client.

        Args:
            client: Client for the PCE organization
        """
        self._client = client
        self._logger = get_logger(self.__class__.__module__)

    @property
    def client(self) -> PCEClient:
        """Get the API client."""
        return self._client

    def _validate_policy_status(self, status: str) -> str:
        """
        Normalize and validate a policy version status.

        Args:
            status: "draft" or "active", any case

        Returns:
            The lower-cased status

        Raises:
            ValidationError: For any other value
        """
        normalized = (status or "").lower()
        if normalized not in POLICY_STATUSES:
            raise ValidationError(
                "invalid status",
                details={"status": status, "allowed": list(POLICY_STATUSES)},
            )
        return normalized

    def _validate_required(
        self,
        fields: dict[str, Any],
        field_names: list[str],
    ) -> None:
        """
        Validate that required fields are present and not empty.

        Args:
            fields: Dictionary of field names to values
            field_names: List of required field names

        Raises:
            ValidationError: If any required field is missing or empty
        """
        missing = []
        for name in field_names:
            value = fields.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)

        if missing:
            raise ValidationError(
                "Required fields missing",
                details={"missing_fields": missing},
            )

    def _log_operation(
        self,
        operation: str,
        **context: Any,
    ) -> None:
        """Log a service operation with context."""
        self._logger.info(
            operation,
            extra={"service": self.__class__.__name__, **context},
        )

    def _log_debug(
        self,
        message: str,
        **context: Any,
    ) -> None:
        """Log debug information."""
        self._logger.debug(
            message,
            extra={"service": self.__class__.__name__, **context},
        )
