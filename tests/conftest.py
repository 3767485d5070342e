"""
Root Pytest Fixtures.

Shared fixtures available to all test types.
"""

from typing import Any

import pytest


# =============================================================================
# Test Settings Fixtures
# =============================================================================


@pytest.fixture
def test_settings() -> dict[str, Any]:
    """
    Provide test-specific settings.

    Values used to build PCESchema and client credentials in tests.
    """
    return {
        "fqdn": "pce.example.com",
        "port": 8443,
        "org_id": 1,
        "user": "api_1a2b3c",
        "api_key": "test-api-key",
    }


# =============================================================================
# Utility Fixtures
# =============================================================================


@pytest.fixture
def anyio_backend() -> str:
    """Specify the async backend for anyio."""
    return "asyncio"
