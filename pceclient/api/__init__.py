"""
API Layer.

Transport executor, async poller and request orchestrator.
"""

from pceclient.api.client import PCEClient, clean_fqdn
from pceclient.api.response import APIResponse, AsyncJobStatus, ErrorDetail

__all__ = [
    "APIResponse",
    "AsyncJobStatus",
    "ErrorDetail",
    "PCEClient",
    "clean_fqdn",
]
