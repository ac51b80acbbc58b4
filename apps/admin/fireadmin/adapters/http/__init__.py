"""HTTP transport adapters."""

from .base import HttpResponse, HttpTransport, raise_for_status
from .mock_transport import MockTransport, RecordedRequest, json_response
from .requests_transport import RequestsTransport

__all__ = [
    "HttpResponse",
    "HttpTransport",
    "raise_for_status",
    "MockTransport",
    "RecordedRequest",
    "json_response",
    "RequestsTransport",
]
