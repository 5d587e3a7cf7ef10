"""
Account Mining Errors.

Classified failures raised by the transport layer and the account pipeline.
Only ``RateLimitedError`` is retried; everything else surfaces to the caller.
"""

from typing import Optional


class DevyzerError(Exception):
    """Base class for all account analysis errors."""


class InvalidHandleError(DevyzerError, ValueError):
    """The input is neither a bare handle nor a GitHub profile URL."""


class AccountNotFoundError(DevyzerError):
    """The requested account does not exist upstream."""

    def __init__(self, handle: str):
        super().__init__(f"GitHub account '{handle}' not found")
        self.handle = handle


class AnalysisCancelledError(DevyzerError):
    """The caller's cancellation signal fired."""


class TransportError(DevyzerError):
    """
    A classified failure of one API call.

    Attributes:
        endpoint (str): Logical endpoint name, e.g. ``user.repos``
        status (Optional[int]): Upstream HTTP status, when known
    """

    def __init__(self, endpoint: str, message: str, status: Optional[int] = None):
        super().__init__(f"{endpoint}: {message}")
        self.endpoint = endpoint
        self.status = status


class NotFoundError(TransportError):
    """Upstream answered 404."""


class RateLimitedError(TransportError):
    """Upstream throttled the request."""


class MalformedResponseError(TransportError):
    """Upstream body could not be decoded into the expected shape."""


class GitHubAPIError(TransportError):
    """Any other non-success answer, including exhausted rate-limit retries."""
