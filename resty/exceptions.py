"""Exception classes for Resty.

Transport problems are translated into these exceptions so callers never
have to catch ``httpx`` errors directly. Non-2xx responses are not errors
by themselves: they are reported through ``RestResponse.success``.
"""

from __future__ import annotations


class RestyError(Exception):
    """Base exception for all Resty errors.

    Catch this to handle every failure raised by the library with a
    single except clause.
    """

    pass


class HTTPError(RestyError):
    """Raised by ``RestResponse.raise_for_status`` for non-2xx statuses.

    Attributes
    ----------
    status_code : int
        The HTTP status code (e.g., 400, 401, 404, 500)
    body : str
        The response body, typically containing error details
    """

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"HTTP {status_code}: {body}")


class ConnectionError(RestyError):
    """Raised when the endpoint cannot be reached in time.

    Covers refused connections, DNS failures and both connect and read
    timeouts.

    Attributes
    ----------
    url : str
        The URL that failed to connect
    original_error : Exception
        The underlying exception that caused the connection failure
    """

    def __init__(self, url: str, original_error: Exception):
        self.url = url
        self.original_error = original_error
        super().__init__(f"Failed to connect to {url}: {original_error}")


class RequestError(RestyError):
    """Raised for any other transport failure while performing a request."""

    def __init__(self, method: str, url: str, original_error: Exception):
        self.method = method
        self.url = url
        self.original_error = original_error
        super().__init__(f"{method} {url} failed: {original_error}")


class ResponseDecodeError(RestyError):
    """Raised when a response body cannot be decoded into the requested type."""

    def __init__(self, body: str, original_error: Exception):
        self.body = body
        self.original_error = original_error
        super().__init__(f"Cannot decode response body: {original_error}")


class ClientBuildError(RestyError):
    """Raised when the underlying HTTP client cannot be constructed."""
