"""Response wrappers returned by Resty clients."""

from __future__ import annotations

import json
import logging
import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from typing import Any, Optional, Type, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from ._http import HTTPX_ERRORS, translate_error
from .exceptions import HTTPError, ResponseDecodeError

logger = logging.getLogger(__name__)

MIN_SUCCESS_CODE = 200
MAX_SUCCESS_CODE = 300

T = TypeVar("T")


@dataclass(frozen=True)
class RestResponse:
    """Status and body of a completed request.

    Parameters
    ----------
    status : int
        The HTTP status code
    body : str
        The decoded response text
    content : bytes, optional
        The raw payload. Defaults to ``body`` encoded as UTF-8

    Notes
    -----
    ``success`` is derived from ``status`` and is true for 2xx codes only.
    Non-2xx responses are returned, not raised; use ``raise_for_status``
    to turn them into ``HTTPError``.
    """

    status: int
    body: str
    content: bytes = field(default=b"", repr=False)
    success: bool = field(init=False)

    def __post_init__(self) -> None:
        if not self.content and self.body:
            object.__setattr__(self, "content", self.body.encode("utf-8"))
        object.__setattr__(
            self, "success", self.verify_status(MIN_SUCCESS_CODE, MAX_SUCCESS_CODE)
        )

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> "RestResponse":
        """Wrap a fully read httpx response."""
        return cls(status=response.status_code, body=response.text, content=response.content)

    def verify_status(self, min: int, max: int) -> bool:
        """Return whether ``min <= status < max``."""
        return min <= self.status < max

    def json(self) -> Any:
        """Return the JSON-decoded body."""
        try:
            return json.loads(self.body)
        except ValueError as exc:
            raise ResponseDecodeError(self.body, exc) from exc

    def get_body(self, model: Type[T]) -> T:
        """Decode the JSON body into ``model``.

        ``model`` may be a pydantic model or any type pydantic can validate,
        such as ``dict[str, int]`` or ``list[SomeModel]``.

        Raises
        ------
        ResponseDecodeError
            If the body is not valid JSON or does not match ``model``
        """
        try:
            return TypeAdapter(model).validate_json(self.body)
        except ValidationError as exc:
            raise ResponseDecodeError(self.body, exc) from exc

    def raise_for_status(self) -> "RestResponse":
        """Raise ``HTTPError`` unless the response is successful."""
        if not self.success:
            raise HTTPError(self.status, self.body)
        return self


class AsyncRestResponse:
    """Handle on a request running in a worker thread.

    The request is already in flight when the handle is created.
    ``wait_for_response`` blocks until it finishes, wraps the result and
    releases the client; the wrapped response is cached so later calls
    return immediately.

    Cancellation and timeouts follow ``concurrent.futures.Future``: a
    ``wait_for_response(timeout=...)`` that expires raises
    ``concurrent.futures.TimeoutError`` and leaves the handle usable, and
    waiting on a cancelled handle raises ``CancelledError``.
    """

    def __init__(
        self,
        client: httpx.Client,
        future: "Future[httpx.Response]",
        method: str = "",
        url: str = "",
    ):
        self._client = client
        self._future = future
        self._method = method
        self._url = url
        self._rest_response: Optional[RestResponse] = None
        self._lock = threading.Lock()
        self._closed = False

    def __repr__(self) -> str:
        state = "done" if self._future.done() else "pending"
        return f"AsyncRestResponse({self._method} {self._url}, {state})"

    @property
    def rest_response(self) -> Optional[RestResponse]:
        """The cached response, or None until ``wait_for_response`` succeeds."""
        return self._rest_response

    def wait_for_response(self, timeout: Optional[float] = None) -> RestResponse:
        """Block until the response is available and return it.

        Parameters
        ----------
        timeout : float, optional
            Seconds to wait. Waits indefinitely when omitted

        Raises
        ------
        ConnectionError
            If the endpoint could not be reached or timed out
        RequestError
            For other transport failures
        """
        with self._lock:
            if self._rest_response is not None:
                return self._rest_response

            # the client stays open only while the request may still finish
            keep_open = False
            try:
                response = self._future.result(timeout=timeout)
                self._rest_response = RestResponse.from_httpx(response)
            except FutureTimeoutError:
                keep_open = True
                raise
            except HTTPX_ERRORS as exc:
                raise translate_error(self._method, self._url, exc) from exc
            finally:
                if not keep_open:
                    self.close()

            logger.debug("Async %s request completed", self._method)
            return self._rest_response

    def done(self) -> bool:
        return self._future.done()

    def cancel(self) -> bool:
        """Try to cancel the request. Only possible before it started running."""
        cancelled = self._future.cancel()
        if cancelled:
            self.close()
        return cancelled

    def close(self) -> None:
        """Release the underlying client."""
        if not self._closed:
            self._client.close()
            self._closed = True
