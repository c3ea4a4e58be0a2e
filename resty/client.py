"""Verb-per-method HTTP clients.

``Resty`` performs blocking requests and can hand requests off to a worker
pool (the ``async_*`` methods, returning ``AsyncRestResponse`` handles).
``AsyncResty`` exposes the same verbs as coroutines for asyncio code.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Mapping, Optional, Sequence

import httpx
from pydantic import TypeAdapter

from ._http import (
    HTTPX_ERRORS,
    TimeoutConfig,
    build_async_client,
    build_client,
    translate_error,
)
from .config import RestyConfig, get_config
from .entity import NO_BODY, RestEntity, TypedRestEntity
from .response import AsyncRestResponse, RestResponse

logger = logging.getLogger(__name__)

FORM_MEDIA_TYPE = "application/x-www-form-urlencoded"


def _essence(media_type: str) -> str:
    return media_type.split(";", 1)[0].strip().lower()


def _is_json(media_type: str) -> bool:
    essence = _essence(media_type)
    return essence == "application/json" or essence.endswith("+json")


def _encode_body(body: Any, media_type: str) -> dict[str, Any]:
    """Return the httpx keyword arguments carrying ``body``."""
    if body is NO_BODY:
        return {}

    if isinstance(body, (bytes, str)):
        return {"content": body}
    if _is_json(media_type):
        return {"content": TypeAdapter(type(body)).dump_json(body)}
    if _essence(media_type) == FORM_MEDIA_TYPE and isinstance(body, Mapping):
        return {"data": dict(body)}
    return {"content": str(body)}


class _RestyBase:
    """Default resolution and request preparation shared by both clients."""

    def __init__(
        self,
        dev_mode: Optional[bool] = None,
        config: Optional[RestyConfig] = None,
    ):
        self.config = config or get_config()
        self.dev_mode = self.config.dev_mode if dev_mode is None else dev_mode

    def get_default_connection_timeout(self) -> int:
        """Default connection timeout in milliseconds."""
        return self.config.connection_timeout

    def get_default_read_timeout(self) -> int:
        """Default read timeout in milliseconds."""
        return self.config.read_timeout

    def _resolve_timeouts(
        self, connection_timeout: Optional[int], read_timeout: Optional[int]
    ) -> TimeoutConfig:
        if connection_timeout is None:
            connection_timeout = self.get_default_connection_timeout()
            logger.debug("Using default value as %s for connection timeout", connection_timeout)
        if read_timeout is None:
            read_timeout = self.get_default_read_timeout()
            logger.debug("Using default value as %s for read timeout", read_timeout)
        return TimeoutConfig(connect=connection_timeout, read=read_timeout)

    def _resolve_media_type(self, media_type: Optional[str]) -> str:
        if media_type is None:
            media_type = self.config.media_type
            logger.debug("Using default value as %s for media type", media_type)
        return media_type

    def _request_kwargs(
        self,
        entities: Sequence[Optional[RestEntity]],
        body: Any,
        media_type: Optional[str],
    ) -> dict[str, Any]:
        typed = TypedRestEntity.build_from_entities(entities)
        logger.debug("Setting headers for request")
        headers = typed.header_pairs()
        kwargs: dict[str, Any] = {}

        if body is not NO_BODY:
            media_type = self._resolve_media_type(media_type)
            headers.append(("Content-Type", media_type))
            kwargs.update(_encode_body(body, media_type))

        kwargs["headers"] = headers
        if typed.parameters:
            logger.debug("Setting query parameters for request")
            kwargs["params"] = typed.parameter_pairs()
        return kwargs


class Resty(_RestyBase):
    """Blocking HTTP client with one method per verb.

    Each request builds its own httpx client with the request's timeouts
    and closes it once the response has been read. The ``async_*`` methods
    run the request in a thread pool and return an ``AsyncRestResponse``.

    Parameters
    ----------
    dev_mode : bool, optional
        Accept any TLS certificate. Defaults to the configuration's value.
        Never enable it for production traffic
    config : RestyConfig, optional
        Default timeouts and media type. Defaults to ``get_config()``
    transport : httpx.BaseTransport, optional
        Transport handed to every client, e.g. ``httpx.MockTransport``
    max_workers : int, optional
        Size of the pool used by the ``async_*`` methods

    Examples
    --------
    >>> with Resty() as resty:
    ...     response = resty.get(url, RestEntity.with_parameter("page", 2))
    ...     handle = resty.async_post(url, {"name": "x"})
    ...     created = handle.wait_for_response()
    """

    def __init__(
        self,
        dev_mode: Optional[bool] = None,
        config: Optional[RestyConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
        max_workers: Optional[int] = None,
    ):
        super().__init__(dev_mode=dev_mode, config=config)
        self._transport = transport
        self._max_workers = max_workers or self.config.max_workers
        self._executor: Optional[ThreadPoolExecutor] = None
        self._executor_lock = threading.Lock()

    def __enter__(self) -> "Resty":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Wait for pending futures and shut the worker pool down."""
        with self._executor_lock:
            if self._executor is not None:
                self._executor.shutdown(wait=True)
                self._executor = None

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers, thread_name_prefix="resty"
                )
            return self._executor

    # ---------------- generic dispatch -----------------

    def request(
        self,
        method: str,
        endpoint: str,
        *entities: Optional[RestEntity],
        body: Any = NO_BODY,
        media_type: Optional[str] = None,
        connection_timeout: Optional[int] = None,
        read_timeout: Optional[int] = None,
    ) -> RestResponse:
        """Perform a request and wait for its response.

        Raises
        ------
        ConnectionError
            If the endpoint could not be reached or timed out
        RequestError
            For other transport failures
        """
        method = method.upper()
        logger.info("Building request for %s method", method)
        timeouts = self._resolve_timeouts(connection_timeout, read_timeout)
        kwargs = self._request_kwargs(entities, body, media_type)

        client = build_client(timeouts, self.dev_mode, self._transport)
        try:
            logger.info("Making %s request", method)
            response = client.request(method, endpoint, **kwargs)
        except HTTPX_ERRORS as exc:
            raise translate_error(method, endpoint, exc) from exc
        finally:
            client.close()

        logger.info("%s request completed", method)
        return RestResponse.from_httpx(response)

    def submit(
        self,
        method: str,
        endpoint: str,
        *entities: Optional[RestEntity],
        body: Any = NO_BODY,
        media_type: Optional[str] = None,
        connection_timeout: Optional[int] = None,
        read_timeout: Optional[int] = None,
    ) -> AsyncRestResponse:
        """Start a request in the worker pool and return its handle."""
        method = method.upper()
        logger.debug("Building request for async %s method", method)
        timeouts = self._resolve_timeouts(connection_timeout, read_timeout)
        kwargs = self._request_kwargs(entities, body, media_type)

        client = build_client(timeouts, self.dev_mode, self._transport)
        logger.debug("Making async %s request", method)
        try:
            future = self._get_executor().submit(client.request, method, endpoint, **kwargs)
        except BaseException:
            client.close()
            raise
        logger.debug("Async %s request made", method)
        return AsyncRestResponse(client, future, method=method, url=endpoint)

    # ---------------- blocking verbs -----------------

    def get(
        self,
        endpoint: str,
        *entities: Optional[RestEntity],
        connection_timeout: Optional[int] = None,
        read_timeout: Optional[int] = None,
    ) -> RestResponse:
        """Perform a GET request."""
        return self.request(
            "GET",
            endpoint,
            *entities,
            connection_timeout=connection_timeout,
            read_timeout=read_timeout,
        )

    def post(
        self,
        endpoint: str,
        body: Any = NO_BODY,
        *entities: Optional[RestEntity],
        media_type: Optional[str] = None,
        connection_timeout: Optional[int] = None,
        read_timeout: Optional[int] = None,
    ) -> RestResponse:
        """Perform a POST request sending ``body`` as ``media_type``."""
        return self.request(
            "POST",
            endpoint,
            *entities,
            body=body,
            media_type=media_type,
            connection_timeout=connection_timeout,
            read_timeout=read_timeout,
        )

    def put(
        self,
        endpoint: str,
        body: Any = NO_BODY,
        *entities: Optional[RestEntity],
        media_type: Optional[str] = None,
        connection_timeout: Optional[int] = None,
        read_timeout: Optional[int] = None,
    ) -> RestResponse:
        """Perform a PUT request sending ``body`` as ``media_type``."""
        return self.request(
            "PUT",
            endpoint,
            *entities,
            body=body,
            media_type=media_type,
            connection_timeout=connection_timeout,
            read_timeout=read_timeout,
        )

    def patch(
        self,
        endpoint: str,
        body: Any = NO_BODY,
        *entities: Optional[RestEntity],
        media_type: Optional[str] = None,
        connection_timeout: Optional[int] = None,
        read_timeout: Optional[int] = None,
    ) -> RestResponse:
        """Perform a PATCH request sending ``body`` as ``media_type``."""
        return self.request(
            "PATCH",
            endpoint,
            *entities,
            body=body,
            media_type=media_type,
            connection_timeout=connection_timeout,
            read_timeout=read_timeout,
        )

    def delete(
        self,
        endpoint: str,
        *entities: Optional[RestEntity],
        connection_timeout: Optional[int] = None,
        read_timeout: Optional[int] = None,
    ) -> RestResponse:
        """Perform a DELETE request."""
        return self.request(
            "DELETE",
            endpoint,
            *entities,
            connection_timeout=connection_timeout,
            read_timeout=read_timeout,
        )

    # ---------------- future-based verbs -----------------

    def async_get(
        self,
        endpoint: str,
        *entities: Optional[RestEntity],
        connection_timeout: Optional[int] = None,
        read_timeout: Optional[int] = None,
    ) -> AsyncRestResponse:
        return self.submit(
            "GET",
            endpoint,
            *entities,
            connection_timeout=connection_timeout,
            read_timeout=read_timeout,
        )

    def async_post(
        self,
        endpoint: str,
        body: Any = NO_BODY,
        *entities: Optional[RestEntity],
        media_type: Optional[str] = None,
        connection_timeout: Optional[int] = None,
        read_timeout: Optional[int] = None,
    ) -> AsyncRestResponse:
        return self.submit(
            "POST",
            endpoint,
            *entities,
            body=body,
            media_type=media_type,
            connection_timeout=connection_timeout,
            read_timeout=read_timeout,
        )

    def async_put(
        self,
        endpoint: str,
        body: Any = NO_BODY,
        *entities: Optional[RestEntity],
        media_type: Optional[str] = None,
        connection_timeout: Optional[int] = None,
        read_timeout: Optional[int] = None,
    ) -> AsyncRestResponse:
        return self.submit(
            "PUT",
            endpoint,
            *entities,
            body=body,
            media_type=media_type,
            connection_timeout=connection_timeout,
            read_timeout=read_timeout,
        )

    def async_patch(
        self,
        endpoint: str,
        body: Any = NO_BODY,
        *entities: Optional[RestEntity],
        media_type: Optional[str] = None,
        connection_timeout: Optional[int] = None,
        read_timeout: Optional[int] = None,
    ) -> AsyncRestResponse:
        return self.submit(
            "PATCH",
            endpoint,
            *entities,
            body=body,
            media_type=media_type,
            connection_timeout=connection_timeout,
            read_timeout=read_timeout,
        )

    def async_delete(
        self,
        endpoint: str,
        *entities: Optional[RestEntity],
        connection_timeout: Optional[int] = None,
        read_timeout: Optional[int] = None,
    ) -> AsyncRestResponse:
        return self.submit(
            "DELETE",
            endpoint,
            *entities,
            connection_timeout=connection_timeout,
            read_timeout=read_timeout,
        )


class AsyncResty(_RestyBase):
    """Asyncio HTTP client with one coroutine per verb.

    Mirrors ``Resty``'s blocking methods; every call is awaited and returns
    a ``RestResponse``. Cancelling the awaiting task cancels the request.
    """

    def __init__(
        self,
        dev_mode: Optional[bool] = None,
        config: Optional[RestyConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(dev_mode=dev_mode, config=config)
        self._transport = transport

    async def request(
        self,
        method: str,
        endpoint: str,
        *entities: Optional[RestEntity],
        body: Any = NO_BODY,
        media_type: Optional[str] = None,
        connection_timeout: Optional[int] = None,
        read_timeout: Optional[int] = None,
    ) -> RestResponse:
        """Perform a request and return its response.

        Raises
        ------
        ConnectionError
            If the endpoint could not be reached or timed out
        RequestError
            For other transport failures
        """
        method = method.upper()
        logger.debug("Building request for async %s method", method)
        timeouts = self._resolve_timeouts(connection_timeout, read_timeout)
        kwargs = self._request_kwargs(entities, body, media_type)

        async with build_async_client(timeouts, self.dev_mode, self._transport) as client:
            try:
                logger.debug("Making async %s request", method)
                response = await client.request(method, endpoint, **kwargs)
            except HTTPX_ERRORS as exc:
                raise translate_error(method, endpoint, exc) from exc

        logger.debug("Async %s request completed", method)
        return RestResponse.from_httpx(response)

    async def get(
        self,
        endpoint: str,
        *entities: Optional[RestEntity],
        connection_timeout: Optional[int] = None,
        read_timeout: Optional[int] = None,
    ) -> RestResponse:
        return await self.request(
            "GET",
            endpoint,
            *entities,
            connection_timeout=connection_timeout,
            read_timeout=read_timeout,
        )

    async def post(
        self,
        endpoint: str,
        body: Any = NO_BODY,
        *entities: Optional[RestEntity],
        media_type: Optional[str] = None,
        connection_timeout: Optional[int] = None,
        read_timeout: Optional[int] = None,
    ) -> RestResponse:
        return await self.request(
            "POST",
            endpoint,
            *entities,
            body=body,
            media_type=media_type,
            connection_timeout=connection_timeout,
            read_timeout=read_timeout,
        )

    async def put(
        self,
        endpoint: str,
        body: Any = NO_BODY,
        *entities: Optional[RestEntity],
        media_type: Optional[str] = None,
        connection_timeout: Optional[int] = None,
        read_timeout: Optional[int] = None,
    ) -> RestResponse:
        return await self.request(
            "PUT",
            endpoint,
            *entities,
            body=body,
            media_type=media_type,
            connection_timeout=connection_timeout,
            read_timeout=read_timeout,
        )

    async def patch(
        self,
        endpoint: str,
        body: Any = NO_BODY,
        *entities: Optional[RestEntity],
        media_type: Optional[str] = None,
        connection_timeout: Optional[int] = None,
        read_timeout: Optional[int] = None,
    ) -> RestResponse:
        return await self.request(
            "PATCH",
            endpoint,
            *entities,
            body=body,
            media_type=media_type,
            connection_timeout=connection_timeout,
            read_timeout=read_timeout,
        )

    async def delete(
        self,
        endpoint: str,
        *entities: Optional[RestEntity],
        connection_timeout: Optional[int] = None,
        read_timeout: Optional[int] = None,
    ) -> RestResponse:
        return await self.request(
            "DELETE",
            endpoint,
            *entities,
            connection_timeout=connection_timeout,
            read_timeout=read_timeout,
        )
