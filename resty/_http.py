"""Internal factory for the httpx clients used by Resty.

Every request gets its own client configured with the request's timeouts.
In development mode the client skips TLS certificate and hostname checks.
"""

from __future__ import annotations

import logging
import ssl
from dataclasses import dataclass
from typing import Optional, Union

import httpx

from .config import DEFAULT_CONNECTION_TIMEOUT, DEFAULT_READ_TIMEOUT
from .exceptions import ClientBuildError, ConnectionError, RequestError

logger = logging.getLogger(__name__)


# httpx failures that do not derive from httpx.HTTPError
HTTPX_ERRORS = (httpx.HTTPError, httpx.InvalidURL, httpx.CookieConflict, httpx.StreamError)


def translate_error(method: str, url: str, exc: Exception) -> Exception:
    """Map an httpx failure onto the matching Resty exception."""
    if isinstance(exc, (httpx.ConnectError, httpx.TimeoutException)):
        return ConnectionError(url, exc)
    return RequestError(method, url, exc)


@dataclass
class TimeoutConfig:
    """Request timeouts in milliseconds. 0 disables a limit."""

    connect: int = DEFAULT_CONNECTION_TIMEOUT
    read: int = DEFAULT_READ_TIMEOUT

    def to_httpx(self) -> httpx.Timeout:
        connect = _seconds(self.connect)
        read = _seconds(self.read)
        return httpx.Timeout(connect=connect, read=read, write=read, pool=connect)


def _seconds(millis: int) -> Optional[float]:
    if millis < 0:
        raise ValueError(f"Timeout must not be negative, got {millis}")
    return millis / 1000 if millis else None


def insecure_ssl_context() -> ssl.SSLContext:
    """Build a TLS context that trusts any certificate and any hostname."""
    try:
        context = ssl.create_default_context()
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    except ssl.SSLError as exc:
        raise ClientBuildError(f"Cannot generate client: {exc}") from exc
    return context


def _verify(dev_mode: bool) -> Union[bool, ssl.SSLContext]:
    if dev_mode:
        logger.warning("Dev mode is active, TLS certificates will not be verified")
        return insecure_ssl_context()
    logger.debug("Dev mode is not active")
    return True


def build_client(
    timeout_config: TimeoutConfig,
    dev_mode: bool = False,
    transport: Optional[httpx.BaseTransport] = None,
) -> httpx.Client:
    """Create a synchronous client for a single request."""
    logger.debug("Generating client")
    client = httpx.Client(
        timeout=timeout_config.to_httpx(),
        verify=_verify(dev_mode),
        transport=transport,
    )
    logger.debug("Client generated")
    return client


def build_async_client(
    timeout_config: TimeoutConfig,
    dev_mode: bool = False,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Create an asyncio client for a single request."""
    logger.debug("Generating async client")
    client = httpx.AsyncClient(
        timeout=timeout_config.to_httpx(),
        verify=_verify(dev_mode),
        transport=transport,
    )
    logger.debug("Async client generated")
    return client
