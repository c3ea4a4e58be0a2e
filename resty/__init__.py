"""Resty: one method per HTTP verb, blocking or asynchronous, over httpx."""

from .client import AsyncResty, Resty
from .config import RestyConfig, get_config, load_dotenv_for_sdk
from .entity import NO_BODY, NO_ENTITY, RestEntity, RestEntityType, TypedRestEntity
from .exceptions import (
    ClientBuildError,
    ConnectionError,
    HTTPError,
    RequestError,
    ResponseDecodeError,
    RestyError,
)
from .response import AsyncRestResponse, RestResponse

__all__ = [
    "AsyncRestResponse",
    "AsyncResty",
    "ClientBuildError",
    "ConnectionError",
    "HTTPError",
    "NO_BODY",
    "NO_ENTITY",
    "RequestError",
    "ResponseDecodeError",
    "RestEntity",
    "RestEntityType",
    "RestResponse",
    "Resty",
    "RestyConfig",
    "RestyError",
    "TypedRestEntity",
    "get_config",
    "load_dotenv_for_sdk",
]
