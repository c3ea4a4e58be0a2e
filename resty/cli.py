"""Command-line utility for making one-off requests with Resty.

Example::

    resty GET https://example.test/items -p page=2 -H "Accept:application/json"
    resty POST https://localhost:8443/save -d '{"name": "x"}' --dev
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional, Sequence

from .client import AsyncResty
from .config import get_config, load_dotenv_for_sdk
from .entity import NO_BODY, RestEntity
from .exceptions import RestyError

logger = logging.getLogger(__name__)

METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")


def _split_pair(raw: str, separator: str) -> tuple[str, str]:
    name, sep, value = raw.partition(separator)
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(
            f"expected NAME{separator}VALUE, got {raw!r}"
        )
    return name.strip(), value.strip()


def _header(raw: str) -> RestEntity:
    return RestEntity.with_header(*_split_pair(raw, ":"))


def _parameter(raw: str) -> RestEntity:
    return RestEntity.with_parameter(*_split_pair(raw, "="))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="resty", description="Send an HTTP request and print the response."
    )
    parser.add_argument("method", type=str.upper, choices=METHODS)
    parser.add_argument("url")
    parser.add_argument(
        "-H", "--header", dest="headers", type=_header, action="append", default=[],
        metavar="NAME:VALUE",
    )
    parser.add_argument(
        "-p", "--param", dest="params", type=_parameter, action="append", default=[],
        metavar="NAME=VALUE",
    )
    parser.add_argument("-d", "--data", default=None, help="Request body, sent verbatim")
    parser.add_argument("--media-type", default=None)
    parser.add_argument("--connect-timeout", type=int, default=None, metavar="MS")
    parser.add_argument("--read-timeout", type=int, default=None, metavar="MS")
    parser.add_argument(
        "--dev", action="store_true", default=None,
        help="Skip TLS certificate validation (local and mock endpoints only)",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


async def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run a single request and print the result.

    Exit Codes
    ----------
    0 : 2xx response
    1 : Non-2xx response or request failure
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    entities: List[RestEntity] = [*args.headers, *args.params]
    body = NO_BODY if args.data is None else args.data
    if body is not NO_BODY and args.method in ("GET", "DELETE"):
        logger.warning("Ignoring request body for %s", args.method)
        body = NO_BODY

    load_dotenv_for_sdk()
    try:
        client = AsyncResty(dev_mode=args.dev, config=get_config(reload=True))
        response = await client.request(
            args.method,
            args.url,
            *entities,
            body=body,
            media_type=args.media_type,
            connection_timeout=args.connect_timeout,
            read_timeout=args.read_timeout,
        )
    except (RestyError, ValueError) as e:
        logger.error("Request failed: %s", e)
        return 1

    print(f"HTTP {response.status}")
    if response.body:
        print(response.body)
    return 0 if response.success else 1


def cli_main():
    """Entry point for the resty command."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli_main()
