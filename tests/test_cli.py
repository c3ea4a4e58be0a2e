"""Test the resty command."""

import json
from unittest.mock import patch

import httpx
import pytest

from resty import cli
from resty.client import AsyncResty


@pytest.fixture
def patched_client(transport):
    """Route the CLI's client through the recording transport."""

    def factory(**kwargs):
        return AsyncResty(transport=transport, **kwargs)

    with patch("resty.cli.AsyncResty", side_effect=factory) as client_cls, \
         patch("resty.cli.load_dotenv_for_sdk"):
        yield client_cls


class TestParser:
    """Test argument parsing."""

    def test_method_is_case_insensitive(self):
        args = cli.build_parser().parse_args(["get", "https://x.test"])
        assert args.method == "GET"

    def test_entities(self):
        args = cli.build_parser().parse_args(
            ["GET", "https://x.test", "-H", "Accept: text/plain", "-p", "q=a=b"]
        )
        assert args.headers[0].as_pair() == ("Accept", "text/plain")
        assert args.params[0].as_pair() == ("q", "a=b")

    def test_bad_header(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["GET", "https://x.test", "-H", "no-separator"])

    def test_unknown_method(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["TRACE", "https://x.test"])


class TestMain:
    """Test running requests from the command line."""

    @pytest.mark.asyncio
    async def test_get(self, patched_client, handler, base_url, capsys):
        code = await cli.main(["GET", f"{base_url}/items", "-p", "page=3"])

        assert code == 0
        assert handler.last.url.params["page"] == "3"
        out = capsys.readouterr().out
        assert "HTTP 200" in out
        assert '{"ok": true}' in out

    @pytest.mark.asyncio
    async def test_post_data(self, patched_client, handler, base_url):
        code = await cli.main(
            ["POST", base_url, "-d", '{"a": 1}', "--read-timeout", "1200", "--dev"]
        )

        assert code == 0
        assert json.loads(handler.last.content) == {"a": 1}
        assert handler.last.extensions["timeout"]["read"] == 1.2
        assert patched_client.call_args.kwargs["dev_mode"] is True

    @pytest.mark.asyncio
    async def test_body_ignored_for_get(self, patched_client, handler, base_url):
        await cli.main(["GET", base_url, "-d", "ignored"])
        assert handler.last.content == b""

    @pytest.mark.asyncio
    async def test_non_success_exit_code(self, patched_client, handler, base_url):
        handler.status = 404
        assert await cli.main(["DELETE", base_url]) == 1

    @pytest.mark.asyncio
    async def test_negative_timeout(self, patched_client, handler, base_url, capsys):
        assert await cli.main(["GET", base_url, "--connect-timeout=-5"]) == 1
        assert handler.requests == []
        assert "HTTP" not in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_invalid_environment(self, patched_client, handler, base_url):
        with patch.dict("os.environ", {"RESTY_READ_TIMEOUT": "soon"}):
            assert await cli.main(["GET", base_url]) == 1
        assert handler.requests == []

    @pytest.mark.asyncio
    async def test_request_failure(self, patched_client, handler, base_url, capsys):
        handler.error = httpx.ConnectError
        assert await cli.main(["GET", base_url]) == 1
        assert "HTTP" not in capsys.readouterr().out
