"""Tests for the HTTP gateway used with ``--endpoint``."""

from unittest.mock import MagicMock

import httpx
import pytest

from ghostpad.core.exceptions import (
    AuthenticationError,
    CompletionParseError,
    InvalidSuffixError,
    UpstreamError,
)
from ghostpad.editor.gateway import ServiceGateway
from ghostpad.models.completion import Completion
from ghostpad.services.api_client import HttpCompletionGateway
from ghostpad.services.api_server import API_PATH


def _gateway(handler):
    return HttpCompletionGateway("http://ghostpad.test/", "geheim", transport=httpx.MockTransport(handler))


class TestHttpCompletionGateway:
    @pytest.mark.asyncio
    async def test_success(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(
                200,
                json={"suggestion": " ein Lehrsatz.", "promptTokens": 30, "completionTokens": 5, "response": {}},
            )

        gateway = _gateway(handler)
        result = await gateway.complete("Der Satz", "gpt-4o", "P")
        await gateway.aclose()

        assert result.text == " ein Lehrsatz."
        assert (result.prompt_tokens, result.completion_tokens) == (30, 5)
        assert result.model == "gpt-4o"
        request = seen[0]
        assert request.method == "POST"
        assert request.url.path == API_PATH
        assert request.url.params["suffix"] == "Der Satz"
        assert request.url.params["password"] == "geheim"
        assert request.url.params["model"] == "gpt-4o"

    @pytest.mark.asyncio
    async def test_unauthorized(self):
        gateway = _gateway(lambda request: httpx.Response(401, json={"error": "Invalid password"}))
        with pytest.raises(AuthenticationError, match="Invalid password"):
            await gateway.complete("x", "gpt-4o", "")
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_bad_request(self):
        gateway = _gateway(lambda request: httpx.Response(400, json={"error": "Invalid suffix"}))
        with pytest.raises(InvalidSuffixError):
            await gateway.complete("x", "gpt-4o", "")
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_server_error_keeps_payload(self):
        payload = {"error": "Invalid completion", "response": {"id": "bad"}}
        gateway = _gateway(lambda request: httpx.Response(500, json=payload))
        with pytest.raises(UpstreamError, match="HTTP 500") as exc:
            await gateway.complete("x", "gpt-4o", "")
        assert exc.value.response == payload
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        gateway = _gateway(lambda request: httpx.Response(502, text="<html>Bad Gateway</html>"))
        with pytest.raises(CompletionParseError, match="non-JSON"):
            await gateway.complete("x", "gpt-4o", "")
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_malformed_payload(self):
        gateway = _gateway(lambda request: httpx.Response(200, json={"completion": "x"}))
        with pytest.raises(CompletionParseError, match="Malformed"):
            await gateway.complete("x", "gpt-4o", "")
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        gateway = _gateway(handler)
        with pytest.raises(UpstreamError, match="refused"):
            await gateway.complete("x", "gpt-4o", "")
        await gateway.aclose()


class TestServiceGateway:
    @pytest.mark.asyncio
    async def test_runs_service_in_thread(self):
        service = MagicMock()
        service.complete.return_value = Completion(text=" x", model="gpt-4o")
        result = await ServiceGateway(service).complete("Der Satz", "gpt-4o", "P")
        assert result.text == " x"
        service.complete.assert_called_once_with("Der Satz", "gpt-4o", "P")
