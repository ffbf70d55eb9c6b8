"""HTTP endpoint — ``POST /api/complete-text`` in front of the completion gateway."""

from __future__ import annotations

import hmac
import json
import logging
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any
from urllib.parse import parse_qs, urlparse

from ghostpad.core.exceptions import CompletionParseError, GatewayError
from ghostpad.models.completion import DEFAULT_MODEL
from ghostpad.services.completion_service import CompletionService

logger = logging.getLogger(__name__)

API_PATH = "/api/complete-text"


def handle_complete_text(
    service: CompletionService,
    password: str,
    params: dict[str, str],
) -> tuple[int, dict[str, Any]]:
    """Validate the query parameters, run the completion and build ``(status, body)``."""
    supplied = params.get("password", "")
    if not password or not hmac.compare_digest(supplied.encode(), password.encode()):
        return 401, {"error": "Invalid password"}

    suffix = params.get("suffix")
    if not suffix:
        return 400, {"error": "Invalid suffix"}

    model = params.get("model") or DEFAULT_MODEL
    prompt = params.get("prompt", "")

    try:
        completion = service.complete(suffix, model, prompt)
    except CompletionParseError as e:
        logger.warning("Unusable completion from %s: %s", model, e)
        return e.status_code, {"error": str(e), "response": e.response}
    except GatewayError as e:
        if e.status_code < 500:
            return e.status_code, {"error": str(e)}
        logger.error("Error fetching suggestion: %s", e)
        return e.status_code, {"error": "Failed to fetch suggestion"}
    except Exception:
        logger.exception("Unexpected error fetching suggestion from %s", model)
        return 500, {"error": "Failed to fetch suggestion"}

    return 200, {
        "suggestion": completion.text,
        "promptTokens": completion.prompt_tokens,
        "completionTokens": completion.completion_tokens,
        "response": completion.raw,
    }


class CompletionRequestHandler(BaseHTTPRequestHandler):
    """Routes requests to ``handle_complete_text``. Configured by ``make_server``."""

    service: CompletionService
    password: str = ""

    def do_POST(self) -> None:
        parsed = urlparse(self.path)
        if parsed.path != API_PATH:
            self._send_json(404, {"error": "Not found"})
            return
        query = parse_qs(parsed.query, keep_blank_values=True)
        params = {key: values[0] for key, values in query.items()}
        status, body = handle_complete_text(self.service, self.password, params)
        self._send_json(status, body)

    def do_GET(self) -> None:
        if urlparse(self.path).path == API_PATH:
            self._send_json(405, {"error": "Method not allowed"})
        else:
            self._send_json(404, {"error": "Not found"})

    def _send_json(self, status: int, body: dict[str, Any]) -> None:
        payload = json.dumps(body, default=str).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(payload)))
        self.send_header("Access-Control-Allow-Origin", "*")
        self.end_headers()
        self.wfile.write(payload)

    def log_message(self, format: str, *args: Any) -> None:
        # the request line carries the password in its query string
        logger.info("%s %s", self.address_string(), urlparse(self.path).path)


def make_server(
    service: CompletionService,
    password: str,
    host: str = "127.0.0.1",
    port: int = 3000,
) -> ThreadingHTTPServer:
    """Build (but do not start) a server bound to ``host:port``."""
    handler = type(
        "BoundCompletionRequestHandler",
        (CompletionRequestHandler,),
        {"service": service, "password": password},
    )
    return ThreadingHTTPServer((host, port), handler)


def serve(service: CompletionService, password: str, host: str = "127.0.0.1", port: int = 3000) -> None:
    """Run the endpoint until interrupted."""
    server = make_server(service, password, host, port)
    logger.info("Serving %s on http://%s:%d", API_PATH, host, server.server_address[1])
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
