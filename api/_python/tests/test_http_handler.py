"""
Tests for the protocol generation HTTP handler (api/protocol/generate.py).

The handler is driven without a socket: request body and headers are set
on a bare instance and the response status, headers and JSON body are
captured.
"""

import importlib.util
import io
import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from helpers import make_request_data

HANDLER_PATH = Path(__file__).parent.parent.parent / "protocol" / "generate.py"


@pytest.fixture(scope="module")
def endpoint():
    location = importlib.util.spec_from_file_location("protocol_generate", HANDLER_PATH)
    module = importlib.util.module_from_spec(location)
    location.loader.exec_module(module)
    return module


class Response:
    def __init__(self):
        self.status = None
        self.headers = {}


def call(endpoint, method: str, body: bytes = b"", headers: dict | None = None):
    request = endpoint.handler.__new__(endpoint.handler)
    request.rfile = io.BytesIO(body)
    request.wfile = io.BytesIO()
    request.headers = {"Content-Length": str(len(body)), **(headers or {})}

    response = Response()
    request.send_response = lambda code, message=None: setattr(response, "status", code)
    request.send_header = lambda key, value: response.headers.__setitem__(key, value)
    request.end_headers = lambda: None

    getattr(request, f"do_{method}")()
    raw = request.wfile.getvalue()
    return response, json.loads(raw) if raw else None


def post(endpoint, data, headers: dict | None = None):
    return call(endpoint, "POST", json.dumps(data).encode(), headers)


class TestPost:
    """Tests for status codes and payloads."""

    def test_generates_protocol(self, endpoint):
        response, payload = post(endpoint, make_request_data())
        assert response.status == 200
        assert response.headers["Content-Type"] == "application/json"
        assert response.headers["Access-Control-Allow-Origin"] == "*"
        protocol = payload["protocol"]
        assert protocol["direction"] == "eastward"
        assert protocol["days"][0]["day_number"] == -3

    def test_invalid_json(self, endpoint):
        response, payload = call(endpoint, "POST", b"{not json")
        assert response.status == 400
        assert payload["error"] == "Invalid JSON in request body"

    def test_empty_body(self, endpoint):
        response, _ = call(endpoint, "POST", b"")
        assert response.status == 400

    def test_validation_error_reports_field(self, endpoint):
        data = make_request_data()
        data["circadian_profile"]["meq_score"] = 99
        response, payload = post(endpoint, data)
        assert response.status == 400
        assert payload["field"] == "meq_score"

    def test_wrongly_typed_field_is_a_client_error(self, endpoint):
        data = make_request_data()
        data["preferences"]["uses_melatonin"] = "false"
        response, payload = post(endpoint, data)
        assert response.status == 400
        assert payload["field"] == "uses_melatonin"

    def test_non_numeric_content_length(self, endpoint):
        response, payload = post(endpoint, make_request_data(), {"Content-Length": "lots"})
        assert response.status == 400
        assert "Content-Length" in payload["error"]

    def test_unexpected_failure_is_500(self, endpoint, monkeypatch):
        def fail(*args, **kwargs):
            raise RuntimeError("clock stopped")

        monkeypatch.setattr(endpoint, "generate_protocol", fail)
        response, payload = post(endpoint, make_request_data())
        assert response.status == 500
        assert "clock stopped" in payload["error"]


class TestOptions:
    """CORS preflight."""

    def test_preflight(self, endpoint):
        response, payload = call(endpoint, "OPTIONS")
        assert response.status == 200
        assert response.headers["Access-Control-Allow-Methods"] == "POST, OPTIONS"
        assert payload is None
