"""
Vercel Python Function for protocol generation.

This endpoint handles POST requests to /api/protocol/generate and returns
a circadian adjustment protocol for the posted
{trip, circadian_profile, preferences} record.
"""

from http.server import BaseHTTPRequestHandler
import json
import logging
import sys
from pathlib import Path

# Add the _python directory to the Python path for importing chronoshift
sys.path.insert(0, str(Path(__file__).parent.parent / "_python"))

from chronoshift import generate_protocol, protocol_to_dict, request_from_dict
from chronoshift.errors import ValidationError

logger = logging.getLogger(__name__)


class handler(BaseHTTPRequestHandler):
    """HTTP handler for Vercel Python Functions."""

    def do_POST(self):
        """Handle POST requests for protocol generation."""
        try:
            content_length = int(self.headers.get("Content-Length", 0))
        except ValueError:
            self._send_json_response(400, {"error": "Invalid Content-Length header"})
            return

        try:
            body = self.rfile.read(content_length)
            data = json.loads(body)

            request = request_from_dict(data)
            protocol = generate_protocol(request.trip, request.profile, request.preferences)

            self._send_json_response(200, {"protocol": protocol_to_dict(protocol)})

        except json.JSONDecodeError:
            self._send_json_response(400, {"error": "Invalid JSON in request body"})
        except ValidationError as e:
            self._send_json_response(400, {"error": e.message, "field": e.field})
        except Exception as e:
            logger.exception("Protocol generation failed")
            self._send_json_response(500, {"error": f"Protocol generation failed: {str(e)}"})

    def _send_json_response(self, status_code: int, data: dict):
        """Send a JSON response with the given status code."""
        self.send_response(status_code)
        self.send_header("Content-Type", "application/json")
        self.send_header("Access-Control-Allow-Origin", "*")
        self.end_headers()
        self.wfile.write(json.dumps(data).encode())

    def do_OPTIONS(self):
        """Handle CORS preflight requests."""
        self.send_response(200)
        self.send_header("Access-Control-Allow-Origin", "*")
        self.send_header("Access-Control-Allow-Methods", "POST, OPTIONS")
        self.send_header("Access-Control-Allow-Headers", "Content-Type")
        self.end_headers()
