#!/usr/bin/env python3
"""
Generate a protocol from a JSON request file.

Usage: python3 generate_protocol.py <request_file.json>

Reads a {trip, circadian_profile, preferences} record and writes the
protocol as JSON to stdout. Errors are written as {"error": ...} with
exit code 1. Logs go to stderr (level from CHRONOSHIFT_LOG_LEVEL).

Security: This script only reads from the specified JSON file and writes
to stdout. It does not accept any code or commands as input.
"""

import json
import sys

# Assumes api/_python is on the path or the script is run from there
from chronoshift import configure_logging, generate_protocol, protocol_to_json, request_from_dict
from chronoshift.errors import ValidationError


def main() -> None:
    if len(sys.argv) != 2:
        print(json.dumps({"error": "Usage: generate_protocol.py <request_file.json>"}))
        sys.exit(1)

    configure_logging()
    request_file = sys.argv[1]

    try:
        with open(request_file) as f:
            data = json.load(f)

        request = request_from_dict(data)
        protocol = generate_protocol(request.trip, request.profile, request.preferences)

        print(protocol_to_json(protocol))

    except FileNotFoundError:
        print(json.dumps({"error": f"Request file not found: {request_file}"}))
        sys.exit(1)
    except json.JSONDecodeError as e:
        print(json.dumps({"error": f"Invalid JSON in request file: {e}"}))
        sys.exit(1)
    except ValidationError as e:
        print(json.dumps({"error": f"Invalid request: {e}", "field": e.field}))
        sys.exit(1)
    except Exception as e:
        print(json.dumps({"error": f"Protocol generation failed: {e}"}))
        sys.exit(1)


if __name__ == "__main__":
    main()
