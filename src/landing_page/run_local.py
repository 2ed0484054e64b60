"""
Run the landing page Lambda handler locally.

Uses test_payload.json when present (an API Gateway v2 event); otherwise a
GET / for the destination given on the command line.

Run from repo root: python -m src.landing_page.run_local [destination]
"""
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

from src.landing_page.lambda_function import lambda_handler

# Resolve test_payload.json relative to this script's directory
SCRIPT_DIR = Path(__file__).parent


class MockContext:
    def __init__(self):
        self.function_name = "landing_page_local"
        self.memory_limit_in_mb = 256
        self.invoked_function_arn = "arn:aws:lambda:local:0:function:landing_page"
        self.aws_request_id = "local-landing-page-request-id"


if __name__ == "__main__":
    load_dotenv()

    payload_file = SCRIPT_DIR / "test_payload.json"
    if payload_file.exists():
        with open(payload_file, "r") as f:
            event = json.load(f)
    else:
        destination = sys.argv[1] if len(sys.argv) > 1 else ""
        event = {
            "version": "2.0",
            "rawPath": "/",
            "rawQueryString": f"destination={destination}" if destination else "",
            "headers": {"host": "localhost"},
            "requestContext": {"http": {"method": "GET", "path": "/"}},
        }
        print("ℹ️  No test_payload.json; using a GET / event.")
        print()

    print("=" * 60)
    print("Landing page Lambda (local)")
    print("=" * 60)

    response = lambda_handler(event, MockContext())
    print(f"Status: {response['statusCode']}")
    for cookie in response.get("cookies", []):
        print(f"Set-Cookie: {cookie}")
    print()
    print(response["body"])
