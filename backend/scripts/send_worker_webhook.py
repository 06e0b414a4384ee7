#!/usr/bin/env python3
"""
Script to send worker status callbacks to a local server.

Usage:
    # Start your server first
    uvicorn main:app --reload

    # Then report progress for a job the worker accepted
    python scripts/send_worker_webhook.py --job-id w-1 --status processing
    python scripts/send_worker_webhook.py --job-id w-1 --status completed --result '{"pages": 10}'
    python scripts/send_worker_webhook.py --job-id w-1 --status failed --result '{"error": "OCR failed"}'
    python scripts/send_worker_webhook.py --job-id w-1 --status completed --bad-signature
"""

import argparse
import hmac
import hashlib
import json
import os
import sys

import httpx

DEFAULT_SECRET = os.getenv("INGESTION_WEBHOOK_SECRET")
DEFAULT_BASE_URL = os.getenv("TEST_BASE_URL", "http://localhost:8000")
WEBHOOK_PATH = "/api/v1/ingestion/webhook/status-update"


def sign(payload: bytes, secret: str) -> str:
    """Hex HMAC-SHA256 signature for a webhook body."""
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def send_status_update(
    base_url: str,
    job_id: str,
    status: str,
    result: dict | None,
    secret: str | None,
    bad_signature: bool = False,
) -> httpx.Response | None:
    """Send one status callback."""
    url = f"{base_url.rstrip('/')}{WEBHOOK_PATH}"
    payload = {"jobId": job_id, "status": status}
    if result is not None:
        payload["result"] = result
    payload_bytes = json.dumps(payload).encode("utf-8")

    headers = {"Content-Type": "application/json"}
    if bad_signature:
        headers["X-Worker-Signature"] = "0" * 64
    elif secret:
        headers["X-Worker-Signature"] = sign(payload_bytes, secret)

    print(f"\n{'='*60}")
    print(f"Sending status update: {status}")
    print(f"URL: {url}")
    print(f"Payload: {json.dumps(payload, indent=2)}")
    print(f"{'='*60}\n")

    try:
        response = httpx.post(url, content=payload_bytes, headers=headers)
    except httpx.HTTPError as e:
        print(f"Error: {e}")
        return None

    print(f"Response Status: {response.status_code}")
    print(f"Response Body: {response.text}")
    if bad_signature:
        if response.status_code == 401:
            print("\n✓ Correctly rejected invalid signature!")
        else:
            print("\n✗ WARNING: Invalid signature was NOT rejected!")
    return response


def main() -> int:
    parser = argparse.ArgumentParser(description="Send worker status callbacks locally")
    parser.add_argument("--job-id", required=True, help="Worker-assigned job id")
    parser.add_argument(
        "--status",
        default="completed",
        help="Reported status: processing, completed or failed (default: completed)"
    )
    parser.add_argument("--result", default=None, help="Result object as JSON")
    parser.add_argument(
        "--secret",
        default=DEFAULT_SECRET,
        help="Webhook secret (default: INGESTION_WEBHOOK_SECRET env var)"
    )
    parser.add_argument(
        "--base-url",
        default=DEFAULT_BASE_URL,
        help="Base URL of your server (default: http://localhost:8000)"
    )
    parser.add_argument(
        "--bad-signature",
        action="store_true",
        help="Send an invalid signature (should be rejected when a secret is configured)"
    )

    args = parser.parse_args()

    result = json.loads(args.result) if args.result else None
    response = send_status_update(
        args.base_url,
        args.job_id,
        args.status,
        result,
        args.secret,
        bad_signature=args.bad_signature,
    )
    if response is None:
        return 1
    return 0 if response.is_success or args.bad_signature else 1


if __name__ == "__main__":
    sys.exit(main())
