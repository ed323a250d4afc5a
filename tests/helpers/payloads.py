"""Canned API payloads and response builders"""

import json

import httpx

API_BASE = "http://api.test/api/v1"

# Low PBKDF2 cost keeps store tests fast
TEST_ITERATIONS = 1_000


def json_response(status: int, body=None) -> httpx.Response:
    """Build an httpx.Response with a JSON body (no body for body=None)"""
    if body is None:
        return httpx.Response(status)
    return httpx.Response(status, content=json.dumps(body).encode())


def token_payload(suffix: str = "1") -> dict:
    return {
        "access_token": f"access-{suffix}",
        "refresh_token": f"refresh-{suffix}",
        "access_expires_at": 1_700_000_000,
        "refresh_expires_at": 1_700_600_000,
    }


def user_payload() -> dict:
    return {
        "id": "u-1",
        "email": "ana@example.com",
        "name": "Ana",
        "workspace_id": "w-1",
        "role": "member",
    }


def message_payload(message_id: str = "m-1", body_md: str = "hello") -> dict:
    return {
        "id": message_id,
        "workspace_id": "w-1",
        "channel_id": "c-1",
        "sender_id": "u-1",
        "body_md": body_md,
        "created_at": 1_700_000_100,
    }
