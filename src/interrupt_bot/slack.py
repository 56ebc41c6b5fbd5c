"""
Slack Web API (chat.postMessage) and request verification using stdlib.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import time
import urllib.request
from typing import Any

SIGNATURE_MAX_AGE_SECONDS = 300


class SlackError(Exception):
    """Raised when Slack answers ``"ok": false``."""


def verify_signature(
    signing_secret: str,
    body: str,
    timestamp: str | None,
    signature: str | None,
    now: float | None = None,
) -> bool:
    """Check ``X-Slack-Signature`` for a raw request body.

    https://api.slack.com/authentication/verifying-requests-from-slack
    """
    if not timestamp or not signature:
        return False
    try:
        ts = int(timestamp)
    except ValueError:
        return False
    if abs((now if now is not None else time.time()) - ts) > SIGNATURE_MAX_AGE_SECONDS:
        return False
    base = f"v0:{timestamp}:{body}"
    expected = "v0=" + hmac.new(
        signing_secret.encode("utf-8"), base.encode("utf-8"), hashlib.sha256
    ).hexdigest()
    return hmac.compare_digest(expected, signature)


class SlackClient:
    def __init__(self, token: str, api_url: str = "https://slack.com/api") -> None:
        self.api_url = api_url.rstrip("/")
        self.token = token

    def _post_json(self, method: str, payload: dict[str, Any]) -> dict[str, Any]:
        req = urllib.request.Request(
            f"{self.api_url}/{method}",
            data=json.dumps(payload).encode("utf-8"),
            headers={
                "User-Agent": "InterruptBot/1.0",
                "Content-Type": "application/json; charset=utf-8",
                "Authorization": f"Bearer {self.token}",
            },
        )
        with urllib.request.urlopen(req, timeout=8) as resp:  # nosec B310
            data = json.loads(resp.read().decode("utf-8"))
        if not data.get("ok"):
            raise SlackError(f"{method} failed: {data.get('error', 'unknown_error')}")
        return data

    def post_message(self, channel: str, text: str) -> dict[str, Any]:
        """Post ``text`` to a channel; a user id as channel opens the bot DM."""
        return self._post_json("chat.postMessage", {"channel": channel, "text": text})
