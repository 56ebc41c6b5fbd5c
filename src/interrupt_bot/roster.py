"""
Team roster persisted as one JSON object in S3.

The roster maps chat handles to Trello usernames. Dict insertion order is the
listing order, so re-adding a handle keeps its position.
"""

from __future__ import annotations

import importlib
import json

from botocore.exceptions import ClientError

_MISSING_CODES = ("404", "NoSuchKey", "NotFound")


def _boto3():
    # Allow tests to monkeypatch module-level `boto3` symbol.
    return globals().get("boto3") or importlib.import_module("boto3")


class RosterStore:
    def __init__(self, bucket: str, key: str = "roster_hash") -> None:
        self.bucket = bucket
        self.key = key
        self._s3 = _boto3().client("s3")

    def get(self) -> dict[str, str] | None:
        """Return the stored roster, or None when nothing was stored yet."""
        try:
            resp = self._s3.get_object(Bucket=self.bucket, Key=self.key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _MISSING_CODES:
                return None
            raise
        return json.loads(resp["Body"].read().decode("utf-8"))

    def set(self, roster: dict[str, str]) -> None:
        body = json.dumps(roster, ensure_ascii=False).encode("utf-8")
        self._s3.put_object(
            Bucket=self.bucket, Key=self.key, Body=body, ContentType="application/json"
        )

    def load(self) -> dict[str, str]:
        return dict(self.get() or {})
