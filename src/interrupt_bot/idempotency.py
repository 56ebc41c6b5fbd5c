"""
Simple idempotency guard using S3.

Slack redelivers an event when the first delivery is not acknowledged in
time; a tiny marker object per event id makes the second delivery a no-op.
"""

from __future__ import annotations

import importlib

from botocore.exceptions import ClientError


def _boto3():
    # Allow tests to monkeypatch module-level `boto3` symbol.
    return globals().get("boto3") or importlib.import_module("boto3")


def s3_record_if_new(bucket: str, key: str) -> bool:
    """Return True if recorded now (i.e., first time), False if already exists."""
    s3 = _boto3().client("s3")
    try:
        s3.head_object(Bucket=bucket, Key=key)
        return False
    except ClientError as e:
        if e.response.get("Error", {}).get("Code") not in ("404", "NoSuchKey", "NotFound"):
            raise
    s3.put_object(Bucket=bucket, Key=key, Body=b"1")
    return True
