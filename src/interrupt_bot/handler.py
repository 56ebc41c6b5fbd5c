"""
AWS Lambda handler for Slack Events API (message / app_mention) -> Bot reply.
"""

from __future__ import annotations

import base64
import json
import logging
import os
import time
from typing import Any

from . import commands
from .config import Settings, load_settings
from .idempotency import s3_record_if_new
from .interrupt import InterruptHandler, Message, Response
from .roster import RosterStore
from .slack import SlackClient, verify_signature
from .trello import TrelloClient

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    level_name = (os.getenv("LOG_LEVEL") or "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.getLogger("interrupt_bot").setLevel(level)
    root = logging.getLogger()
    if root.level and root.level > level:
        root.setLevel(level)


def _rid(context: Any) -> str | None:
    return getattr(context, "aws_request_id", None)


def _log(msg: str, **fields: Any) -> None:
    try:
        rec = {"msg": msg, **fields}
        logger.info(json.dumps(rec, ensure_ascii=False))
    except (TypeError, ValueError):
        # Fallback to plain log
        logger.info("%s | %s", msg, fields)


def _response(status: int, body: dict[str, Any]) -> dict[str, Any]:
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body, ensure_ascii=False),
    }


def _raw_body(event: dict[str, Any]) -> str:
    body = event.get("body") or ""
    if event.get("isBase64Encoded"):
        body = base64.b64decode(body)
    if isinstance(body, (bytes, bytearray)):
        body = body.decode("utf-8")
    return body


def _parse_body(raw: str) -> dict[str, Any]:
    try:
        data = json.loads(raw or "{}")
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _get_header(event: dict[str, Any], name: str) -> str | None:
    headers = event.get("headers") or {}
    for k, v in headers.items():
        if k.lower() == name.lower():
            return v
    return None


def _bot_user_id(payload: dict[str, Any]) -> str:
    auths = payload.get("authorizations") or []
    if auths and isinstance(auths[0], dict):
        return str(auths[0].get("user_id") or "")
    return ""


def _extract_message(payload: dict[str, Any], settings: Settings) -> Message | None:
    """Turn a Slack event callback into a Message, or None when it is not for us.

    ``app_mention`` and direct messages are addressed to the bot. Channel
    messages that mention the bot arrive again as ``app_mention`` and are
    skipped here.
    """
    if payload.get("type") != "event_callback":
        return None
    ev = payload.get("event") or {}
    if not isinstance(ev, dict) or ev.get("type") not in ("app_mention", "message"):
        return None
    # bot echoes, edits, joins and the like
    if ev.get("bot_id") or ev.get("subtype"):
        return None
    user, channel, text = ev.get("user"), ev.get("channel"), ev.get("text") or ""
    if not user or not channel:
        return None

    bot_id = settings.slack_bot_user_id or _bot_user_id(payload)
    if ev["type"] == "app_mention":
        return Message(user, channel, commands.strip_leading_mention(text), addressed=True)
    if ev.get("channel_type") == "im":
        addressed = True
    elif commands.mentions_user(text, bot_id):
        return None
    else:
        addressed = False

    return Message(
        user=user,
        channel=channel,
        text=commands.strip_bot_mention(text, bot_id),
        addressed=addressed,
    )


def _deliver(slack: SlackClient, settings: Settings, channel: str, out: Response) -> None:
    for text in out.replies:
        slack.post_message(channel, text)
    for text in out.admin_alerts:
        for admin in settings.robot_admins:
            slack.post_message(admin, text)


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    _configure_logging()
    settings = load_settings()
    start_ts = time.time()

    # 1) Verify the Slack request signature
    raw = _raw_body(event)
    if settings.slack_signing_secret:
        if not verify_signature(
            settings.slack_signing_secret,
            raw,
            _get_header(event, "X-Slack-Request-Timestamp"),
            _get_header(event, "X-Slack-Signature"),
        ):
            _log("auth_failed", rid=_rid(context), reason="signature_mismatch")
            return _response(401, {"error": "unauthorized"})

    # 2) Parse body; answer the URL verification handshake
    payload = _parse_body(raw)
    if payload.get("type") == "url_verification":
        return _response(200, {"challenge": payload.get("challenge", "")})

    msg = _extract_message(payload, settings)
    if msg is None:
        _log(
            "ignored_not_a_message",
            rid=_rid(context),
            type=payload.get("type"),
            event_type=(payload.get("event") or {}).get("type"),
        )
        return _response(200, {"result": "ignored"})

    if not msg.addressed and not commands.has_trigger(msg.text, settings.interrupt_trigger):
        _log("ignored_chatter", rid=_rid(context), user=msg.user)
        return _response(200, {"result": "ignored"})

    # 3) Idempotency (Slack retries unacknowledged deliveries)
    event_id = str(payload.get("event_id") or "")
    if settings.idempotency_bucket and event_id:
        if not s3_record_if_new(settings.idempotency_bucket, f"events/{event_id}"):
            _log("duplicate_ignored", rid=_rid(context), eventId=event_id)
            return _response(200, {"result": "duplicate_ignored"})

    # 4) Collaborators
    if not (settings.trello_developer_public_key and settings.trello_member_token):
        _log("config_error_missing_trello_credentials", rid=_rid(context))
        return _response(500, {"error": "Trello credentials not found"})
    if not settings.roster_bucket:
        _log("config_error_missing_roster_bucket", rid=_rid(context))
        return _response(500, {"error": "ROSTER_BUCKET not set"})
    trello = TrelloClient(
        settings.trello_base_url,
        settings.trello_developer_public_key,
        settings.trello_member_token,
    )
    store = RosterStore(settings.roster_bucket, settings.roster_key)
    bot = InterruptHandler(
        store,
        trello,
        settings.board_name,
        team_group=settings.team_group,
        trigger=settings.interrupt_trigger,
    )

    # 5) Dispatch
    try:
        out = bot.dispatch(msg)
    except Exception as e:
        logger.exception("Dispatch failed")
        _log("dispatch_error", rid=_rid(context), user=msg.user, error=str(e))
        return _response(500, {"error": f"dispatch failed: {e}"})
    if not out:
        _log("ignored_no_output", rid=_rid(context), user=msg.user)
        return _response(200, {"result": "ignored"})

    # 6) Post replies
    slack = SlackClient(settings.slack_bot_token or "", settings.slack_api_url)
    try:
        _deliver(slack, settings, msg.channel, out)
    except Exception as e:
        logger.exception("Slack post failed")
        _log("slack_post_error", rid=_rid(context), error=str(e))
        return _response(500, {"error": f"slack post failed: {e}"})
    _log(
        "ok",
        rid=_rid(context),
        eventId=event_id,
        user=msg.user,
        replies=len(out.replies),
        alerts=len(out.admin_alerts),
        ms_total=int((time.time() - start_ts) * 1000),
    )
    return _response(200, {"result": "ok"})
