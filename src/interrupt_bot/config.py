"""
Configuration helpers and defaults.

Centralize tunables to avoid magic values in code/tests.
"""

from __future__ import annotations

import os
from dataclasses import dataclass


def _env(name: str, default: str | None = None) -> str | None:
    v = os.getenv(name)
    return v if v is not None else default


def _csv(name: str) -> tuple[str, ...]:
    return tuple(s.strip() for s in ((_env(name, "") or "").split(",")) if s.strip())


@dataclass(frozen=True)
class Settings:
    board_name: str
    trello_base_url: str
    trello_developer_public_key: str | None
    trello_member_token: str | None
    robot_admins: tuple[str, ...]
    team_group: tuple[str, ...]
    slack_bot_token: str | None
    slack_signing_secret: str | None
    slack_bot_user_id: str
    slack_api_url: str
    roster_bucket: str | None
    roster_key: str
    idempotency_bucket: str | None
    interrupt_trigger: str


def load_settings() -> Settings:
    """Load settings from environment with safe defaults for local tests."""

    return Settings(
        board_name=_env("TRELLO_BOARD_NAME", "") or "",
        trello_base_url=_env("TRELLO_BASE_URL") or "https://api.trello.com",
        trello_developer_public_key=_env("TRELLO_DEVELOPER_PUBLIC_KEY"),
        trello_member_token=_env("TRELLO_MEMBER_TOKEN"),
        robot_admins=_csv("ROBOT_ADMINS"),
        team_group=_csv("TEAM_GROUP"),
        slack_bot_token=_env("SLACK_BOT_TOKEN"),
        slack_signing_secret=_env("SLACK_SIGNING_SECRET"),
        slack_bot_user_id=_env("SLACK_BOT_USER_ID", "") or "",
        slack_api_url=_env("SLACK_API_URL") or "https://slack.com/api",
        roster_bucket=_env("ROSTER_BUCKET"),
        roster_key=_env("ROSTER_KEY", "roster_hash") or "roster_hash",
        idempotency_bucket=_env("IDEMPOTENCY_BUCKET"),
        interrupt_trigger=_env("INTERRUPT_TRIGGER", "hey") or "hey",
    )
