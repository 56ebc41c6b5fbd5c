"""
Command parsing, mention handling, and reply rendering.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

# `@U123`, `<@U123>` or `<@U123|name>`; `me` targets the sender
_TARGET = r"(?:<@(?P<ref>[A-Za-z0-9]+)(?:\|[^>]*)?>|@(?P<handle>[\w.-]+)|(?P<me>me))"

ADD_RE = re.compile(rf"^add\s+{_TARGET}\s+(?P<username>\S+)\s*$")
REMOVE_RE = re.compile(rf"^remove\s+{_TARGET}\s*$")
TEAM_RE = re.compile(r"^team\s*$")

EMPTY_ROSTER = "The team roster is empty at the moment."
NO_ROSTER = (
    "You must add some users to the team roster. "
    "You will need each member's slack handle and trello user name."
)
CARD_NOT_FOUND = (
    "Interrupt card not found! Your team "
    'trello board needs a list with a card titled "Interrupt".'
)
MULTIPLE_CARDS = "Multiple interrupt cards found! Using first one."
INTERRUPT_CARD_NAME = "Interrupt"


@dataclass(frozen=True)
class Route:
    """One entry of the dispatch table.

    ``restricted`` routes only run when the sender acts on themself or belongs
    to the team group; otherwise the message is dropped without a reply.
    """

    name: str
    pattern: re.Pattern[str]
    restricted: bool


ROUTES: tuple[Route, ...] = (
    Route("add", ADD_RE, restricted=True),
    Route("remove", REMOVE_RE, restricted=True),
    Route("team", TEAM_RE, restricted=False),
)


def parse_command(text: str | None, sender: str) -> dict[str, Any] | None:
    """Match ``text`` against the routes.

    Returns ``{"cmd", "route", "target"[, "username"]}`` where ``target``
    falls back to ``sender`` for ``me``, or None when no route matches.
    """
    text = (text or "").strip()
    for route in ROUTES:
        m = route.pattern.match(text)
        if not m:
            continue
        cmd: dict[str, Any] = {"cmd": route.name, "route": route}
        if "me" in route.pattern.groupindex:
            cmd["target"] = m.group("ref") or m.group("handle") or sender
        if "username" in route.pattern.groupindex:
            cmd["username"] = m.group("username")
        return cmd
    return None


def strip_bot_mention(text: str | None, bot_user_id: str) -> str:
    """Drop a leading ``<@BOT>`` (and a trailing ``:``) from ``text``."""
    text = (text or "").strip()
    if bot_user_id:
        text = re.sub(rf"^<@{re.escape(bot_user_id)}(?:\|[^>]*)?>:?\s*", "", text)
    return text


def strip_leading_mention(text: str | None) -> str:
    """Drop whichever user mention opens ``text``."""
    return re.sub(r"^<@[A-Za-z0-9]+(?:\|[^>]*)?>:?\s*", "", (text or "").strip())


def mentions_user(text: str | None, user_id: str) -> bool:
    if not text or not user_id:
        return False
    return re.search(rf"<@{re.escape(user_id)}(?:\|[^>]*)?>", text) is not None


def has_trigger(text: str | None, trigger: str) -> bool:
    if not text or not trigger:
        return False
    return re.search(rf"\b{re.escape(trigger)}\b", text) is not None


def mention(handle: str) -> str:
    return f"<@{handle}>"


def render_added(username: str, handle: str) -> str:
    return f'Trello user "{username}" ({mention(handle)}) added!'


def render_removed(username: str, handle: str) -> str:
    return f'Trello user "{username}" ({mention(handle)}) removed!'


def render_not_found(username: str) -> str:
    return f'Did not find the trello username "{username}"'


def render_board_not_found(board_name: str) -> str:
    return (
        f'Trello team board "{board_name}" not found! '
        'Set "TRELLO_BOARD_NAME" and restart me, please.'
    )


def render_roster(roster: dict[str, str]) -> str:
    if not roster:
        return EMPTY_ROSTER
    pairs = ", ".join(f"{mention(h)} => {u}" for h, u in roster.items())
    return f"The team roster is {pairs}"


def render_interrupt(handles: list[str], requester: str) -> str:
    pinged = " ".join(mention(h) for h in handles)
    return f"{pinged}: you have an interrupt from {mention(requester)} ^^"
