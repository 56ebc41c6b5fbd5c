"""
Roster commands and interrupt-pair resolution.

The handler works against two collaborators: a roster store (``load`` /
``set``) and a board client (``find_member``, ``list_boards``, ``list_lists``,
``list_cards``). Neither is retried; any failure other than an unknown Trello
username on ``add`` propagates to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from . import commands
from .trello import TrelloError

logger = logging.getLogger(__name__)


class Board(Protocol):
    def find_member(self, username: str) -> dict[str, Any]: ...

    def list_boards(self, member_id: str) -> list[dict[str, Any]]: ...

    def list_lists(self, board_id: str) -> list[dict[str, Any]]: ...

    def list_cards(self, list_id: str) -> list[dict[str, Any]]: ...


class Store(Protocol):
    def load(self) -> dict[str, str]: ...

    def set(self, roster: dict[str, str]) -> None: ...


@dataclass(frozen=True)
class Message:
    user: str
    channel: str
    text: str
    addressed: bool = True


@dataclass
class Response:
    replies: list[str] = field(default_factory=list)
    admin_alerts: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.replies or self.admin_alerts)


class InterruptHandler:
    def __init__(
        self,
        store: Store,
        board: Board,
        board_name: str,
        team_group: tuple[str, ...] = (),
        trigger: str = "hey",
    ) -> None:
        self.store = store
        self.board = board
        self.board_name = board_name
        self.team_group = team_group
        self.trigger = trigger

    # ----- Dispatch -----
    def authorized(self, requester: str, target: str) -> bool:
        return requester == target or requester in self.team_group

    def dispatch(self, msg: Message) -> Response:
        cmd = commands.parse_command(msg.text, msg.user) if msg.addressed else None
        if cmd is None:
            if msg.addressed or commands.has_trigger(msg.text, self.trigger):
                return self.interrupt(msg.user)
            return Response()

        route: commands.Route = cmd["route"]
        if route.restricted and not self.authorized(msg.user, cmd["target"]):
            logger.info(
                "Dropping unauthorized %s from %s for %s", route.name, msg.user, cmd["target"]
            )
            return Response()

        if route.name == "add":
            return self.add(cmd["target"], cmd["username"])
        if route.name == "remove":
            return self.remove(cmd["target"])
        return self.list_team()

    # ----- Roster commands -----
    def add(self, handle: str, username: str) -> Response:
        try:
            self.board.find_member(username)
        except TrelloError as e:
            if not e.not_found:
                raise
            return Response([commands.render_not_found(username)])
        roster = self.store.load()
        roster[handle] = username
        self.store.set(roster)
        logger.info("Added %s => %s", handle, username)
        return Response([commands.render_added(username, handle)])

    def remove(self, handle: str) -> Response:
        roster = self.store.load()
        if not roster:
            return Response([commands.EMPTY_ROSTER])
        username = roster.pop(handle, None)
        self.store.set(roster)
        logger.info("Removed %s (was %s)", handle, username)
        return Response([commands.render_removed(username or "", handle)])

    def list_team(self) -> Response:
        return Response([commands.render_roster(self.store.load())])

    # ----- Interrupts -----
    def interrupt(self, requester: str) -> Response:
        roster = self.store.load()
        if not roster:
            return Response([commands.NO_ROSTER])

        board = self._team_board(next(iter(roster.values())))
        if board is None:
            text = commands.render_board_not_found(self.board_name)
            logger.warning(text)
            return Response([text], [text])

        cards = self._interrupt_cards(board["id"])
        if not cards:
            logger.warning(commands.CARD_NOT_FOUND)
            return Response([commands.CARD_NOT_FOUND], [commands.CARD_NOT_FOUND])

        out = Response()
        if len(cards) > 1:
            logger.warning("%d interrupt cards on board %s", len(cards), self.board_name)
            out.replies.append(commands.MULTIPLE_CARDS)
            out.admin_alerts.append(commands.MULTIPLE_CARDS)

        handles = self._interrupt_pair(cards[0], roster) or list(roster)
        logger.debug("Interrupt for %s goes to %s", requester, handles)
        out.replies.append(commands.render_interrupt(handles, requester))
        return out

    def _team_board(self, username: str) -> dict[str, Any] | None:
        member = self.board.find_member(username)
        for board in self.board.list_boards(member["id"]):
            if board.get("name") == self.board_name:
                return board
        return None

    def _interrupt_cards(self, board_id: str) -> list[dict[str, Any]]:
        found: list[dict[str, Any]] = []
        for lst in self.board.list_lists(board_id):
            for card in self.board.list_cards(lst["id"]):
                if card.get("name") == commands.INTERRUPT_CARD_NAME:
                    found.append(card)
        return found

    def _interrupt_pair(self, marker: dict[str, Any], roster: dict[str, str]) -> list[str]:
        # several handles may share one Trello username
        by_username: dict[str, list[str]] = {}
        for h, u in roster.items():
            by_username.setdefault(u, []).append(h)
        handles: list[str] = []
        for card in self.board.list_cards(marker["idList"]):
            if card.get("id") == marker.get("id"):
                continue
            for member in card.get("members") or []:
                for handle in by_username.get(member.get("username"), []):
                    if handle not in handles:
                        handles.append(handle)
        return handles
