"""
Minimal Trello REST API client (v1) using stdlib urllib.
"""

from __future__ import annotations

import json
import urllib.error
import urllib.parse
import urllib.request
from typing import Any


class TrelloError(Exception):
    """Raised when the Trello API returns a non-2xx response."""

    def __init__(self, status_code: int, detail: str = "") -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"Trello API error {status_code}: {detail}")

    @property
    def not_found(self) -> bool:
        # Trello answers 400 ("invalid id") for unknown usernames, 404 for missing objects
        return self.status_code in (400, 404)


def _seg(value: str) -> str:
    # one path segment; "/" in a username must not reach another endpoint
    return urllib.parse.quote(value, safe="")


class TrelloClient:
    def __init__(self, base_url: str, key: str, token: str) -> None:
        self.base_api = base_url.rstrip("/") + "/1"
        self.key = key
        self.token = token

    # ----- Helpers -----
    def _url(self, path: str, params: dict[str, Any] | None = None) -> str:
        p = {"key": self.key, "token": self.token}
        if params:
            p.update(params)
        return self.base_api + path + "?" + urllib.parse.urlencode(p)

    def _get_json(self, url: str) -> Any:
        req = urllib.request.Request(url, headers={"User-Agent": "InterruptBot/1.0"})
        try:
            with urllib.request.urlopen(req, timeout=8) as resp:  # nosec B310
                data = resp.read()
        except urllib.error.HTTPError as e:
            raise TrelloError(e.code, e.read().decode("utf-8", "replace")) from e
        return json.loads(data.decode("utf-8"))

    def _get_list(self, url: str) -> list[dict[str, Any]]:
        data = self._get_json(url)
        return list(data) if isinstance(data, list) else []

    # ----- Public APIs -----
    def find_member(self, username: str) -> dict[str, Any]:
        url = self._url(f"/members/{_seg(username)}", {"fields": "username,fullName"})
        data = self._get_json(url)
        if not isinstance(data, dict) or "id" not in data:
            raise TrelloError(404, f"no member {username!r}")
        return data

    def list_boards(self, member_id: str) -> list[dict[str, Any]]:
        url = self._url(f"/members/{_seg(member_id)}/boards", {"fields": "name"})
        return self._get_list(url)

    def list_lists(self, board_id: str) -> list[dict[str, Any]]:
        url = self._url(f"/boards/{_seg(board_id)}/lists", {"fields": "name"})
        return self._get_list(url)

    def list_cards(self, list_id: str) -> list[dict[str, Any]]:
        """Cards of a list, each with ``idList`` and its ``members`` (id, username)."""
        url = self._url(
            f"/lists/{_seg(list_id)}/cards",
            {"fields": "name,idList", "members": "true", "member_fields": "username"},
        )
        return self._get_list(url)
