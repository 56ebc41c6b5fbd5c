import copy

import pytest

from interrupt_bot.interrupt import InterruptHandler
from interrupt_bot.trello import TrelloError

MAESTER = "U9298ANLQ"
SAM = "U93MFAV9V"
ARYA = "U93FMA9VV"
JON = "U1BSCLVQ1"
TYRION = "U5062MBLE"
JAIME = "U8FE4C6Z7"

BOARD_NAME = "Game of Boards"

MEMBERS = {
    "jonsnow": {"id": "m-jon", "username": "jonsnow"},
    "samwelltarley": {"id": "m-sam", "username": "samwelltarley"},
    "tyrionlannister": {"id": "m-tyrion", "username": "tyrionlannister"},
    "jaimelannister": {"id": "m-jaime", "username": "jaimelannister"},
    "aryastark": {"id": "m-arya", "username": "aryastark"},
}

INTERRUPT_CARD = {"id": "c-interrupt", "name": "Interrupt", "idList": "l-interrupt", "members": []}
TYRION_CARD = {
    "id": "c-tyrion",
    "name": "Fix the deploy",
    "idList": "l-interrupt",
    "members": [{"id": "m-tyrion", "username": "tyrionlannister"}],
}
JAIME_CARD = {
    "id": "c-jaime",
    "name": "Rotate certs",
    "idList": "l-interrupt",
    "members": [{"id": "m-jaime", "username": "jaimelannister"}],
}

TEAM = {
    JON: "jonsnow",
    SAM: "samwelltarley",
    TYRION: "tyrionlannister",
    JAIME: "jaimelannister",
}


class FakeTrello:
    """In-memory Trello with the 'Game of Boards' fixture board."""

    def __init__(self):
        self.members = copy.deepcopy(MEMBERS)
        self.boards = [{"id": "b-1", "name": BOARD_NAME}]
        self.lists = [
            {"id": "l-doing", "name": "Doing"},
            {"id": "l-interrupt", "name": "Interrupt"},
        ]
        self.cards = {
            "l-doing": [TYRION_CARD, JAIME_CARD],
            "l-interrupt": [INTERRUPT_CARD, TYRION_CARD, JAIME_CARD],
        }
        self.calls = []

    def find_member(self, username):
        self.calls.append(("find_member", username))
        if username not in self.members:
            raise TrelloError(400, "invalid id")
        return self.members[username]

    def list_boards(self, member_id):
        self.calls.append(("list_boards", member_id))
        return list(self.boards)

    def list_lists(self, board_id):
        self.calls.append(("list_lists", board_id))
        return list(self.lists)

    def list_cards(self, list_id):
        self.calls.append(("list_cards", list_id))
        return list(self.cards.get(list_id, []))


class MemoryStore:
    def __init__(self, roster=None):
        self.roster = dict(roster or {})
        self.writes = 0

    def load(self):
        return dict(self.roster)

    def set(self, roster):
        self.writes += 1
        self.roster = dict(roster)


@pytest.fixture
def trello():
    return FakeTrello()


@pytest.fixture
def store():
    return MemoryStore(TEAM)


@pytest.fixture
def bot(store, trello):
    return InterruptHandler(store, trello, BOARD_NAME, team_group=(MAESTER,))
