"""Фазы игры, стороны и метаданные бейджей."""
from enum import Enum, IntEnum
from typing import TypedDict


class Phase(IntEnum):
    """Фазы в порядке следования; значение задаёт полный порядок."""
    ACCEPTING_PARTICIPANTS = 0
    GUESS_COLLECTION = 1
    WINNER_SELECTION = 2
    PAYOUT = 3
    ENDED = 4


class Side(str, Enum):
    FIRST_CALLER = "first_caller"
    SECOND_CALLER = "second_caller"


class BadgeSpec(TypedDict):
    id: int
    name: str
    side: Side


BADGE_RESOURCE_NAME = "Odd Or Even Game"
BADGE_RESOURCE_SYMBOL = "OOE"

BADGE_SPECS: list[BadgeSpec] = [
    {"id": 1, "name": "First Caller badge", "side": Side.FIRST_CALLER},
    {"id": 2, "name": "Second Caller badge", "side": Side.SECOND_CALLER},
]

# Зарезервированный id: победитель ещё не определён
UNSET_WINNER_ID = 0

MAX_PARTICIPANTS = 2
