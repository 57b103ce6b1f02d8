# teams/rooms.py
"""
Room catalog and the room-assignment policy.

The catalog is static: numbered classrooms plus the Library Conference
Room hold at most two finalized teams each, the Library is the overflow
room (effectively unbounded, and where solo teams always go), and
"unassigned" is the synthetic bucket for teams without a room.

`assign` is pure: it takes the member count, the requested room and the
current finalized occupancy and either returns the room to store or raises.
"""
from typing import Mapping, NamedTuple, Optional

from core.exceptions import RoomFull, RoomRequired, UnknownRoom

ORDINARY_ROOM_CAPACITY = 2
UNBOUNDED_CAPACITY = 999

OVERFLOW_ROOM_ID = "Library"
UNASSIGNED_ROOM_ID = "unassigned"
# value a team carries before it is finalized
TBD_ROOM = "TBD"


class Room(NamedTuple):
    id: str
    name: str
    max_teams: int

    @property
    def is_bounded(self) -> bool:
        return self.max_teams < UNBOUNDED_CAPACITY


_NUMBERED_ROOMS = [
    "124", "123", "121", "119", "115", "103", "105", "107",
    "201", "203", "205", "207", "209", "202", "204", "206",
    "216", "211", "213", "215", "217", "219", "223", "225",
    "227", "220", "222", "228", "230",
]

ROOMS = (
    [Room(number, f"Room {number}", ORDINARY_ROOM_CAPACITY) for number in _NUMBERED_ROOMS]
    + [
        Room("Library Conference Room", "Library Conference Room", ORDINARY_ROOM_CAPACITY),
        Room(OVERFLOW_ROOM_ID, "Library", UNBOUNDED_CAPACITY),
        Room(UNASSIGNED_ROOM_ID, "Unassigned Teams", UNBOUNDED_CAPACITY),
    ]
)

ROOMS_BY_ID = {room.id: room for room in ROOMS}


def get_room(room_id: Optional[str]) -> Optional[Room]:
    if room_id is None:
        return None
    return ROOMS_BY_ID.get(room_id)


def selectable_rooms():
    """Rooms a leader may pick when finalizing."""
    return [room for room in ROOMS if room.id != UNASSIGNED_ROOM_ID]


def board_bucket(room_value: Optional[str]) -> str:
    """Board column for a stored `Team.room` value."""
    if room_value and room_value != UNASSIGNED_ROOM_ID and room_value in ROOMS_BY_ID:
        return room_value
    return UNASSIGNED_ROOM_ID


def assign(
    member_count: int,
    desired_room: Optional[str],
    occupancy: Mapping[str, int],
    allow_unassigned: bool = False,
) -> str:
    """
    Decide the room a team ends up in.

    - a single-member team always goes to the overflow room, capacity unchecked
    - otherwise a catalog room is required and must have a free place among
      its finalized occupants (`occupancy` must already exclude the team)
    - "unassigned" (admin moves only) is unbounded

    Returns the catalog room id. Raises RoomRequired, UnknownRoom or RoomFull.
    """
    if allow_unassigned and desired_room == UNASSIGNED_ROOM_ID:
        return UNASSIGNED_ROOM_ID

    if member_count == 1:
        return OVERFLOW_ROOM_ID

    if not desired_room:
        raise RoomRequired()

    room = get_room(desired_room)
    if room is None or room.id == UNASSIGNED_ROOM_ID:
        raise UnknownRoom(f"Unknown room: {desired_room}")

    if room.is_bounded and occupancy.get(room.id, 0) >= room.max_teams:
        raise RoomFull(f"{room.name} is already at capacity ({room.max_teams} teams)")

    return room.id
