"""
Fixed-layout replay header (decompressed stream, little-endian).

Layout (offsets from the start of the stream):
  0x000  u32   engine version
  0x004  u32   frame count
  0x008  u32   random seed
  0x018  u16   game type
  0x01A  u16   game sub type
  0x161  12 x 36-byte player slots:
           +0   name, 25 bytes, NUL terminated
           +32  race id
           +33  team
           +34  color
  0x1CD  map name, 25 bytes, NUL terminated

The map name offset falls inside the player table (slot 3's name field). Both
offsets come from reverse engineering and are kept as data in `HeaderLayout`
so alternate layouts can be tried without code changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final
import unicodedata

from construct import Array, Byte, Bytes, ConstructError, Int16ul, Int32ul, Padding, Pointer, Struct

from .errors import HeaderTruncated
from .types import PlayerSlot, ReplayHeader, race_from_id

MAX_FRAME_COUNT: Final[int] = 10_000_000
COMPUTER_NAME: Final[str] = "Computer"
UNKNOWN_MAP_NAME: Final[str] = "Unknown"

GAME_TYPE_NAMES: Final[dict[int, str]] = {
    0x02: "Melee",
    0x03: "Free For All",
    0x04: "One on One",
    0x05: "Capture The Flag",
    0x06: "Greed",
    0x07: "Slaughter",
    0x08: "Sudden Death",
    0x09: "Ladder",
    0x0A: "Use Map Settings",
    0x0B: "Team Melee",
    0x0C: "Team Free For All",
    0x0D: "Team Capture The Flag",
    0x0F: "Top vs Bottom",
}


@dataclass(frozen=True, slots=True)
class HeaderLayout:
    engine_version: int = 0x00
    frame_count: int = 0x04
    random_seed: int = 0x08
    game_type: int = 0x18
    game_sub_type: int = 0x1A
    player_table: int = 0x161
    slot_count: int = 12
    slot_size: int = 36
    name_size: int = 25
    # Team and color follow the race byte.
    race_offset: int = 32
    map_name: int = 0x1CD
    map_name_size: int = 25

    @property
    def required_size(self) -> int:
        ends = (
            self.engine_version + 4,
            self.frame_count + 4,
            self.random_seed + 4,
            self.game_type + 2,
            self.game_sub_type + 2,
            self.player_table + self.slot_count * self.slot_size,
            self.map_name + self.map_name_size,
        )
        return max(ends)


DEFAULT_LAYOUT: Final[HeaderLayout] = HeaderLayout()


def _slot_struct(layout: HeaderLayout) -> Struct:
    return Struct(
        "name" / Bytes(layout.name_size),
        Padding(layout.race_offset - layout.name_size),
        "race_id" / Byte,
        "team" / Byte,
        "color" / Byte,
        Padding(layout.slot_size - layout.race_offset - 3),
    )


def _header_struct(layout: HeaderLayout) -> Struct:
    return Struct(
        "engine_version" / Pointer(layout.engine_version, Int32ul),
        "frame_count" / Pointer(layout.frame_count, Int32ul),
        "random_seed" / Pointer(layout.random_seed, Int32ul),
        "game_type" / Pointer(layout.game_type, Int16ul),
        "game_sub_type" / Pointer(layout.game_sub_type, Int16ul),
        "slots" / Pointer(layout.player_table, Array(layout.slot_count, _slot_struct(layout))),
        "map_name" / Pointer(layout.map_name, Bytes(layout.map_name_size)),
    )


_DEFAULT_STRUCT: Final[Struct] = _header_struct(DEFAULT_LAYOUT)


def decode_name(raw: bytes) -> str:
    """Decode a fixed-width name field: NUL terminated, UTF-8 with a Latin-1 fallback."""

    raw = bytes(raw).split(b"\x00", 1)[0]
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        text = raw.decode("latin-1")
    text = "".join(ch for ch in text if unicodedata.category(ch) != "Cc")
    return text.strip()


def is_active_slot(name: str) -> bool:
    return bool(name) and name != COMPUTER_NAME


def game_type_name(game_type: int) -> str:
    return GAME_TYPE_NAMES.get(int(game_type), f"Unknown (0x{int(game_type):02X})")


def estimate_frame_count(stream_length: int, average_bytes_per_frame: float) -> int:
    return max(1, int(int(stream_length) / float(average_bytes_per_frame)))


def decode_header(
    stream: bytes,
    *,
    layout: HeaderLayout = DEFAULT_LAYOUT,
    average_bytes_per_frame: float = 3.0,
) -> ReplayHeader:
    stream = bytes(stream)
    if len(stream) < layout.required_size:
        raise HeaderTruncated(f"header needs {layout.required_size} bytes, stream has {len(stream)}")
    struct = _DEFAULT_STRUCT if layout == DEFAULT_LAYOUT else _header_struct(layout)
    try:
        parsed = struct.parse(stream)
    except ConstructError as exc:
        raise HeaderTruncated(f"failed to parse replay header: {exc}") from exc

    slots: list[PlayerSlot] = []
    for slot_index, raw in enumerate(parsed.slots):
        name = decode_name(raw.name)
        if not is_active_slot(name):
            continue
        slots.append(
            PlayerSlot(
                player_id=len(slots),
                slot_index=slot_index,
                name=name,
                race=race_from_id(raw.race_id),
                race_id=int(raw.race_id),
                team=int(raw.team),
                color=int(raw.color),
            )
        )

    frame_count = int(parsed.frame_count)
    estimated = not (0 < frame_count < MAX_FRAME_COUNT)
    if estimated:
        frame_count = estimate_frame_count(len(stream), average_bytes_per_frame)

    return ReplayHeader(
        engine_version=int(parsed.engine_version),
        frame_count=frame_count,
        random_seed=int(parsed.random_seed),
        map_name=decode_name(parsed.map_name) or UNKNOWN_MAP_NAME,
        game_type=int(parsed.game_type),
        game_sub_type=int(parsed.game_sub_type),
        player_slots=tuple(slots),
        frame_count_estimated=estimated,
    )
