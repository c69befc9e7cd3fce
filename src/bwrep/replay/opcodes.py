from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Final

from construct import Array, Byte, Bytes, Int16ul, Struct, Tell, this

from .types import CommandParams, Format, Opcode, OpcodeCategory

# Frame-advance pseudo-commands; never part of the opcode table.
FRAME_STEP: Final[int] = 0x00
FRAME_SKIP_U8: Final[int] = 0x01
FRAME_SKIP_U16: Final[int] = 0x02
FRAME_MARKERS: Final[frozenset[int]] = frozenset({FRAME_STEP, FRAME_SKIP_U8, FRAME_SKIP_U16})

# Longest encodable command: a 255-unit selection.
MAX_COMMAND_LENGTH: Final[int] = 3 + 2 * 255

FPS_CLASSIC: Final[float] = 24.0
FPS_MODERN: Final[float] = 23.81

_PARAM_FIELDS: Final[tuple[str, ...]] = tuple(f.name for f in fields(CommandParams))


def _layout(*subcons) -> Struct:
    """Every command starts with its opcode and the issuing player id."""

    return Struct("opcode" / Byte, "player_id" / Byte, *subcons, "end" / Tell)


BARE = _layout()
QUEUED = _layout("queued" / Byte)
SELECT = _layout("unit_count" / Byte, "unit_ids" / Array(this.unit_count, Int16ul))
BUILD = _layout("unit_type" / Int16ul, "x" / Int16ul, "y" / Int16ul)
HOTKEY = _layout("hotkey_action" / Byte, "hotkey" / Byte)
MOVE = _layout(
    "x" / Int16ul,
    "y" / Int16ul,
    "target_id" / Int16ul,
    "unit_type" / Int16ul,
    "queued" / Byte,
)
ATTACK = _layout(
    "x" / Int16ul,
    "y" / Int16ul,
    "target_id" / Int16ul,
    "unit_type" / Int16ul,
    "order" / Byte,
    "queued" / Byte,
)
UNIT_TYPE = _layout("unit_type" / Int16ul)
TARGET = _layout("target_id" / Int16ul)
TECH = _layout("tech_type" / Byte)
POSITION = _layout("x" / Int16ul, "y" / Int16ul)
VISION = _layout("mask" / Int16ul)
ALLIANCE = _layout("mask" / Bytes(4))
SYNC = _layout("payload" / Bytes(6))
SLOT = _layout("slot" / Byte)
SLOT_PAIR = _layout("slot" / Byte, "value" / Byte)
CHANGE_GAME_SLOT = _layout("payload" / Bytes(5))
NEW_NET_PLAYER = _layout("payload" / Bytes(7))
JOINED_GAME = _layout("payload" / Bytes(17))
SAVED_DATA = _layout("payload" / Bytes(12))
CHAT = _layout("sender" / Byte, "message" / Bytes(80))


@dataclass(frozen=True, slots=True)
class OpcodeInfo:
    opcode: Opcode
    name: str
    is_game_action: bool
    category: OpcodeCategory
    layout: Struct
    length: int | None

    @property
    def length_rule(self) -> str:
        if self.length is not None:
            return str(self.length)
        return "3 + 2 * unit_count"

    def decode_params(self, parsed) -> CommandParams:
        return CommandParams(**{name: int(parsed[name]) for name in _PARAM_FIELDS if name in parsed})


def _fixed_length(layout: Struct) -> int | None:
    if layout is SELECT:
        return None
    return int(layout.sizeof())


def _info(opcode: Opcode, name: str, category: OpcodeCategory, layout: Struct, *, action: bool = True) -> OpcodeInfo:
    return OpcodeInfo(
        opcode=opcode,
        name=name,
        is_game_action=action,
        category=category,
        layout=layout,
        length=_fixed_length(layout),
    )


_C = OpcodeCategory
_ENTRIES: Final[tuple[OpcodeInfo, ...]] = (
    _info(Opcode.SELECT, "Select", _C.SELECT, SELECT),
    _info(Opcode.SHIFT_SELECT, "Shift Select", _C.SHIFT_SELECT, SELECT),
    _info(Opcode.SHIFT_DESELECT, "Shift Deselect", _C.SHIFT_DESELECT, SELECT),
    _info(Opcode.BUILD, "Build", _C.BUILD, BUILD),
    _info(Opcode.VISION, "Vision", _C.VISION, VISION, action=False),
    _info(Opcode.ALLIANCE, "Alliance", _C.VISION, ALLIANCE, action=False),
    _info(Opcode.HOTKEY, "Hotkey", _C.HOTKEY, HOTKEY),
    _info(Opcode.MOVE, "Move", _C.PLAIN_MOVE, MOVE),
    _info(Opcode.ATTACK, "Attack", _C.ATTACK, ATTACK),
    _info(Opcode.CANCEL, "Cancel", _C.CANCEL, BARE),
    _info(Opcode.CANCEL_HATCH, "Cancel Hatch", _C.CANCEL, BARE),
    _info(Opcode.STOP, "Stop", _C.ORDER, QUEUED),
    _info(Opcode.CARRIER_STOP, "Carrier Stop", _C.ORDER, BARE),
    _info(Opcode.REAVER_STOP, "Reaver Stop", _C.ORDER, BARE),
    _info(Opcode.ORDER_NOTHING, "Order Nothing", _C.ORDER, BARE),
    _info(Opcode.RETURN_CARGO, "Return Cargo", _C.ORDER, QUEUED),
    _info(Opcode.TRAIN, "Train", _C.TRAIN, UNIT_TYPE),
    _info(Opcode.CANCEL_TRAIN, "Cancel Train", _C.CANCEL, TARGET),
    _info(Opcode.CLOAK, "Cloak", _C.ABILITY, QUEUED),
    _info(Opcode.DECLOAK, "Decloak", _C.ABILITY, QUEUED),
    _info(Opcode.UNIT_MORPH, "Unit Morph", _C.MORPH, UNIT_TYPE),
    _info(Opcode.UNSIEGE, "Unsiege", _C.ABILITY, QUEUED),
    _info(Opcode.SIEGE, "Siege", _C.ABILITY, QUEUED),
    _info(Opcode.TRAIN_FIGHTER, "Train Fighter", _C.TRAIN, BARE),
    _info(Opcode.UNLOAD_ALL, "Unload All", _C.TRANSPORT, QUEUED),
    _info(Opcode.UNLOAD, "Unload", _C.TRANSPORT, TARGET),
    _info(Opcode.MERGE_ARCHON, "Merge Archon", _C.ABILITY, BARE),
    _info(Opcode.HOLD_POSITION, "Hold Position", _C.ORDER, QUEUED),
    _info(Opcode.BURROW, "Burrow", _C.ABILITY, QUEUED),
    _info(Opcode.UNBURROW, "Unburrow", _C.ABILITY, QUEUED),
    _info(Opcode.CANCEL_NUKE, "Cancel Nuke", _C.CANCEL, BARE),
    _info(Opcode.LIFT, "Lift", _C.ABILITY, POSITION),
    _info(Opcode.RESEARCH, "Research", _C.RESEARCH, TECH),
    _info(Opcode.CANCEL_RESEARCH, "Cancel Research", _C.CANCEL, BARE),
    _info(Opcode.UPGRADE, "Upgrade", _C.UPGRADE, TECH),
    _info(Opcode.CANCEL_UPGRADE, "Cancel Upgrade", _C.CANCEL, BARE),
    _info(Opcode.CANCEL_ADDON, "Cancel Addon", _C.CANCEL, BARE),
    _info(Opcode.BUILDING_MORPH, "Building Morph", _C.BUILDING_MORPH, UNIT_TYPE),
    _info(Opcode.STIM, "Stim", _C.ABILITY, BARE),
    _info(Opcode.SYNC, "Sync", _C.SYNC, SYNC, action=False),
    _info(Opcode.VOICE_ENABLE_1, "Voice Enable 1", _C.LOBBY, BARE, action=False),
    _info(Opcode.VOICE_ENABLE_2, "Voice Enable 2", _C.LOBBY, BARE, action=False),
    _info(Opcode.VOICE_SQUELCH_1, "Voice Squelch 1", _C.LOBBY, SLOT, action=False),
    _info(Opcode.VOICE_SQUELCH_2, "Voice Squelch 2", _C.LOBBY, SLOT, action=False),
    _info(Opcode.START_GAME, "Start Game", _C.LOBBY, BARE, action=False),
    _info(Opcode.DOWNLOAD_PERCENTAGE, "Download Percentage", _C.LOBBY, SLOT, action=False),
    _info(Opcode.CHANGE_GAME_SLOT, "Change Game Slot", _C.LOBBY, CHANGE_GAME_SLOT, action=False),
    _info(Opcode.NEW_NET_PLAYER, "New Net Player", _C.LOBBY, NEW_NET_PLAYER, action=False),
    _info(Opcode.JOINED_GAME, "Joined Game", _C.LOBBY, JOINED_GAME, action=False),
    _info(Opcode.CHANGE_RACE, "Change Race", _C.LOBBY, SLOT_PAIR, action=False),
    _info(Opcode.TEAM_GAME_TEAM, "Team Game Team", _C.LOBBY, SLOT, action=False),
    _info(Opcode.UMS_TEAM, "UMS Team", _C.LOBBY, SLOT, action=False),
    _info(Opcode.MELEE_TEAM, "Melee Team", _C.LOBBY, SLOT_PAIR, action=False),
    _info(Opcode.SWAP_PLAYERS, "Swap Players", _C.LOBBY, SLOT_PAIR, action=False),
    _info(Opcode.SAVED_DATA, "Saved Data", _C.LOBBY, SAVED_DATA, action=False),
    _info(Opcode.LEAVE_GAME, "Leave Game", _C.LOBBY, SLOT, action=False),
    _info(Opcode.MINIMAP_PING, "Minimap Ping", _C.VISION, POSITION, action=False),
    _info(Opcode.MERGE_DARK_ARCHON, "Merge Dark Archon", _C.ABILITY, BARE),
    _info(Opcode.MAKE_GAME_PUBLIC, "Make Game Public", _C.LOBBY, BARE, action=False),
    _info(Opcode.CHAT, "Chat", _C.CHAT, CHAT, action=False),
)


def _build_table(entries: tuple[OpcodeInfo, ...]) -> tuple[OpcodeInfo | None, ...]:
    table: list[OpcodeInfo | None] = [None] * 256
    for entry in entries:
        value = int(entry.opcode)
        if value in FRAME_MARKERS:
            raise ValueError(f"opcode 0x{value:02X} collides with a frame marker")
        if table[value] is not None:
            raise ValueError(f"duplicate opcode table entry: 0x{value:02X}")
        table[value] = entry
    return tuple(table)


# Indexed by byte value; `None` is the unknown arm.
OPCODE_TABLE: Final[tuple[OpcodeInfo | None, ...]] = _build_table(_ENTRIES)


def lookup_opcode(byte: int, table: tuple[OpcodeInfo | None, ...] = OPCODE_TABLE) -> OpcodeInfo | None:
    return table[int(byte) & 0xFF]


@dataclass(frozen=True, slots=True)
class EngineProfile:
    """Per-engine decoding parameters; version drift lives here as data."""

    name: str
    fps: float
    opcode_table: tuple[OpcodeInfo | None, ...]
    max_players: int = 8


CLASSIC_PROFILE: Final[EngineProfile] = EngineProfile(name="classic", fps=FPS_CLASSIC, opcode_table=OPCODE_TABLE)
MODERN_PROFILE: Final[EngineProfile] = EngineProfile(name="modern", fps=FPS_MODERN, opcode_table=OPCODE_TABLE)
REMASTERED_PROFILE: Final[EngineProfile] = EngineProfile(name="remastered", fps=FPS_MODERN, opcode_table=OPCODE_TABLE)

_PROFILES: Final[dict[Format, EngineProfile]] = {
    Format.UNCOMPRESSED: CLASSIC_PROFILE,
    Format.LEGACY_PKWARE: CLASSIC_PROFILE,
    Format.MODERN_ZLIB: MODERN_PROFILE,
    Format.MODERN_121: REMASTERED_PROFILE,
}


def profile_for_format(fmt: Format) -> EngineProfile:
    return _PROFILES[Format(fmt)]
