from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum

from .errors import QualityIssue


class Format(IntEnum):
    UNCOMPRESSED = 0
    LEGACY_PKWARE = 1
    MODERN_ZLIB = 2
    MODERN_121 = 3


class Race(IntEnum):
    ZERG = 0
    TERRAN = 1
    PROTOSS = 2
    RANDOM = 6
    INVALID = 0xFF


_RACE_IDS: dict[int, Race] = {
    0: Race.ZERG,
    1: Race.TERRAN,
    2: Race.PROTOSS,
    3: Race.RANDOM,
    6: Race.RANDOM,
}


def race_from_id(race_id: int) -> Race:
    return _RACE_IDS.get(int(race_id), Race.INVALID)


class Opcode(IntEnum):
    SELECT = 0x09
    SHIFT_SELECT = 0x0A
    SHIFT_DESELECT = 0x0B
    BUILD = 0x0C
    VISION = 0x0D
    ALLIANCE = 0x0E
    HOTKEY = 0x13
    MOVE = 0x14
    ATTACK = 0x15
    CANCEL = 0x16
    CANCEL_HATCH = 0x17
    STOP = 0x18
    CARRIER_STOP = 0x19
    REAVER_STOP = 0x1A
    ORDER_NOTHING = 0x1B
    RETURN_CARGO = 0x1C
    TRAIN = 0x1D
    CANCEL_TRAIN = 0x1E
    CLOAK = 0x1F
    DECLOAK = 0x20
    UNIT_MORPH = 0x21
    UNSIEGE = 0x23
    SIEGE = 0x24
    TRAIN_FIGHTER = 0x25
    UNLOAD_ALL = 0x27
    UNLOAD = 0x28
    MERGE_ARCHON = 0x29
    HOLD_POSITION = 0x2A
    BURROW = 0x2B
    UNBURROW = 0x2C
    CANCEL_NUKE = 0x2D
    LIFT = 0x2E
    RESEARCH = 0x2F
    CANCEL_RESEARCH = 0x30
    UPGRADE = 0x31
    CANCEL_UPGRADE = 0x32
    CANCEL_ADDON = 0x33
    BUILDING_MORPH = 0x34
    STIM = 0x35
    SYNC = 0x36
    VOICE_ENABLE_1 = 0x37
    VOICE_ENABLE_2 = 0x38
    VOICE_SQUELCH_1 = 0x39
    VOICE_SQUELCH_2 = 0x3A
    START_GAME = 0x3C
    DOWNLOAD_PERCENTAGE = 0x3D
    CHANGE_GAME_SLOT = 0x3E
    NEW_NET_PLAYER = 0x3F
    JOINED_GAME = 0x40
    CHANGE_RACE = 0x41
    TEAM_GAME_TEAM = 0x42
    UMS_TEAM = 0x43
    MELEE_TEAM = 0x44
    SWAP_PLAYERS = 0x45
    SAVED_DATA = 0x48
    LEAVE_GAME = 0x57
    MINIMAP_PING = 0x58
    MERGE_DARK_ARCHON = 0x5A
    MAKE_GAME_PUBLIC = 0x5B
    CHAT = 0x5C


class OpcodeCategory(str, Enum):
    SELECT = "select"
    SHIFT_SELECT = "shift_select"
    SHIFT_DESELECT = "shift_deselect"
    PLAIN_MOVE = "plain_move"
    ATTACK = "attack"
    BUILD = "build"
    TRAIN = "train"
    MORPH = "morph"
    BUILDING_MORPH = "building_morph"
    RESEARCH = "research"
    UPGRADE = "upgrade"
    CANCEL = "cancel"
    HOTKEY = "hotkey"
    ORDER = "order"
    ABILITY = "ability"
    TRANSPORT = "transport"
    VISION = "vision"
    SYNC = "sync"
    LOBBY = "lobby"
    CHAT = "chat"


# Categories that count toward APM but not EAPM.
INEFFECTIVE_CATEGORIES: frozenset[OpcodeCategory] = frozenset(
    {
        OpcodeCategory.SELECT,
        OpcodeCategory.SHIFT_SELECT,
        OpcodeCategory.SHIFT_DESELECT,
        OpcodeCategory.PLAIN_MOVE,
    }
)


class StreamTermination(str, Enum):
    END_OF_BUFFER = "end_of_buffer"
    FRAME_LIMIT = "frame_limit"
    COMMAND_CAP = "command_cap"
    TRUNCATED_COMMAND = "truncated_command"


class BuildCategory(str, Enum):
    BUILD = "Build"
    TRAIN = "Train"
    TECH = "Tech"
    UPGRADE = "Upgrade"


class CommandVolume(str, Enum):
    REALISTIC = "realistic"
    SUSPICIOUS = "suspicious"
    INSUFFICIENT = "insufficient"


@dataclass(frozen=True, slots=True)
class ReplayContainer:
    data: bytes
    format: Format
    confidence: float


@dataclass(frozen=True, slots=True)
class PlayerSlot:
    player_id: int
    slot_index: int
    name: str
    race: Race
    race_id: int
    team: int
    color: int


@dataclass(frozen=True, slots=True)
class ReplayHeader:
    engine_version: int
    frame_count: int
    random_seed: int
    map_name: str
    game_type: int
    game_sub_type: int
    player_slots: tuple[PlayerSlot, ...] = ()
    frame_count_estimated: bool = False

    @property
    def player_count(self) -> int:
        return len(self.player_slots)


@dataclass(frozen=True, slots=True)
class CommandParams:
    unit_type: int | None = None
    x: int | None = None
    y: int | None = None
    target_id: int | None = None
    hotkey: int | None = None
    hotkey_action: int | None = None
    tech_type: int | None = None
    unit_count: int | None = None


@dataclass(frozen=True, slots=True)
class Command:
    frame: int
    player_id: int
    opcode: Opcode
    params: CommandParams = field(default_factory=CommandParams)
    offset: int = 0


@dataclass(frozen=True, slots=True)
class OffsetCandidate:
    offset: int
    opcode_matches: int
    frame_markers: int
    accepted: bool


@dataclass(frozen=True, slots=True)
class PlayerMetrics:
    player_id: int
    apm: float
    eapm: float
    total_actions: int
    effective_actions: int
    per_minute: tuple[int, ...] = ()


@dataclass(frozen=True, slots=True)
class BuildOrderEntry:
    frame: int
    timestamp: str
    unit_name: str
    category: BuildCategory
    supply_estimate: int
    unit_type: int | None = None
    supply_cap: int = 0
    minerals: int = 0
    gas: int = 0


@dataclass(frozen=True, slots=True)
class ActionDistribution:
    player_id: int
    counts: tuple[tuple[OpcodeCategory, int], ...]
    macro_percentage: float
    micro_percentage: float
    hotkey_actions_per_minute: float


@dataclass(frozen=True, slots=True)
class QualityFlags:
    format: Format
    format_confidence: float
    confidence: float
    command_offset: int
    offset_recovered: bool
    termination: StreamTermination
    command_volume: CommandVolume
    expected_commands_min: int
    expected_commands_max: int
    compressed_offset: int | None = None
    decompression_fallback: bool = False
    frame_count_estimated: bool = False
    unknown_bytes: int = 0
    issues: tuple[QualityIssue, ...] = ()

    @property
    def low_confidence(self) -> bool:
        return self.confidence < 0.5


@dataclass(frozen=True, slots=True)
class ReplayAnalysis:
    header: ReplayHeader
    commands: tuple[Command, ...]
    metrics: tuple[PlayerMetrics, ...]
    build_orders: tuple[tuple[BuildOrderEntry, ...], ...]
    quality: QualityFlags
    fps: float
    game_seconds: float
    action_distributions: tuple[ActionDistribution, ...] = ()
    inferred_races: tuple[Race, ...] = ()
