from __future__ import annotations

from .commands import CommandStream, CommandStreamDecoder, decode_commands
from .decompress import DecompressedStream, decompress, raw_fallback
from .detect import detect_format
from .errors import (
    DecodeError,
    DecompressedSizeExceeded,
    DecompressionFailed,
    FormatUnrecognized,
    HeaderTruncated,
    QualityIssue,
)
from .header import UNKNOWN_MAP_NAME, HeaderLayout, decode_header, game_type_name
from .implode import ImplodeError, explode
from .offsets import OffsetRecovery, iter_candidate_offsets, recover_command_offset, score_offset
from .opcodes import OPCODE_TABLE, EngineProfile, OpcodeInfo, lookup_opcode, profile_for_format
from .quality import ReplayQualityWarning, warn_on_low_confidence
from .types import (
    BuildCategory,
    BuildOrderEntry,
    Command,
    CommandParams,
    CommandVolume,
    Format,
    OffsetCandidate,
    Opcode,
    OpcodeCategory,
    PlayerMetrics,
    PlayerSlot,
    QualityFlags,
    Race,
    ReplayAnalysis,
    ReplayContainer,
    ReplayHeader,
    StreamTermination,
)

__all__ = [
    "OPCODE_TABLE",
    "UNKNOWN_MAP_NAME",
    "BuildCategory",
    "BuildOrderEntry",
    "Command",
    "CommandParams",
    "CommandStream",
    "CommandStreamDecoder",
    "CommandVolume",
    "DecodeError",
    "DecompressedSizeExceeded",
    "DecompressedStream",
    "DecompressionFailed",
    "EngineProfile",
    "Format",
    "FormatUnrecognized",
    "HeaderLayout",
    "HeaderTruncated",
    "ImplodeError",
    "OffsetCandidate",
    "OffsetRecovery",
    "Opcode",
    "OpcodeCategory",
    "OpcodeInfo",
    "PlayerMetrics",
    "PlayerSlot",
    "QualityFlags",
    "QualityIssue",
    "Race",
    "ReplayAnalysis",
    "ReplayContainer",
    "ReplayHeader",
    "ReplayQualityWarning",
    "StreamTermination",
    "decode_commands",
    "decode_header",
    "decompress",
    "detect_format",
    "explode",
    "game_type_name",
    "iter_candidate_offsets",
    "lookup_opcode",
    "profile_for_format",
    "raw_fallback",
    "recover_command_offset",
    "score_offset",
    "warn_on_low_confidence",
]
