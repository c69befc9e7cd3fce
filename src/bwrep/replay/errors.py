from __future__ import annotations

from enum import Enum


class DecodeError(ValueError):
    """Fatal replay decode failure; no partial result is available."""


class FormatUnrecognized(DecodeError):
    pass


class DecompressionFailed(DecodeError):
    pass


class DecompressedSizeExceeded(DecompressionFailed):
    pass


class HeaderTruncated(DecodeError):
    pass


class QualityIssue(str, Enum):
    """Non-fatal conditions recorded on a decoded replay."""

    COMMAND_STREAM_EMPTY = "CommandStreamEmpty"
    OFFSET_RECOVERY_FAILED = "OffsetRecoveryFailed"
    DECOMPRESSION_FALLBACK = "DecompressionFallback"
    FRAME_COUNT_ESTIMATED = "FrameCountEstimated"
    COMMAND_STREAM_TRUNCATED = "CommandStreamTruncated"
    COMMAND_CAP_REACHED = "CommandCapReached"
