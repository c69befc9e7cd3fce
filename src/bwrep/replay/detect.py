from __future__ import annotations

from typing import Final

from .errors import FormatUnrecognized
from .types import Format, ReplayContainer

MIN_CONTAINER_SIZE: Final[int] = 16
MODERN_121_TAG: Final[bytes] = b"seRS"
ZLIB_MAGIC: Final[int] = 0x78
ZLIB_PROBE_OFFSET: Final[int] = 28

_CONFIDENCE: Final[dict[Format, float]] = {
    Format.MODERN_121: 0.95,
    Format.MODERN_ZLIB: 0.90,
    Format.LEGACY_PKWARE: 0.85,
}


def detect_format(data: bytes) -> ReplayContainer:
    """Classify a raw replay container from a handful of header bytes.

    Bytes 12..15 carry the replay tag; `seRS` marks the 1.21+ layout. Older
    modern files are recognised by a zlib header byte at offset 28, and
    everything else is assumed to be a legacy PKWare-imploded file.
    """

    data = bytes(data)
    if len(data) < MIN_CONTAINER_SIZE:
        raise FormatUnrecognized(f"replay too short: {len(data)} bytes (need at least {MIN_CONTAINER_SIZE})")
    tag = data[12:16]
    if tag == MODERN_121_TAG:
        fmt = Format.MODERN_121
    elif len(data) > ZLIB_PROBE_OFFSET and data[ZLIB_PROBE_OFFSET] == ZLIB_MAGIC:
        fmt = Format.MODERN_ZLIB
    else:
        fmt = Format.LEGACY_PKWARE
    return ReplayContainer(data=data, format=fmt, confidence=_CONFIDENCE[fmt])


def replay_tag(data: bytes) -> str:
    """Return bytes 12..15 as printable text, for diagnostics."""
    raw = bytes(data[12:16])
    return "".join(chr(b) if 0x20 <= b < 0x7F else "." for b in raw)
