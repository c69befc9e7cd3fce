from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Iterator
import zlib

from ..config import MAX_DECOMPRESSED_SIZE, ZLIB_SCAN_LIMIT
from ..debug_log import decode_debug_log
from .errors import DecompressedSizeExceeded, DecompressionFailed
from .implode import ImplodeError, ImplodeSizeExceeded, explode, looks_like_implode_header
from .types import Format, ReplayContainer

ZLIB_MAGIC: Final[int] = 0x78
ZLIB_LEVEL_BYTES: Final[frozenset[int]] = frozenset({0x01, 0x5E, 0x9C, 0xDA})

EXPECTED_STREAM_OFFSETS: Final[dict[Format, tuple[int, ...]]] = {
    Format.MODERN_121: (32, 28, 30, 31, 29),
    Format.MODERN_ZLIB: (28, 29, 30, 31, 32),
    Format.LEGACY_PKWARE: (28, 32, 29, 30, 31),
}


@dataclass(frozen=True, slots=True)
class DecompressedStream:
    data: bytes
    format: Format
    offset: int | None
    method: str


def is_zlib_header(data: bytes, pos: int) -> bool:
    return pos + 1 < len(data) and data[pos] == ZLIB_MAGIC and data[pos + 1] in ZLIB_LEVEL_BYTES


def iter_stream_offsets(data: bytes, fmt: Format, *, scan_limit: int = ZLIB_SCAN_LIMIT) -> Iterator[int]:
    """Yield plausible compressed-stream starts: expected offsets first, then a bounded scan."""

    probe = looks_like_implode_header if fmt == Format.LEGACY_PKWARE else is_zlib_header
    seen: set[int] = set()
    for pos in EXPECTED_STREAM_OFFSETS.get(fmt, ()):
        if probe(data, pos):
            seen.add(pos)
            yield pos
    for pos in range(0, min(int(scan_limit), len(data))):
        if pos in seen:
            continue
        if probe(data, pos):
            yield pos


def inflate_bounded(data: bytes, *, max_size: int) -> bytes:
    inflater = zlib.decompressobj()
    try:
        out = inflater.decompress(data, max_size)
    except zlib.error as exc:
        raise DecompressionFailed(f"inflate failed: {exc}") from exc
    if not inflater.eof:
        if inflater.unconsumed_tail or len(out) >= max_size:
            raise DecompressedSizeExceeded(f"decompressed size exceeds {max_size} bytes")
        raise DecompressionFailed("zlib stream is truncated")
    return out


def _decompress_zlib(container: ReplayContainer, *, max_size: int, scan_limit: int) -> DecompressedStream:
    data = container.data
    last_error: DecompressionFailed | None = None
    for pos in iter_stream_offsets(data, container.format, scan_limit=scan_limit):
        try:
            out = inflate_bounded(data[pos:], max_size=max_size)
        except DecompressedSizeExceeded:
            raise
        except DecompressionFailed as exc:
            decode_debug_log("inflate_miss", offset=pos, error=exc)
            last_error = exc
            continue
        return DecompressedStream(data=out, format=container.format, offset=pos, method="zlib")
    if last_error is not None:
        raise last_error
    raise DecompressionFailed(f"no zlib stream found in the first {scan_limit} bytes")


def _decompress_implode(container: ReplayContainer, *, max_size: int, scan_limit: int) -> DecompressedStream:
    data = container.data
    last_error: ImplodeError | None = None
    for pos in iter_stream_offsets(data, container.format, scan_limit=scan_limit):
        try:
            out = explode(data[pos:], max_size=max_size)
        except ImplodeSizeExceeded as exc:
            raise DecompressedSizeExceeded(str(exc)) from exc
        except ImplodeError as exc:
            decode_debug_log("explode_miss", offset=pos, error=exc)
            last_error = exc
            continue
        if out:
            return DecompressedStream(data=out, format=container.format, offset=pos, method="implode")
    if last_error is not None:
        raise DecompressionFailed(f"implode stream not decodable: {last_error}") from last_error
    raise DecompressionFailed(f"no implode stream found in the first {scan_limit} bytes")


def decompress(
    container: ReplayContainer,
    *,
    max_size: int = MAX_DECOMPRESSED_SIZE,
    scan_limit: int = ZLIB_SCAN_LIMIT,
) -> DecompressedStream:
    fmt = container.format
    if fmt == Format.UNCOMPRESSED:
        return DecompressedStream(data=container.data, format=fmt, offset=None, method="none")
    if fmt in (Format.MODERN_ZLIB, Format.MODERN_121):
        return _decompress_zlib(container, max_size=int(max_size), scan_limit=int(scan_limit))
    if fmt == Format.LEGACY_PKWARE:
        return _decompress_implode(container, max_size=int(max_size), scan_limit=int(scan_limit))
    raise DecompressionFailed(f"unsupported container format: {fmt!r}")  # pragma: no cover


def raw_fallback(container: ReplayContainer) -> DecompressedStream:
    """Treat the container bytes as an already-inflated stream.

    Callers must flag results built from this as a fallback parse.
    """

    return DecompressedStream(data=container.data, format=Format.UNCOMPRESSED, offset=None, method="raw")
