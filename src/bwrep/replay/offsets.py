from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence

from ..config import KNOWN_COMMAND_OFFSETS
from ..debug_log import decode_debug_log
from .opcodes import FRAME_MARKERS, OPCODE_TABLE, OpcodeInfo
from .types import OffsetCandidate

DEFAULT_WINDOW = 100
DEFAULT_SCAN_SPAN = 2048
MIN_OPCODE_MATCHES = 3
MIN_FRAME_MARKERS = 5


@dataclass(frozen=True, slots=True)
class OffsetRecovery:
    offset: int
    candidate: OffsetCandidate | None
    recovered: bool
    tried: int


def iter_candidate_offsets(
    stream_length: int,
    *,
    known_offsets: Sequence[int] = KNOWN_COMMAND_OFFSETS,
    scan_span: int = DEFAULT_SCAN_SPAN,
) -> Iterator[int]:
    """Yield command-section start candidates in priority order.

    Known offsets come first, in the order given. A dense scan follows, starting
    at the lowest known offset and covering `scan_span` bytes. Offsets outside
    the stream are skipped and no offset is yielded twice.
    """

    seen: set[int] = set()
    for offset in known_offsets:
        offset = int(offset)
        if 0 <= offset < stream_length and offset not in seen:
            seen.add(offset)
            yield offset
    if not known_offsets or scan_span <= 0:
        return
    start = min(int(v) for v in known_offsets)
    stop = min(int(stream_length), start + int(scan_span))
    for offset in range(max(0, start), stop):
        if offset not in seen:
            seen.add(offset)
            yield offset


def score_offset(
    stream: bytes,
    offset: int,
    *,
    window: int = DEFAULT_WINDOW,
    max_players: int = 8,
    table: tuple[OpcodeInfo | None, ...] = OPCODE_TABLE,
    min_opcode_matches: int = MIN_OPCODE_MATCHES,
    min_frame_markers: int = MIN_FRAME_MARKERS,
) -> OffsetCandidate:
    """Score the `window` bytes at `offset` for command-stream likeness.

    An opcode match is a byte found in `table` whose following byte is a
    plausible player id (`< max_players`). A frame marker is any of the
    frame-advance bytes `0x00..0x02`.
    """

    end = min(len(stream), int(offset) + int(window))
    opcode_matches = 0
    frame_markers = 0
    for pos in range(int(offset), end):
        byte = stream[pos]
        if byte in FRAME_MARKERS:
            frame_markers += 1
        elif table[byte] is not None and pos + 1 < len(stream) and stream[pos + 1] < max_players:
            opcode_matches += 1
    accepted = opcode_matches >= min_opcode_matches and frame_markers >= min_frame_markers
    return OffsetCandidate(
        offset=int(offset),
        opcode_matches=opcode_matches,
        frame_markers=frame_markers,
        accepted=accepted,
    )


def score_candidates(stream: bytes, offsets: Iterable[int], **kwargs) -> list[OffsetCandidate]:
    return [score_offset(stream, offset, **kwargs) for offset in offsets]


def recover_command_offset(
    stream: bytes,
    *,
    candidates: Iterable[int] | None = None,
    known_offsets: Sequence[int] = KNOWN_COMMAND_OFFSETS,
    scan_span: int = DEFAULT_SCAN_SPAN,
    window: int = DEFAULT_WINDOW,
    max_players: int = 8,
    table: tuple[OpcodeInfo | None, ...] = OPCODE_TABLE,
    min_opcode_matches: int = MIN_OPCODE_MATCHES,
    min_frame_markers: int = MIN_FRAME_MARKERS,
) -> OffsetRecovery:
    """Pick the first accepted candidate; fall back to the first known offset.

    `candidates` overrides the generated priority order.
    """

    if candidates is None:
        candidates = iter_candidate_offsets(len(stream), known_offsets=known_offsets, scan_span=scan_span)
    tried = 0
    for offset in candidates:
        tried += 1
        candidate = score_offset(
            stream,
            offset,
            window=window,
            max_players=max_players,
            table=table,
            min_opcode_matches=min_opcode_matches,
            min_frame_markers=min_frame_markers,
        )
        if candidate.accepted:
            decode_debug_log(
                "offset_accepted",
                offset=candidate.offset,
                opcodes=candidate.opcode_matches,
                markers=candidate.frame_markers,
                tried=tried,
            )
            return OffsetRecovery(offset=candidate.offset, candidate=candidate, recovered=True, tried=tried)

    fallback = int(known_offsets[0]) if known_offsets else 0
    decode_debug_log("offset_fallback", offset=fallback, tried=tried)
    return OffsetRecovery(offset=fallback, candidate=None, recovered=False, tried=tried)
