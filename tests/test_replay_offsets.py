from __future__ import annotations

import itertools

import pytest

from bwrep.replay import recover_command_offset, score_offset
from bwrep.replay.offsets import iter_candidate_offsets

from conftest import build_stream, sample_commands


def test_score_offset_counts_markers_and_opcodes() -> None:
    stream = bytes([0x0C, 0x01, 0x00, 0x00, 0x14, 0x09, 0xFF])
    candidate = score_offset(stream, 0, window=100, max_players=8, min_opcode_matches=1, min_frame_markers=3)

    assert candidate.offset == 0
    assert candidate.opcode_matches == 1
    assert candidate.frame_markers == 3
    assert candidate.accepted is True


def test_score_offset_requires_both_thresholds() -> None:
    zeros = bytes(200)
    candidate = score_offset(zeros, 0)
    assert candidate.frame_markers == 100
    assert candidate.opcode_matches == 0
    assert candidate.accepted is False


def test_score_offset_respects_player_bound() -> None:
    stream = bytes([0x0C, 0x03, 0x0C, 0x01])
    assert score_offset(stream, 0, max_players=2, min_opcode_matches=0, min_frame_markers=0).opcode_matches == 1
    assert score_offset(stream, 0, max_players=4, min_opcode_matches=0, min_frame_markers=0).opcode_matches == 2


def test_iter_candidate_offsets_known_first_then_scan() -> None:
    offsets = list(iter_candidate_offsets(1000, known_offsets=(640, 633), scan_span=10))
    assert offsets[:2] == [640, 633]
    assert offsets[2:] == [634, 635, 636, 637, 638, 639, 641, 642]
    assert len(offsets) == len(set(offsets))


def test_iter_candidate_offsets_skips_out_of_range() -> None:
    assert list(iter_candidate_offsets(100, known_offsets=(633, 50), scan_span=0)) == [50]


def test_recover_command_offset_skips_rejected_candidate() -> None:
    stream = build_stream(commands=sample_commands(), command_offset=900)

    recovery = recover_command_offset(stream, known_offsets=(700, 900), scan_span=0)
    assert recovery.offset == 900
    assert recovery.recovered is True
    assert recovery.tried == 2
    assert recovery.candidate is not None
    assert recovery.candidate.accepted


def test_recover_command_offset_explicit_candidates() -> None:
    stream = build_stream(commands=sample_commands(), command_offset=900)

    recovery = recover_command_offset(stream, candidates=[700, 900], known_offsets=(633,))
    assert recovery.offset == 900
    assert recovery.recovered is True


def test_recover_command_offset_falls_back_to_first_known() -> None:
    stream = build_stream(commands=b"\xff" * 300, command_offset=800)

    recovery = recover_command_offset(stream, known_offsets=(800,))
    assert recovery.offset == 800
    assert recovery.recovered is False
    assert recovery.candidate is None
    assert recovery.tried > 1


@pytest.mark.parametrize("failing", list(itertools.permutations((700, 750, 820))))
def test_recover_command_offset_ignores_order_of_failing_candidates(failing: tuple[int, ...]) -> None:
    stream = build_stream(commands=sample_commands(), command_offset=900)
    assert not any(score_offset(stream, offset).accepted for offset in failing)

    recovery = recover_command_offset(stream, known_offsets=(*failing, 900), scan_span=0)
    assert recovery.offset == 900
    assert recovery.recovered is True
    assert recovery.tried == 4
