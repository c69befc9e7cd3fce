from __future__ import annotations

import pytest

from bwrep.analysis import assess_command_volume, compute_player_metrics, fps_for_format, frames_to_timestamp, game_minutes
from bwrep.analysis.metrics import format_duration, frames_to_seconds, is_effective_action, is_game_action
from bwrep.replay import Command, CommandParams, CommandVolume, Format, Opcode, decode_header

from conftest import build_stream


def _cmd(frame: int, player: int, opcode: Opcode, **params: int) -> Command:
    return Command(frame=frame, player_id=player, opcode=opcode, params=CommandParams(**params))


def _header(frame_count: int = 1440):
    return decode_header(build_stream(frame_count=frame_count))


def test_fps_for_format() -> None:
    assert fps_for_format(Format.MODERN_ZLIB) == pytest.approx(23.81)
    assert fps_for_format(Format.MODERN_121) == pytest.approx(23.81)
    assert fps_for_format(Format.LEGACY_PKWARE) == pytest.approx(24.0)
    assert fps_for_format(Format.UNCOMPRESSED) == pytest.approx(24.0)


def test_time_helpers() -> None:
    assert game_minutes(1440, 24.0) == pytest.approx(1.0)
    assert game_minutes(1440, 0.0) == 0.0
    assert frames_to_seconds(48, 24.0) == pytest.approx(2.0)
    assert frames_to_timestamp(2 * 1440 + 120, 24.0) == "02:05"
    assert frames_to_timestamp(0, 24.0) == "00:00"
    assert format_duration(125.9) == "02:05"
    assert format_duration(3725) == "1:02:05"


def test_apm_equals_eapm_for_builds_only() -> None:
    commands = [_cmd(i * 12, 0, Opcode.BUILD, unit_type=0x6D, x=1, y=1) for i in range(120)]

    metrics = compute_player_metrics(_header(), commands, fps=24.0)
    assert len(metrics) == 2
    assert metrics[0].apm == pytest.approx(120.0)
    assert metrics[0].eapm == pytest.approx(120.0)
    assert metrics[0].total_actions == 120
    assert metrics[1].apm == 0.0


def test_selection_and_moves_are_not_effective() -> None:
    commands = []
    for i in range(60):
        commands.append(_cmd(i * 24, 0, Opcode.SELECT, unit_count=1))
        commands.append(_cmd(i * 24, 0, Opcode.BUILD, unit_type=0x6D, x=1, y=1))
    commands.append(_cmd(100, 0, Opcode.MOVE, x=1, y=1, target_id=0, unit_type=0))

    (player0, _) = compute_player_metrics(_header(), commands, fps=24.0)
    assert player0.total_actions == 121
    assert player0.effective_actions == 60
    assert player0.eapm < player0.apm


def test_non_game_actions_are_excluded() -> None:
    chat = _cmd(10, 0, Opcode.CHAT)
    sync = _cmd(10, 0, Opcode.SYNC)
    assert not is_game_action(chat)
    assert not is_game_action(sync)
    assert not is_effective_action(chat)

    (player0, _) = compute_player_metrics(_header(), [chat, sync], fps=24.0)
    assert player0.total_actions == 0


def test_commands_from_unknown_players_are_ignored() -> None:
    commands = [_cmd(10, 5, Opcode.BUILD, unit_type=0x6D, x=1, y=1)]

    metrics = compute_player_metrics(_header(), commands, fps=24.0)
    assert [m.total_actions for m in metrics] == [0, 0]


def test_zero_length_game_has_zero_apm() -> None:
    commands = [_cmd(0, 0, Opcode.BUILD, unit_type=0x6D, x=1, y=1)]

    (player0, _) = compute_player_metrics(_header(), commands, fps=0.0)
    assert player0.apm == 0.0
    assert player0.eapm == 0.0
    assert player0.per_minute == ()


def test_per_minute_buckets() -> None:
    commands = [
        _cmd(100, 0, Opcode.TRAIN, unit_type=7),
        _cmd(1500, 0, Opcode.TRAIN, unit_type=7),
        _cmd(1600, 0, Opcode.TRAIN, unit_type=7),
        _cmd(9000, 0, Opcode.TRAIN, unit_type=7),
    ]

    (player0, _) = compute_player_metrics(_header(2880), commands, fps=24.0)
    assert player0.per_minute == (1, 3)


def test_assess_command_volume() -> None:
    realistic = assess_command_volume(3000, players=2, minutes=10.0, commands_per_minute=150.0)
    assert realistic.volume == CommandVolume.REALISTIC
    assert realistic.expected_min <= 3000 <= realistic.expected_max

    assert assess_command_volume(100, players=2, minutes=10.0).volume == CommandVolume.INSUFFICIENT
    assert assess_command_volume(6000, players=2, minutes=10.0).volume == CommandVolume.SUSPICIOUS


def test_assess_command_volume_without_players() -> None:
    result = assess_command_volume(0, players=0, minutes=10.0)
    assert result.volume == CommandVolume.REALISTIC
    assert (result.expected_min, result.expected_max) == (0, 0)
