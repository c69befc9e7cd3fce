from __future__ import annotations

from bwrep.replay import CommandStreamDecoder, Opcode, StreamTermination
from bwrep.replay.commands import decode_commands
from bwrep.replay.opcodes import MODERN_PROFILE

from conftest import build_cmd, frames, hotkey_cmd, move_cmd, sample_commands, select_cmd, train_cmd


def test_decode_build_after_frame_steps() -> None:
    stream = frames(120) + bytes([0x0C, 0x01, 0x41, 0x00, 0x0A, 0x00, 0x0A, 0x00])

    result = decode_commands(stream, 0, 1440)
    assert result.termination == StreamTermination.END_OF_BUFFER
    assert len(result.commands) == 1
    cmd = result.commands[0]
    assert cmd.frame == 120
    assert cmd.player_id == 1
    assert cmd.opcode == Opcode.BUILD
    assert (cmd.params.unit_type, cmd.params.x, cmd.params.y) == (0x41, 10, 10)
    assert cmd.offset == 120
    assert result.cursor == len(stream)


def test_decode_resynchronizes_on_unknown_byte() -> None:
    stream = bytes([0xFF]) + build_cmd(0, 7, 1, 2)

    result = decode_commands(stream, 0, 100)
    assert result.unknown_bytes == 1
    assert [cmd.opcode for cmd in result.commands] == [Opcode.BUILD]
    assert result.commands[0].offset == 1


def test_decode_frame_skips() -> None:
    stream = bytes([0x01, 10, 0x02, 0x2C, 0x01]) + train_cmd(0, 0x41)

    result = decode_commands(stream, 0, 1000)
    (cmd,) = result.commands
    assert cmd.frame == 310
    assert cmd.opcode == Opcode.TRAIN
    assert cmd.params.unit_type == 0x41
    assert result.final_frame == 310


def test_decode_stops_past_frame_count() -> None:
    result = decode_commands(frames(10) + train_cmd(0, 7), 0, 5)
    assert result.termination == StreamTermination.FRAME_LIMIT
    assert result.commands == ()
    assert result.cursor == 6


def test_decode_keeps_command_on_last_frame() -> None:
    result = decode_commands(frames(5) + train_cmd(0, 7), 0, 5)
    assert len(result.commands) == 1
    assert result.commands[0].frame == 5


def test_decode_stops_at_command_cap() -> None:
    stream = b"".join(train_cmd(0, 7) for _ in range(10))

    result = CommandStreamDecoder(max_commands=3).decode(stream, 0, 100)
    assert len(result.commands) == 3
    assert result.termination == StreamTermination.COMMAND_CAP
    assert result.cursor == 12


def test_decode_truncated_command_keeps_earlier_commands() -> None:
    stream = train_cmd(1, 7) + bytes([0x00, 0x0C, 0x00, 0x41])

    result = decode_commands(stream, 0, 100)
    assert result.termination == StreamTermination.TRUNCATED_COMMAND
    assert result.truncated
    assert [cmd.opcode for cmd in result.commands] == [Opcode.TRAIN]
    assert result.cursor == 5


def test_decode_truncated_frame_skip() -> None:
    result = decode_commands(bytes([0x02, 0x05]), 0, 100)
    assert result.termination == StreamTermination.TRUNCATED_COMMAND
    assert result.commands == ()


def test_decode_variable_length_select() -> None:
    stream = select_cmd(0, [1, 2, 3]) + hotkey_cmd(0, 0, 1) + move_cmd(0, 100, 120, 5)

    result = decode_commands(stream, 0, 100)
    select, hotkey, move = result.commands
    assert select.opcode == Opcode.SELECT
    assert select.params.unit_count == 3
    assert hotkey.offset == 9
    assert (hotkey.params.hotkey_action, hotkey.params.hotkey) == (0, 1)
    assert move.offset == 13
    assert (move.params.x, move.params.y, move.params.target_id) == (100, 120, 5)
    assert result.cursor == len(stream)


def test_decode_respects_start_offset() -> None:
    stream = b"\x0c" * 5 + build_cmd(0, 7)

    result = decode_commands(stream, 5, 100)
    assert len(result.commands) == 1
    assert result.commands[0].offset == 5
    assert result.unknown_bytes == 0


def test_decode_sample_stream_frames_are_monotonic() -> None:
    result = CommandStreamDecoder(profile=MODERN_PROFILE).decode(sample_commands(), 0, 1440)

    assert len(result.commands) == 11
    assert result.unknown_bytes == 0
    frames_seen = [cmd.frame for cmd in result.commands]
    assert frames_seen == sorted(frames_seen)
    assert frames_seen[-1] == 474
