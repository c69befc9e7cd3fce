from __future__ import annotations

import struct
import sys
import zlib
from pathlib import Path
from typing import Sequence

import pytest


def pytest_configure(config: pytest.Config) -> None:
    # Test the bwrep sources in this checkout, installed or not.
    src_dir = Path(__file__).resolve().parents[1] / "src"
    src_str = str(src_dir)
    if src_str not in sys.path:
        sys.path.insert(0, src_str)


PLAYER_TABLE = 0x161
SLOT_SIZE = 36
HEADER_SIZE = PLAYER_TABLE + 12 * SLOT_SIZE
COMMAND_OFFSET = 800

TERRAN = 1
PROTOSS = 2
RANDOM = 6


def frames(count: int) -> bytes:
    return b"\x00" * count


def build_cmd(player: int, unit_type: int, x: int = 10, y: int = 10) -> bytes:
    return bytes([0x0C, player]) + struct.pack("<HHH", unit_type, x, y)


def train_cmd(player: int, unit_type: int) -> bytes:
    return bytes([0x1D, player]) + struct.pack("<H", unit_type)


def research_cmd(player: int, tech_type: int) -> bytes:
    return bytes([0x2F, player, tech_type])


def upgrade_cmd(player: int, upgrade_type: int) -> bytes:
    return bytes([0x31, player, upgrade_type])


def select_cmd(player: int, unit_ids: Sequence[int]) -> bytes:
    return bytes([0x09, player, len(unit_ids)]) + struct.pack(f"<{len(unit_ids)}H", *unit_ids)


def hotkey_cmd(player: int, action: int, hotkey: int) -> bytes:
    return bytes([0x13, player, action, hotkey])


def move_cmd(player: int, x: int, y: int, target_id: int = 0) -> bytes:
    return bytes([0x14, player]) + struct.pack("<HHHHB", x, y, target_id, 0, 0)


def build_stream(
    *,
    players: Sequence[tuple[str | bytes, int]] = (("Alice", TERRAN), ("Bob", PROTOSS)),
    frame_count: int = 1440,
    commands: bytes = b"",
    command_offset: int = COMMAND_OFFSET,
    slot_indices: Sequence[int] | None = None,
    game_type: int = 0x02,
) -> bytes:
    """Assemble a decompressed replay stream: header, padding, then the command section."""

    out = bytearray(max(HEADER_SIZE, command_offset))
    struct.pack_into("<III", out, 0, 59, frame_count, 0x12345678)
    struct.pack_into("<HH", out, 0x18, game_type, 1)
    indices = list(slot_indices) if slot_indices is not None else list(range(len(players)))
    for slot_index, (name, race) in zip(indices, players):
        base = PLAYER_TABLE + slot_index * SLOT_SIZE
        raw = name.encode("utf-8") if isinstance(name, str) else bytes(name)
        out[base : base + len(raw)] = raw[:25]
        out[base + 32] = race
        out[base + 33] = slot_index % 2
        out[base + 34] = slot_index
    return bytes(out) + commands


def zlib_container(stream: bytes, *, tag: bytes = b"reRS") -> bytes:
    if tag == b"seRS":
        prefix = bytearray(32)
    else:
        prefix = bytearray(28)
    prefix[12:16] = tag
    return bytes(prefix) + zlib.compress(stream)


def sample_commands() -> bytes:
    return b"".join(
        [
            frames(10),
            train_cmd(0, 0x07),
            frames(24),
            train_cmd(1, 0x40),
            frames(24),
            build_cmd(0, 0x6D, 40, 50),
            frames(24),
            build_cmd(1, 0x9C, 60, 70),
            frames(48),
            select_cmd(0, [1, 2]),
            move_cmd(0, 100, 120),
            frames(24),
            hotkey_cmd(1, 0, 1),
            build_cmd(0, 0x6F, 44, 52),
            frames(120),
            build_cmd(1, 0xA0, 64, 72),
            research_cmd(0, 0),
            frames(200),
            train_cmd(0, 0x00),
        ]
    )


@pytest.fixture
def sample_stream() -> bytes:
    return build_stream(commands=sample_commands())


@pytest.fixture
def sample_replay(sample_stream: bytes) -> bytes:
    return zlib_container(sample_stream)


@pytest.fixture
def decoder_config():
    from bwrep.config import DecoderConfig

    return DecoderConfig(command_offsets=(COMMAND_OFFSET,), assumed_commands_per_minute=5.0)
