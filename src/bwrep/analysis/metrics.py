from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Iterable, Sequence

from ..replay.opcodes import OPCODE_TABLE, OpcodeInfo, profile_for_format
from ..replay.types import (
    INEFFECTIVE_CATEGORIES,
    Command,
    CommandVolume,
    Format,
    PlayerMetrics,
    ReplayHeader,
)


def fps_for_format(fmt: Format) -> float:
    return float(profile_for_format(fmt).fps)


def game_minutes(frame_count: int, fps: float) -> float:
    if fps <= 0.0:
        return 0.0
    return max(0, int(frame_count)) / float(fps) / 60.0


def frames_to_seconds(frame: int, fps: float) -> float:
    if fps <= 0.0:
        return 0.0
    return max(0, int(frame)) / float(fps)


def frames_to_timestamp(frame: int, fps: float) -> str:
    """Format a frame as `mm:ss`; minutes are not wrapped into hours."""

    total = int(frames_to_seconds(frame, fps))
    return f"{total // 60:02d}:{total % 60:02d}"


def format_duration(seconds: float) -> str:
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def opcode_info(command: Command, table: Sequence[OpcodeInfo | None] = OPCODE_TABLE) -> OpcodeInfo | None:
    return table[int(command.opcode)]


def is_game_action(command: Command) -> bool:
    info = opcode_info(command)
    return info is not None and info.is_game_action


def is_effective_action(command: Command) -> bool:
    info = opcode_info(command)
    return info is not None and info.is_game_action and info.category not in INEFFECTIVE_CATEGORIES


def _player_metrics(player_id: int, commands: Iterable[Command], *, frame_count: int, fps: float) -> PlayerMetrics:
    minutes = game_minutes(frame_count, fps)
    frames_per_minute = float(fps) * 60.0
    buckets = max(1, math.ceil(minutes)) if minutes > 0.0 else 0
    per_minute = [0] * buckets

    total = 0
    effective = 0
    for cmd in commands:
        if cmd.player_id != player_id or not is_game_action(cmd):
            continue
        total += 1
        if is_effective_action(cmd):
            effective += 1
        if buckets:
            per_minute[min(buckets - 1, int(cmd.frame / frames_per_minute))] += 1

    if minutes <= 0.0:
        apm = eapm = 0.0
    else:
        apm = total / minutes
        eapm = effective / minutes
    return PlayerMetrics(
        player_id=player_id,
        apm=apm,
        eapm=eapm,
        total_actions=total,
        effective_actions=effective,
        per_minute=tuple(per_minute),
    )


def compute_player_metrics(header: ReplayHeader, commands: Sequence[Command], *, fps: float) -> tuple[PlayerMetrics, ...]:
    """APM and EAPM for every active player.

    Only dense player ids `0..player_count-1` are counted; commands from other
    ids (observers, computer slots, misaligned bytes) are ignored.
    """

    return tuple(
        _player_metrics(player_id, commands, frame_count=header.frame_count, fps=fps)
        for player_id in range(header.player_count)
    )


@dataclass(frozen=True, slots=True)
class VolumeAssessment:
    volume: CommandVolume
    expected_min: int
    expected_max: int
    observed: int


def assess_command_volume(
    observed: int,
    *,
    players: int,
    minutes: float,
    commands_per_minute: float = 150.0,
    tolerance: float = 0.8,
) -> VolumeAssessment:
    """Classify a decoded command count against what `players` would plausibly issue."""

    expected = max(0, int(players)) * float(commands_per_minute) * max(0.0, float(minutes))
    low = math.floor(expected * (1.0 - tolerance))
    high = math.ceil(expected * (1.0 + tolerance))
    if observed < low:
        volume = CommandVolume.INSUFFICIENT
    elif observed > high:
        volume = CommandVolume.SUSPICIOUS
    else:
        volume = CommandVolume.REALISTIC
    return VolumeAssessment(volume=volume, expected_min=int(low), expected_max=int(high), observed=int(observed))
