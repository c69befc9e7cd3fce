from __future__ import annotations

from dataclasses import asdict
from pathlib import Path
from typing import Any

import msgspec

from .analysis.metrics import format_duration
from .replay.header import game_type_name
from .replay.types import Command, ReplayAnalysis, ReplayHeader

EXPORT_VERSION = 1


def _params_to_obj(command: Command) -> dict[str, int]:
    return {key: value for key, value in asdict(command.params).items() if value is not None}


def command_to_obj(command: Command) -> dict[str, Any]:
    return {
        "frame": int(command.frame),
        "player_id": int(command.player_id),
        "opcode": command.opcode.name,
        "params": _params_to_obj(command),
    }


def header_to_obj(header: ReplayHeader) -> dict[str, Any]:
    obj = asdict(header)
    # Enums are exported by name.
    obj["player_slots"] = [
        {**asdict(slot), "race": slot.race.name} for slot in header.player_slots
    ]
    obj["player_count"] = header.player_count
    obj["game_type_name"] = game_type_name(header.game_type)
    return obj


def analysis_to_obj(analysis: ReplayAnalysis, *, include_commands: bool = True) -> dict[str, Any]:
    quality = asdict(analysis.quality)
    quality["format"] = analysis.quality.format.name
    quality["termination"] = analysis.quality.termination.value
    quality["command_volume"] = analysis.quality.command_volume.value
    quality["issues"] = [issue.value for issue in analysis.quality.issues]
    quality["low_confidence"] = analysis.quality.low_confidence

    obj: dict[str, Any] = {
        "v": EXPORT_VERSION,
        "header": header_to_obj(analysis.header),
        "fps": analysis.fps,
        "game_seconds": analysis.game_seconds,
        "duration": format_duration(analysis.game_seconds),
        "command_count": len(analysis.commands),
        "metrics": [asdict(m) for m in analysis.metrics],
        "build_orders": [
            [{**asdict(entry), "category": entry.category.value} for entry in order]
            for order in analysis.build_orders
        ],
        "action_distributions": [
            {
                "player_id": dist.player_id,
                "counts": {category.value: count for category, count in dist.counts},
                "macro_percentage": dist.macro_percentage,
                "micro_percentage": dist.micro_percentage,
                "hotkey_actions_per_minute": dist.hotkey_actions_per_minute,
            }
            for dist in analysis.action_distributions
        ],
        "inferred_races": [race.name for race in analysis.inferred_races],
        "quality": quality,
    }
    if include_commands:
        obj["commands"] = [command_to_obj(cmd) for cmd in analysis.commands]
    return obj


def dump_analysis_json(analysis: ReplayAnalysis, *, include_commands: bool = True, indent: int = 0) -> bytes:
    raw = msgspec.json.encode(analysis_to_obj(analysis, include_commands=include_commands))
    if indent > 0:
        raw = msgspec.json.format(raw, indent=indent)
    return raw


def dump_analysis_file(path: Path, analysis: ReplayAnalysis, *, include_commands: bool = True) -> None:
    path = Path(path)
    path.write_bytes(dump_analysis_json(analysis, include_commands=include_commands, indent=2))
