from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping
import tomllib

KNOWN_COMMAND_OFFSETS: tuple[int, ...] = (633, 637, 641, 645)
MAX_COMMANDS = 20_000
MAX_DECOMPRESSED_SIZE = 64 * 1024 * 1024
ZLIB_SCAN_LIMIT = 200


class ConfigError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class DecoderConfig:
    max_commands: int = MAX_COMMANDS
    max_decompressed_size: int = MAX_DECOMPRESSED_SIZE
    compressed_scan_limit: int = ZLIB_SCAN_LIMIT
    raw_fallback: bool = True
    command_offsets: tuple[int, ...] = KNOWN_COMMAND_OFFSETS
    offset_scan_span: int = 2048
    offset_window: int = 100
    min_opcode_matches: int = 3
    min_frame_markers: int = 5
    average_bytes_per_frame: float = 3.0
    build_order_limit: int = 25
    build_order_include_tech: bool = True
    assumed_commands_per_minute: float = 150.0
    command_volume_tolerance: float = 0.8

    def __post_init__(self) -> None:
        if int(self.max_commands) <= 0:
            raise ConfigError(f"max_commands must be positive, got {self.max_commands}")
        if int(self.max_decompressed_size) <= 0:
            raise ConfigError(f"max_decompressed_size must be positive, got {self.max_decompressed_size}")
        if not self.command_offsets:
            raise ConfigError("command_offsets must name at least one offset")
        if any(int(offset) < 0 for offset in self.command_offsets):
            raise ConfigError(f"command_offsets must be non-negative: {self.command_offsets!r}")
        if float(self.average_bytes_per_frame) <= 0.0:
            raise ConfigError("average_bytes_per_frame must be positive")
        if not (0.0 <= float(self.command_volume_tolerance) <= 1.0):
            raise ConfigError("command_volume_tolerance must be within [0, 1]")


def config_from_mapping(data: Mapping[str, Any], *, base: DecoderConfig | None = None) -> DecoderConfig:
    """Overlay `data` onto `base` (or the defaults), rejecting unknown keys."""

    base = base if base is not None else DecoderConfig()
    known = {f.name for f in fields(DecoderConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"unknown decoder settings: {', '.join(unknown)}")
    values: dict[str, Any] = dict(data)
    if "command_offsets" in values:
        raw = values["command_offsets"]
        if not isinstance(raw, (list, tuple)):
            raise ConfigError("command_offsets must be a list of integers")
        values["command_offsets"] = tuple(int(v) for v in raw)
    return replace(base, **values)


def load_decoder_config(path: Path) -> DecoderConfig:
    path = Path(path)
    try:
        doc = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"invalid TOML in {path}: {exc}") from exc
    section = doc.get("decoder", {})
    if not isinstance(section, dict):
        raise ConfigError(f"[decoder] in {path} must be a table")
    return config_from_mapping(section)
