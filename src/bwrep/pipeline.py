from __future__ import annotations

from pathlib import Path

from .analysis.actions import compute_action_distributions
from .analysis.build_order import compute_build_orders, infer_player_races
from .analysis.metrics import assess_command_volume, compute_player_metrics, frames_to_seconds, game_minutes
from .config import DecoderConfig
from .debug_log import decode_debug_log
from .replay.commands import CommandStreamDecoder
from .replay.decompress import DecompressedStream, decompress, raw_fallback
from .replay.detect import detect_format
from .replay.errors import DecompressedSizeExceeded, DecompressionFailed
from .replay.header import decode_header
from .replay.offsets import recover_command_offset
from .replay.opcodes import profile_for_format
from .replay.quality import collect_issues, confidence_score
from .replay.types import QualityFlags, ReplayAnalysis, ReplayContainer


def load_stream(data: bytes, *, config: DecoderConfig) -> tuple[ReplayContainer, DecompressedStream, bool]:
    """Detect and inflate a container. The flag is True when the raw fallback was used."""

    container = detect_format(data)
    decode_debug_log(
        "detect",
        format=container.format.name,
        confidence=container.confidence,
        size=len(container.data),
    )

    fallback = False
    try:
        stream = decompress(
            container,
            max_size=config.max_decompressed_size,
            scan_limit=config.compressed_scan_limit,
        )
    except DecompressedSizeExceeded:
        decode_debug_log("decompress_refused", format=container.format.name)
        raise
    except DecompressionFailed as exc:
        if not config.raw_fallback:
            raise
        decode_debug_log("decompress_fallback", format=container.format.name, error=exc)
        stream = raw_fallback(container)
        fallback = True
    decode_debug_log("decompress", method=stream.method, offset=stream.offset, size=len(stream.data))
    return container, stream, fallback


def decode_replay(data: bytes, *, config: DecoderConfig | None = None) -> ReplayAnalysis:
    """Decode a raw `.rep` container into header, commands and derived metrics.

    Raises a `DecodeError` subclass on fatal failures (unrecognized container,
    undecodable payload, truncated header). Every other problem is recorded on
    `ReplayAnalysis.quality` and the best available result is returned.
    """

    config = config if config is not None else DecoderConfig()
    container, stream, fallback = load_stream(data, config=config)

    profile = profile_for_format(container.format)
    header = decode_header(stream.data, average_bytes_per_frame=config.average_bytes_per_frame)
    decode_debug_log(
        "header",
        frames=header.frame_count,
        estimated=header.frame_count_estimated,
        players=header.player_count,
        map=header.map_name,
    )

    recovery = recover_command_offset(
        stream.data,
        known_offsets=config.command_offsets,
        scan_span=config.offset_scan_span,
        window=config.offset_window,
        max_players=header.player_count or profile.max_players,
        table=profile.opcode_table,
        min_opcode_matches=config.min_opcode_matches,
        min_frame_markers=config.min_frame_markers,
    )

    decoder = CommandStreamDecoder(profile=profile, max_commands=config.max_commands)
    result = decoder.decode(stream.data, recovery.offset, header.frame_count)
    commands = result.commands
    decode_debug_log(
        "commands",
        count=len(commands),
        cursor=result.cursor,
        frame=result.final_frame,
        termination=result.termination.value,
        unknown=result.unknown_bytes,
    )

    fps = profile.fps
    minutes = game_minutes(header.frame_count, fps)
    metrics = compute_player_metrics(header, commands, fps=fps)
    build_orders = compute_build_orders(
        header,
        commands,
        fps=fps,
        limit=config.build_order_limit,
        include_tech=config.build_order_include_tech,
    )
    volume = assess_command_volume(
        len(commands),
        players=header.player_count,
        minutes=minutes,
        commands_per_minute=config.assumed_commands_per_minute,
        tolerance=config.command_volume_tolerance,
    )

    issues = collect_issues(
        command_count=len(commands),
        offset_recovered=recovery.recovered,
        decompression_fallback=fallback,
        frame_count_estimated=header.frame_count_estimated,
        termination=result.termination,
    )
    quality = QualityFlags(
        format=container.format,
        format_confidence=container.confidence,
        confidence=confidence_score(container.confidence, issues, volume.volume),
        command_offset=recovery.offset,
        offset_recovered=recovery.recovered,
        termination=result.termination,
        command_volume=volume.volume,
        expected_commands_min=volume.expected_min,
        expected_commands_max=volume.expected_max,
        compressed_offset=stream.offset,
        decompression_fallback=fallback,
        frame_count_estimated=header.frame_count_estimated,
        unknown_bytes=result.unknown_bytes,
        issues=issues,
    )
    decode_debug_log(
        "quality",
        confidence=quality.confidence,
        volume=quality.command_volume.value,
        issues=",".join(issue.value for issue in issues) or "-",
    )

    return ReplayAnalysis(
        header=header,
        commands=commands,
        metrics=metrics,
        build_orders=build_orders,
        quality=quality,
        fps=fps,
        game_seconds=frames_to_seconds(header.frame_count, fps),
        action_distributions=compute_action_distributions(header, commands, fps=fps),
        inferred_races=infer_player_races(header, build_orders),
    )


def decode_replay_file(path: Path, *, config: DecoderConfig | None = None) -> ReplayAnalysis:
    path = Path(path)
    return decode_replay(path.read_bytes(), config=config)
