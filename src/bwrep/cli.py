from __future__ import annotations

from pathlib import Path

import typer

from .analysis.metrics import format_duration, frames_to_timestamp
from .config import ConfigError, DecoderConfig, config_from_mapping, load_decoder_config
from .debug_log import close_decode_debug_log, init_decode_debug_log
from .export import command_to_obj, dump_analysis_json
from .pipeline import decode_replay, load_stream
from .replay.detect import detect_format, replay_tag
from .replay.errors import DecodeError
from .replay.header import decode_header, game_type_name
from .replay.offsets import recover_command_offset, score_offset
from .replay.opcodes import lookup_opcode, profile_for_format
from .replay.quality import warn_on_low_confidence
from .replay.types import ReplayAnalysis


app = typer.Typer(add_completion=False)


def _read_replay(path: Path) -> bytes:
    path = Path(path)
    if not path.is_file():
        typer.echo(f"replay not found: {path}", err=True)
        raise typer.Exit(code=1)
    return path.read_bytes()


def _load_config(config_path: Path | None, *, max_commands: int | None = None) -> DecoderConfig:
    try:
        config = load_decoder_config(config_path) if config_path is not None else DecoderConfig()
        if max_commands is not None:
            config = config_from_mapping({"max_commands": int(max_commands)}, base=config)
    except (ConfigError, OSError) as exc:
        typer.echo(f"invalid config: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    return config


def _decode(data: bytes, config: DecoderConfig) -> ReplayAnalysis:
    try:
        return decode_replay(data, config=config)
    except DecodeError as exc:
        typer.echo(f"{type(exc).__name__}: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def _format_params(params: dict[str, int]) -> str:
    return " ".join(f"{key}={value}" for key, value in params.items())


def _summary_lines(analysis: ReplayAnalysis) -> list[str]:
    header = analysis.header
    quality = analysis.quality
    lines = [
        f"Map: {header.map_name}",
        f"Game type: {game_type_name(header.game_type)} (sub type {header.game_sub_type})",
        f"Duration: {format_duration(analysis.game_seconds)} ({header.frame_count} frames @ {analysis.fps} fps)",
        f"Format: {quality.format.name} (confidence {quality.format_confidence:.2f})",
        f"Commands: {len(analysis.commands)} from offset {quality.command_offset}",
    ]
    for slot in header.player_slots:
        race = slot.race.name
        if slot.player_id < len(analysis.inferred_races) and analysis.inferred_races[slot.player_id] != slot.race:
            race = f"{race} -> {analysis.inferred_races[slot.player_id].name}"
        metrics = analysis.metrics[slot.player_id]
        lines.append(
            f"  [{slot.player_id}] {slot.name} ({race}, team {slot.team}): "
            f"APM {metrics.apm:.0f} EAPM {metrics.eapm:.0f} actions {metrics.total_actions}"
        )
    issues = ", ".join(issue.value for issue in quality.issues) or "none"
    lines.append(
        f"Quality: confidence {quality.confidence:.2f}, volume {quality.command_volume.value} "
        f"(expected {quality.expected_commands_min}..{quality.expected_commands_max}), issues: {issues}"
    )
    return lines


@app.command("detect")
def cmd_detect(replay_file: Path = typer.Argument(..., help="replay file path (.rep)")) -> None:
    """Show the detected container format."""
    data = _read_replay(replay_file)
    try:
        container = detect_format(data)
    except DecodeError as exc:
        typer.echo(f"{type(exc).__name__}: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(f"format={container.format.name} confidence={container.confidence:.2f} tag={replay_tag(data)!r} size={len(data)}")


@app.command("decode")
def cmd_decode(
    replay_file: Path = typer.Argument(..., help="replay file path (.rep)"),
    json_output: bool = typer.Option(False, "--json", help="print the full analysis as JSON"),
    no_commands: bool = typer.Option(False, "--no-commands", help="omit the command list from JSON output"),
    config_path: Path | None = typer.Option(None, "--config", help="TOML file with a [decoder] table"),
    max_commands: int | None = typer.Option(None, "--max-commands", min=1, help="emitted command cap"),
    trace_log: Path | None = typer.Option(None, "--trace-log", help="append decode trace events to this file"),
) -> None:
    """Decode a replay and print a summary (or JSON)."""
    data = _read_replay(replay_file)
    config = _load_config(config_path, max_commands=max_commands)
    if trace_log is not None:
        init_decode_debug_log(trace_log, source=str(replay_file))
    try:
        analysis = _decode(data, config)
    finally:
        if trace_log is not None:
            close_decode_debug_log()

    warn_on_low_confidence(analysis, action="decode")
    if json_output:
        typer.echo(dump_analysis_json(analysis, include_commands=not no_commands, indent=2).decode("utf-8"))
        return
    for line in _summary_lines(analysis):
        typer.echo(line)


@app.command("offsets")
def cmd_offsets(
    replay_file: Path = typer.Argument(..., help="replay file path (.rep)"),
    config_path: Path | None = typer.Option(None, "--config", help="TOML file with a [decoder] table"),
) -> None:
    """Score the known command-section offsets and show the one selected."""
    data = _read_replay(replay_file)
    config = _load_config(config_path)
    try:
        container, stream, fallback = load_stream(data, config=config)
        header = decode_header(stream.data, average_bytes_per_frame=config.average_bytes_per_frame)
    except DecodeError as exc:
        typer.echo(f"{type(exc).__name__}: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    profile = profile_for_format(container.format)
    max_players = header.player_count or profile.max_players
    typer.echo(f"stream={len(stream.data)} bytes method={stream.method} fallback={fallback} max_players={max_players}")
    for offset in config.command_offsets:
        candidate = score_offset(
            stream.data,
            offset,
            window=config.offset_window,
            max_players=max_players,
            table=profile.opcode_table,
            min_opcode_matches=config.min_opcode_matches,
            min_frame_markers=config.min_frame_markers,
        )
        mark = "ok" if candidate.accepted else "--"
        typer.echo(f"{mark} offset={candidate.offset} opcodes={candidate.opcode_matches} markers={candidate.frame_markers}")
    recovery = recover_command_offset(
        stream.data,
        known_offsets=config.command_offsets,
        scan_span=config.offset_scan_span,
        window=config.offset_window,
        max_players=max_players,
        table=profile.opcode_table,
        min_opcode_matches=config.min_opcode_matches,
        min_frame_markers=config.min_frame_markers,
    )
    status = "recovered" if recovery.recovered else "fallback"
    typer.echo(f"selected offset={recovery.offset} ({status}, {recovery.tried} candidates tried)")


@app.command("commands")
def cmd_commands(
    replay_file: Path = typer.Argument(..., help="replay file path (.rep)"),
    player: int | None = typer.Option(None, "--player", min=0, help="only this dense player id"),
    limit: int = typer.Option(50, "--limit", min=0, help="max commands to print (0 = all)"),
    config_path: Path | None = typer.Option(None, "--config", help="TOML file with a [decoder] table"),
) -> None:
    """Dump decoded commands."""
    data = _read_replay(replay_file)
    config = _load_config(config_path)
    analysis = _decode(data, config)

    commands = [cmd for cmd in analysis.commands if player is None or cmd.player_id == player]
    if limit:
        commands = commands[:limit]
    for cmd in commands:
        info = lookup_opcode(cmd.opcode)
        name = info.name if info is not None else cmd.opcode.name
        params = _format_params(command_to_obj(cmd)["params"])
        stamp = frames_to_timestamp(cmd.frame, analysis.fps)
        typer.echo(f"{stamp} f={cmd.frame:<6d} p={cmd.player_id} @{cmd.offset:<6d} {name} {params}".rstrip())
    typer.echo(f"{len(commands)} of {len(analysis.commands)} commands, termination={analysis.quality.termination.value}")


@app.command("build-order")
def cmd_build_order(
    replay_file: Path = typer.Argument(..., help="replay file path (.rep)"),
    player: int | None = typer.Option(None, "--player", min=0, help="only this dense player id"),
    config_path: Path | None = typer.Option(None, "--config", help="TOML file with a [decoder] table"),
) -> None:
    """Print build orders per player."""
    data = _read_replay(replay_file)
    config = _load_config(config_path)
    analysis = _decode(data, config)

    if player is not None and player >= len(analysis.build_orders):
        typer.echo(f"unknown player {player}; replay has {len(analysis.build_orders)} players", err=True)
        raise typer.Exit(code=1)
    for slot in analysis.header.player_slots:
        if player is not None and slot.player_id != player:
            continue
        typer.echo(f"[{slot.player_id}] {slot.name}")
        for entry in analysis.build_orders[slot.player_id]:
            typer.echo(
                f"  {entry.timestamp} {entry.supply_estimate:>3d}/{entry.supply_cap:<3d} "
                f"{entry.category.value:<7s} {entry.unit_name}"
            )


def main(argv: list[str] | None = None) -> None:
    app(prog_name="bwrep", args=argv)


if __name__ == "__main__":
    main()
