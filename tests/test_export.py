from __future__ import annotations

import msgspec

from bwrep.config import DecoderConfig
from bwrep.export import EXPORT_VERSION, analysis_to_obj, command_to_obj, dump_analysis_file, dump_analysis_json
from bwrep.pipeline import decode_replay
from bwrep.replay import Command, CommandParams, Opcode


def test_command_to_obj_drops_missing_params() -> None:
    cmd = Command(frame=12, player_id=1, opcode=Opcode.TRAIN, params=CommandParams(unit_type=7), offset=900)
    assert command_to_obj(cmd) == {"frame": 12, "player_id": 1, "opcode": "TRAIN", "params": {"unit_type": 7}}


def test_analysis_to_obj_shape(sample_replay: bytes, decoder_config: DecoderConfig) -> None:
    obj = analysis_to_obj(decode_replay(sample_replay, config=decoder_config))

    assert obj["v"] == EXPORT_VERSION
    assert obj["command_count"] == 11
    assert obj["header"]["player_count"] == 2
    assert obj["header"]["game_type_name"] == "Melee"
    assert [slot["race"] for slot in obj["header"]["player_slots"]] == ["TERRAN", "PROTOSS"]
    assert obj["quality"]["format"] == "MODERN_ZLIB"
    assert obj["quality"]["issues"] == []
    assert obj["quality"]["low_confidence"] is False
    assert obj["build_orders"][1][0]["category"] == "Train"
    assert obj["inferred_races"] == ["TERRAN", "PROTOSS"]
    assert len(obj["commands"]) == 11


def test_dump_analysis_json_round_trips(sample_replay: bytes, decoder_config: DecoderConfig) -> None:
    analysis = decode_replay(sample_replay, config=decoder_config)

    decoded = msgspec.json.decode(dump_analysis_json(analysis, include_commands=False))
    assert "commands" not in decoded
    assert decoded["duration"] == "01:00"
    assert decoded["metrics"][0]["total_actions"] == 7
    assert decoded["quality"]["command_volume"] == "realistic"
    assert decoded["action_distributions"][1]["counts"]["build"] == 2


def test_dump_analysis_json_indent(sample_replay: bytes, decoder_config: DecoderConfig) -> None:
    analysis = decode_replay(sample_replay, config=decoder_config)
    pretty = dump_analysis_json(analysis, indent=2)
    assert b"\n  " in pretty
    assert msgspec.json.decode(pretty) == msgspec.json.decode(dump_analysis_json(analysis))


def test_dump_analysis_file(tmp_path, sample_replay: bytes, decoder_config: DecoderConfig) -> None:
    path = tmp_path / "analysis.json"
    dump_analysis_file(path, decode_replay(sample_replay, config=decoder_config))
    assert msgspec.json.decode(path.read_bytes())["command_count"] == 11
