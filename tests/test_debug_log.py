from __future__ import annotations

from bwrep.config import DecoderConfig
from bwrep.debug_log import close_decode_debug_log, decode_debug_log, init_decode_debug_log
from bwrep.pipeline import decode_replay


def test_debug_log_writes_sorted_fields(tmp_path) -> None:
    path = tmp_path / "logs" / "trace.log"
    init_decode_debug_log(path, source="unit")
    try:
        decode_debug_log("lookup", zeta=1, alpha="two\nlines")
    finally:
        close_decode_debug_log()

    lines = path.read_text(encoding="utf-8").splitlines()
    assert "event=init" in lines[0]
    assert "source=unit" in lines[0]
    assert lines[1].endswith("event=lookup alpha=two\\nlines zeta=1")

    decode_debug_log("after_close", value=1)
    assert len(path.read_text(encoding="utf-8").splitlines()) == 2


def test_debug_log_is_silent_when_closed(tmp_path) -> None:
    close_decode_debug_log()
    decode_debug_log("ignored", value=1)
    assert list(tmp_path.iterdir()) == []


def test_decode_replay_emits_trace_events(tmp_path, sample_replay: bytes, decoder_config: DecoderConfig) -> None:
    path = tmp_path / "decode.log"
    init_decode_debug_log(path, source="sample")
    try:
        decode_replay(sample_replay, config=decoder_config)
    finally:
        close_decode_debug_log()

    text = path.read_text(encoding="utf-8")
    for event in ("detect", "decompress", "header", "offset_accepted", "commands", "quality"):
        assert f"event={event}" in text
