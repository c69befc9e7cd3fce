from __future__ import annotations

import datetime as dt
import os
from pathlib import Path
from threading import Lock

_LOCK = Lock()
_PATH: Path | None = None


def _trace_line(event: str, fields: dict[str, object]) -> str:
    stamp = dt.datetime.now(dt.timezone.utc).isoformat(timespec="milliseconds")
    parts = [f"{stamp} event={event.strip()}"]
    parts.extend(f"{key}={str(fields[key])}".replace("\n", "\\n") for key in sorted(fields))
    return " ".join(parts) + "\n"


def init_decode_debug_log(path: Path, *, source: str = "") -> Path:
    """Start appending decode trace events to `path` (one line per event)."""

    global _PATH
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with _LOCK:
        _PATH = path
    decode_debug_log("init", source=str(source), pid=os.getpid())
    return path


def close_decode_debug_log() -> None:
    global _PATH
    with _LOCK:
        _PATH = None


def decode_debug_log(event: str, **fields: object) -> None:
    with _LOCK:
        if _PATH is None:
            return
        with _PATH.open("a", encoding="utf-8") as handle:
            handle.write(_trace_line(str(event), fields))
