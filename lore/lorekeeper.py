# lorekeeper.py — lowercase lore utilities (append-only session ledger)
import functools
import json
import os
import sys
import traceback
import uuid
from datetime import datetime

DIV = "=" * 79

CHRONICLES_HEADER = f"""{DIV}
HEARTGATE CHRONICLES - the living lineage
{DIV}
note: append chronologically; never rewrite history
{DIV}
"""

_SESSION_ID = None


def data_dir() -> str:
    return os.environ.get("HEARTGATE_DATA_DIR") or os.path.join(os.path.expanduser("~"), ".heartgate")


def lore_dir() -> str:
    return os.path.join(data_dir(), "Lore")


def chronicles_path() -> str:
    return os.path.join(lore_dir(), "chronicles.txt")


def events_path() -> str:
    return os.path.join(lore_dir(), "events.jsonl")


def debug_on() -> bool:
    return os.environ.get("HEARTGATE_DEBUG", "0") not in ("0", "", "false", "False", "FALSE")


def _ensure_dirs_and_headers():
    os.makedirs(lore_dir(), exist_ok=True)
    path = chronicles_path()
    if not os.path.exists(path):
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            f.write(CHRONICLES_HEADER)


def _append_block(title: str, lines: list[str]) -> None:
    """Ledger writes never block the card; failures go to the debug log."""
    ts = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    block = [DIV, f"{title} - {ts}", DIV]
    block.extend(lines)
    block.append(DIV)
    block.append("end of entry")
    block.append(DIV)
    try:
        _ensure_dirs_and_headers()
        with open(chronicles_path(), "a", encoding="utf-8", newline="\n") as f:
            f.write("\n".join(block) + "\n")
    except OSError as e:
        dbg(e, f"lore:append {title}")


def _append_jsonl(payload: dict) -> None:
    try:
        _ensure_dirs_and_headers()
        with open(events_path(), "a", encoding="utf-8") as f:
            f.write(json.dumps(payload, ensure_ascii=False) + "\n")
    except OSError as e:
        dbg(e, f"lore:events {payload.get('event')}")


def session_id() -> str | None:
    return _SESSION_ID


def begin_session(notes: str = "") -> str:
    global _SESSION_ID
    _SESSION_ID = uuid.uuid4().hex[:12]
    lines = [f"session: {_SESSION_ID}"]
    if notes:
        lines.append(f"notes: {notes}")
    _append_block("session begin", lines)
    return _SESSION_ID


def end_session() -> None:
    global _SESSION_ID
    if _SESSION_ID is None:
        return
    _append_block("session end", [f"session: {_SESSION_ID}"])
    _SESSION_ID = None


def log_event(event: str, details: list[str] | None = None) -> None:
    details = details or []
    lines = [f"event: {event}"]
    lines.extend([f"- {d}" for d in details])
    _append_block("channeler log", lines)
    payload = {
        "event": event,
        "session": _SESSION_ID,
        "schema": "1.0",
        "ts": datetime.now().isoformat(timespec="seconds"),
    }
    if details:
        payload["data"] = details
    _append_jsonl(payload)


def log_error(event: str, err: Exception) -> None:
    tb = "".join(traceback.format_exception(type(err), err, err.__traceback__))
    lines = [f"error: {event}", "traceback:", tb.strip()]
    _append_block("channeler error", lines)


def lore_guard(title: str):
    """Record any exception escaping the wrapped handler, then re-raise it."""
    def deco(fn):
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            try:
                return fn(*args, **kwargs)
            except Exception as e:
                log_error(title, e)
                raise
        return wrapper
    return deco


def dbg(exc: Exception, where: str = "") -> None:
    """
    Lightweight logger for diagnostics. Enable with HEARTGATE_DEBUG=1.
    Writes to <data dir>/debug.log and stderr.
    """
    if not debug_on():
        return
    stamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    msg = f"[{stamp}] {where}: {exc}"
    print(msg, file=sys.stderr)
    try:
        os.makedirs(data_dir(), exist_ok=True)
        with open(os.path.join(data_dir(), "debug.log"), "a", encoding="utf-8") as f:
            f.write(msg + "\n")
    except OSError:
        pass
