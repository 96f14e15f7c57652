# tests/test_lorekeeper.py
import json

import pytest

from lore import lorekeeper


@pytest.fixture(autouse=True)
def _no_session():
    lorekeeper._SESSION_ID = None
    yield
    lorekeeper._SESSION_ID = None


def test_session_brackets_chronicle(data_dir):
    sid = lorekeeper.begin_session(notes="card v1.0.0")
    assert lorekeeper.session_id() == sid
    lorekeeper.end_session()
    assert lorekeeper.session_id() is None

    text = (data_dir / "Lore" / "chronicles.txt").read_text(encoding="utf-8")
    assert text.startswith(lorekeeper.DIV)
    assert "HEARTGATE CHRONICLES" in text
    assert f"session: {sid}" in text
    assert "session begin" in text and "session end" in text


def test_log_event_writes_block_and_jsonl(data_dir):
    sid = lorekeeper.begin_session()
    lorekeeper.log_event("unlocked")
    lorekeeper.log_event("placeholder_used", ["slot=3"])

    lines = (data_dir / "Lore" / "events.jsonl").read_text(encoding="utf-8").splitlines()
    events = [json.loads(l) for l in lines]
    assert [e["event"] for e in events] == ["unlocked", "placeholder_used"]
    assert all(e["session"] == sid for e in events)
    assert events[1]["data"] == ["slot=3"]
    assert "data" not in events[0]

    chron = (data_dir / "Lore" / "chronicles.txt").read_text(encoding="utf-8")
    assert "event: placeholder_used" in chron
    assert "- slot=3" in chron


def test_lore_guard_records_and_reraises(data_dir):
    @lorekeeper.lore_guard("yes click failure")
    def boom():
        raise RuntimeError("kaput")

    with pytest.raises(RuntimeError, match="kaput"):
        boom()
    chron = (data_dir / "Lore" / "chronicles.txt").read_text(encoding="utf-8")
    assert "error: yes click failure" in chron
    assert "RuntimeError: kaput" in chron


def test_lore_guard_passes_results_through(data_dir):
    @lorekeeper.lore_guard("noop")
    def ok(x):
        return x * 2

    assert ok(21) == 42
    assert not (data_dir / "Lore").exists()


def test_dbg_is_silent_unless_enabled(data_dir, monkeypatch, capsys):
    lorekeeper.dbg(ValueError("quiet"), "here")
    assert not (data_dir / "debug.log").exists()

    monkeypatch.setenv("HEARTGATE_DEBUG", "1")
    lorekeeper.dbg(ValueError("loud"), "there")
    assert "there: loud" in (data_dir / "debug.log").read_text(encoding="utf-8")
    assert "there: loud" in capsys.readouterr().err


def test_unwritable_data_dir_never_raises(tmp_path, monkeypatch, capsys):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("plain file", encoding="utf-8")
    monkeypatch.setenv("HEARTGATE_DATA_DIR", str(blocker))
    monkeypatch.setenv("HEARTGATE_DEBUG", "1")

    sid = lorekeeper.begin_session(notes="card v1.0.0")
    assert lorekeeper.session_id() == sid
    lorekeeper.log_event("accepted", ["yes_scale=1.4"])
    lorekeeper.log_error("yes click failure", RuntimeError("kaput"))
    lorekeeper.end_session()

    assert lorekeeper.session_id() is None
    assert blocker.read_text(encoding="utf-8") == "plain file"
    assert "lore:append" in capsys.readouterr().err


def test_lore_guard_reraises_even_when_ledger_is_unwritable(tmp_path, monkeypatch):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("", encoding="utf-8")
    monkeypatch.setenv("HEARTGATE_DATA_DIR", str(blocker))

    @lorekeeper.lore_guard("gallery back failure")
    def boom():
        raise ValueError("original")

    with pytest.raises(ValueError, match="original"):
        boom()
