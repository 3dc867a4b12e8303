import asyncio

import pytest

from mxdx_launcher.recovery import RecoveryState, SessionState, list_tmux_sessions


def _session(session_id, room, last_seq=0):
    return SessionState(
        session_id=session_id,
        dm_room_id=room,
        command="/bin/bash",
        cols=80,
        rows=24,
        last_seq=last_seq,
    )


class _FakeProcess:
    def __init__(self, returncode, stdout):
        self.returncode = returncode
        self._stdout = stdout

    async def communicate(self, input=None):
        return self._stdout, b""


def _fake_exec(returncode, stdout, calls):
    async def fake(*args, **kwargs):
        calls.append(args)
        return _FakeProcess(returncode, stdout)

    return fake


def test_recovery_state_save_and_load(tmp_path):
    path = tmp_path / "recovery.json"
    state = RecoveryState()
    state.add_session(_session("test-1", "!abc:localhost", last_seq=42))
    state.save(path)

    loaded = RecoveryState.load(path)
    assert len(loaded.sessions) == 1
    assert loaded.sessions["test-1"].last_seq == 42
    assert loaded == state


def test_recovery_state_empty_file_returns_default(tmp_path):
    state = RecoveryState.load(tmp_path / "nonexistent.json")
    assert state.sessions == {}


def test_recoverable_sessions_matches_tmux():
    state = RecoveryState()
    state.add_session(_session("alive", "!room1:localhost"))
    state.add_session(_session("dead", "!room2:localhost"))

    recoverable = state.recoverable_sessions(["alive", "other"])
    assert len(recoverable) == 1
    assert recoverable[0].session_id == "alive"


def test_remove_session():
    state = RecoveryState()
    state.add_session(_session("alive", "!room1:localhost"))
    state.remove_session("alive")
    state.remove_session("missing")
    assert state.sessions == {}


def test_add_session_replaces_same_id():
    state = RecoveryState()
    state.add_session(_session("s", "!room1:localhost"))
    state.add_session(_session("s", "!room2:localhost"))
    assert list(state.sessions) == ["s"]
    assert state.sessions["s"].dm_room_id == "!room2:localhost"


def test_load_rejects_missing_field(tmp_path):
    path = tmp_path / "recovery.json"
    path.write_text('{"sessions": {"x": {"session_id": "x"}}}')
    with pytest.raises(ValueError):
        RecoveryState.load(path)


def test_load_rejects_invalid_json(tmp_path):
    path = tmp_path / "recovery.json"
    path.write_text("not json")
    with pytest.raises(ValueError):
        RecoveryState.load(path)


@pytest.mark.asyncio
async def test_list_tmux_sessions_parses_names(monkeypatch):
    calls = []
    monkeypatch.setattr(
        asyncio, "create_subprocess_exec", _fake_exec(0, b"alive\nother\n", calls)
    )
    assert await list_tmux_sessions() == ["alive", "other"]
    assert calls[0] == ("tmux", "list-sessions", "-F", "#{session_name}")


@pytest.mark.asyncio
async def test_list_tmux_sessions_without_server_is_empty(monkeypatch):
    monkeypatch.setattr(asyncio, "create_subprocess_exec", _fake_exec(1, b"", []))
    assert await list_tmux_sessions() == []