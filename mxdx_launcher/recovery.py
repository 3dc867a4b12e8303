"""Persisted mapping of tmux sessions to their rooms, for recovery after restart."""

from __future__ import annotations

import asyncio
import json
import os
from collections.abc import Iterable
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any


async def list_tmux_sessions() -> list[str]:
    """Return the names of running tmux sessions, or an empty list if none."""
    process = await asyncio.create_subprocess_exec(
        "tmux",
        "list-sessions",
        "-F",
        "#{session_name}",
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, _ = await process.communicate()
    if process.returncode != 0:
        return []
    return stdout.decode("utf-8", errors="replace").splitlines()


@dataclass
class SessionState:
    session_id: str
    dm_room_id: str
    command: str
    cols: int
    rows: int
    last_seq: int


_STRING_FIELDS = {"session_id", "dm_room_id", "command"}


def _session_from_dict(data: Any) -> SessionState:
    if not isinstance(data, dict):
        raise ValueError("session entry: expected an object")
    values = {}
    for f in fields(SessionState):
        if f.name not in data:
            raise ValueError(f"missing field `{f.name}`")
        value = data[f.name]
        if f.name in _STRING_FIELDS:
            if not isinstance(value, str):
                raise ValueError(f"{f.name}: expected a string")
        elif isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValueError(f"{f.name}: expected a non-negative integer")
        values[f.name] = value
    return SessionState(**values)


@dataclass
class RecoveryState:
    sessions: dict[str, SessionState] = field(default_factory=dict)

    @classmethod
    def load(cls, path: str | os.PathLike[str]) -> RecoveryState:
        """Load state from ``path``; a missing file yields an empty state."""
        file = Path(path)
        if not file.exists():
            return cls()
        document = json.loads(file.read_text(encoding="utf-8"))
        if not isinstance(document, dict) or "sessions" not in document:
            raise ValueError("missing field `sessions`")
        sessions = document["sessions"]
        if not isinstance(sessions, dict):
            raise ValueError("sessions: expected an object")
        return cls({key: _session_from_dict(value) for key, value in sessions.items()})

    def save(self, path: str | os.PathLike[str]) -> None:
        """Write the state to ``path`` as pretty-printed JSON."""
        document = {"sessions": {key: asdict(s) for key, s in self.sessions.items()}}
        Path(path).write_text(json.dumps(document, indent=2), encoding="utf-8")

    def add_session(self, state: SessionState) -> None:
        self.sessions[state.session_id] = state

    def remove_session(self, session_id: str) -> None:
        self.sessions.pop(session_id, None)

    def recoverable_sessions(self, tmux_sessions: Iterable[str]) -> list[SessionState]:
        """Return saved sessions whose tmux session is still alive."""
        alive = set(tmux_sessions)
        return [s for s in self.sessions.values() if s.session_id in alive]