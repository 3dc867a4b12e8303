"""Control of detached tmux sessions through the tmux command."""

from __future__ import annotations

import asyncio
import string
from types import TracebackType

_NAME_CHARS = frozenset(string.ascii_letters + string.digits + "_-")
_POLL_INTERVAL = 0.1


class TmuxError(RuntimeError):
    """Raised when a tmux command fails or a session name is invalid."""


def is_valid_session_name(name: str) -> bool:
    """Session names are non-empty and use only ASCII letters, digits, '_' and '-'."""
    return bool(name) and all(c in _NAME_CHARS for c in name)


async def _tmux(*args: str) -> tuple[int, bytes, bytes]:
    try:
        process = await asyncio.create_subprocess_exec(
            "tmux",
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise TmuxError(f"failed to run tmux: {exc}") from exc
    stdout, stderr = await process.communicate()
    return process.returncode, stdout, stderr


async def _checked(what: str, *args: str) -> bytes:
    returncode, stdout, stderr = await _tmux(*args)
    if returncode != 0:
        message = stderr.decode("utf-8", errors="replace")
        raise TmuxError(f"tmux {what} failed: {message}")
    return stdout


class TmuxSession:
    """A named tmux session. Use as an async context manager to kill it on exit."""

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"TmuxSession({self.name!r})"

    @classmethod
    async def create(cls, name: str, command: str, cols: int, rows: int) -> TmuxSession:
        """Start a detached session of the given size running ``command``."""
        if not is_valid_session_name(name):
            raise TmuxError(f"invalid tmux session name: {name}")
        await _checked(
            "new-session",
            "new-session", "-d", "-s", name, "-x", str(cols), "-y", str(rows), command,
        )
        return cls(name)

    async def send_input(self, data: str) -> None:
        """Type ``data`` into the session literally."""
        await _checked("send-keys", "send-keys", "-t", self.name, "-l", "--", data)

    async def capture_pane(self) -> str:
        """Return the visible contents of the session's pane."""
        stdout = await _checked("capture-pane", "capture-pane", "-t", self.name, "-p")
        return stdout.decode("utf-8", errors="replace")

    async def capture_pane_until(self, expected: str, timeout: float) -> str:
        """Poll the pane until it contains ``expected`` or ``timeout`` seconds pass."""
        loop = asyncio.get_running_loop()
        start = loop.time()
        while True:
            content = await self.capture_pane()
            if expected in content:
                return content
            if loop.time() - start >= timeout:
                raise TmuxError(f"timed out waiting for {expected!r} in pane output")
            await asyncio.sleep(_POLL_INTERVAL)

    async def resize(self, cols: int, rows: int) -> None:
        await _checked(
            "resize-window",
            "resize-window", "-t", self.name, "-x", str(cols), "-y", str(rows),
        )

    async def kill(self) -> None:
        await _checked("kill-session", "kill-session", "-t", self.name)

    async def __aenter__(self) -> TmuxSession:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            await _tmux("kill-session", "-t", self.name)
        except TmuxError:
            pass