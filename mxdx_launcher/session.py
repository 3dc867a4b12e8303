"""A terminal session: a tmux session plus sequenced, replayable output."""

from __future__ import annotations

from dataclasses import dataclass, field

from mxdx_launcher.compression import DecodeError, compress_encode, decode_decompress_bounded
from mxdx_launcher.ring_buffer import EventRingBuffer
from mxdx_launcher.tmux import TmuxSession

MAX_INPUT_BYTES = 1_048_576
RING_BUFFER_CAPACITY = 1000


@dataclass
class TerminalSession:
    session_id: str
    tmux: TmuxSession
    ring_buffer: EventRingBuffer[bytes] = field(
        default_factory=lambda: EventRingBuffer(RING_BUFFER_CAPACITY)
    )
    seq: int = 0
    dm_room_id: str | None = None

    @classmethod
    async def create(
        cls, session_id: str, command: str, cols: int, rows: int
    ) -> TerminalSession:
        """Start a tmux session named ``session_id`` running ``command``."""
        tmux = await TmuxSession.create(session_id, command, cols, rows)
        return cls(session_id=session_id, tmux=tmux)

    async def handle_input(self, encoded_data: str, encoding: str) -> None:
        """Decode user input and type it into the terminal."""
        data = decode_decompress_bounded(encoded_data, encoding, MAX_INPUT_BYTES)
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"input is not valid UTF-8: {exc}") from exc
        await self.tmux.send_input(text)

    async def capture_output(self) -> tuple[str, str, int] | None:
        """Capture the pane; return (encoded, encoding, seq), or None if it is empty."""
        output = await self.tmux.capture_pane()
        if not output:
            return None
        raw = output.encode("utf-8")
        encoded, encoding = compress_encode(raw)
        seq = self.seq
        self.ring_buffer.push(seq, raw)
        self.seq += 1
        return encoded, encoding, seq

    async def resize(self, cols: int, rows: int) -> None:
        await self.tmux.resize(cols, rows)

    async def kill(self) -> None:
        await self.tmux.kill()