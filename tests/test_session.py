import asyncio
import base64

import pytest

from mxdx_launcher.compression import DecodeError, compress_encode, decode_decompress_bounded
from mxdx_launcher.session import TerminalSession
from mxdx_launcher.tmux import TmuxError, TmuxSession


class _FakeProcess:
    def __init__(self, returncode, stdout):
        self.returncode = returncode
        self._stdout = stdout

    async def communicate(self, input=None):
        return self._stdout, b""


class _FakeTmux:
    def __init__(self, returncode=0, stdout=b""):
        self.returncode = returncode
        self.stdout = stdout
        self.calls = []

    async def __call__(self, *args, **kwargs):
        self.calls.append(args)
        return _FakeProcess(self.returncode, self.stdout)


@pytest.fixture
def fake_tmux(monkeypatch):
    def install(returncode=0, stdout=b""):
        fake = _FakeTmux(returncode, stdout)
        monkeypatch.setattr(asyncio, "create_subprocess_exec", fake)
        return fake

    return install


@pytest.mark.asyncio
async def test_create_starts_tmux_with_defaults(fake_tmux):
    fake = fake_tmux()
    session = await TerminalSession.create("term-1", "/bin/bash", 80, 24)
    assert session.session_id == "term-1"
    assert session.tmux.name == "term-1"
    assert session.seq == 0
    assert session.dm_room_id is None
    assert len(session.ring_buffer) == 0
    assert fake.calls[0][:2] == ("tmux", "new-session")


@pytest.mark.asyncio
async def test_create_rejects_bad_name(fake_tmux):
    fake_tmux()
    with pytest.raises(TmuxError):
        await TerminalSession.create("../../evil", "/bin/bash", 80, 24)


@pytest.mark.asyncio
async def test_handle_input_sends_decoded_text(fake_tmux):
    fake = fake_tmux()
    session = TerminalSession("term-1", TmuxSession("term-1"))
    encoded, encoding = compress_encode(b"ls -la\n")
    await session.handle_input(encoded, encoding)
    assert fake.calls == [("tmux", "send-keys", "-t", "term-1", "-l", "--", "ls -la\n")]

    fake.returncode = 1
    with pytest.raises(TmuxError, match="send-keys failed"):
        await session.handle_input(encoded, encoding)


@pytest.mark.asyncio
async def test_handle_input_rejects_oversized_payload(fake_tmux):
    fake = fake_tmux()
    session = TerminalSession("term-1", TmuxSession("term-1"))
    encoded, encoding = compress_encode(b"a" * (2 * 1024 * 1024))
    with pytest.raises(DecodeError):
        await session.handle_input(encoded, encoding)
    assert fake.calls == []


@pytest.mark.asyncio
async def test_handle_input_rejects_invalid_utf8(fake_tmux):
    fake_tmux()
    session = TerminalSession("term-1", TmuxSession("term-1"))
    encoded = base64.b64encode(b"\xff\xfe").decode()
    with pytest.raises(DecodeError):
        await session.handle_input(encoded, "raw+base64")


@pytest.mark.asyncio
async def test_capture_output_sequences_and_buffers(fake_tmux):
    pane = b"prompt$ echo hi\nhi\n"
    fake_tmux(stdout=pane)
    session = TerminalSession("term-1", TmuxSession("term-1"))

    first = await session.capture_output()
    second = await session.capture_output()

    encoded, encoding, seq = first
    assert seq == 0
    assert second[2] == 1
    assert session.seq == 2
    assert decode_decompress_bounded(encoded, encoding, 1_048_576) == pane
    assert session.ring_buffer.get(0) == pane
    assert session.ring_buffer.get_range(0, 1) == [pane, pane]


@pytest.mark.asyncio
async def test_capture_output_empty_pane_returns_none(fake_tmux):
    fake_tmux(stdout=b"")
    session = TerminalSession("term-1", TmuxSession("term-1"))
    assert await session.capture_output() is None
    assert session.seq == 0
    assert len(session.ring_buffer) == 0


@pytest.mark.asyncio
async def test_resize_and_kill_delegate_to_tmux(fake_tmux):
    fake = fake_tmux()
    session = TerminalSession("term-1", TmuxSession("term-1"))
    await session.resize(120, 40)
    await session.kill()
    assert fake.calls == [
        ("tmux", "resize-window", "-t", "term-1", "-x", "120", "-y", "40"),
        ("tmux", "kill-session", "-t", "term-1"),
    ]

    fake.returncode = 1
    with pytest.raises(TmuxError, match="resize-window failed"):
        await session.resize(1, 1)
    with pytest.raises(TmuxError, match="kill-session failed"):
        await session.kill()