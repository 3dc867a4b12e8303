"""Command validation against capabilities and subprocess execution."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field

from mxdx_launcher.config import CapabilitiesConfig, CapabilityMode

_STREAM_LIMIT = 16 * 1024 * 1024


class ExecutorError(Exception):
    """Raised when a command is rejected or fails to run."""


@dataclass(frozen=True)
class ValidatedCommand:
    cmd: str
    args: tuple[str, ...] = ()
    cwd: str | None = None


@dataclass
class CommandResult:
    exit_code: int | None
    stdout_lines: list[str] = field(default_factory=list)
    stderr_lines: list[str] = field(default_factory=list)
    total_seq: int = 0


def normalize_path(path: str) -> str:
    """Resolve ``.`` and ``..`` components without touching the filesystem."""
    is_absolute = path.startswith("/")
    components: list[str] = []
    for part in path.split("/"):
        if part in ("", "."):
            continue
        if part == "..":
            if is_absolute:
                if components:
                    components.pop()
            elif not components or components[-1] == "..":
                components.append("..")
            else:
                components.pop()
        else:
            components.append(part)
    joined = "/".join(components)
    return f"/{joined}" if is_absolute else joined


def _validate_args(cmd: str, args: Sequence[str]) -> None:
    if cmd == "git":
        for arg, following in zip(args, [*args[1:], None]):
            if arg in ("-c", "--config"):
                raise ExecutorError(f"argument not permitted: git {arg} is blocked")
            if arg == "submodule" and following == "foreach":
                raise ExecutorError(
                    "argument not permitted: git submodule foreach is blocked"
                )
    elif cmd == "docker":
        if "compose" in args:
            after = args[list(args).index("compose") + 1 :]
            if any(a in ("-f", "--file") for a in after):
                raise ExecutorError(
                    "argument not permitted: docker compose -f/--file is blocked"
                )
    elif cmd == "env":
        raise ExecutorError(
            "argument not permitted: env command is blocked to prevent prefix injection"
        )


def validate_command(
    config: CapabilitiesConfig,
    cmd: str,
    args: Sequence[str],
    cwd: str | None = None,
) -> ValidatedCommand:
    """Check a command against the capability config; raise ExecutorError if refused."""
    if config.mode is CapabilityMode.ALLOWLIST and cmd not in config.allowed_commands:
        raise ExecutorError(f"command '{cmd}' not permitted")

    resolved_cwd = None
    if cwd is not None:
        normalized = normalize_path(cwd)
        if not any(normalized.startswith(p) for p in config.allowed_cwd_prefixes):
            raise ExecutorError(f"cwd not permitted: {normalized}")
        resolved_cwd = normalized

    _validate_args(cmd, args)
    return ValidatedCommand(cmd=cmd, args=tuple(args), cwd=resolved_cwd)


async def _read_lines(stream: asyncio.StreamReader, name: str) -> list[str]:
    lines: list[str] = []
    while True:
        try:
            raw = await stream.readline()
            text = raw.decode("utf-8")
        except (ValueError, UnicodeDecodeError) as exc:
            raise ExecutorError(f"{name} read error: {exc}") from exc
        if not raw:
            return lines
        if text.endswith("\n"):
            text = text[:-1]
            if text.endswith("\r"):
                text = text[:-1]
        lines.append(text)


async def execute_command(validated: ValidatedCommand) -> CommandResult:
    """Run a validated command, collecting stdout and stderr line by line."""
    try:
        process = await asyncio.create_subprocess_exec(
            validated.cmd,
            *validated.args,
            cwd=validated.cwd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            limit=_STREAM_LIMIT,
        )
    except OSError as exc:
        raise ExecutorError(f"spawn failed: {exc}") from exc

    assert process.stdout is not None and process.stderr is not None
    try:
        stdout_lines, stderr_lines = await asyncio.gather(
            _read_lines(process.stdout, "stdout"),
            _read_lines(process.stderr, "stderr"),
        )
    except ExecutorError:
        if process.returncode is None:
            process.kill()
        await process.wait()
        raise

    try:
        returncode = await process.wait()
    except OSError as exc:
        raise ExecutorError(f"wait failed: {exc}") from exc

    return CommandResult(
        exit_code=returncode if returncode >= 0 else None,
        stdout_lines=stdout_lines,
        stderr_lines=stderr_lines,
        total_seq=len(stdout_lines) + len(stderr_lines),
    )