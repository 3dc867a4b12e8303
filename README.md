# mxdx_launcher

Building blocks for a fleet management launcher agent that runs on a single
host. The package does four things:

- It checks requested commands against a capability configuration and runs
  the ones it accepts.
- It keeps interactive shells alive inside tmux.
- It encodes and batches terminal output.
- It reports host telemetry.

## Installation

```
pip install .
```

Terminal sessions and `list_tmux_sessions` need `tmux` on the `PATH`.

## Command line

```
mxdx-launcher --help
mxdx-launcher --version
mxdx-launcher
```

- `--help` prints usage.
- `--version` prints `mxdx-launcher 1.0.0`.
- Run without options, the command prints `mxdx-launcher starting...` and
  exits with status 0.

The same entry point can be called from Python as `mxdx_launcher.cli.main()`.

## Configuration

The configuration is a TOML file:

```toml
[global]
launcher_id = "worker-1"
data_dir = "/var/lib/mxdx"

[[homeservers]]
url = "https://hs.example.com"
username = "launcher-1"
password = "placeholder"

[capabilities]
mode = "allowlist"
allowed_commands = ["cargo", "git", "npm"]
allowed_cwd_prefixes = ["/workspace"]
max_sessions = 10

[telemetry]
detail_level = "summary"
poll_interval_seconds = 30
```

Rules for the `[global]` table:

- It is required.
- Its `launcher_id` is required and must not be empty.
- In the resulting `LauncherConfig` it is held as the attribute `global_`.

The other fields have these defaults:

| Field | Default |
| --- | --- |
| `data_dir` | `""` |
| `homeservers` | empty list |
| `mode` | `allowlist` (`CapabilityMode.ALLOWLIST`) |
| `allowed_commands`, `allowed_cwd_prefixes` | empty lists |
| `max_sessions` | 5 |
| `detail_level` | `full` (`TelemetryDetail.FULL`) |
| `poll_interval_seconds` | 60 |

There are three ways to build a configuration:

- `load_config(path)` reads a file.
- `parse_config(text)` parses TOML text.
- `config_from_dict(data)` takes an already parsed mapping.

All three raise `ConfigError` on these errors:

- invalid TOML
- missing fields
- values of the wrong type
- unknown enum values
- integers out of range

`validate_config_permissions(path)` logs a warning through `logging` when
group or others have any access to the file. Keep the file at mode `0600`.

```python
from mxdx_launcher.config import load_config, validate_config_permissions

validate_config_permissions("launcher.toml")
config = load_config("launcher.toml")
print(config.global_.launcher_id, config.capabilities.max_sessions)
```

## Running commands

`validate_command(config, cmd, args, cwd)` checks a request against a
`CapabilitiesConfig`:

- In allowlist mode, `cmd` must appear in `allowed_commands`. Denylist mode
  does not check the command name.
- If `cwd` is given, it is normalised with `normalize_path`, which resolves
  `.` and `..` without touching the filesystem. The result must start with
  one of the `allowed_cwd_prefixes`.
- These arguments are blocked:
  - `git -c` and `git --config`
  - `git submodule foreach`
  - `docker compose -f` and `docker compose --file`
  - the `env` command as a whole

A rejected request raises `ExecutorError`. An accepted one returns a frozen
`ValidatedCommand`.

`execute_command(validated)` is a coroutine that runs the command with stdin
closed. It returns a `CommandResult` with these fields:

- `exit_code`: the exit status, or `None` if the process was killed by a
  signal.
- `stdout_lines` and `stderr_lines`: the output, collected line by line.
- `total_seq`: the total number of lines.

A failure to start the process or to read its output raises `ExecutorError`.

```python
import asyncio
from mxdx_launcher.config import CapabilitiesConfig, CapabilityMode
from mxdx_launcher.executor import validate_command, execute_command

caps = CapabilitiesConfig(
    mode=CapabilityMode.ALLOWLIST,
    allowed_commands=["echo"],
    allowed_cwd_prefixes=["/tmp"],
)
validated = validate_command(caps, "echo", ["hello"], "/tmp")
result = asyncio.run(execute_command(validated))
print(result.exit_code, result.stdout_lines)
```

## Terminal sessions

### TmuxSession

`mxdx_launcher.tmux.TmuxSession` drives a named, detached tmux session.

- Create one with `await TmuxSession.create(name, command, cols, rows)`.
- Session names may contain only ASCII letters, digits, `_` and `-`. Check a
  name with `is_valid_session_name`.

Its methods are all coroutines:

| Method | What it does |
| --- | --- |
| `send_input(data)` | Types the text literally into the session. |
| `capture_pane()` | Returns the visible text of the pane. |
| `capture_pane_until(expected, timeout)` | Polls every 0.1 s until `expected` appears, for up to `timeout` seconds. |
| `resize(cols, rows)` | Resizes the window. |
| `kill()` | Ends the session. |

Failures raise `TmuxError`. This covers:

- invalid names
- tmux failing to start
- tmux reporting an error
- `capture_pane_until` timing out

Used as an async context manager, a `TmuxSession` kills its session on exit
and ignores any error while doing so.

### TerminalSession

`mxdx_launcher.session.TerminalSession` adds the following on top of a tmux
session:

- `create(session_id, command, cols, rows)` starts the tmux session.
- `handle_input(encoded_data, encoding)` decodes a payload of at most 1 MiB,
  which must be UTF-8, and types it into the terminal.
- `capture_output()` returns `(encoded, encoding, seq)`, or `None` when the
  pane is empty. Each capture is stored in an `EventRingBuffer` that holds
  the last 1000 captures, and `seq` then goes up by one.
- `resize` and `kill` pass through to tmux.

### Encoding

In `mxdx_launcher.compression`, `compress_encode(data)` returns
`(encoded, encoding)`:

- `raw+base64` for data shorter than 32 bytes.
- `zlib+base64` for data of 32 bytes or more.

`decode_decompress_bounded(encoded, encoding, max_bytes)` decompresses in a
stream of 8 KiB chunks. It raises `DecodeError` in these cases:

- the output would exceed `max_bytes`, so compressed bombs are rejected early
- the base64 or the zlib stream is invalid
- the encoding is unknown

### Buffers

`EventRingBuffer(capacity)` keeps the newest `capacity` events, keyed by
sequence number. It has these methods:

- `push(seq, event)` stores an event.
- `get(seq)` returns that event, or `None`.
- `get_range(start, end)` returns the events in the inclusive range.
- `len()` gives the number of events held.

`OutputBatcher(max_bytes, flush_interval)` collects bytes. Give
`flush_interval` in seconds or as a `timedelta`.

- `push(data)` returns the whole buffer once it reaches `max_bytes`.
- `tick()` returns the buffer once the interval has passed since the last
  release.
- `flush()` returns whatever is buffered.

Each returns `None` when there is nothing to release.

### Recovery

`mxdx_launcher.recovery` helps pick up sessions after a restart.

- `RecoveryState` maps session ids to `SessionState` records, which hold the
  room id, command, size and last sequence number.
- `RecoveryState.load(path)` reads the JSON file. A missing file gives an
  empty state.
- `save(path)` writes the state as pretty-printed JSON.
- `add_session` and `remove_session` edit the mapping.
- `await list_tmux_sessions()` returns the names of live tmux sessions, or an
  empty list if no tmux server is running.
- `recoverable_sessions(names)` returns the saved sessions whose names are in
  that list.

## Telemetry

`mxdx_launcher.telemetry.collect_telemetry(detail_level)` returns a frozen
`HostTelemetry`.

- `TelemetryDetail.SUMMARY` gives the hostname, OS version, architecture,
  uptime, load average, CPU (`CpuInfo`) and memory (`MemoryInfo`). Disk
  totals are zero and `network` is `None`.
- `TelemetryDetail.FULL` also sums disk usage over mounted partitions
  (`DiskInfo`) and received and sent bytes over all interfaces
  (`NetworkInfo`).

In both modes:

- `timestamp` is an empty string.
- `services` and `devices` are `None`.

## What the package does not do

There is no messaging or homeserver client in the package. The
`[[homeservers]]` entries are parsed and validated, but nothing in the package
connects to them. The package does not do the following:

- register or log in
- receive commands or send output events over the network
- fail over between homeservers

The `mxdx-launcher` command does not run an agent loop. It only parses its
options and prints a start-up line. Wiring the pieces above into a running
service is left to the caller.