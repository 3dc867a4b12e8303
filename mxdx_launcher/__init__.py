"""Fleet management launcher agent: configuration, command validation and execution, tmux terminal sessions, output encoding and host telemetry."""

__version__ = "1.0.0"