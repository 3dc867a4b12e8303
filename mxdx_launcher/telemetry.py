"""Host telemetry collection."""

from __future__ import annotations

import platform
import socket
import time
from dataclasses import dataclass
from typing import Any

import psutil

from mxdx_launcher.config import TelemetryDetail


@dataclass(frozen=True)
class CpuInfo:
    cores: int
    usage_percent: float


@dataclass(frozen=True)
class MemoryInfo:
    total_bytes: int
    used_bytes: int


@dataclass(frozen=True)
class DiskInfo:
    total_bytes: int
    used_bytes: int


@dataclass(frozen=True)
class NetworkInfo:
    rx_bytes: int
    tx_bytes: int


@dataclass(frozen=True)
class HostTelemetry:
    timestamp: str
    hostname: str
    os: str
    arch: str
    uptime_seconds: int
    load_avg: tuple[float, float, float]
    cpu: CpuInfo
    memory: MemoryInfo
    disk: DiskInfo
    network: NetworkInfo | None = None
    services: Any | None = None
    devices: Any | None = None


def _os_version() -> str:
    try:
        release = platform.freedesktop_os_release()
    except OSError:
        release = {}
    return release.get("VERSION_ID") or platform.mac_ver()[0] or platform.release()


def _disk_totals() -> DiskInfo:
    total = used = 0
    for partition in psutil.disk_partitions(all=False):
        try:
            usage = psutil.disk_usage(partition.mountpoint)
        except OSError:
            continue
        total += usage.total
        used += usage.total - usage.free
    return DiskInfo(total_bytes=total, used_bytes=used)


def _network_totals() -> NetworkInfo:
    counters = psutil.net_io_counters(pernic=True).values()
    return NetworkInfo(
        rx_bytes=sum(c.bytes_recv for c in counters),
        tx_bytes=sum(c.bytes_sent for c in counters),
    )


def collect_telemetry(detail_level: TelemetryDetail) -> HostTelemetry:
    """Collect host telemetry.

    Summary mode reports basic host, CPU and memory figures only; full mode
    adds disk and network totals.
    """
    one, five, fifteen = psutil.getloadavg()
    memory = psutil.virtual_memory()
    base = dict(
        timestamp="",
        hostname=socket.gethostname(),
        os=_os_version(),
        arch=platform.machine(),
        uptime_seconds=max(0, int(time.time() - psutil.boot_time())),
        load_avg=(one, five, fifteen),
        cpu=CpuInfo(
            cores=psutil.cpu_count() or 0,
            usage_percent=float(psutil.cpu_percent(interval=None)),
        ),
        memory=MemoryInfo(total_bytes=memory.total, used_bytes=memory.used),
    )
    if detail_level is TelemetryDetail.SUMMARY:
        return HostTelemetry(**base, disk=DiskInfo(total_bytes=0, used_bytes=0))
    return HostTelemetry(**base, disk=_disk_totals(), network=_network_totals())