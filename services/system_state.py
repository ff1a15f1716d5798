import socket
import time
from dataclasses import dataclass
from typing import Dict, List

import psutil


@dataclass
class ProcessRow:
    pid: int
    name: str
    cpu_percent: float
    memory_percent: float


def process_rows() -> List[ProcessRow]:
    """Snapshot of running processes, sorted by pid."""
    rows = []
    for p in psutil.process_iter(["pid", "name", "cpu_percent", "memory_percent"]):
        info = p.info
        rows.append(ProcessRow(
            pid=info["pid"],
            name=info.get("name") or "?",
            cpu_percent=info.get("cpu_percent") or 0.0,
            memory_percent=info.get("memory_percent") or 0.0,
        ))
    rows.sort(key=lambda r: r.pid)
    return rows


def disk_summary(path: str = "/") -> Dict[str, float]:
    """Total and available space for the filesystem holding ``path``, in GiB."""
    usage = psutil.disk_usage(path)
    gib = 1024 ** 3
    return {"total": usage.total / gib, "free": usage.free / gib, "percent": usage.percent}


def uptime_seconds() -> int:
    return int(time.time() - psutil.boot_time())


def interface_addresses() -> Dict[str, List[str]]:
    families = {socket.AF_INET: "inet", socket.AF_INET6: "inet6"}
    out: Dict[str, List[str]] = {}
    for name, addrs in sorted(psutil.net_if_addrs().items()):
        out[name] = [
            f"{families[a.family]} {a.address}" for a in addrs if a.family in families
        ]
    return out


def get_state():
    """Collects a one-line summary used by the process monitor header."""
    return {
        "cpu_percent": psutil.cpu_percent(interval=None),
        "memory_percent": psutil.virtual_memory().percent,
        "running_processes": len(psutil.pids()),
        "uptime": uptime_seconds(),
    }
