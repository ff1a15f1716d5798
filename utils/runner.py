#!/usr/bin/env python3
"""
External process service.

Every invocation is optionally recorded as one JSON line in the command log
(``runner.command_log`` in the config; disabled when empty).
"""
from __future__ import annotations

import json
import logging
import os
import shutil
import subprocess
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Sequence

import psutil

logger = logging.getLogger("mintterm.runner")

LOG_FILE: Optional[Path] = None
SHELL: str = ""

MAX_CAPTURE = 8192  # chars per stream to keep in log
POLL_INTERVAL = 0.1  # seconds between cancel checks while streaming


def configure(command_log: str = "", shell: str = "") -> None:
    global LOG_FILE, SHELL
    LOG_FILE = Path(os.path.expanduser(command_log)) if command_log else None
    if LOG_FILE is not None:
        LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
    SHELL = shell


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def shell_argv(line: str) -> list[str]:
    if SHELL:
        return [SHELL, "-c", line]
    if os.name == "nt":
        return [os.environ.get("COMSPEC", "cmd.exe"), "/c", line]
    return ["/bin/sh", "-c", line]


def _ensure_list(cmd: Sequence[str] | str) -> list[str]:
    if isinstance(cmd, str):
        return shell_argv(cmd)
    return [str(c) for c in cmd]


def have(cmd: str) -> bool:
    return shutil.which(cmd) is not None


def _truncate(s: str | bytes | None, limit: int = MAX_CAPTURE) -> str:
    if s is None:
        return ""
    if isinstance(s, bytes):
        s = s.decode("utf-8", errors="replace")
    s = str(s)
    if len(s) <= limit:
        return s
    return s[:limit] + f"\n… [truncated {len(s) - limit} chars]"


def _write_log(entry: dict[str, Any]) -> None:
    if LOG_FILE is None:
        return
    try:
        with LOG_FILE.open("a", encoding="utf-8") as f:
            f.write(json.dumps(entry, ensure_ascii=False) + "\n")
    except OSError:
        logger.debug("could not append to command log %s", LOG_FILE, exc_info=True)


def _log_entry(argv: list[str], mode: str, rc: Optional[int], **extra: Any) -> None:
    entry = {
        "ts": _now_iso(),
        "cmd": argv,
        "cwd": os.getcwd(),
        "mode": mode,
        "rc": rc,
    }
    entry.update(extra)
    _write_log(entry)


def _terminate(p: subprocess.Popen) -> None:
    if p.poll() is not None:
        return
    # commands run through the shell leave grandchildren behind sh
    try:
        children = psutil.Process(p.pid).children(recursive=True)
    except psutil.Error:
        children = []
    for child in children:
        try:
            child.terminate()
        except psutil.Error:
            pass
    p.terminate()
    try:
        p.wait(timeout=2)
    except subprocess.TimeoutExpired:
        p.kill()
        p.wait()
    _, alive = psutil.wait_procs(children, timeout=1)
    for child in alive:
        try:
            child.kill()
        except psutil.Error:
            pass

def run_cmd(
    cmd: Sequence[str] | str,
    *,
    cwd: str | Path | None = None,
    env: Mapping[str, str] | None = None,
    timeout: float | None = None,
) -> dict[str, Any]:
    """
    Execute a command, capture stdout/stderr and return a result dict:
    { 'rc': int, 'stdout': str, 'stderr': str, 'cmd': [...] }
    """
    argv = _ensure_list(cmd)
    try:
        p = subprocess.Popen(
            argv,
            cwd=str(cwd) if cwd else None,
            env={**os.environ, **(env or {})},
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
        try:
            out, err = p.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            p.kill()
            out, err = p.communicate()
            rc = 124
        else:
            rc = p.returncode
    except FileNotFoundError as e:
        out, err, rc = "", str(e), 127
    except OSError as e:
        out, err, rc = "", str(e), 126

    _log_entry(argv, "capture", rc, stdout=_truncate(out), stderr=_truncate(err))
    return {"rc": rc, "stdout": out or "", "stderr": err or "", "cmd": argv}


def stream_cmd(
    cmd: Sequence[str] | str,
    write: Callable[[str], None],
    *,
    cancel: Optional[threading.Event] = None,
) -> int:
    """Run a command and hand each stdout line to ``write`` as it arrives.

    stdout is read on a helper thread so ``cancel`` is honoured even while the
    child prints nothing. stderr goes straight to the terminal. OSError is
    raised if the process cannot be started. Ctrl-C or ``cancel`` terminates
    the child and its descendants and returns 130.
    """
    argv = _ensure_list(cmd)
    try:
        p = subprocess.Popen(
            argv,
            stdout=subprocess.PIPE,
            text=True,
            errors="replace",
        )
    except OSError as e:
        _log_entry(argv, "stream", None, error=str(e))
        raise

    def pump() -> None:
        assert p.stdout is not None
        with p.stdout:
            for line in p.stdout:
                write(line)

    reader = threading.Thread(target=pump, name="stream-stdout", daemon=True)
    reader.start()
    stop = cancel or threading.Event()
    rc: Optional[int] = None
    try:
        while rc is None:
            if stop.is_set():
                _terminate(p)
                rc = 130
                break
            try:
                rc = p.wait(timeout=POLL_INTERVAL)
            except subprocess.TimeoutExpired:
                continue
    except KeyboardInterrupt:
        _terminate(p)
        rc = 130
    # the pipe closes once the child tree is gone
    reader.join(timeout=1)
    _log_entry(argv, "stream", rc)
    return rc


def call_cmd(cmd: Sequence[str] | str) -> int:
    """Run an interactive program on the inherited terminal and wait for it."""
    argv = _ensure_list(cmd)
    try:
        p = subprocess.Popen(argv)
    except OSError as e:
        _log_entry(argv, "interactive", None, error=str(e))
        raise
    try:
        rc = p.wait()
    except KeyboardInterrupt:
        _terminate(p)
        rc = 130
    _log_entry(argv, "interactive", rc)
    return rc


def spawn_cmd(
    cmd: Sequence[str] | str,
    *,
    cwd: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> int:
    """Spawn a detached process (no capture); still logs the intent."""
    argv = _ensure_list(cmd)
    try:
        subprocess.Popen(
            argv,
            cwd=str(cwd) if cwd else None,
            env={**os.environ, **(env or {})},
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
        rc = 0
    except FileNotFoundError:
        rc = 127
    except OSError:
        rc = 1
    _log_entry(argv, "spawn", rc)
    return rc
