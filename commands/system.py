"""Built-ins backed by the host: processes, disks, environment, network, archives."""
from __future__ import annotations

import getpass
import hashlib
import logging
import os
import shutil
import sys
import time

from runtime.errors import UsageError
from services import archive, system_state
from utils import runner
from utils.ui_dashboard import run_dashboard

logger = logging.getLogger("mintterm.commands.system")


def _stream(ctx, argv) -> int:
    def write(chunk: str) -> None:
        ctx.out.write(chunk)
        ctx.out.flush()

    return runner.stream_cmd(argv, write, cancel=ctx.cancel)


def cmd_ps(ctx, args):
    ctx.write(f"{'PID':>7} {'COMMAND':<24} {'%CPU':>5} {'%MEM':>5}")
    for row in system_state.process_rows():
        ctx.write(f"{row.pid:>7} {row.name[:24]:<24} {row.cpu_percent:>5.1f} {row.memory_percent:>5.1f}")


def cmd_df(ctx, args):
    path = args[1] if len(args) > 1 else os.path.abspath(os.sep)
    disk = system_state.disk_summary(path)
    ctx.write(f"{path} {disk['total']:.1f}G {disk['free']:.1f}G")


def cmd_whoami(ctx, args):
    try:
        user = getpass.getuser()
    except (KeyError, OSError):
        user = os.environ.get("USER", ctx.config.prompt.default_user)
    ctx.write(user)


def cmd_date(ctx, args):
    ctx.write(time.ctime(), "gray")


def cmd_clear(ctx, args):
    if os.name == "nt":
        runner.call_cmd(["cmd", "/c", "cls"])
    else:
        ctx.write("\x1b[2J\x1b[H", end="")


def cmd_which(ctx, args):
    if len(args) < 2:
        raise UsageError("missing argument")
    found = shutil.which(args[1])
    ctx.write(found if found else "which: not found")


def cmd_env(ctx, args):
    for name, value in os.environ.items():
        ctx.write(f"{name}={value}")


def cmd_setenv(ctx, args):
    if len(args) < 3:
        raise UsageError()
    # visible to children of this shell only
    os.environ[args[1]] = args[2]


def cmd_uptime(ctx, args):
    ctx.write(f"{ctx.paint('cyan', 'uptime: ')}{system_state.uptime_seconds()} seconds")


def cmd_ping(ctx, args):
    if len(args) < 2:
        raise UsageError("missing host")
    count = 4
    for i in range(2, len(args) - 1):
        if args[i] == "-c":
            try:
                count = int(args[i + 1])
            except ValueError:
                raise UsageError()
    flag = "-n" if os.name == "nt" else "-c"
    _stream(ctx, ["ping", flag, str(count), args[1]])


def cmd_hash(ctx, args):
    if len(args) < 2:
        raise UsageError("missing file")
    digest = hashlib.sha256()
    with open(args[1], "rb") as f:
        for block in iter(lambda: f.read(65536), b""):
            digest.update(block)
    ctx.write(f"{digest.hexdigest()}  {args[1]}")


def cmd_compress(ctx, args):
    if len(args) < 3:
        raise UsageError()
    created = archive.create_archive(args[1], args[2])
    ctx.write(f"created {created}")


def cmd_extract(ctx, args):
    if len(args) < 2:
        raise UsageError()
    dest = args[2] if len(args) > 2 else "."
    archive.extract_archive(args[1], dest)
    ctx.write(f"extracted into {os.path.abspath(dest)}")


def cmd_top(ctx, args):
    if os.name == "nt":
        runner.spawn_cmd(["taskmgr"])
        return
    for tool in ("htop", "top"):
        if runner.have(tool):
            runner.call_cmd([tool])
            return
    if not run_dashboard():
        ctx.error("top: no process viewer available")


def cmd_net(ctx, args):
    if os.name == "nt":
        _stream(ctx, ["ipconfig", "/all"])
        return
    if runner.have("ip"):
        _stream(ctx, ["ip", "addr"])
        return
    if runner.have("ifconfig"):
        _stream(ctx, ["ifconfig", "-a"])
        return
    for name, addrs in system_state.interface_addresses().items():
        ctx.write(name, "cyan")
        for addr in addrs:
            ctx.write(f"    {addr}")


def cmd_notify(ctx, args):
    if len(args) < 2:
        raise UsageError()
    message = args[1]
    if sys.platform.startswith("linux") and runner.have("notify-send"):
        result = runner.run_cmd(["notify-send", "mintterm", message])
        if result["rc"] == 0:
            return
        logger.warning("notify-send failed: %s", result["stderr"].strip())
    ctx.write(f"[notify] {message}")


def register(registry) -> None:
    registry.register("ps", cmd_ps, "ps", "process list")
    registry.register("df", cmd_df, "df [path]", "disk/free info")
    registry.register("whoami", cmd_whoami, "whoami", "current user")
    registry.register("date", cmd_date, "date", "show date/time")
    registry.register("clear", cmd_clear, "clear", "clear screen")
    registry.register("which", cmd_which, "which <cmd>", "find executable in PATH")
    registry.register("env", cmd_env, "env", "show environment variables")
    registry.register("setenv", cmd_setenv, "setenv NAME VALUE", "set environment variable")
    registry.register("uptime", cmd_uptime, "uptime", "show system uptime")
    registry.register("ping", cmd_ping, "ping <host> [-c N]", "wrapper around system ping")
    registry.register("hash", cmd_hash, "hash <file>", "show SHA-256")
    registry.register("compress", cmd_compress, "compress <src> <out.zip>", "create archive (.zip, .tar, .tar.gz, ...)")
    registry.register("extract", cmd_extract, "extract <archive> [dir]", "extract archive (zip/tar)")
    registry.register("top", cmd_top, "top", "launch htop/top (or built-in monitor)")
    registry.register("net", cmd_net, "net", "show network interfaces (ip/ipconfig)")
    registry.register("notify", cmd_notify, "notify <message>", "desktop notification (Linux)")
