"""Line-oriented text built-ins, including the ``tail -f`` follower."""
from __future__ import annotations

from collections import deque

from runtime.errors import UsageError
from runtime.follower import FileFollower
from utils.helper import read_lines

DEFAULT_LINES = 10


def cmd_echo(ctx, args):
    ctx.write(" ".join(args[1:]))


def cmd_grep(ctx, args):
    if len(args) < 3:
        raise UsageError()
    pattern = args[1]
    for lineno, line in enumerate(read_lines(args[2]), 1):
        if pattern in line:
            ctx.write(ctx.paint("magenta", f"{lineno}: ") + line)


def cmd_wc(ctx, args):
    if len(args) < 2:
        raise UsageError("missing file")
    lines = read_lines(args[1])
    words = sum(len(line.split()) for line in lines)
    chars = sum(len(line) + 1 for line in lines)
    ctx.write(f"{len(lines)} {words} {chars} {args[1]}")


def cmd_head(ctx, args):
    if len(args) < 2:
        raise UsageError("missing file")
    with open(args[1], "r", encoding="utf-8", errors="replace") as f:
        for n, line in enumerate(f):
            if n >= DEFAULT_LINES:
                break
            ctx.write(line.rstrip("\n"))


def cmd_tail(ctx, args):
    if len(args) < 2:
        raise UsageError("missing file")
    with open(args[1], "r", encoding="utf-8", errors="replace") as f:
        last = deque(f, maxlen=DEFAULT_LINES)
    for line in last:
        ctx.write(line.rstrip("\n"))


def cmd_tail_follow(ctx, args):
    if len(args) < 3:
        raise UsageError("usage tail -f <file>")
    follow = ctx.config.follow
    follower = FileFollower(
        args[2],
        ctx.write,
        replay_bytes=follow.replay_bytes,
        poll_interval=follow.poll_interval,
        cancel=ctx.cancel,
    )
    follower.run()


def cmd_sort(ctx, args):
    if len(args) < 2:
        raise UsageError("missing file")
    for line in sorted(read_lines(args[1])):
        ctx.write(line)


def cmd_uniq(ctx, args):
    if len(args) < 2:
        raise UsageError("missing file")
    prev = None
    for line in read_lines(args[1]):
        if line != prev:
            ctx.write(line)
        prev = line


def register(registry) -> None:
    registry.register("echo", cmd_echo, "echo <text>", "print text")
    registry.register("grep", cmd_grep, "grep <pattern> <file>", "search for pattern in file")
    registry.register("wc", cmd_wc, "wc <file>", "count lines/words/chars")
    registry.register("head", cmd_head, "head <file>", "first 10 lines")
    registry.register("tail", cmd_tail, "tail <file>", "last 10 lines")
    registry.add_variant(
        "tail", "-f", cmd_tail_follow,
        "tail -f <file>", "follow appended writes (Ctrl-C to stop)",
    )
    registry.register("sort", cmd_sort, "sort <file>", "sort file lines")
    registry.register("uniq", cmd_uniq, "uniq <file>", "unique adjacent lines")
