"""Commands that read or change session state, plus calc/random."""
from __future__ import annotations

import os
import random

from runtime.errors import NotFoundError, ShellExit, UsageError
from utils.calc import evaluate, format_number
from utils.tokenizer import rest_of_line, strip_quotes


def cmd_help(ctx, args):
    ctx.write("Commands (Mint look):", "cyan")
    for command in ctx.registry.commands():
        if command.name in ("exit", "quit"):
            continue
        ctx.write(f"  {command.usage:<27}- {command.summary}")
        for usage, summary in command.variant_help:
            ctx.write(f"  {usage:<27}- {summary}")
    ctx.write(f"  {'exit, quit':<27}- leave the shell")
    ctx.write("Anything else is run by the host shell.", "gray")


def cmd_exit(ctx, args):
    raise ShellExit()


def cmd_history(ctx, args):
    history = ctx.session.history
    if len(args) > 1 and args[1] == "-c":
        history.clear()
        ctx.write("history cleared")
        return
    for i, entry in history.numbered():
        ctx.write(f"{i}  {entry}")


def cmd_alias(ctx, args):
    if len(args) < 2:
        raise UsageError()
    # the definition is taken from the raw text so quoted values keep their spaces
    definition = strip_quotes(rest_of_line(ctx.line).strip())
    name, sep, replacement = definition.partition("=")
    if not sep or not name:
        raise UsageError("need name=command")
    replacement = strip_quotes(replacement)
    ctx.session.aliases.define(name, replacement)
    ctx.write(f"alias {ctx.paint('mint', name)} -> {replacement}")


def cmd_unalias(ctx, args):
    if len(args) < 2:
        raise UsageError()
    if not ctx.session.aliases.remove(args[1]):
        raise NotFoundError("not found")
    ctx.write("unalias: removed")


def cmd_aliases(ctx, args):
    for name, replacement in ctx.session.aliases.items():
        ctx.write(f"{ctx.paint('mint', name)}='{replacement}'")


def cmd_bookmark(ctx, args):
    if len(args) < 2:
        raise UsageError()
    target = ctx.session.bookmarks.add(args[1], os.getcwd())
    ctx.write(f"bookmarked {ctx.paint('mint', args[1])} -> {target}")


def cmd_bookmarks(ctx, args):
    marks = ctx.session.bookmarks.items()
    if not marks:
        ctx.write("(no bookmarks)", "gray")
        return
    for name, target in marks:
        ctx.write(f"{ctx.paint('mint', name)} -> {target}")


def cmd_unbookmark(ctx, args):
    if len(args) < 2:
        raise UsageError()
    if not ctx.session.bookmarks.remove(args[1]):
        raise NotFoundError("not found")
    ctx.write("removed")


def cmd_goto(ctx, args):
    if len(args) < 2:
        raise UsageError()
    target = ctx.session.bookmarks.resolve(args[1])
    if target is None:
        raise NotFoundError("not found")
    os.chdir(target)
    ctx.write(f"cwd -> {ctx.paint('mint', target)}")


def cmd_calc(ctx, args):
    if len(args) < 2:
        raise UsageError()
    result = evaluate(" ".join(args[1:]))
    ctx.write(format_number(result), "orange")


def cmd_random(ctx, args):
    try:
        bounds = [int(a) for a in args[1:4]]
    except ValueError:
        raise UsageError()
    lo, hi, count = bounds + [0, 100, 1][len(bounds):]
    if lo > hi or count < 0:
        raise UsageError()
    values = [str(random.randint(lo, hi)) for _ in range(count)]
    if values:
        ctx.write(" ".join(ctx.paint("green", v) for v in values))


def register(registry) -> None:
    registry.register("help", cmd_help, "help", "this message")
    registry.register("exit", cmd_exit, "exit", "leave the shell")
    registry.register("quit", cmd_exit, "quit", "leave the shell")
    registry.register("history", cmd_history, "history [-c]", "show (or clear) command history")
    registry.register("alias", cmd_alias, "alias name='command'", "create alias")
    registry.register("unalias", cmd_unalias, "unalias name", "remove alias")
    registry.register("aliases", cmd_aliases, "aliases", "list aliases")
    registry.register("bookmark", cmd_bookmark, "bookmark <name>", "save cwd under <name>")
    registry.register("bookmarks", cmd_bookmarks, "bookmarks", "list bookmarks")
    registry.register("unbookmark", cmd_unbookmark, "unbookmark <name>", "forget a bookmark")
    registry.register("goto", cmd_goto, "goto <name>", "cd to bookmark")
    registry.register("calc", cmd_calc, 'calc "expr"', "simple calculator (+ - * / parentheses)")
    registry.register("random", cmd_random, "random [min] [max] [count]", "generate integers")
