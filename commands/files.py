"""Filesystem built-ins."""
from __future__ import annotations

import os
import shlex
import shutil
import sys
from pathlib import Path

from runtime.errors import NotFoundError, UsageError
from utils import runner
from utils.helper import (
    file_time_string,
    is_executable_file,
    parse_octal_mode,
    perms_to_string,
    walk_entries,
)


def _name_color(entry: os.DirEntry) -> str | None:
    if entry.is_symlink():
        return "magenta"
    if entry.is_dir():
        return "blue"
    if is_executable_file(entry.path):
        return "green"
    return None


def cmd_ls(ctx, args):
    path = "."
    long_list = False
    if len(args) > 1:
        if args[1] == "-l":
            long_list = True
            if len(args) > 2:
                path = args[2]
        else:
            path = args[1]
    with os.scandir(path) as it:
        entries = sorted(it, key=lambda e: e.name)
    for entry in entries:
        prefix = ""
        if long_list:
            st = entry.stat(follow_symlinks=False)
            size = st.st_size if entry.is_file(follow_symlinks=False) else 0
            prefix = (
                ctx.paint("gray", perms_to_string(st.st_mode) + " ")
                + ctx.paint("orange", f"{size:>8}") + " "
                + ctx.paint("gray", file_time_string(st.st_mtime)) + " "
            )
        ctx.write(prefix + ctx.paint(_name_color(entry), entry.name))


def cmd_pwd(ctx, args):
    ctx.write(os.getcwd(), "mint")


def cmd_cd(ctx, args):
    if len(args) < 2:
        raise UsageError("missing arg")
    os.chdir(os.path.expanduser(args[1]))


def cmd_cat(ctx, args):
    if len(args) < 2:
        raise UsageError("missing file")
    with open(args[1], "r", encoding="utf-8", errors="replace") as f:
        for line in f:
            ctx.write(line.rstrip("\n"))


def cmd_edit(ctx, args):
    if len(args) < 2:
        raise UsageError("missing file")
    editor = os.environ.get("EDITOR", "").strip()
    if editor:
        argv = shlex.split(editor) + [args[1]]
    elif runner.have("code"):
        argv = ["code", args[1]]
    else:
        argv = ["nano", args[1]]
    runner.call_cmd(argv)


def cmd_mkdir(ctx, args):
    if len(args) < 2:
        raise UsageError("missing dir")
    if args[1] == "-p":
        if len(args) < 3:
            raise UsageError("missing path")
        os.makedirs(args[2], exist_ok=True)
    else:
        os.mkdir(args[1])
    ctx.write("created")


def cmd_rm(ctx, args):
    if len(args) < 2:
        raise UsageError("missing file")
    target = args[1]
    if os.path.isdir(target) and not os.path.islink(target):
        os.rmdir(target)
    else:
        os.remove(target)
    ctx.write("removed")


def cmd_rmdir(ctx, args):
    if len(args) < 2:
        raise UsageError("missing dir")
    target = args[1]
    if not os.path.lexists(target):
        count = 0
    elif os.path.isdir(target) and not os.path.islink(target):
        count = 1 + sum(1 for _ in walk_entries(target))
        shutil.rmtree(target)
    else:
        os.remove(target)
        count = 1
    ctx.write(f"removed {count} entries")


def cmd_touch(ctx, args):
    if len(args) < 2:
        raise UsageError("missing file")
    with open(args[1], "a"):
        pass
    os.utime(args[1], None)


def cmd_cp(ctx, args):
    if len(args) < 3:
        raise UsageError()
    src, dst = args[1], args[2]
    if os.path.isdir(src):
        shutil.copytree(src, dst, dirs_exist_ok=True)
    else:
        shutil.copy2(src, dst)
    ctx.write("copied")


def cmd_mv(ctx, args):
    if len(args) < 3:
        raise UsageError()
    os.replace(args[1], args[2])
    ctx.write("moved")


def cmd_find(ctx, args):
    root = args[1] if len(args) > 1 else "."
    for entry in walk_entries(root):
        ctx.write(entry.path)


def _print_tree(ctx, root: Path, prefix: str = "") -> None:
    children = list(root.iterdir())
    dirs = sorted(p for p in children if p.is_dir())
    files = sorted(p for p in children if not p.is_dir())
    for i, d in enumerate(dirs):
        last = i + 1 == len(dirs) and not files
        ctx.write(prefix + ("└── " if last else "├── ") + ctx.paint("blue", d.name))
        if not d.is_symlink():
            _print_tree(ctx, d, prefix + ("    " if last else "│   "))
    for i, f in enumerate(files):
        ctx.write(prefix + ("└── " if i + 1 == len(files) else "├── ") + f.name)


def cmd_tree(ctx, args):
    root = args[1] if len(args) > 1 else "."
    ctx.write(root)
    _print_tree(ctx, Path(root))


def cmd_chmod(ctx, args):
    if len(args) < 3:
        raise UsageError()
    try:
        mode = parse_octal_mode(args[1])
    except ValueError:
        raise UsageError()
    os.chmod(args[2], mode)


def cmd_ln(ctx, args):
    if len(args) < 3:
        raise UsageError()
    os.symlink(args[1], args[2])
    ctx.write("symlink created")


def cmd_du(ctx, args):
    root = args[1] if len(args) > 1 else "."
    total = 0
    for entry in walk_entries(root):
        try:
            if entry.is_file(follow_symlinks=False):
                total += entry.stat(follow_symlinks=False).st_size
        except OSError:
            continue
    ctx.write(f"{total // 1024}K\t{root}")


def cmd_stat(ctx, args):
    if len(args) < 2:
        raise UsageError("missing file")
    p = Path(args[1])
    if not p.exists():
        raise NotFoundError("not found")
    st = p.stat()
    kind = "directory" if p.is_dir() else ("file" if p.is_file() else "other")
    ctx.write(ctx.paint("gray", "path: ") + str(p))
    ctx.write(ctx.paint("gray", "size: ") + (str(st.st_size) if p.is_file() else "-"))
    ctx.write(ctx.paint("gray", "type: ") + kind)
    ctx.write(ctx.paint("gray", "perm: ") + perms_to_string(st.st_mode))
    ctx.write(ctx.paint("gray", "mtime: ") + file_time_string(st.st_mtime))


def cmd_count(ctx, args):
    root = args[1] if len(args) > 1 else "."
    files = dirs = 0
    for entry in walk_entries(root):
        try:
            if entry.is_dir():
                dirs += 1
            elif entry.is_file():
                files += 1
        except OSError:
            continue
    ctx.write(f"{ctx.paint('cyan', 'files: ')}{files}    {ctx.paint('cyan', 'dirs: ')}{dirs}")


def cmd_replace(ctx, args):
    if len(args) < 4:
        raise UsageError()
    path, old, new = args[1], args[2], args[3]
    if not old:
        raise UsageError("<old> must not be empty")
    with open(path, "rb") as f:
        content = f.read()
    backup = path + ".bak"
    # the backup is complete before the original is touched
    with open(backup, "wb") as f:
        f.write(content)
    with open(path, "wb") as f:
        f.write(content.replace(old.encode("utf-8"), new.encode("utf-8")))
    ctx.write(f"replaced (backup -> {backup})")


def cmd_open(ctx, args):
    if len(args) < 2:
        raise UsageError("missing file")
    target = args[1]
    if sys.platform.startswith("linux"):
        rc = runner.spawn_cmd(["xdg-open", target])
    elif sys.platform == "darwin":
        rc = runner.spawn_cmd(["open", target])
    elif os.name == "nt":
        rc = runner.spawn_cmd(["cmd", "/c", "start", "", target])
    else:
        rc = 127
    if rc != 0:
        ctx.error("open: no system opener available")


def register(registry) -> None:
    registry.register("ls", cmd_ls, "ls [-l] [dir]", "list directory (-l: permissions, size, mtime)")
    registry.register("pwd", cmd_pwd, "pwd", "print working dir")
    registry.register("cd", cmd_cd, "cd <dir>", "change dir")
    registry.register("cat", cmd_cat, "cat <file>", "show file")
    registry.register("edit", cmd_edit, "edit <file>", "open file with $EDITOR/code/nano")
    registry.register("mkdir", cmd_mkdir, "mkdir [-p] <dir>", "create directory")
    registry.register("rm", cmd_rm, "rm <file>", "remove file or empty directory")
    registry.register("rmdir", cmd_rmdir, "rmdir <dir>", "remove directory tree")
    registry.register("touch", cmd_touch, "touch <file>", "create file / update mtime")
    registry.register("cp", cmd_cp, "cp <src> <dst>", "copy (recursive, overwrites)")
    registry.register("mv", cmd_mv, "mv <src> <dst>", "move / rename")
    registry.register("find", cmd_find, "find [dir]", "list every path below dir")
    registry.register("tree", cmd_tree, "tree [dir]", "tree view (simple)")
    registry.register("chmod", cmd_chmod, "chmod <octal> <file>", "change permissions (e.g. 755)")
    registry.register("ln", cmd_ln, "ln <target> <link>", "create symbolic link")
    registry.register("du", cmd_du, "du [dir]", "disk usage (simple)")
    registry.register("stat", cmd_stat, "stat <file>", "show file metadata")
    registry.register("count", cmd_count, "count [dir]", "count files and directories (recursive)")
    registry.register("replace", cmd_replace, "replace <file> <old> <new>", "in-file simple replace (creates .bak)")
    registry.register("open", cmd_open, "open <file>", "open with default application")
