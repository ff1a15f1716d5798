from __future__ import annotations
import os, stat, time
from pathlib import Path
from typing import Iterator, Union

# ---------------- Metadata formatting ----------------
_PERM_BITS = (
    (stat.S_IRUSR, "r"), (stat.S_IWUSR, "w"), (stat.S_IXUSR, "x"),
    (stat.S_IRGRP, "r"), (stat.S_IWGRP, "w"), (stat.S_IXGRP, "x"),
    (stat.S_IROTH, "r"), (stat.S_IWOTH, "w"), (stat.S_IXOTH, "x"),
)


def perms_to_string(mode: int) -> str:
    """rwxr-xr-x style string for the nine permission bits of ``mode``."""
    return "".join(ch if mode & bit else "-" for bit, ch in _PERM_BITS)


def file_time_string(ts: float) -> str:
    return time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(ts))


def parse_octal_mode(text: str) -> int:
    """Apply the last three octal digits, e.g. '755', '0644', '7'."""
    s = text[1:] if text.startswith("0") else text
    s = s.rjust(3, "0")
    digits = s[-3:]
    if not all(c in "01234567" for c in digits):
        raise ValueError(f"invalid mode: {text}")
    return int(digits, 8)


def is_executable_file(path: Union[str, Path]) -> bool:
    p = Path(path)
    if os.name == "nt":
        return p.is_file() and p.suffix.lower() in {".exe", ".com", ".bat", ".cmd"}
    return p.is_file() and os.access(p, os.X_OK)


# ---------------- Directory walking ----------------
def walk_entries(root: Union[str, Path]) -> Iterator[os.DirEntry]:
    """Yield every entry below ``root`` in sorted pre-order; symlinked dirs are not entered."""
    with os.scandir(root) as it:
        entries = sorted(it, key=lambda e: e.name)
    for entry in entries:
        yield entry
        if entry.is_dir(follow_symlinks=False):
            try:
                yield from walk_entries(entry.path)
            except PermissionError:
                continue


def read_lines(path: Union[str, Path]) -> list[str]:
    with open(path, "r", encoding="utf-8", errors="replace", newline=None) as f:
        lines = f.read().split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines
