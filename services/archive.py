#!/usr/bin/env python3
from __future__ import annotations

import os
import shutil
from pathlib import Path

# longest suffix first so .tar.gz wins over .gz
_FORMATS = (
    (".tar.gz", "gztar"),
    (".tgz", "gztar"),
    (".tar.bz2", "bztar"),
    (".tar.xz", "xztar"),
    (".tar", "tar"),
    (".zip", "zip"),
)


def _split_format(out: str) -> tuple[str, str]:
    lowered = out.lower()
    for suffix, fmt in _FORMATS:
        if lowered.endswith(suffix):
            return out[: -len(suffix)], fmt
    # unknown extension: zip, keeping the name as given
    return out, "zip"


def create_archive(src: str | Path, out: str | Path) -> Path:
    """Archive ``src`` (file or directory) into ``out``; the format follows its extension."""
    src_path = Path(src)
    if not src_path.exists():
        raise FileNotFoundError(2, "No such file or directory", str(src))
    base, fmt = _split_format(str(out))
    src_abs = src_path.resolve()
    created = shutil.make_archive(
        os.path.abspath(base),
        fmt,
        root_dir=str(src_abs.parent),
        base_dir=src_abs.name,
    )
    created_path = Path(created)
    wanted = Path(os.path.abspath(str(out)))
    if created_path != wanted:
        created_path.replace(wanted)
    return wanted


def extract_archive(archive: str | Path, dest: str | Path = ".") -> Path:
    """Unpack ``archive`` into ``dest``; zip and tar variants are recognised by name."""
    archive_path = Path(archive)
    if not archive_path.exists():
        raise FileNotFoundError(2, "No such file or directory", str(archive))
    dest_path = Path(dest)
    dest_path.mkdir(parents=True, exist_ok=True)
    shutil.unpack_archive(str(archive_path), str(dest_path))
    return dest_path
