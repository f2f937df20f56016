"""Filesystem helpers."""

from __future__ import annotations

import os
import re

_DIR_MODE = 0o755


def mkdirp(path: str | os.PathLike[str]) -> None:
    """Create ``path`` and every missing parent directory.

    Components that already exist are left alone, even when they are not
    directories; any other failure raises OSError.
    """
    path = os.fspath(path)
    prefixes = [path[: m.start()] for m in re.finditer("/", path) if m.start() > 0]
    prefixes.append(path)
    for prefix in prefixes:
        try:
            os.mkdir(prefix, _DIR_MODE)
        except FileExistsError:
            pass