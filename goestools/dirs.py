"""Directory listing with shell-style pattern matching."""

from __future__ import annotations

import fnmatch
import os


def match_files(path: str | os.PathLike[str], pattern: str) -> list[str]:
    """Return ``path/name`` for every directory entry whose name matches ``pattern``.

    Matching is case sensitive and a leading dot is not special, so the
    ``.`` and ``..`` entries take part like any other name. Raises OSError
    if the directory cannot be read.
    """
    path = os.fspath(path)
    names = [".", "..", *os.listdir(path)]
    return [f"{path}/{name}" for name in names if fnmatch.fnmatchcase(name, pattern)]