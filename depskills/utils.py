"""Best-effort filesystem helpers shared by the scanning components.

Nothing in here raises for missing or malformed input; callers receive
``None``/``False``/empty results instead.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

MANIFEST_NAME = "package.json"


def path_exists(path: Path) -> bool:
    """Return True when ``path`` exists (file, directory or live symlink)."""
    try:
        return path.exists()
    except OSError:
        return False


def is_directory(path: Path) -> bool:
    """Return True when ``path`` is a directory, following symlinks."""
    try:
        return path.is_dir()
    except OSError:
        return False


def read_json(path: Path) -> Optional[Any]:
    """Return parsed JSON from ``path`` or None if it is missing or invalid."""
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None


def load_manifest(package_dir: Path) -> Optional[Dict[str, Any]]:
    """Return the parsed package.json mapping for ``package_dir``, if any."""
    data = read_json(package_dir / MANIFEST_NAME)
    if isinstance(data, dict):
        return data
    return None


def read_text(path: Path, max_lines: int | None = None) -> Optional[str]:
    """Read a UTF-8 text file, optionally keeping only the first ``max_lines`` lines."""
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, ValueError):
        return None
    if max_lines is not None:
        return "\n".join(content.split("\n")[:max_lines])
    return content


def find_first(directory: Path, names: Iterable[str]) -> Optional[Path]:
    """Return the first ``directory / name`` that exists, in candidate order."""
    for name in names:
        candidate = directory / name
        if path_exists(candidate):
            return candidate
    return None


def list_entries(directory: Path) -> List[os.DirEntry]:
    """Return the entries of ``directory`` sorted by name; empty if unreadable."""
    try:
        with os.scandir(directory) as iterator:
            entries = list(iterator)
    except OSError:
        return []
    entries.sort(key=lambda entry: entry.name)
    return entries


def is_dir_entry(entry: os.DirEntry) -> bool:
    """Return True for real directories and symlinks that resolve to a directory."""
    try:
        if entry.is_dir(follow_symlinks=False):
            return True
        if entry.is_symlink():
            return entry.is_dir(follow_symlinks=True)
    except OSError:
        return False
    return False


__all__ = [
    "MANIFEST_NAME",
    "find_first",
    "is_dir_entry",
    "is_directory",
    "list_entries",
    "load_manifest",
    "path_exists",
    "read_json",
    "read_text",
]
