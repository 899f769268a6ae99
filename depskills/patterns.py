"""Wildcard matching and workspace pattern expansion.

Only the ``*`` wildcard is understood. It matches any run of characters
(including none) within a single path segment when expanding directories, and
anywhere in the string when matching package names. There is no recursive
``**`` support: a ``**`` segment behaves like ``*``.
"""

from __future__ import annotations

import os
import re
from functools import lru_cache
from pathlib import Path
from typing import List, Pattern

from .utils import list_entries

_SEPARATORS = re.compile(r"[\\/]")


@lru_cache(maxsize=256)
def wildcard_to_regex(pattern: str) -> Pattern[str]:
    """Translate a ``*`` wildcard pattern into an anchored regular expression."""
    parts = [re.escape(part) for part in pattern.split("*")]
    return re.compile("^" + ".*".join(parts) + "$", re.DOTALL)


def matches_wildcard(value: str, pattern: str) -> bool:
    """Return True when ``value`` matches ``pattern`` as a whole."""
    return wildcard_to_regex(pattern).match(value) is not None


def expand_pattern(pattern: str, base: Path) -> List[Path]:
    """Expand a workspace ``pattern`` relative to ``base`` into directory paths.

    Patterns without ``*`` map to a single candidate path; whether it exists is
    left to the caller. For wildcard patterns the segments before the first
    wildcard segment form the directory that is listed, subdirectories whose
    name matches the wildcard segment are kept, and any remaining segments are
    expanded recursively beneath each match. Unreadable directories contribute
    nothing.
    """
    if "*" not in pattern:
        return [base / pattern]

    segments = [segment for segment in _SEPARATORS.split(pattern) if segment]
    wildcard_index = next(index for index, segment in enumerate(segments) if "*" in segment)
    parent = base.joinpath(*segments[:wildcard_index])
    wildcard = segments[wildcard_index]
    remaining = "/".join(segments[wildcard_index + 1:])

    results: List[Path] = []
    for entry in list_entries(parent):
        if not _is_real_directory(entry):
            continue
        if not matches_wildcard(entry.name, wildcard):
            continue
        matched = parent / entry.name
        if remaining:
            results.extend(expand_pattern(remaining, matched))
        else:
            results.append(matched)
    return results


def _is_real_directory(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir(follow_symlinks=False)
    except OSError:
        return False


__all__ = ["expand_pattern", "matches_wildcard", "wildcard_to_regex"]
