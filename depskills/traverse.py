"""Walk an installed dependency directory and yield package records."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, Optional, Sequence, Set

from .gatherer import extract_package
from .logging import get_logger
from .models import PackageRecord
from .patterns import matches_wildcard
from .utils import is_dir_entry, list_entries, load_manifest

BIN_DIR = ".bin"
SCOPE_PREFIX = "@"

logger = get_logger("traverse")


def traverse_dependencies(
    dependency_root: Path,
    *,
    include: Sequence[str] | None = None,
    exclude: Sequence[str] | None = None,
    extra_doc_names: Sequence[str] | None = None,
) -> Iterator[PackageRecord]:
    """Lazily yield a record for every installed package under ``dependency_root``.

    Entries are visited in name order. Symlinks that resolve to directories
    count as packages, ``@scope`` directories are descended one level, and
    candidates without a versioned manifest are skipped. A missing or
    unreadable root yields nothing.
    """
    root = Path(dependency_root)
    for entry in list_entries(root):
        if not is_dir_entry(entry):
            continue

        if entry.name.startswith(SCOPE_PREFIX):
            scope_dir = root / entry.name
            for scoped in list_entries(scope_dir):
                if not is_dir_entry(scoped):
                    continue
                full_name = f"{entry.name}/{scoped.name}"
                record = _visit(scope_dir / scoped.name, root, full_name, include, exclude, extra_doc_names)
                if record is not None:
                    yield record
            continue

        if entry.name.startswith(".") or entry.name == BIN_DIR:
            continue

        record = _visit(root / entry.name, root, entry.name, include, exclude, extra_doc_names)
        if record is not None:
            yield record


def should_include(
    name: str,
    include: Sequence[str] | None = None,
    exclude: Sequence[str] | None = None,
) -> bool:
    """Apply exclude-first filtering, then the optional include allow-list."""
    if exclude and any(match_package_pattern(name, pattern) for pattern in exclude):
        return False
    if include:
        return any(match_package_pattern(name, pattern) for pattern in include)
    return True


def match_package_pattern(name: str, pattern: str) -> bool:
    """Match a package name against a wildcard, exact or scope-prefix pattern."""
    if "*" in pattern:
        return matches_wildcard(name, pattern)
    return name == pattern or name.startswith(f"{pattern}/")


def direct_dependency_names(project_root: Path) -> Set[str]:
    """Return the names declared in the root manifest's dependencies and devDependencies."""
    manifest = load_manifest(Path(project_root))
    if manifest is None:
        return set()
    names: Set[str] = set()
    for key in ("dependencies", "devDependencies"):
        declared = manifest.get(key)
        if isinstance(declared, dict):
            names.update(str(name) for name in declared)
    return names


def _visit(
    package_dir: Path,
    dependency_root: Path,
    name: str,
    include: Sequence[str] | None,
    exclude: Sequence[str] | None,
    extra_doc_names: Sequence[str] | None,
) -> Optional[PackageRecord]:
    if not should_include(name, include, exclude):
        logger.debug("Filtered out %s", name)
        return None
    return extract_package(package_dir, dependency_root, name, extra_doc_names)


__all__ = [
    "direct_dependency_names",
    "match_package_pattern",
    "should_include",
    "traverse_dependencies",
]
