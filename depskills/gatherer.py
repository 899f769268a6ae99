"""Locate and extract documentation artifacts from an installed package."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .logging import get_logger
from .models import DocumentationBundle, ExtraDoc, PackageRecord
from .utils import (
    find_first,
    is_directory,
    list_entries,
    load_manifest,
    path_exists,
    read_text,
)

README_CANDIDATES: Tuple[str, ...] = (
    "README.md",
    "readme.md",
    "Readme.md",
    "README.MD",
    "README",
    "readme",
    "README.markdown",
    "readme.markdown",
    "README.txt",
    "readme.txt",
)

CHANGELOG_CANDIDATES: Tuple[str, ...] = (
    "CHANGELOG.md",
    "changelog.md",
    "Changelog.md",
    "CHANGELOG",
    "changelog",
    "HISTORY.md",
    "history.md",
    "CHANGES.md",
    "changes.md",
)

LICENSE_CANDIDATES: Tuple[str, ...] = (
    "LICENSE",
    "LICENSE.md",
    "LICENSE.txt",
    "license",
    "license.md",
    "license.txt",
    "LICENCE",
    "LICENCE.md",
    "LICENCE.txt",
)

DOCS_FOLDER_CANDIDATES: Tuple[str, ...] = ("docs", "doc", "documentation", "Docs", "Doc")

DEFAULT_EXTRA_DOCS: Tuple[str, ...] = (
    "CONTRIBUTING.md",
    "contributing.md",
    "ARCHITECTURE.md",
    "architecture.md",
    "API.md",
    "api.md",
    "GUIDE.md",
    "guide.md",
    "USAGE.md",
    "usage.md",
)

DOC_EXTENSIONS: Tuple[str, ...] = (".md", ".markdown", ".txt", ".rst", ".adoc")

CHANGELOG_MAX_LINES = 200
DOCS_MAX_DEPTH = 2
TYPES_SCOPE = "@types"
DEFAULT_TYPES_FILE = "index.d.ts"

logger = get_logger("gatherer")


def extract_package(
    package_dir: Path,
    dependency_root: Path,
    name: str,
    extra_doc_names: Sequence[str] | None = None,
) -> Optional[PackageRecord]:
    """Build a :class:`PackageRecord` for ``package_dir``.

    Returns None when the manifest is unreadable or has no ``version``; a
    version is the minimal sign of a real installed package.
    """
    manifest = load_manifest(package_dir)
    if manifest is None:
        logger.debug("Skipping %s: no readable manifest", name)
        return None
    version = manifest.get("version")
    if not isinstance(version, str) or not version:
        logger.debug("Skipping %s: manifest has no version", name)
        return None

    docs = gather_documentation(package_dir, dependency_root, name, manifest, extra_doc_names)

    return PackageRecord(
        name=name,
        version=version,
        package_path=package_dir,
        docs=docs,
        description=_as_str(manifest.get("description")),
        homepage=_as_str(manifest.get("homepage")),
        repository=_as_repository(manifest.get("repository")),
        license_type=_as_str(manifest.get("license")),
        peer_dependencies=_as_str_mapping(manifest.get("peerDependencies")),
        engines=_as_str_mapping(manifest.get("engines")),
        keywords=tuple(_as_str_list(manifest.get("keywords"))),
    )


def gather_documentation(
    package_dir: Path,
    dependency_root: Path,
    name: str,
    manifest: Dict[str, Any],
    extra_doc_names: Sequence[str] | None = None,
) -> DocumentationBundle:
    """Collect README, changelog, license, docs folder, typings and extra docs."""
    readme_path = find_first(package_dir, README_CANDIDATES)
    changelog_path = find_first(package_dir, CHANGELOG_CANDIDATES)
    license_path = find_first(package_dir, LICENSE_CANDIDATES)
    docs_folder = find_docs_folder(package_dir)
    types = find_type_definitions(package_dir, dependency_root, name, manifest)

    return DocumentationBundle(
        readme=read_text(readme_path) if readme_path else None,
        readme_path=readme_path,
        changelog=read_text(changelog_path, CHANGELOG_MAX_LINES) if changelog_path else None,
        changelog_path=changelog_path,
        license=read_text(license_path) if license_path else None,
        license_path=license_path,
        docs_path=docs_folder[0] if docs_folder else None,
        doc_files=docs_folder[1] if docs_folder else (),
        types_path=types[0] if types else None,
        types_from_companion=types[1] if types else False,
        extra_docs=find_extra_docs(package_dir, extra_doc_names),
    )


def find_docs_folder(package_dir: Path) -> Optional[Tuple[Path, Tuple[str, ...]]]:
    """Return the first docs directory holding documentation files, with its listing."""
    for name in DOCS_FOLDER_CANDIDATES:
        docs_path = package_dir / name
        if not is_directory(docs_path):
            continue
        files = scan_docs_folder(docs_path)
        if files:
            return docs_path, tuple(files)
    return None


def scan_docs_folder(docs_path: Path, prefix: str = "", depth: int = 0) -> List[str]:
    """List documentation files under ``docs_path`` as ``/``-joined relative paths.

    Subdirectories are followed at most ``DOCS_MAX_DEPTH`` levels deep.
    """
    files: List[str] = []
    for entry in list_entries(docs_path):
        relative = f"{prefix}/{entry.name}" if prefix else entry.name
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
            is_file = entry.is_file(follow_symlinks=False)
        except OSError:
            continue
        if is_dir:
            if depth < DOCS_MAX_DEPTH:
                files.extend(scan_docs_folder(docs_path / entry.name, relative, depth + 1))
        elif is_file and is_doc_file(entry.name):
            files.append(relative)
    return files


def is_doc_file(name: str) -> bool:
    return name.lower().endswith(DOC_EXTENSIONS)


def find_type_definitions(
    package_dir: Path,
    dependency_root: Path,
    name: str,
    manifest: Dict[str, Any],
) -> Optional[Tuple[Path, bool]]:
    """Locate type definitions, returning ``(path, from_companion_package)``.

    Order: the manifest's ``types``/``typings`` entry, a root ``index.d.ts``,
    then the companion ``@types`` package installed in ``dependency_root``.
    """
    declared = _types_field(manifest)
    if declared:
        declared_path = package_dir / declared
        if path_exists(declared_path):
            return declared_path, False

    index_path = package_dir / DEFAULT_TYPES_FILE
    if path_exists(index_path):
        return index_path, False

    companion_dir = dependency_root / companion_types_name(name)
    if path_exists(companion_dir):
        companion_manifest = load_manifest(companion_dir) or {}
        types_file = _types_field(companion_manifest) or DEFAULT_TYPES_FILE
        types_path = companion_dir / types_file
        if path_exists(types_path):
            return types_path, True
    return None


def companion_types_name(name: str) -> str:
    """Map ``@scope/name`` to ``@types/scope__name`` and ``name`` to ``@types/name``."""
    if name.startswith("@") and "/" in name:
        scope, _, bare = name[1:].partition("/")
        return f"{TYPES_SCOPE}/{scope}__{bare}"
    return f"{TYPES_SCOPE}/{name}"


def find_extra_docs(
    package_dir: Path, extra_doc_names: Sequence[str] | None = None
) -> Tuple[ExtraDoc, ...]:
    """Return every default or caller-supplied extra doc present in ``package_dir``."""
    names: List[str] = []
    for name in (*DEFAULT_EXTRA_DOCS, *(extra_doc_names or ())):
        if name and name not in names:
            names.append(name)

    found: List[ExtraDoc] = []
    for name in names:
        path = package_dir / name
        if path_exists(path):
            found.append(ExtraDoc(name=name, path=path))
    return tuple(found)


def _types_field(manifest: Dict[str, Any]) -> Optional[str]:
    for key in ("types", "typings"):
        value = manifest.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def _as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _as_repository(value: Any) -> Any:
    if isinstance(value, str) and value:
        return value
    if isinstance(value, dict):
        return dict(value)
    return None


def _as_str_mapping(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(key): str(item) for key, item in value.items()}


def _as_str_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if isinstance(item, (str, int, float))]


__all__ = [
    "CHANGELOG_MAX_LINES",
    "DEFAULT_EXTRA_DOCS",
    "companion_types_name",
    "extract_package",
    "find_docs_folder",
    "find_extra_docs",
    "find_type_definitions",
    "gather_documentation",
    "scan_docs_folder",
]
