"""Workspace layout detection and dependency-root discovery."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .logging import get_logger
from .models import WorkspaceInfo, WorkspaceType
from .patterns import expand_pattern
from .utils import is_directory, load_manifest, path_exists, read_json, read_text

DEPENDENCY_DIR = "node_modules"

PNPM_WORKSPACE_FILE = "pnpm-workspace.yaml"
NX_CONFIG_FILE = "nx.json"
LERNA_CONFIG_FILE = "lerna.json"
YARN_LOCK_FILE = "yarn.lock"

_NX_DEFAULT_APPS_DIR = "apps"
_NX_DEFAULT_LIBS_DIR = "libs"
_NX_PACKAGES_DIR = "packages"

logger = get_logger("workspace")


def detect_workspace(root: Path) -> WorkspaceInfo:
    """Classify the project at ``root`` and collect its member package patterns.

    Checks run in priority order (pnpm, Nx, Lerna, package.json workspaces) and
    the first match wins. Missing or unparsable marker files count as absent.
    """
    root = Path(root)

    pnpm_file = root / PNPM_WORKSPACE_FILE
    if path_exists(pnpm_file):
        packages = parse_pnpm_workspace(read_text(pnpm_file) or "")
        return _info(root, packages, WorkspaceType.PNPM)

    nx_file = root / NX_CONFIG_FILE
    if path_exists(nx_file):
        packages = _detect_nx_packages(root, _as_dict(read_json(nx_file)))
        if packages:
            return _info(root, packages, WorkspaceType.NX)
        logger.debug("%s present but no project directories found", NX_CONFIG_FILE)

    lerna = _load_lerna(root)
    if lerna is not None and not lerna.get("useWorkspaces"):
        lerna_packages = lerna.get("packages")
        if isinstance(lerna_packages, list) and lerna_packages:
            return _info(root, _as_patterns(lerna_packages), WorkspaceType.LERNA)

    manifest = load_manifest(root)
    if manifest is None:
        return _info(root, [], WorkspaceType.SINGLE)

    workspaces = manifest.get("workspaces")
    if isinstance(workspaces, list):
        packages = _as_patterns(workspaces)
    elif isinstance(workspaces, dict):
        packages = _as_patterns(workspaces.get("packages"))
    else:
        return _info(root, [], WorkspaceType.SINGLE)

    if lerna is not None and lerna.get("useWorkspaces"):
        return _info(root, packages, WorkspaceType.LERNA)
    if path_exists(root / YARN_LOCK_FILE):
        return _info(root, packages, WorkspaceType.YARN)
    return _info(root, packages, WorkspaceType.NPM)


def parse_pnpm_workspace(content: str) -> List[str]:
    """Return the ``packages:`` list of a pnpm workspace file.

    Only the block list form is understood. Items may be bare, single-quoted or
    double-quoted; comments and blank lines are skipped, and the list ends at
    the first other line once it has started.
    """
    packages: List[str] = []
    in_packages = False
    for line in content.splitlines():
        stripped = line.strip()
        if stripped == "packages:":
            in_packages = True
            continue
        if not in_packages:
            continue
        if stripped.startswith("-"):
            item = _strip_quotes(stripped[1:].strip())
            if item:
                packages.append(item)
        elif stripped and not stripped.startswith("#"):
            break
    return packages


def dependency_roots(workspace: WorkspaceInfo) -> List[Path]:
    """Return dependency directories to scan, workspace root first.

    Member directories follow in pattern declaration order; only members that
    actually have a dependency directory are included.
    """
    roots: List[Path] = [workspace.root / DEPENDENCY_DIR]
    if workspace.type is WorkspaceType.SINGLE or not workspace.packages:
        return roots

    seen = {roots[0]}
    for pattern in workspace.packages:
        for member in expand_pattern(pattern, workspace.root):
            candidate = member / DEPENDENCY_DIR
            if candidate in seen or not is_directory(candidate):
                continue
            seen.add(candidate)
            roots.append(candidate)
    return roots


def _detect_nx_packages(root: Path, nx_config: Dict[str, Any]) -> List[str]:
    layout = _as_dict(nx_config.get("workspaceLayout"))
    apps_dir = _as_str(layout.get("appsDir")) or _NX_DEFAULT_APPS_DIR
    libs_dir = _as_str(layout.get("libsDir")) or _NX_DEFAULT_LIBS_DIR

    packages: List[str] = []
    for directory in (apps_dir, libs_dir, _NX_PACKAGES_DIR):
        pattern = f"{directory}/*"
        if pattern not in packages and is_directory(root / directory):
            packages.append(pattern)
    return packages


def _load_lerna(root: Path) -> Optional[Dict[str, Any]]:
    lerna_file = root / LERNA_CONFIG_FILE
    if not path_exists(lerna_file):
        return None
    data = read_json(lerna_file)
    return data if isinstance(data, dict) else None


def _info(root: Path, packages: Sequence[str], workspace_type: WorkspaceType) -> WorkspaceInfo:
    logger.debug("Detected %s workspace at %s (%d patterns)", workspace_type.value, root, len(packages))
    return WorkspaceInfo(root=root, packages=tuple(packages), type=workspace_type)


def _strip_quotes(value: str) -> str:
    if value[:1] in {"'", '"'}:
        value = value[1:]
    if value[-1:] in {"'", '"'}:
        value = value[:-1]
    return value


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _as_patterns(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str) and item]


__all__ = [
    "DEPENDENCY_DIR",
    "dependency_roots",
    "detect_workspace",
    "parse_pnpm_workspace",
]
