"""Core data models shared across depskills components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple, Union

DEFAULT_OUTPUT = Path(".claude") / "skills" / "depskills"

RepositoryField = Union[str, Mapping[str, object]]


class WorkspaceType(str, Enum):
    """Dependency-management layout of the scanned project."""

    SINGLE = "single"
    NPM = "npm"
    YARN = "yarn"
    PNPM = "pnpm"
    LERNA = "lerna"
    NX = "nx"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class WorkspaceInfo:
    """Workspace layout detected at the project root."""

    root: Path
    packages: Tuple[str, ...]
    type: WorkspaceType


@dataclass(frozen=True)
class ExtraDoc:
    """Additional documentation file shipped with a package (CONTRIBUTING.md, ...)."""

    name: str
    path: Path


@dataclass(frozen=True)
class DocumentationBundle:
    """Documentation artifacts located inside a single package directory."""

    readme: Optional[str] = None
    readme_path: Optional[Path] = None
    changelog: Optional[str] = None
    changelog_path: Optional[Path] = None
    license: Optional[str] = None
    license_path: Optional[Path] = None
    docs_path: Optional[Path] = None
    doc_files: Tuple[str, ...] = ()
    types_path: Optional[Path] = None
    types_from_companion: bool = False
    extra_docs: Tuple[ExtraDoc, ...] = ()

    @property
    def has_content(self) -> bool:
        """Return True when the bundle holds anything worth rendering.

        License text on its own does not count.
        """
        return bool(
            self.readme
            or self.changelog
            or self.docs_path
            or self.types_path
            or self.extra_docs
        )


@dataclass(frozen=True)
class PackageRecord:
    """Manifest metadata plus documentation bundle for one installed package."""

    name: str
    version: str
    package_path: Path
    docs: DocumentationBundle = field(default_factory=DocumentationBundle)
    description: Optional[str] = None
    homepage: Optional[str] = None
    repository: Optional[RepositoryField] = None
    license_type: Optional[str] = None
    peer_dependencies: Dict[str, str] = field(default_factory=dict)
    engines: Dict[str, str] = field(default_factory=dict)
    keywords: Tuple[str, ...] = ()

    @property
    def repository_url(self) -> Optional[str]:
        """Repository URL without a ``git+`` prefix or ``.git`` suffix."""
        repo = self.repository
        if not repo:
            return None
        if isinstance(repo, str):
            url = repo
        else:
            raw = repo.get("url")
            if not isinstance(raw, str) or not raw:
                return None
            url = raw
        if url.startswith("git+"):
            url = url[len("git+"):]
        if url.endswith(".git"):
            url = url[: -len(".git")]
        return url

    @property
    def has_content(self) -> bool:
        return bool(self.docs.has_content or self.description or self.homepage)


@dataclass(frozen=True)
class SkillFile:
    """A rendered per-package summary document."""

    name: str
    version: str
    source_path: Path
    target_path: Path
    content: Optional[str] = None


@dataclass(frozen=True)
class GenerateOptions:
    """Resolved options for a generate/clean run."""

    cwd: Path
    output: Optional[Path] = None
    direct_only: bool = False
    include: Tuple[str, ...] = ()
    exclude: Tuple[str, ...] = ()
    additional_sources: Tuple[str, ...] = ()

    @property
    def output_dir(self) -> Path:
        output = self.output if self.output is not None else DEFAULT_OUTPUT
        if output.is_absolute():
            return output
        return self.cwd / output


@dataclass(frozen=True)
class GenerateResult:
    """Aggregate outcome of a generate run."""

    skills: Tuple[SkillFile, ...]
    workspace_type: WorkspaceType
    packages_scanned: int
    duration_ms: int
    output_dir: Path
    index_path: Optional[Path] = None


@dataclass(frozen=True)
class CleanResult:
    """Outcome of a clean run."""

    output_dir: Path
    removed: bool
    files_removed: int
    duration_ms: int
