"""Pipeline orchestration for the generate/clean flows."""

from __future__ import annotations

import shutil
import time
from pathlib import Path
from typing import Iterator, List, Optional, Set

from .logging import get_logger
from .models import (
    CleanResult,
    GenerateOptions,
    GenerateResult,
    PackageRecord,
    SkillFile,
    WorkspaceInfo,
)
from .renderer import SkillRenderer
from .traverse import direct_dependency_names, traverse_dependencies
from .workspace import dependency_roots, detect_workspace


class Orchestrator:
    """Coordinates workspace detection, traversal, and rendering."""

    def __init__(self, renderer: SkillRenderer | None = None) -> None:
        self.renderer = renderer or SkillRenderer()
        self.logger = get_logger("orchestrator")

    def generate(self, options: GenerateOptions) -> GenerateResult:
        """Render a summary for every documented package and write the index."""
        started = time.perf_counter()
        cwd = Path(options.cwd)
        output_dir = options.output_dir
        self.logger.info("Scanning dependencies under %s", cwd)

        workspace = detect_workspace(cwd)
        skills: List[SkillFile] = []
        scanned = 0
        for record in self.iter_packages(options, workspace):
            scanned += 1
            skill = self.renderer.render(record, output_dir)
            if skill is not None:
                skills.append(skill)

        index_path = self.renderer.render_index(skills, output_dir, workspace.type)
        duration_ms = _elapsed_ms(started)
        self.logger.info(
            "Generated %d of %d packages (%s workspace) in %dms",
            len(skills),
            scanned,
            workspace.type.value,
            duration_ms,
        )
        return GenerateResult(
            skills=tuple(skills),
            workspace_type=workspace.type,
            packages_scanned=scanned,
            duration_ms=duration_ms,
            output_dir=output_dir,
            index_path=index_path,
        )

    def iter_packages(
        self, options: GenerateOptions, workspace: WorkspaceInfo | None = None
    ) -> Iterator[PackageRecord]:
        """Yield unique package records across all dependency roots.

        The workspace root's dependency directory is walked first, then member
        directories in pattern order; the first record seen for a name wins.
        """
        workspace = workspace or detect_workspace(Path(options.cwd))
        direct: Optional[Set[str]] = None
        if options.direct_only:
            direct = direct_dependency_names(workspace.root)
            self.logger.debug("Restricting to %d direct dependencies", len(direct))

        seen: Set[str] = set()
        for root in dependency_roots(workspace):
            self.logger.debug("Walking %s", root)
            for record in traverse_dependencies(
                root,
                include=options.include,
                exclude=options.exclude,
                extra_doc_names=options.additional_sources,
            ):
                if direct is not None and record.name not in direct:
                    continue
                if record.name in seen:
                    self.logger.debug("Skipping duplicate %s from %s", record.name, root)
                    continue
                seen.add(record.name)
                yield record

    def clean(self, options: GenerateOptions) -> CleanResult:
        """Remove the output directory tree; a missing directory is not an error."""
        started = time.perf_counter()
        output_dir = options.output_dir
        if not output_dir.exists():
            self.logger.debug("Nothing to clean at %s", output_dir)
            return CleanResult(
                output_dir=output_dir,
                removed=False,
                files_removed=0,
                duration_ms=_elapsed_ms(started),
            )

        files_removed = sum(1 for path in output_dir.rglob("*") if path.is_file())
        shutil.rmtree(output_dir)
        self.logger.info("Removed %s (%d files)", output_dir, files_removed)
        return CleanResult(
            output_dir=output_dir,
            removed=True,
            files_removed=files_removed,
            duration_ms=_elapsed_ms(started),
        )


def generate(options: GenerateOptions) -> GenerateResult:
    return Orchestrator().generate(options)


def clean(options: GenerateOptions) -> CleanResult:
    return Orchestrator().clean(options)


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


__all__ = ["Orchestrator", "clean", "generate"]
