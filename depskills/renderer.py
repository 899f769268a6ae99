"""Render package records into summary documents and the aggregate index."""

from __future__ import annotations

import os
from datetime import UTC, datetime
from pathlib import Path
from typing import Callable, List, Sequence

from jinja2 import Environment, FileSystemLoader

from .logging import get_logger
from .models import PackageRecord, SkillFile, WorkspaceType

SKILL_FILENAME = "SKILL.md"
INDEX_FILENAME = "_index.md"
MARKER_FMT = "<!-- depskills: {name}@{version} -->"

CHANGELOG_PREVIEW_LINES = 50
DOC_LINKS_LIMIT = 10

logger = get_logger("renderer")


def _today() -> str:
    return datetime.now(UTC).date().isoformat()


def skill_folder_name(name: str) -> str:
    """Folder for a package's document; scoped names keep their ``@scope/name`` nesting."""
    return name


def skill_file_name(name: str, version: str) -> str:
    """Flat-layout file name, e.g. ``tanstack__react-query@5.0.0.md``."""
    safe_name = name.removeprefix("@").replace("/", "__")
    return f"{safe_name}@{version}.md"


def relative_link(document: Path, target: Path) -> str:
    """Return the ``/``-separated path from ``document``'s directory to ``target``."""
    return Path(os.path.relpath(target, document.parent)).as_posix()


class SkillRenderer:
    """Writes one markdown summary per package and an index of all of them."""

    def __init__(
        self,
        templates_dir: Path | None = None,
        *,
        clock: Callable[[], str] | None = None,
    ) -> None:
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self._clock = clock or _today
        self._env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def target_path(self, record: PackageRecord, output_dir: Path, *, flat: bool = False) -> Path:
        if flat:
            return output_dir / skill_file_name(record.name, record.version)
        return output_dir / skill_folder_name(record.name) / SKILL_FILENAME

    def render(
        self, record: PackageRecord, output_dir: Path, *, flat: bool = False
    ) -> SkillFile | None:
        """Write the summary document for ``record`` under ``output_dir``.

        Returns None without touching the filesystem when the package has no
        documentable content.
        """
        if not record.has_content:
            logger.debug("No documentable content for %s@%s", record.name, record.version)
            return None

        target = self.target_path(record, Path(output_dir), flat=flat)
        target.parent.mkdir(parents=True, exist_ok=True)
        if target.exists():
            target.unlink()

        content = self.render_markdown(record, target)
        target.write_text(content, encoding="utf-8")

        return SkillFile(
            name=record.name,
            version=record.version,
            source_path=record.package_path,
            target_path=target,
            content=content,
        )

    def render_markdown(self, record: PackageRecord, target: Path) -> str:
        """Return the summary document text for ``record`` as if written to ``target``."""
        docs = record.docs
        lines: List[str] = [
            MARKER_FMT.format(name=record.name, version=record.version),
            f"# {record.name}",
            "",
        ]
        lines.extend(self._metadata_lines(record))
        lines.extend(["", "---", ""])

        if docs.readme:
            lines.extend(["## Documentation", "", docs.readme, ""])
        elif record.description:
            lines.extend(["## About", "", record.description, ""])

        lines.extend(self._resource_lines(record, target))
        lines.extend(self._changelog_lines(docs.changelog))

        if record.keywords:
            lines.extend(["## Keywords", "", ", ".join(record.keywords), ""])

        lines.append("---")
        lines.append(f"*Auto-generated by depskills on {self._clock()}. Do not edit manually.*")
        return "\n".join(lines) + "\n"

    def render_index(
        self,
        skills: Sequence[SkillFile],
        output_dir: Path,
        workspace_type: WorkspaceType,
    ) -> Path:
        """Write the aggregate index listing every rendered package."""
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        index_path = output_dir / INDEX_FILENAME

        entries = [
            {
                "name": skill.name,
                "version": skill.version,
                "link": Path(os.path.relpath(skill.target_path, output_dir)).as_posix(),
            }
            for skill in sorted(skills, key=lambda skill: skill.name)
        ]
        template = self._env.get_template("index.md.j2")
        content = (
            template.render(
                skills=entries,
                workspace_type=WorkspaceType(workspace_type).value,
                generated_on=self._clock(),
            ).strip()
            + "\n"
        )
        if index_path.exists():
            index_path.unlink()
        index_path.write_text(content, encoding="utf-8")
        return index_path

    @staticmethod
    def _metadata_lines(record: PackageRecord) -> List[str]:
        lines = [f"**Version:** {record.version}"]
        if record.description:
            lines.append(f"**Description:** {record.description}")
        repo_url = record.repository_url
        if repo_url:
            lines.append(f"**Repository:** {repo_url}")
        if record.homepage:
            lines.append(f"**Homepage:** {record.homepage}")
        if record.license_type:
            lines.append(f"**License:** {record.license_type}")
        if record.engines:
            engines = ", ".join(f"{key}: {value}" for key, value in record.engines.items())
            lines.append(f"**Engines:** {engines}")
        if record.peer_dependencies:
            peers = ", ".join(f"{key}@{value}" for key, value in record.peer_dependencies.items())
            lines.append(f"**Peer Dependencies:** {peers}")
        return lines

    @staticmethod
    def _resource_lines(record: PackageRecord, target: Path) -> List[str]:
        docs = record.docs
        if not (docs.docs_path or docs.extra_docs or record.homepage or docs.types_path):
            return []

        lines = ["## Additional Resources", ""]

        if docs.docs_path and docs.doc_files:
            docs_link = relative_link(target, docs.docs_path)
            lines.extend(["### Local Documentation", ""])
            for doc_file in docs.doc_files[:DOC_LINKS_LIMIT]:
                lines.append(f"- [{doc_file}]({docs_link}/{doc_file})")
            hidden = len(docs.doc_files) - DOC_LINKS_LIMIT
            if hidden > 0:
                lines.append(f"- *...and {hidden} more files*")
            lines.append("")

        if docs.extra_docs:
            lines.extend(["### Additional Docs", ""])
            for extra in docs.extra_docs:
                lines.append(f"- [{extra.name}]({relative_link(target, extra.path)})")
            lines.append("")

        if record.homepage:
            lines.extend(["### Official Documentation", "", f"- [{record.homepage}]({record.homepage})", ""])

        if docs.types_path:
            origin = " (from companion @types package)" if docs.types_from_companion else ""
            lines.extend(
                [
                    "### API Reference",
                    "",
                    f"- [Type Definitions{origin}]({relative_link(target, docs.types_path)})",
                    "",
                ]
            )
        return lines

    @staticmethod
    def _changelog_lines(changelog: str | None) -> List[str]:
        if not changelog:
            return []
        changelog_lines = changelog.split("\n")
        lines = ["## Recent Changes", "", "\n".join(changelog_lines[:CHANGELOG_PREVIEW_LINES])]
        if len(changelog_lines) > CHANGELOG_PREVIEW_LINES:
            lines.extend(["", "*[Changelog truncated - see full file for complete history]*"])
        lines.append("")
        return lines


__all__ = [
    "INDEX_FILENAME",
    "SKILL_FILENAME",
    "SkillRenderer",
    "relative_link",
    "skill_file_name",
    "skill_folder_name",
]
