"""Tests for depskills.orchestrator."""

from __future__ import annotations

from pathlib import Path

from depskills.models import DEFAULT_OUTPUT, GenerateOptions, WorkspaceType
from depskills.orchestrator import Orchestrator, clean, generate
from depskills.renderer import INDEX_FILENAME, SKILL_FILENAME, SkillRenderer
from tests._fixtures.workspace_builder import WorkspaceBuilder


def _orchestrator() -> Orchestrator:
    return Orchestrator(renderer=SkillRenderer(clock=lambda: "2024-01-02"))


def _seed_packages(workspace: WorkspaceBuilder) -> None:
    workspace.package("react", "18.3.1", readme="# React", description="UI library")
    workspace.package("express", "4.19.2", readme="# Express")
    workspace.package("zod", "3.23.8", description="Schema validation")


def test_generate_renders_every_documented_package(workspace: WorkspaceBuilder) -> None:
    workspace.manifest()
    _seed_packages(workspace)

    result = _orchestrator().generate(workspace.options())

    assert [skill.name for skill in result.skills] == ["express", "react", "zod"]
    assert result.workspace_type is WorkspaceType.SINGLE
    assert result.packages_scanned == 3
    assert result.duration_ms >= 0
    assert result.index_path == workspace.output / INDEX_FILENAME
    for name in ("express", "react", "zod"):
        assert (workspace.output / name / SKILL_FILENAME).is_file()

    index = result.index_path.read_text(encoding="utf-8")
    assert "| [react](./react/SKILL.md) | 18.3.1 |" in index
    assert "Workspace: single | 3 packages" in index


def test_generate_content_gate_counts_but_skips(workspace: WorkspaceBuilder) -> None:
    workspace.package("react", "18.3.1", readme="# React")
    workspace.package("bare", "1.0.0", files={"LICENSE": "MIT"})

    result = _orchestrator().generate(workspace.options())

    assert [skill.name for skill in result.skills] == ["react"]
    assert result.packages_scanned == 2
    assert not (workspace.output / "bare").exists()


def test_generate_direct_only(workspace: WorkspaceBuilder) -> None:
    workspace.manifest(dependencies=["react"])
    workspace.package("react", "18.3.1", readme="# React")
    workspace.package("lodash", "4.17.21", readme="# Lodash")

    result = _orchestrator().generate(workspace.options(direct_only=True))

    assert [skill.name for skill in result.skills] == ["react"]
    assert result.packages_scanned == 1


def test_generate_applies_include_and_exclude(workspace: WorkspaceBuilder) -> None:
    _seed_packages(workspace)

    included = _orchestrator().generate(workspace.options(include=("react",)))
    excluded = _orchestrator().generate(workspace.options(exclude=("express",)))

    assert [skill.name for skill in included.skills] == ["react"]
    assert [skill.name for skill in excluded.skills] == ["react", "zod"]


def test_generate_scoped_package_and_clean(workspace: WorkspaceBuilder) -> None:
    workspace.package("@scope/pkg", "1.0.0", readme="# Scoped")

    result = _orchestrator().generate(workspace.options())

    target = workspace.output / "@scope" / "pkg" / SKILL_FILENAME
    assert result.skills[0].name == "@scope/pkg"
    assert result.skills[0].target_path == target
    assert target.is_file()

    cleaned = _orchestrator().clean(workspace.options())

    assert cleaned.removed is True
    assert cleaned.files_removed == 2
    assert not workspace.output.exists()


def test_clean_missing_output_is_not_an_error(workspace: WorkspaceBuilder) -> None:
    result = clean(workspace.options(output=workspace.root / "non-existent"))

    assert result.removed is False
    assert result.files_removed == 0


def test_generate_is_idempotent(workspace: WorkspaceBuilder) -> None:
    workspace.package(
        "pkg",
        "1.0.0",
        readme="# Pkg",
        files={"CHANGELOG.md": "\n".join(f"- {i}" for i in range(300)), "docs/a.md": "a"},
    )
    orchestrator = _orchestrator()
    document = workspace.output / "pkg" / SKILL_FILENAME

    orchestrator.generate(workspace.options())
    first = document.read_bytes()
    orchestrator.generate(workspace.options())

    assert document.read_bytes() == first


def test_generate_deduplicates_across_workspace_members(workspace: WorkspaceBuilder) -> None:
    workspace.manifest(workspaces=["packages/*"])
    member_modules = workspace.root / "packages" / "app" / "node_modules"
    member_modules.mkdir(parents=True)
    workspace.package("react", "18.3.1", readme="# Root React")
    workspace.package("react", "17.0.2", readme="# Nested React", node_modules=member_modules)
    workspace.package("only-in-member", "0.1.0", readme="# Member", node_modules=member_modules)

    result = _orchestrator().generate(workspace.options())

    versions = {skill.name: skill.version for skill in result.skills}
    assert versions == {"react": "18.3.1", "only-in-member": "0.1.0"}
    assert result.workspace_type is WorkspaceType.NPM
    assert result.packages_scanned == 2


def test_generate_discovers_symlinked_workspace_member(workspace: WorkspaceBuilder) -> None:
    workspace.manifest(workspaces=["packages/*"])
    member = workspace.package(
        "@repo/ui", "0.0.1", readme="# UI", node_modules=workspace.root / "packages"
    )
    workspace.link(workspace.node_modules / "@repo" / "ui", member)

    result = _orchestrator().generate(workspace.options())

    assert [skill.name for skill in result.skills] == ["@repo/ui"]
    assert result.skills[0].source_path == workspace.node_modules / "@repo" / "ui"


def test_generate_handles_missing_dependency_directory(workspace: WorkspaceBuilder) -> None:
    result = _orchestrator().generate(workspace.options())

    assert result.skills == ()
    assert result.packages_scanned == 0
    assert (workspace.output / INDEX_FILENAME).is_file()


def test_generate_uses_default_output_directory(workspace: WorkspaceBuilder) -> None:
    workspace.package("react", "18.3.1", readme="# React")

    generate(GenerateOptions(cwd=workspace.root))

    assert (workspace.root / DEFAULT_OUTPUT / "react" / SKILL_FILENAME).is_file()


def test_generate_passes_additional_sources(workspace: WorkspaceBuilder) -> None:
    workspace.package("pkg", "1.0.0", files={"MIGRATION.md": "Upgrade notes"})

    result = _orchestrator().generate(workspace.options(additional_sources=("MIGRATION.md",)))

    assert len(result.skills) == 1
    assert "- [MIGRATION.md](" in result.skills[0].content


def test_iter_packages_scans_root_before_members(workspace: WorkspaceBuilder) -> None:
    workspace.manifest(workspaces=["packages/*"])
    member_modules = workspace.root / "packages" / "lib" / "node_modules"
    member_modules.mkdir(parents=True)
    workspace.package("zeta", node_modules=workspace.node_modules)
    workspace.package("alpha", node_modules=member_modules)

    names = [record.name for record in _orchestrator().iter_packages(workspace.options())]

    assert names == ["zeta", "alpha"]


def test_generated_links_resolve_from_document(workspace: WorkspaceBuilder) -> None:
    workspace.package("pkg", "1.0.0", readme="# Pkg", files={"API.md": "api"})

    skill = _orchestrator().generate(workspace.options()).skills[0]
    link = skill.content.split("- [API.md](", 1)[1].split(")", 1)[0]

    assert (skill.target_path.parent / Path(link)).resolve() == (
        workspace.node_modules / "pkg" / "API.md"
    ).resolve()
