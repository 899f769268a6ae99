"""Generate per-package documentation summaries from an installed dependency tree."""

from .config import ConfigError, SkillsConfig, load_config, merge_config, resolve_options
from .gatherer import extract_package
from .models import (
    CleanResult,
    DocumentationBundle,
    ExtraDoc,
    GenerateOptions,
    GenerateResult,
    PackageRecord,
    SkillFile,
    WorkspaceInfo,
    WorkspaceType,
)
from .orchestrator import Orchestrator, clean, generate
from .patterns import expand_pattern
from .renderer import SkillRenderer, skill_file_name, skill_folder_name
from .traverse import direct_dependency_names, traverse_dependencies
from .workspace import dependency_roots, detect_workspace

__all__ = [
    "CleanResult",
    "ConfigError",
    "DocumentationBundle",
    "ExtraDoc",
    "GenerateOptions",
    "GenerateResult",
    "Orchestrator",
    "PackageRecord",
    "SkillFile",
    "SkillsConfig",
    "SkillRenderer",
    "WorkspaceInfo",
    "WorkspaceType",
    "clean",
    "dependency_roots",
    "detect_workspace",
    "direct_dependency_names",
    "expand_pattern",
    "extract_package",
    "generate",
    "load_config",
    "merge_config",
    "resolve_options",
    "skill_file_name",
    "skill_folder_name",
    "traverse_dependencies",
]
