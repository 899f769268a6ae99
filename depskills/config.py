"""Configuration loading for depskills (depskills.config.* or package.json)."""

from __future__ import annotations

import importlib.util
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from .logging import get_logger
from .models import GenerateOptions
from .utils import MANIFEST_NAME, load_manifest

CONFIG_FILES = (
    "depskills.config.py",
    "depskills.config.json",
    "depskills.config.yaml",
    "depskills.config.yml",
)
MANIFEST_FIELD = "depskills"
TEMPLATE_FILE = "depskills.config.yaml"

_KEY_ALIASES = {
    "include": "include",
    "exclude": "exclude",
    "output": "output",
    "directOnly": "direct_only",
    "direct_only": "direct_only",
    "additionalSources": "additional_sources",
    "additional_sources": "additional_sources",
}

CONFIG_TEMPLATE = """\
# depskills configuration

# Only include direct dependencies (skip transitive ones)
# directOnly: true

# Packages to include (supports * wildcards and @scope prefixes)
# include:
#   - react
#   - "@tanstack/*"

# Packages to exclude (supports * wildcards)
exclude:
  - "@types/*"
  - typescript
  - "eslint*"
  - prettier

# Extra documentation files to look for in each package
# additionalSources:
#   - MIGRATION.md

# Output directory
# output: .claude/skills/depskills
"""

logger = get_logger("config")


class ConfigError(RuntimeError):
    """Raised when a configuration source cannot be loaded or is invalid."""


@dataclass
class SkillsConfig:
    """Options read from a configuration source; unset fields are None."""

    include: Optional[List[str]] = None
    exclude: Optional[List[str]] = None
    direct_only: Optional[bool] = None
    output: Optional[str] = None
    additional_sources: Optional[List[str]] = None
    source: Optional[Path] = None


def load_config(cwd: Path) -> Optional[SkillsConfig]:
    """Load configuration from ``cwd``.

    The first existing ``depskills.config.*`` file wins; otherwise the
    ``depskills`` field of package.json is used. Returns None when no
    configuration is present.
    """
    cwd = Path(cwd)
    for file_name in CONFIG_FILES:
        path = cwd / file_name
        if path.is_file():
            config = validate_config(_read_config_file(path))
            config.source = path
            logger.debug("Loaded configuration from %s", path)
            return config

    manifest = load_manifest(cwd)
    if manifest is not None:
        embedded = manifest.get(MANIFEST_FIELD)
        if isinstance(embedded, dict):
            config = validate_config(embedded)
            config.source = cwd / MANIFEST_NAME
            logger.debug("Loaded configuration from %s field of %s", MANIFEST_FIELD, MANIFEST_NAME)
            return config
    return None


def validate_config(data: Any) -> SkillsConfig:
    """Validate a raw configuration mapping and normalise its values."""
    if not isinstance(data, Mapping):
        raise ConfigError("Config must be an object")

    values: Dict[str, Any] = {}
    for key, value in data.items():
        field_name = _KEY_ALIASES.get(key)
        if field_name is not None and value is not None:
            values[field_name] = (key, value)

    config = SkillsConfig()
    for field_name in ("include", "exclude", "additional_sources"):
        if field_name in values:
            key, value = values[field_name]
            setattr(config, field_name, _as_str_list(key, value))
    if "direct_only" in values:
        config.direct_only = bool(values["direct_only"][1])
    if "output" in values:
        config.output = str(values["output"][1])
    return config


def merge_config(cli: SkillsConfig, file_config: Optional[SkillsConfig]) -> SkillsConfig:
    """Merge CLI options over file configuration; CLI fields win whole-field."""
    if file_config is None:
        return cli
    return SkillsConfig(
        include=cli.include if cli.include is not None else file_config.include,
        exclude=cli.exclude if cli.exclude is not None else file_config.exclude,
        direct_only=cli.direct_only if cli.direct_only is not None else file_config.direct_only,
        output=cli.output if cli.output is not None else file_config.output,
        additional_sources=(
            cli.additional_sources
            if cli.additional_sources is not None
            else file_config.additional_sources
        ),
        source=file_config.source,
    )


def resolve_options(
    cwd: Path,
    cli: SkillsConfig | None = None,
    *,
    use_config: bool = True,
) -> tuple[GenerateOptions, Optional[SkillsConfig]]:
    """Return effective options and the file configuration they were merged with."""
    cwd = Path(cwd).expanduser().resolve()
    file_config = load_config(cwd) if use_config else None
    merged = merge_config(cli or SkillsConfig(), file_config)
    options = GenerateOptions(
        cwd=cwd,
        output=Path(merged.output).expanduser() if merged.output else None,
        direct_only=bool(merged.direct_only),
        include=tuple(merged.include or ()),
        exclude=tuple(merged.exclude or ()),
        additional_sources=tuple(merged.additional_sources or ()),
    )
    return options, file_config


def write_config_template(cwd: Path) -> Path:
    """Create a starter configuration file in ``cwd``."""
    path = Path(cwd) / TEMPLATE_FILE
    if path.exists():
        raise FileExistsError(f"{path.name} already exists at {path.parent}")
    path.write_text(CONFIG_TEMPLATE, encoding="utf-8")
    return path


def _read_config_file(path: Path) -> Any:
    if path.suffix == ".py":
        return _load_module_config(path)

    text = path.read_text(encoding="utf-8")
    if path.suffix == ".json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc

    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _load_module_config(path: Path) -> Any:
    spec = importlib.util.spec_from_file_location(f"_depskills_config_{path.stem.replace('.', '_')}", path)
    if spec is None or spec.loader is None:
        raise ConfigError(f"Failed to load config from {path.name}: not an importable module")
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
        config = getattr(module, "config", None)
        if callable(config):
            config = config()
    except Exception as exc:
        raise ConfigError(f"Failed to load config from {path.name}: {exc}") from exc
    if config is None:
        raise ConfigError(f"{path.name} must define a module-level `config` mapping")
    return config


def _as_str_list(key: str, value: Any) -> List[str]:
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise ConfigError(f'Config "{key}" must be an array')
    return [str(item) for item in value]


__all__ = [
    "CONFIG_FILES",
    "ConfigError",
    "SkillsConfig",
    "load_config",
    "merge_config",
    "resolve_options",
    "validate_config",
    "write_config_template",
]
