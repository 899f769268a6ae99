from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.workspace_builder import WorkspaceBuilder


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspaceBuilder:
    """Provide a reusable project builder rooted at the pytest tmp_path."""
    return WorkspaceBuilder(tmp_path)
