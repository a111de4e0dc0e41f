"""Fixtures for CLI tests."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from impactplane.config import loader

REPO_CONFIG = """\
server:
  url: https://analysis.example.com
  project: shop
  user_name: build-bot
  user_access_token: s3cret
commit:
  branch: main
  timestamp: 1700000000000
"""

PROJECT_GRAPH = """\
projects:
  app:
    class_dirs: [app/build/classes]
    dependencies: [core, bom]
  core:
    class_dirs: [core/build/classes]
  bom:
    source: false
"""


@pytest.fixture
def cli_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Build root with a complete repo config and no global config or env overrides."""
    monkeypatch.setattr(loader, "GLOBAL_CONFIG_PATH", tmp_path / "global.yaml")
    for key in list(os.environ):
        if key.upper().startswith("IMPACTPLANE__"):
            monkeypatch.delenv(key)

    root = tmp_path / "repo"
    (root / ".impactplane").mkdir(parents=True)
    (root / ".impactplane" / "config.yaml").write_text(REPO_CONFIG)
    (root / "projects.yaml").write_text(PROJECT_GRAPH)
    return root
