"""CLI utilities."""

from pathlib import Path

import click

from impactplane.config.loader import load_config
from impactplane.config.models import ImpactPlaneConfig
from impactplane.core.errors import ImpactPlaneError
from impactplane.core.logging import configure_logging


def find_repo_root(start_path: Path | None = None) -> Path:
    """Find the git repository root from the given path.

    Walks up the directory tree looking for a .git directory. Falls back to
    the start path itself, since a build with an explicit commit need not
    live in a repository.
    """
    if start_path is None:
        start_path = Path.cwd()

    start = start_path.resolve()
    for candidate in (start, *start.parents):
        if (candidate / ".git").exists():
            return candidate
    return start


def load_cli_config(repo_root: Path) -> ImpactPlaneConfig:
    """Load config and apply its logging section (unless --verbose was given)."""
    try:
        config = load_config(repo_root)
    except ImpactPlaneError as e:
        raise click.ClickException(str(e)) from e

    ctx = click.get_current_context(silent=True)
    root_obj = ctx.find_root().obj if ctx is not None else None
    if not (isinstance(root_obj, dict) and root_obj.get("verbose")):
        configure_logging(config=config.logging)
    return config
