"""ipl upload command - upload report files to the analysis server."""

from pathlib import Path

import click
from rich.console import Console

from impactplane.cli.utils import find_repo_root, load_cli_config
from impactplane.core.errors import ImpactPlaneError
from impactplane.reports.models import Report, ReportFormat
from impactplane.tasks.session import BuildSession


@click.command()
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--format",
    "report_format",
    required=True,
    type=click.Choice([f.value for f in ReportFormat], case_sensitive=False),
    help="Report format of all FILES",
)
@click.option("--partition", required=True, help="Server partition to upload to")
@click.option("--message", default="External report upload", show_default=True, help="Upload message")
@click.option("--ignore-failures", is_flag=True, help="Log upload failures instead of failing")
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Build root (default: enclosing git repository)",
)
def upload_command(
    files: tuple[Path, ...],
    report_format: str,
    partition: str,
    message: str,
    ignore_failures: bool,
    root: Path | None,
) -> None:
    """Upload FILES as one report batch."""
    repo_root = find_repo_root(root)
    config = load_cli_config(repo_root)
    if ignore_failures:
        config = config.model_copy(
            update={"upload": config.upload.model_copy(update={"ignore_failures": True})}
        )

    session = BuildSession(config, repo_root)
    fmt = ReportFormat(report_format.upper())
    for path in files:
        session.registry.register(
            Report(report_file=path.resolve(), format=fmt, partition=partition, message=message)
        )

    try:
        result = session.upload_task.run()
    except ImpactPlaneError as e:
        raise click.ClickException(str(e)) from e

    console = Console(stderr=True)
    if result is None:
        console.print(f"[yellow]Nothing uploaded[/yellow] ({session.upload_task.state.value})")
        return
    for group in result.uploaded:
        console.print(
            f"[green]✓[/green] {len(group.files)} {group.format.value} report(s) "
            f"→ {group.partition} at {session.commit.resolve()}"
        )
