"""ImpactPlane CLI - ipl command."""

import click

from impactplane.cli.impacted import impacted_command
from impactplane.cli.projects import projects_command
from impactplane.cli.upload import upload_command
from impactplane.core.logging import configure_logging


@click.group()
@click.version_option(version="0.4.13", prog_name="ipl")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """ImpactPlane - impacted test execution and report upload."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "INFO")


cli.add_command(upload_command, name="upload")
cli.add_command(impacted_command, name="impacted")
cli.add_command(projects_command, name="projects")


if __name__ == "__main__":
    cli()
