"""ipl projects command - show the dependency closure of a project."""

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from impactplane.core.errors import ImpactPlaneError
from impactplane.projects.walker import (
    StaticProjectGraph,
    collect_class_dirs,
    collect_dependent_projects,
)


@click.command()
@click.argument("project_id")
@click.option(
    "--graph",
    "graph_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML description of the build's projects",
)
def projects_command(project_id: str, graph_path: Path) -> None:
    """List PROJECT_ID and every project its tests depend on."""
    try:
        graph = StaticProjectGraph.from_yaml(graph_path)
    except ImpactPlaneError as e:
        raise click.ClickException(str(e)) from e

    root = graph.get(project_id)
    if root is None:
        raise click.ClickException(f"Unknown project: {project_id}")

    projects = sorted(collect_dependent_projects(root, graph), key=lambda p: p.identifier)

    table = Table(show_header=True, box=None, padding=(0, 2), pad_edge=False)
    table.add_column("Project", style="cyan")
    table.add_column("Class directories")
    for project in projects:
        dirs = "\n".join(str(d) for d in collect_class_dirs([project])) or "-"
        table.add_row(project.identifier, dirs)

    Console().print(table)
