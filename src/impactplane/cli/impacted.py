"""ipl impacted command - run impacted tests with testwise coverage, then upload."""

from pathlib import Path

import click

from impactplane.cli.utils import find_repo_root, load_cli_config
from impactplane.core.errors import ConfigError, ImpactPlaneError, TestExecutionError
from impactplane.projects.walker import StaticProjectGraph
from impactplane.tasks.session import BuildSession


@click.command(context_settings={"ignore_unknown_options": True})
@click.argument("command", nargs=-1, required=True, type=click.UNPROCESSED)
@click.option("--project", "project_id", required=True, help="Project whose tests are run")
@click.option(
    "--graph",
    "graph_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML description of the build's projects",
)
@click.option("--task", "task_name", default="testImpacted", show_default=True, help="Task name")
@click.option("--impacted", "run_impacted", is_flag=True, help="Only execute impacted tests")
@click.option(
    "--run-all-tests",
    is_flag=True,
    help="Run all tests, but still collect testwise coverage",
)
@click.option("--no-upload", is_flag=True, help="Register reports without uploading them")
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Build root (default: enclosing git repository)",
)
def impacted_command(
    command: tuple[str, ...],
    project_id: str,
    graph_path: Path,
    task_name: str,
    run_impacted: bool,
    run_all_tests: bool,
    no_upload: bool,
    root: Path | None,
) -> None:
    """Run COMMAND as the impacted test process.

    Use `--` to separate COMMAND from ipl options:

        ipl impacted --project app --graph projects.yaml -- ./gradlew test
    """
    repo_root = find_repo_root(root)
    config = load_cli_config(repo_root)
    impacted = config.impacted.model_copy(
        update={
            "run_impacted": run_impacted or config.impacted.run_impacted,
            "run_all_tests": run_all_tests or config.impacted.run_all_tests,
        }
    )
    config = config.model_copy(update={"impacted": impacted})

    session = BuildSession(config, repo_root)
    try:
        graph = StaticProjectGraph.from_yaml(graph_path)
        project = graph.get(project_id)
        if project is None:
            raise ConfigError.invalid_value("project", project_id, "not declared in the project graph")
        task = session.impacted_task(project, graph, task_name)
    except ImpactPlaneError as e:
        raise click.ClickException(str(e)) from e

    failures: list[ImpactPlaneError] = []
    result = None
    try:
        result = task.execute(command, cwd=repo_root)
    except TestExecutionError as e:
        failures.append(e)
    except ImpactPlaneError as e:
        raise click.ClickException(str(e)) from e

    # Coverage of failing test runs is uploaded as well
    if not no_upload:
        try:
            session.upload_task.run()
        except ImpactPlaneError as e:
            failures.append(e)

    if failures:
        raise click.ClickException("\n".join(str(e) for e in failures))
    if result is not None:
        click.echo(f"Tests finished; {len(result.reports)} report(s) registered.")
