"""Tests for projects/walker.py."""

from __future__ import annotations

from pathlib import Path

import pytest

from impactplane.core.errors import ConfigError
from impactplane.projects.walker import (
    ProjectNode,
    StaticProjectGraph,
    collect_class_dirs,
    collect_dependent_projects,
)


def node(identifier: str, *deps: str, source: bool = True) -> ProjectNode:
    return ProjectNode(
        identifier=identifier,
        class_output_dirs=(Path(f"/build/{identifier}/classes"),),
        test_runtime_dependencies=frozenset(deps),
        is_source_project=source,
    )


def ids(projects: frozenset[ProjectNode]) -> set[str]:
    return {p.identifier for p in projects}


class TestCollectDependentProjects:
    def test_root_without_dependencies(self) -> None:
        root = node("app")

        assert collect_dependent_projects(root, StaticProjectGraph([root])) == {root}

    def test_transitive_closure(self) -> None:
        graph = StaticProjectGraph([node("app", "service"), node("service", "core"), node("core")])

        result = collect_dependent_projects(graph.get("app"), graph)  # type: ignore[arg-type]

        assert ids(result) == {"app", "service", "core"}

    def test_cycle_terminates_with_each_node_once(self) -> None:
        a, b = node("a", "b"), node("b", "a")
        graph = StaticProjectGraph([a, b])

        result = collect_dependent_projects(a, graph)

        assert result == {a, b}
        assert len(result) == 2

    def test_self_dependency_terminates(self) -> None:
        root = node("app", "app")

        assert collect_dependent_projects(root, StaticProjectGraph([root])) == {root}

    def test_diamond_visits_shared_dependency_once(self) -> None:
        graph = StaticProjectGraph(
            [node("app", "left", "right"), node("left", "core"), node("right", "core"), node("core")]
        )

        result = collect_dependent_projects(graph.get("app"), graph)  # type: ignore[arg-type]

        assert ids(result) == {"app", "left", "right", "core"}

    def test_non_source_projects_are_excluded_and_not_expanded(self) -> None:
        graph = StaticProjectGraph([node("app", "bom"), node("bom", "lib", source=False), node("lib")])

        result = collect_dependent_projects(graph.get("app"), graph)  # type: ignore[arg-type]

        assert ids(result) == {"app"}

    def test_root_is_included_even_if_not_source(self) -> None:
        root = node("tests-only", source=False)

        assert collect_dependent_projects(root, StaticProjectGraph([root])) == {root}

    def test_unknown_dependency_is_skipped(self) -> None:
        root = node("app", "external")

        assert ids(collect_dependent_projects(root, StaticProjectGraph([root]))) == {"app"}


class TestCollectClassDirs:
    def test_unions_directories_without_duplicates(self) -> None:
        shared = Path("/build/shared")
        projects = [
            ProjectNode("b", (Path("/build/b"), shared)),
            ProjectNode("a", (Path("/build/a"), shared)),
        ]

        assert collect_class_dirs(projects) == (Path("/build/a"), shared, Path("/build/b"))


class TestStaticProjectGraph:
    def test_from_yaml(self, tmp_path: Path) -> None:
        graph_file = tmp_path / "projects.yaml"
        graph_file.write_text(
            "projects:\n"
            "  app:\n"
            "    class_dirs: [app/build/classes]\n"
            "    dependencies: [core, docs]\n"
            "  core:\n"
            "    class_dirs: [core/build/classes]\n"
            "  docs:\n"
            "    source: false\n"
        )

        graph = StaticProjectGraph.from_yaml(graph_file)
        app = graph.get("app")

        assert app is not None
        assert app.class_output_dirs == ((tmp_path / "app/build/classes").resolve(),)
        assert app.test_runtime_dependencies == {"core", "docs"}
        assert graph.get("docs").is_source_project is False  # type: ignore[union-attr]
        assert ids(collect_dependent_projects(app, graph)) == {"app", "core"}

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError):
            StaticProjectGraph.from_yaml(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        graph_file = tmp_path / "projects.yaml"
        graph_file.write_text("projects: [unclosed")

        with pytest.raises(ConfigError):
            StaticProjectGraph.from_yaml(graph_file)

    def test_projects_must_be_mapping(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError):
            StaticProjectGraph.from_mapping({"projects": ["app"]}, tmp_path)
