"""Project graph and the transitive test-runtime dependency walk."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

import yaml

from impactplane.core.errors import ConfigError
from impactplane.core.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ProjectNode:
    """One project of a multi-project build."""

    identifier: str
    class_output_dirs: tuple[Path, ...] = ()
    test_runtime_dependencies: frozenset[str] = field(default_factory=frozenset)
    is_source_project: bool = True  # compilable source set, as opposed to e.g. a BOM or docs project


class ProjectGraph(Protocol):
    """Read-only view of the build's project-local dependency graph."""

    def get(self, identifier: str) -> ProjectNode | None: ...


class StaticProjectGraph:
    """ProjectGraph backed by a mapping, loadable from a YAML build description.

    YAML format::

        projects:
          app:
            class_dirs: [app/build/classes/java/main]
            dependencies: [core]
          core:
            class_dirs: [core/build/classes/java/main]
          docs:
            source: false
    """

    def __init__(self, nodes: Iterable[ProjectNode]) -> None:
        self._nodes = {node.identifier: node for node in nodes}

    def get(self, identifier: str) -> ProjectNode | None:
        return self._nodes.get(identifier)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._nodes

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], base_dir: Path) -> StaticProjectGraph:
        projects = data.get("projects")
        if not isinstance(projects, Mapping):
            raise ConfigError.invalid_value("projects", projects, "expected a mapping of projects")
        nodes = []
        for identifier, spec in projects.items():
            spec = spec or {}
            nodes.append(
                ProjectNode(
                    identifier=str(identifier),
                    class_output_dirs=tuple(
                        (base_dir / d).resolve() for d in spec.get("class_dirs", [])
                    ),
                    test_runtime_dependencies=frozenset(str(d) for d in spec.get("dependencies", [])),
                    is_source_project=bool(spec.get("source", True)),
                )
            )
        return cls(nodes)

    @classmethod
    def from_yaml(cls, path: Path) -> StaticProjectGraph:
        if not path.exists():
            raise ConfigError.file_not_found(str(path))
        try:
            with path.open() as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError.parse_error(str(path), str(e)) from e
        return cls.from_mapping(data, path.parent)


def collect_dependent_projects(root: ProjectNode, graph: ProjectGraph) -> frozenset[ProjectNode]:
    """Transitive closure of ``root`` over test-runtime project dependencies.

    Only source projects are followed. The root is always included. Each
    node is expanded once, so cycles and self-dependencies terminate.
    """
    visited: dict[str, ProjectNode] = {root.identifier: root}
    pending = [root]
    while pending:
        node = pending.pop()
        for dep_id in sorted(node.test_runtime_dependencies):
            if dep_id in visited:
                continue
            dep = graph.get(dep_id)
            if dep is None:
                log.warning("project_dependency_unknown", project=node.identifier, dependency=dep_id)
                continue
            if not dep.is_source_project:
                log.debug("project_dependency_ignored", project=node.identifier, dependency=dep_id)
                continue
            visited[dep_id] = dep
            pending.append(dep)
    return frozenset(visited.values())


def collect_class_dirs(projects: Iterable[ProjectNode]) -> tuple[Path, ...]:
    """Union of class-output directories, ordered by project then declaration."""
    seen: dict[Path, None] = {}
    for project in sorted(projects, key=lambda p: p.identifier):
        for directory in project.class_output_dirs:
            seen.setdefault(directory, None)
    return tuple(seen)
