"""Multi-project build graph traversal."""

from impactplane.projects.walker import (
    ProjectGraph,
    ProjectNode,
    StaticProjectGraph,
    collect_class_dirs,
    collect_dependent_projects,
)

__all__ = [
    "ProjectGraph",
    "ProjectNode",
    "StaticProjectGraph",
    "collect_class_dirs",
    "collect_dependent_projects",
]
