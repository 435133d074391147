"""Analysis helpers for generated trees."""

from .hierarchy import hierarchy_graph, validate_hierarchy, level_counts

__all__ = [
    "hierarchy_graph",
    "validate_hierarchy",
    "level_counts",
]
