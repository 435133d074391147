"""
Geometry operations for tree generation.

This module provides the growth path generator, the tube mesh builder and the
primitive archetype trees.
"""

from .growth import generate_growth_path, frame_positions, path_length
from .tube import build_tube_mesh, expected_vertex_count, tube_report, TIP_EPSILON
from .archetypes import (
    generate_oak_tree,
    generate_pine_tree,
    generate_willow_tree,
    generate_palm_tree,
    generate_archetype,
)

__all__ = [
    "generate_growth_path",
    "frame_positions",
    "path_length",
    "build_tube_mesh",
    "expected_vertex_count",
    "tube_report",
    "TIP_EPSILON",
    "generate_oak_tree",
    "generate_pine_tree",
    "generate_willow_tree",
    "generate_palm_tree",
    "generate_archetype",
]
