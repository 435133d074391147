"""
tree-maker - procedural branching tree meshes.

Builds a tree's surface mesh from a recursive set of per-level growth
parameters and emits it as a scene graph that can be exported to GLB.

Main Entry Points:
    - generate(): build a tree from a BranchConfig into a scene sink
    - generate_tree(): build a tree and write it to a GLB file
    - load_tree_spec(): read a JSON tree description

Example:
    >>> from treemaker import BranchConfig, SceneGraphSink, generate
    >>>
    >>> trunk = BranchConfig(
    ...     length=5.0, start_radius=0.3, end_radius=0.25,
    ...     length_segments=4, radial_segments=8,
    ...     children=2,
    ...     children_config=BranchConfig(length=2.0, start_radius=0.1, end_radius=0.0),
    ... )
    >>> sink = SceneGraphSink()
    >>> root = generate(trunk, seed=7, sink=sink)
    >>> len(sink.nodes)
    3
"""

from .core import BranchConfig, ConfigError, GrowthFrame, Mesh, RandomSource
from .ops import generate_growth_path, build_tube_mesh, generate_archetype
from .api import (
    generate,
    generate_tree,
    TreeAssembler,
    GenerationReport,
    AttachmentMode,
    SceneSink,
    SceneGraphSink,
    TrimeshSceneSink,
)
from .specs import load_tree_spec, compile_branch_config, compile_tree_config

__version__ = "0.1.0"

__all__ = [
    "BranchConfig",
    "ConfigError",
    "GrowthFrame",
    "Mesh",
    "RandomSource",
    "generate_growth_path",
    "build_tube_mesh",
    "generate_archetype",
    "generate",
    "generate_tree",
    "TreeAssembler",
    "GenerationReport",
    "AttachmentMode",
    "SceneSink",
    "SceneGraphSink",
    "TrimeshSceneSink",
    "load_tree_spec",
    "compile_branch_config",
    "compile_tree_config",
]
