"""
High-level API for tree generation.

Main entry points:
    - generate(): build a tree from a BranchConfig into any SceneSink
    - generate_tree(): build a tree and export it to GLB
"""

from .generate import (
    generate,
    generate_tree,
    TreeAssembler,
    GenerationReport,
    AttachmentMode,
)
from .sink import SceneSink, SceneGraphSink, TrimeshSceneSink, SceneGraphError
from .export import export_scene, write_report

__all__ = [
    "generate",
    "generate_tree",
    "TreeAssembler",
    "GenerationReport",
    "AttachmentMode",
    "SceneSink",
    "SceneGraphSink",
    "TrimeshSceneSink",
    "SceneGraphError",
    "export_scene",
    "write_report",
]
