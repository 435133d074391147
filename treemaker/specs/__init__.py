"""Tree file loading and compilation."""

from ..core.config import ConfigError
from .tree_spec import TreeSpec, BarkSpec, LeavesSpec, BranchLevelsSpec, load_tree_spec
from .compile import (
    TreeType,
    TreeConfig,
    parse_tree_type,
    tint_to_rgba,
    tree_materials,
    compile_branch_config,
    compile_tree_config,
)

__all__ = [
    "ConfigError",
    "TreeSpec",
    "BarkSpec",
    "LeavesSpec",
    "BranchLevelsSpec",
    "load_tree_spec",
    "TreeType",
    "TreeConfig",
    "parse_tree_type",
    "tint_to_rgba",
    "tree_materials",
    "compile_branch_config",
    "compile_tree_config",
]
