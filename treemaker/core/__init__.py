"""Core data structures for tree generation."""

from .config import BranchConfig, ConfigError, validate_branch_config, MAX_DEPTH
from .types import GrowthFrame, Mesh, FORWARD_AXIS
from .rng import RandomSource

__all__ = [
    "BranchConfig",
    "ConfigError",
    "validate_branch_config",
    "MAX_DEPTH",
    "GrowthFrame",
    "Mesh",
    "FORWARD_AXIS",
    "RandomSource",
]
