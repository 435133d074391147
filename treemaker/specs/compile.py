"""
Compile tree descriptions into runtime configs.

- compile_branch_config(): level maps (or a nested trunk) -> BranchConfig chain
- compile_tree_config(): archetype metadata for the primitive tree generators

UNIT CONVENTIONS
----------------
Level-map ``twist`` values are in DEGREES per segment and are converted to
radians. ``angle`` stays in degrees.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple
import math
import logging

from ..core.config import BranchConfig, ConfigError, validate_branch_config
from .tree_spec import TreeSpec, BranchLevelsSpec

logger = logging.getLogger(__name__)

_DEFAULTS = BranchConfig()


class TreeType(str, Enum):
    """Archetypes of the primitive-based tree generators."""
    OAK = "oak"
    PINE = "pine"
    WILLOW = "willow"
    PALM = "palm"


TREE_TYPE_ALIASES: Dict[str, TreeType] = {
    "deciduous": TreeType.OAK,
    "oak": TreeType.OAK,
    "conifer": TreeType.PINE,
    "pine": TreeType.PINE,
    "weeping": TreeType.WILLOW,
    "willow": TreeType.WILLOW,
    "tropical": TreeType.PALM,
    "palm": TreeType.PALM,
}


@dataclass
class TreeConfig:
    """
    Metadata for the primitive archetype trees.

    Parameters
    ----------
    tree_type : TreeType
        Archetype
    height : float
        Overall tree height (> 0)
    branch_density : float
        Canopy density in [0, 1]
    detail_level : int
        Tessellation level in [1, 5]
    seed : int, optional
        Seed for the archetype's random placement
    bark_color, leaf_color : tuple
        RGBA base colours in [0, 1]
    """
    tree_type: TreeType = TreeType.OAK
    height: float = 5.0
    branch_density: float = 0.5
    detail_level: int = 3
    seed: Optional[int] = None
    bark_color: Tuple[float, float, float, float] = (0.55, 0.27, 0.07, 1.0)
    leaf_color: Tuple[float, float, float, float] = (0.1, 0.6, 0.1, 1.0)

    def validate(self) -> None:
        """Raise ConfigError on out-of-range values."""
        errors = []
        if not self.height > 0:
            errors.append(f"height must be > 0, got {self.height}")
        if not 0.0 <= self.branch_density <= 1.0:
            errors.append(f"branch_density must be in [0, 1], got {self.branch_density}")
        if not 1 <= self.detail_level <= 5:
            errors.append(f"detail_level must be in [1, 5], got {self.detail_level}")
        if errors:
            raise ConfigError("Invalid tree config: " + "; ".join(errors))

    def materials(self) -> Dict[str, Tuple[float, float, float, float]]:
        """Material name -> RGBA base colour for the archetype meshes."""
        return {"Bark": self.bark_color, "Leaves": self.leaf_color}


def parse_tree_type(tag: str) -> TreeType:
    """
    Map an archetype tag to a TreeType (case-insensitive).

    Raises
    ------
    ConfigError
        If the tag is unknown
    """
    tree_type = TREE_TYPE_ALIASES.get(str(tag).strip().lower())
    if tree_type is None:
        raise ConfigError(f"Unknown tree type: {tag}")
    return tree_type


def tint_to_rgba(tint: int) -> Tuple[float, float, float, float]:
    """Convert a 0xRRGGBB integer to an RGBA tuple in [0, 1]."""
    tint = int(tint) & 0xFFFFFF
    return (
        ((tint >> 16) & 0xFF) / 255.0,
        ((tint >> 8) & 0xFF) / 255.0,
        (tint & 0xFF) / 255.0,
        1.0,
    )


def tree_materials(spec: TreeSpec) -> Dict[str, Tuple[float, float, float, float]]:
    """Material name -> RGBA base colour from the bark and leaf tints."""
    return {
        "Bark": tint_to_rgba(spec.bark.tint),
        "Leaves": tint_to_rgba(spec.leaves.tint),
    }


def _level_config(levels: BranchLevelsSpec, level: int) -> BranchConfig:
    radius = float(levels.value("radius", level, _DEFAULTS.start_radius))
    taper = float(levels.value("taper", level, 1.0))
    twist_deg = float(levels.value("twist", level, 0.0))

    return BranchConfig(
        length=float(levels.value("length", level, _DEFAULTS.length)),
        start_radius=radius,
        end_radius=radius * taper,
        length_segments=int(levels.value("sections", level, _DEFAULTS.length_segments)),
        radial_segments=int(levels.segments),
        angle=float(levels.value("angle", level, _DEFAULTS.angle)),
        twist=math.radians(twist_deg),
        gnarliness=float(levels.value("gnarliness", level, _DEFAULTS.gnarliness)),
        min_rotation=float(levels.value("min_rotation", level, _DEFAULTS.min_rotation)),
        max_rotation=float(levels.value("max_rotation", level, _DEFAULTS.max_rotation)),
        children=int(levels.value("children", level, 0)),
    )


def compile_branch_config(spec: TreeSpec) -> BranchConfig:
    """
    Build the BranchConfig chain described by a tree spec.

    Level L of the ``branch`` maps becomes the L-th config in the
    children_config chain. Missing entries fall back to the previous level,
    then to BranchConfig defaults. The last level never has a
    children_config; a non-zero ``children`` there is kept and reported.

    Raises
    ------
    ConfigError
        If the tree has no branch description or the result is invalid
    """
    if spec.trunk is not None:
        validate_branch_config(spec.trunk)
        return spec.trunk

    if spec.branch is None:
        raise ConfigError("Tree spec has no branch description")

    levels = spec.branch
    if levels.levels < 1:
        raise ConfigError(f"branch.levels must be >= 1, got {levels.levels}")

    configs = []
    for level in range(levels.levels):
        try:
            configs.append(_level_config(levels, level))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Level {level}: invalid branch value: {e}")

    for parent, child in zip(configs, configs[1:]):
        parent.children_config = child

    last = configs[-1]
    if last.children > 0:
        logger.warning(
            f"Level {levels.levels - 1} requests {last.children} children but is the last "
            f"level; it will have no descendants"
        )

    root = configs[0]
    validate_branch_config(root)
    return root


def compile_tree_config(spec: TreeSpec) -> TreeConfig:
    """
    Derive archetype metadata from a tree spec.

    - height: sum of per-level lengths
    - branch_density: sum of per-level children / (levels * 3), clamped to [0, 1]
    - detail_level: segments * mean(sections) / 10, clamped to [1, 5]

    Raises
    ------
    ConfigError
        On an unknown archetype tag or out-of-range derived values
    """
    tree_type = parse_tree_type(spec.type)
    chain = compile_branch_config(spec).levels()

    n_levels = len(chain)
    height = sum(c.length for c in chain)
    density = sum(c.children for c in chain) / (n_levels * 3.0)
    density = min(max(density, 0.0), 1.0)
    mean_sections = sum(c.length_segments for c in chain) / n_levels
    detail = int(chain[0].radial_segments * mean_sections / 10.0)
    detail = min(max(detail, 1), 5)

    materials = tree_materials(spec)
    config = TreeConfig(
        tree_type=tree_type,
        height=height,
        branch_density=density,
        detail_level=detail,
        seed=spec.seed,
        bark_color=materials["Bark"],
        leaf_color=materials["Leaves"],
    )
    config.validate()
    return config
