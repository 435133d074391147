"""
Branch configuration for recursive tree generation.

A tree is described by a chain of BranchConfig records: the trunk config,
its ``children_config`` template (shared by every child of the trunk), that
template's own ``children_config``, and so on. The chain is acyclic and
read-only during generation.

UNIT CONVENTIONS
----------------
Lengths and radii are in scene units. ``angle``, ``min_rotation`` and
``max_rotation`` are in DEGREES. ``twist`` and ``gnarliness`` are per-segment
curvature amplitudes in RADIANS.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, List, Optional

MAX_DEPTH = 64


class ConfigError(ValueError):
    """Raised when a tree configuration is invalid."""
    pass


@dataclass
class BranchConfig:
    """
    Configuration for one level of the branch hierarchy.

    Parameters
    ----------
    length : float
        Centerline length of the branch
    start_radius : float
        Radius at the base of the branch
    end_radius : float
        Radius at the tip (below TIP_EPSILON gives a pointed tip)
    length_segments : int
        Number of path segments (the path has length_segments + 1 frames)
    radial_segments : int
        Ring resolution around the circumference (raised to 3 if lower)
    angle : float
        Nominal branch-to-parent angle in degrees (ANGLE attachment mode)
    twist : float
        Roll amplitude applied while advancing the growth path
    gnarliness : float
        Curvature strength of the path and radial noise of the tube, clamped to [0, 1]
    min_rotation, max_rotation : float
        Bounds in degrees for the random rotation of the branch node. A range
        narrower than 0.1 degrees (inverted included) is widened when sampled.
    children : int
        Number of child branches spawned from this branch
    children_config : BranchConfig, optional
        Template applied to every child branch
    """
    length: float = 1.0
    start_radius: float = 0.1
    end_radius: float = 0.05
    length_segments: int = 8
    radial_segments: int = 8
    angle: float = 45.0
    twist: float = 0.0
    gnarliness: float = 0.1
    min_rotation: float = 20.0
    max_rotation: float = 40.0
    children: int = 0
    children_config: Optional["BranchConfig"] = None

    @property
    def segment_length(self) -> float:
        return self.length / max(self.length_segments, 1)

    @property
    def clamped_gnarliness(self) -> float:
        return min(max(self.gnarliness, 0.0), 1.0)

    def levels(self) -> List["BranchConfig"]:
        """Configs from this node down the children_config chain."""
        chain = []
        seen = set()
        node = self
        while node is not None and id(node) not in seen and len(chain) <= MAX_DEPTH:
            seen.add(id(node))
            chain.append(node)
            node = node.children_config
        return chain

    def depth(self) -> int:
        return len(self.levels())

    def validate(self) -> List[str]:
        """
        Validate this config and its children_config chain.

        Returns
        -------
        List[str]
            Validation error messages (empty if valid)
        """
        errors = []
        seen = set()
        node = self
        level = 0

        while node is not None:
            if id(node) in seen:
                errors.append(f"Level {level}: children_config chain is cyclic")
                break
            if level >= MAX_DEPTH:
                errors.append(f"children_config chain deeper than {MAX_DEPTH} levels")
                break
            seen.add(id(node))

            if not node.length > 0:
                errors.append(f"Level {level}: length must be > 0, got {node.length}")
            if node.start_radius < 0:
                errors.append(f"Level {level}: start_radius must be >= 0, got {node.start_radius}")
            if node.end_radius < 0:
                errors.append(f"Level {level}: end_radius must be >= 0, got {node.end_radius}")
            if node.length_segments < 1:
                errors.append(
                    f"Level {level}: length_segments must be >= 1, got {node.length_segments}"
                )
            if node.children < 0:
                errors.append(f"Level {level}: children must be >= 0, got {node.children}")

            node = node.children_config
            level += 1

        return errors

    def structural_warnings(self) -> List[str]:
        """Non-fatal anomalies that change the shape of the output."""
        warnings = []
        for level, node in enumerate(self.levels()):
            if node.children > 0 and node.children_config is None:
                warnings.append(
                    f"Level {level}: children={node.children} but no children_config; "
                    f"no descendants will be generated"
                )
        return warnings

    def to_dict(self) -> Dict[str, Any]:
        d = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "children_config"}
        d["children_config"] = (
            self.children_config.to_dict() if self.children_config is not None else None
        )
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "BranchConfig":
        """Create a BranchConfig from a (nested) dictionary. Unknown keys are ignored."""
        if not isinstance(d, dict):
            raise ConfigError(f"Branch config must be a mapping, got {type(d).__name__}")

        kwargs = {}
        for f in fields(cls):
            if f.name == "children_config" or f.name not in d:
                continue
            value = d[f.name]
            try:
                if f.name in ("length_segments", "radial_segments", "children"):
                    kwargs[f.name] = int(value)
                else:
                    kwargs[f.name] = float(value)
            except (TypeError, ValueError):
                raise ConfigError(f"Invalid value for {f.name}: {value!r}")

        child = d.get("children_config")
        if child is not None:
            kwargs["children_config"] = cls.from_dict(child)

        return cls(**kwargs)


def validate_branch_config(config: BranchConfig) -> None:
    """
    Raise ConfigError if the config tree is invalid.

    Raises
    ------
    ConfigError
        With all validation messages joined
    """
    if not isinstance(config, BranchConfig):
        raise ConfigError(f"Expected BranchConfig, got {type(config).__name__}")
    errors = config.validate()
    if errors:
        raise ConfigError("Invalid branch config: " + "; ".join(errors))
