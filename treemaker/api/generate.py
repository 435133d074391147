"""
Recursive branch hierarchy assembly.

Walks a BranchConfig chain depth-first, building one growth path and tube
mesh per branch, registering them with a scene sink and attaching each
branch node to its parent at a point sampled along the parent's path.

Each branch owns a RandomSource seeded from a value its parent drew before
any child was built, so sibling subtrees are independent and the whole tree
is reproducible from a single seed.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union
import numpy as np
import logging
from scipy.spatial.transform import Rotation

from ..core.config import BranchConfig, validate_branch_config
from ..core.rng import RandomSource
from ..core.types import GrowthFrame
from ..ops.growth import generate_growth_path
from ..ops.tube import build_tube_mesh, tube_report
from .sink import SceneSink, TrimeshSceneSink

logger = logging.getLogger(__name__)

MIN_ROTATION_RANGE = 0.1  # degrees
TRUNK_NAME = "Trunk"


class AttachmentMode(str, Enum):
    """How child branches are placed on their parent."""
    PATH = "path"
    ANGLE = "angle"


@dataclass
class Attachment:
    """Where a branch starts in its parent's local frame."""
    position: np.ndarray
    rotation: Optional[np.ndarray] = None  # quaternion (x, y, z, w); sampled if None


@dataclass
class GenerationReport:
    """Report from a tree generation run."""
    success: bool
    seed: Optional[int] = None
    root: Optional[int] = None
    node_count: int = 0
    mesh_count: int = 0
    vertex_count: int = 0
    triangle_count: int = 0
    total_path_length: float = 0.0
    open_branch_count: int = 0
    max_depth: int = 0
    nodes_per_level: Dict[int, int] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "seed": self.seed,
            "root": self.root,
            "node_count": self.node_count,
            "mesh_count": self.mesh_count,
            "vertex_count": self.vertex_count,
            "triangle_count": self.triangle_count,
            "total_path_length": self.total_path_length,
            "open_branch_count": self.open_branch_count,
            "max_depth": self.max_depth,
            "nodes_per_level": {str(k): v for k, v in self.nodes_per_level.items()},
            "warnings": self.warnings,
            "metadata": self.metadata,
        }


def sample_rotation(rng: RandomSource, min_rotation: float, max_rotation: float) -> np.ndarray:
    """
    Sample a random node rotation.

    Each axis gets an angle in [min_rotation, max_rotation] degrees with an
    independent random sign. A range narrower than 0.1 degrees is widened to
    [min_rotation, min_rotation + 0.1].

    Returns
    -------
    np.ndarray
        Quaternion (x, y, z, w)
    """
    if max_rotation - min_rotation < MIN_ROTATION_RANGE:
        max_rotation = min_rotation + MIN_ROTATION_RANGE

    angles = []
    for _ in range(3):
        angle = rng.uniform(min_rotation, max_rotation)
        if rng.boolean():
            angle = -angle
        angles.append(angle)

    return Rotation.from_euler("xyz", angles, degrees=True).as_quat()


def branch_name(path: Tuple[int, ...]) -> str:
    """Deterministic node name from the child indices leading to a branch."""
    if not path:
        return TRUNK_NAME
    return f"Branch_L{len(path)}_" + "_".join(str(i) for i in path)


class TreeAssembler:
    """
    Builds a branch hierarchy into a scene sink.

    Parameters
    ----------
    sink : SceneSink
        Receives meshes, nodes and parent/child links
    seed : int, optional
        Root seed. Drawn from entropy if None (the effective seed is reported).
    attachment_mode : AttachmentMode or str
        "path" attaches children at sampled growth frames of the parent,
        "angle" places them on the parent's straight axis using ``angle``.
    material : str, optional
        Material name passed to ``create_mesh`` for every branch
    """

    def __init__(
        self,
        sink: SceneSink,
        seed: Optional[int] = None,
        attachment_mode: Union[AttachmentMode, str] = AttachmentMode.PATH,
        material: Optional[str] = "Bark",
    ):
        self.sink = sink
        self.rng = RandomSource(seed)
        self.attachment_mode = AttachmentMode(attachment_mode)
        self.material = material
        self.report = GenerationReport(success=False, seed=self.rng.seed)

    def build(self, root_config: BranchConfig) -> int:
        """
        Generate the whole tree and return the trunk node handle.

        Raises
        ------
        ConfigError
            If the config tree is invalid (before any sink call)
        """
        validate_branch_config(root_config)

        for warning in root_config.structural_warnings():
            logger.warning(warning)
            self.report.warnings.append(warning)

        logger.info(
            f"Generating tree: depth={root_config.depth()}, seed={self.rng.seed}, "
            f"attachment_mode={self.attachment_mode.value}"
        )

        root = self._build_branch(
            config=root_config,
            rng=self.rng,
            attachment=Attachment(position=np.zeros(3)),
            parent=None,
            path=(),
        )

        self.report.success = True
        self.report.root = root
        self.report.metadata["attachment_mode"] = self.attachment_mode.value
        logger.info(
            f"Generated tree: {self.report.node_count} nodes, "
            f"{self.report.vertex_count} vertices, {self.report.triangle_count} triangles"
        )
        return root

    def _build_branch(
        self,
        config: BranchConfig,
        rng: RandomSource,
        attachment: Attachment,
        parent: Optional[int],
        path: Tuple[int, ...],
    ) -> int:
        depth = len(path)
        name = branch_name(path)

        path_seed = rng.next_seed()
        noise_seed = rng.next_seed()

        frames = generate_growth_path(
            segment_count=config.length_segments + 1,
            segment_length=config.segment_length,
            curvature_strength=config.clamped_gnarliness,
            curvature_variation=config.twist,
            seed=path_seed,
        )
        mesh = build_tube_mesh(
            frames,
            start_radius=config.start_radius,
            end_radius=config.end_radius,
            radial_segments=config.radial_segments,
            noise_level=config.clamped_gnarliness,
            seed=noise_seed,
        )

        mesh_handle = self.sink.create_mesh(
            f"{name}_mesh", mesh.vertices, mesh.triangles, mesh.normals, mesh.uvs, self.material
        )

        rotation = attachment.rotation
        if rotation is None:
            rotation = sample_rotation(rng, config.min_rotation, config.max_rotation)

        node = self.sink.create_node(name, mesh_handle, attachment.position, rotation, (1.0, 1.0, 1.0))
        if parent is not None:
            self.sink.attach_child(parent, node)

        self._record(name, depth, mesh, frames)
        logger.debug(
            f"Branch {name}: depth={depth}, frames={len(frames)}, "
            f"vertices={mesh.vertex_count}, children={config.children}"
        )

        if config.children <= 0 or config.children_config is None:
            return node

        # Draw every child's attachment and seed before recursing
        plans = []
        for i in range(config.children):
            child_attachment = self._attachment(config, frames, rng, i)
            plans.append((child_attachment, rng.next_seed()))

        for i, (child_attachment, child_seed) in enumerate(plans):
            self._build_branch(
                config=config.children_config,
                rng=RandomSource(child_seed),
                attachment=child_attachment,
                parent=node,
                path=path + (i,),
            )

        return node

    def _attachment(
        self,
        config: BranchConfig,
        frames: List[GrowthFrame],
        rng: RandomSource,
        index: int,
    ) -> Attachment:
        if self.attachment_mode == AttachmentMode.ANGLE:
            height = rng.uniform(0.0, config.length)
            yaw = 360.0 * index / config.children
            rotation = Rotation.from_euler("zx", [yaw, config.angle], degrees=True).as_quat()
            return Attachment(position=np.array([0.0, 0.0, height]), rotation=rotation)

        n = len(frames)
        if n >= 3:
            frame_index = rng.integer(1, n - 1)
        else:
            frame_index = rng.integer(0, n)
        return Attachment(position=frames[frame_index].position.copy())

    def _record(self, name: str, depth: int, mesh, frames: List[GrowthFrame]) -> None:
        stats = tube_report(mesh, frames)
        report = self.report
        report.node_count += 1
        report.mesh_count += 1
        report.vertex_count += stats["vertex_count"]
        report.triangle_count += stats["triangle_count"]
        report.total_path_length += stats["path_length"]
        if not stats["is_watertight"]:
            report.open_branch_count += 1
            logger.warning(f"Branch {name}: mesh is not watertight")
        report.max_depth = max(report.max_depth, depth)
        report.nodes_per_level[depth] = report.nodes_per_level.get(depth, 0) + 1


def generate(
    root_config: BranchConfig,
    seed: Optional[int],
    sink: SceneSink,
    attachment_mode: Union[AttachmentMode, str] = AttachmentMode.PATH,
    material: Optional[str] = "Bark",
) -> int:
    """
    Generate a tree into ``sink`` and return the root (trunk) node handle.

    Parameters
    ----------
    root_config : BranchConfig
        Trunk configuration with its children_config chain
    seed : int, optional
        Root seed; entropy if None
    sink : SceneSink
        Destination for meshes and nodes
    attachment_mode : AttachmentMode or str
        Child placement strategy
    material : str, optional
        Material name for branch meshes
    """
    assembler = TreeAssembler(sink, seed=seed, attachment_mode=attachment_mode, material=material)
    return assembler.build(root_config)


def generate_tree(
    config: BranchConfig,
    seed: Optional[int] = None,
    output_path: Optional[Union[str, Path]] = None,
    attachment_mode: Union[AttachmentMode, str] = AttachmentMode.PATH,
    materials: Optional[Dict[str, Tuple[float, float, float, float]]] = None,
    up_axis: str = "y",
) -> Tuple[Path, GenerationReport]:
    """
    Generate a tree and export it as GLB.

    Parameters
    ----------
    config : BranchConfig
        Trunk configuration
    seed : int, optional
        Root seed
    output_path : str or Path, optional
        Output file (default: tree.glb)
    attachment_mode : AttachmentMode or str
        Child placement strategy
    materials : dict, optional
        Material name -> RGBA overrides for the sink
    up_axis : str
        "y" (glTF convention) or "z"

    Returns
    -------
    path : Path
        Written file
    report : GenerationReport
        Generation statistics
    """
    from .export import export_scene
    from ..analysis.hierarchy import validate_hierarchy

    sink = TrimeshSceneSink(materials=materials, up_axis=up_axis)
    assembler = TreeAssembler(sink, seed=seed, attachment_mode=attachment_mode)
    assembler.build(config)

    hierarchy_errors = validate_hierarchy(sink)
    if hierarchy_errors:
        assembler.report.success = False
        assembler.report.metadata["hierarchy_errors"] = hierarchy_errors

    output = Path(output_path) if output_path is not None else Path("tree.glb")
    path = export_scene(sink, output)
    assembler.report.metadata["output_path"] = str(path)
    return path, assembler.report


__all__ = [
    "generate",
    "generate_tree",
    "TreeAssembler",
    "GenerationReport",
    "AttachmentMode",
    "Attachment",
    "sample_rotation",
    "branch_name",
]
