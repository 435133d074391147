"""
Primitive-based archetype trees.

These generators bypass the branch hierarchy and assemble a tree from a few
trimesh primitives: a trunk plus sphere, cone or frond canopies. They share
the sink interface with the recursive generator, so the same export path
applies.

All archetypes grow along +Z with the trunk base at the origin.
"""

from typing import Callable, Dict, Optional
import numpy as np
import logging
from scipy.spatial.transform import Rotation

from ..core.rng import RandomSource
from ..core.types import Mesh
from ..specs.compile import TreeConfig, TreeType
from .growth import generate_growth_path
from .tube import build_tube_mesh

logger = logging.getLogger(__name__)

BARK_MATERIAL = "Bark"
LEAF_MATERIAL = "Leaves"
_IDENTITY = (0.0, 0.0, 0.0, 1.0)


def _sections(detail_level: int) -> int:
    return 6 + 2 * int(detail_level)


def _subdivisions(detail_level: int) -> int:
    return 1 + int(detail_level) // 2


def _add_mesh(sink, name: str, mesh: Mesh, material: str) -> int:
    return sink.create_mesh(name, mesh.vertices, mesh.triangles, mesh.normals, mesh.uvs, material)


def _add_primitive(sink, name: str, primitive, material: str) -> int:
    return _add_mesh(sink, name, Mesh.from_trimesh(primitive), material)


def _trunk(sink, config: TreeConfig, height: float, radius: float) -> int:
    import trimesh

    cylinder = trimesh.creation.cylinder(
        radius=radius,
        height=height,
        sections=_sections(config.detail_level),
    )
    cylinder.apply_translation([0.0, 0.0, height / 2.0])
    mesh_handle = _add_primitive(sink, "Trunk_mesh", cylinder, BARK_MATERIAL)
    return sink.create_node("Trunk", mesh_handle, (0.0, 0.0, 0.0), _IDENTITY, (1.0, 1.0, 1.0))


def _child(sink, parent: int, name: str, mesh_handle: int, position, rotation=_IDENTITY, scale=(1.0, 1.0, 1.0)) -> int:
    node = sink.create_node(name, mesh_handle, position, rotation, scale)
    sink.attach_child(parent, node)
    return node


def generate_oak_tree(config: TreeConfig, sink) -> int:
    """Trunk with a main sphere canopy and density-driven side clusters."""
    import trimesh

    config.validate()
    rng = RandomSource(config.seed)
    H = config.height

    trunk_height = 0.45 * H
    trunk = _trunk(sink, config, trunk_height, 0.05 * H)

    canopy_radius = 0.3 * H
    canopy_center = np.array([0.0, 0.0, trunk_height + 0.2 * H])
    sphere = trimesh.creation.icosphere(
        subdivisions=_subdivisions(config.detail_level), radius=canopy_radius
    )
    canopy_mesh = _add_primitive(sink, "Canopy_mesh", sphere, LEAF_MATERIAL)
    _child(sink, trunk, "Canopy", canopy_mesh, canopy_center)

    n_clusters = 1 + int(round(config.branch_density * 5))
    for i in range(n_clusters):
        radius = rng.uniform(0.15, 0.22) * H
        azimuth = rng.uniform(0.0, 2 * np.pi)
        offset = np.array([
            np.cos(azimuth) * canopy_radius * 0.8,
            np.sin(azimuth) * canopy_radius * 0.8,
            rng.uniform(-0.1, 0.1) * H,
        ])
        cluster = trimesh.creation.icosphere(
            subdivisions=_subdivisions(config.detail_level), radius=radius
        )
        cluster_mesh = _add_primitive(sink, f"Cluster_{i}_mesh", cluster, LEAF_MATERIAL)
        _child(sink, trunk, f"Cluster_{i}", cluster_mesh, canopy_center + offset)

    logger.info(f"Generated oak archetype: height={H}, clusters={n_clusters}")
    return trunk


def generate_pine_tree(config: TreeConfig, sink) -> int:
    """Tall trunk with stacked cone tiers narrowing towards the top."""
    import trimesh

    config.validate()
    rng = RandomSource(config.seed)
    H = config.height

    trunk = _trunk(sink, config, 0.9 * H, 0.04 * H)

    tiers = config.detail_level + 2
    base_radius = 0.3 * H * (0.5 + 0.5 * config.branch_density)
    tier_height = 0.3 * H
    z0 = 0.25 * H
    z_step = (0.9 * H - z0) / tiers

    for i in range(tiers):
        shrink = 1.0 - i / (tiers + 1)
        cone = trimesh.creation.cone(
            radius=base_radius * shrink,
            height=tier_height * (0.6 + 0.4 * shrink),
            sections=_sections(config.detail_level),
        )
        spin = Rotation.from_euler("z", rng.uniform(0.0, 360.0), degrees=True).as_quat()
        tier_mesh = _add_primitive(sink, f"Tier_{i}_mesh", cone, LEAF_MATERIAL)
        _child(sink, trunk, f"Tier_{i}", tier_mesh, (0.0, 0.0, z0 + i * z_step), spin)

    logger.info(f"Generated pine archetype: height={H}, tiers={tiers}")
    return trunk


def generate_willow_tree(config: TreeConfig, sink) -> int:
    """Trunk with a flattened canopy and hanging capsule strands around its rim."""
    import trimesh

    config.validate()
    rng = RandomSource(config.seed)
    H = config.height

    trunk_height = 0.5 * H
    trunk = _trunk(sink, config, trunk_height, 0.05 * H)

    canopy_radius = 0.3 * H
    canopy_center = np.array([0.0, 0.0, trunk_height + 0.15 * H])
    sphere = trimesh.creation.icosphere(
        subdivisions=_subdivisions(config.detail_level), radius=canopy_radius
    )
    canopy_mesh = _add_primitive(sink, "Canopy_mesh", sphere, LEAF_MATERIAL)
    _child(sink, trunk, "Canopy", canopy_mesh, canopy_center, scale=(1.0, 1.0, 0.7))

    n_strands = 4 + int(round(config.branch_density * 12))
    strand_length = 0.35 * H
    for i in range(n_strands):
        azimuth = 2 * np.pi * i / n_strands + rng.uniform(-0.1, 0.1)
        length = strand_length * rng.uniform(0.7, 1.0)
        strand = trimesh.creation.capsule(
            height=length,
            radius=0.01 * H,
            count=[_sections(config.detail_level), _sections(config.detail_level)],
        )
        # Hang from the rim: top of the capsule at the attachment point
        strand.apply_translation([0.0, 0.0, -strand.bounds[1][2]])
        position = canopy_center + np.array([
            np.cos(azimuth) * canopy_radius * 0.9,
            np.sin(azimuth) * canopy_radius * 0.9,
            0.0,
        ])
        strand_mesh = _add_primitive(sink, f"Strand_{i}_mesh", strand, LEAF_MATERIAL)
        _child(sink, trunk, f"Strand_{i}", strand_mesh, position)

    logger.info(f"Generated willow archetype: height={H}, strands={n_strands}")
    return trunk


def generate_palm_tree(config: TreeConfig, sink) -> int:
    """Curved tube trunk with a crown of fronds at its top."""
    import trimesh

    config.validate()
    rng = RandomSource(config.seed)
    H = config.height

    segments = 4 * config.detail_level
    frames = generate_growth_path(
        segment_count=segments + 1,
        segment_length=0.9 * H / segments,
        curvature_strength=0.04,
        curvature_variation=0.05,
        seed=rng.next_seed(),
    )
    trunk_mesh = build_tube_mesh(
        frames,
        start_radius=0.04 * H,
        end_radius=0.025 * H,
        radial_segments=_sections(config.detail_level),
        noise_level=0.05,
        seed=rng.next_seed(),
    )
    mesh_handle = _add_mesh(sink, "Trunk_mesh", trunk_mesh, BARK_MATERIAL)
    trunk = sink.create_node("Trunk", mesh_handle, (0.0, 0.0, 0.0), _IDENTITY, (1.0, 1.0, 1.0))

    top = frames[-1].position
    n_fronds = 5 + int(round(config.branch_density * 5))
    for i in range(n_fronds):
        frond = trimesh.creation.cone(
            radius=0.05 * H,
            height=0.35 * H,
            sections=_sections(config.detail_level),
        )
        yaw = 360.0 * i / n_fronds + rng.uniform(-10.0, 10.0)
        droop = rng.uniform(100.0, 120.0)
        rotation = Rotation.from_euler("zx", [yaw, droop], degrees=True).as_quat()
        frond_mesh = _add_primitive(sink, f"Frond_{i}_mesh", frond, LEAF_MATERIAL)
        _child(sink, trunk, f"Frond_{i}", frond_mesh, top, rotation, scale=(1.0, 0.25, 1.0))

    logger.info(f"Generated palm archetype: height={H}, fronds={n_fronds}")
    return trunk


ARCHETYPE_GENERATORS: Dict[TreeType, Callable] = {
    TreeType.OAK: generate_oak_tree,
    TreeType.PINE: generate_pine_tree,
    TreeType.WILLOW: generate_willow_tree,
    TreeType.PALM: generate_palm_tree,
}


def generate_archetype(config: TreeConfig, sink) -> int:
    """Dispatch to the generator for ``config.tree_type``; returns the trunk handle."""
    return ARCHETYPE_GENERATORS[TreeType(config.tree_type)](config, sink)
