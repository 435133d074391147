"""
Tube mesh builder: sweeps a circular cross-section along a growth path.

Each growth frame contributes one ring of vertices in its local XY plane.
Consecutive rings are joined with quad strips, the base is closed with a flat
fan and the tip is closed either with a flat fan or, for tapered branches,
collapsed to a single apex vertex.
"""

from typing import Any, Dict, List, Optional
import numpy as np
import logging

from ..core.rng import RandomSource
from ..core.types import GrowthFrame, Mesh
from .growth import path_length

logger = logging.getLogger(__name__)

MIN_RADIAL_SEGMENTS = 3
TIP_EPSILON = 1e-4
NOISE_FRACTION = 0.3


def build_tube_mesh(
    frames: List[GrowthFrame],
    start_radius: float,
    end_radius: float,
    radial_segments: int,
    noise_level: float,
    seed: Optional[int] = None,
) -> Mesh:
    """
    Create a closed tube mesh following a list of growth frames.

    Parameters
    ----------
    frames : list of GrowthFrame
        Centerline frames from base to tip
    start_radius : float
        Radius at the first frame
    end_radius : float
        Radius at the last frame. Below TIP_EPSILON the tip collapses to a point.
    radial_segments : int
        Vertices per ring (raised to 3 if lower)
    noise_level : float
        Radial noise amplitude, clamped to [0, 1]. Each ring vertex's distance
        from the centerline is perturbed by up to +/- noise_level * 0.3.
    seed : int, optional
        Seed for the radial noise

    Returns
    -------
    Mesh
        Tube mesh; empty if fewer than 2 frames are given
    """
    if len(frames) < 2:
        return Mesh.empty()

    radial_segments = max(int(radial_segments), MIN_RADIAL_SEGMENTS)
    noise_level = min(max(noise_level, 0.0), 1.0)
    pointed_tip = end_radius < TIP_EPSILON

    rng = RandomSource(seed)

    n_frames = len(frames)
    n_rings = n_frames - 1 if pointed_tip else n_frames

    angles = 2 * np.pi * np.arange(radial_segments) / radial_segments
    circle = np.column_stack([np.cos(angles), np.sin(angles), np.zeros(radial_segments)])
    u_coords = np.arange(radial_segments) / radial_segments

    vertices = []
    normals = []
    uvs = []

    # Rings
    for i in range(n_rings):
        frame = frames[i]
        t = i / (n_frames - 1)
        radius = start_radius * (1.0 - t) + end_radius * t

        if noise_level > 0.0:
            jitter = np.array([
                rng.uniform(-1.0, 1.0) * noise_level * NOISE_FRACTION
                for _ in range(radial_segments)
            ])
        else:
            jitter = np.zeros(radial_segments)

        directions = frame.orientation.apply(circle)
        offsets = directions * (radius * (1.0 + jitter))[:, None]

        vertices.append(frame.position + offsets)
        normals.append(directions / np.linalg.norm(directions, axis=1)[:, None])
        uvs.append(np.column_stack([u_coords, np.full(radial_segments, t)]))

    vertices = np.vstack(vertices)
    normals = np.vstack(normals)
    uvs = np.vstack(uvs)

    # Side faces
    faces = []
    for i in range(n_rings - 1):
        for j in range(radial_segments):
            v0 = i * radial_segments + j
            v1 = i * radial_segments + (j + 1) % radial_segments
            v2 = (i + 1) * radial_segments + j
            v3 = (i + 1) * radial_segments + (j + 1) % radial_segments

            faces.append([v0, v1, v2])
            faces.append([v1, v3, v2])

    # Base cap
    base = frames[0]
    base_idx = len(vertices)
    vertices = np.vstack([vertices, base.position])
    normals = np.vstack([normals, -base.forward])
    uvs = np.vstack([uvs, [0.5, 0.0]])
    for j in range(radial_segments):
        faces.append([base_idx, (j + 1) % radial_segments, j])

    # Tip
    tip = frames[-1]
    tip_idx = len(vertices)
    vertices = np.vstack([vertices, tip.position])
    normals = np.vstack([normals, tip.forward])
    uvs = np.vstack([uvs, [0.5, 1.0]])

    last_ring = (n_rings - 1) * radial_segments
    for j in range(radial_segments):
        current = last_ring + j
        nxt = last_ring + (j + 1) % radial_segments
        if pointed_tip:
            faces.append([current, nxt, tip_idx])
        else:
            faces.append([tip_idx, current, nxt])

    return Mesh(
        vertices=vertices,
        triangles=np.array(faces, dtype=np.int64),
        normals=normals,
        uvs=uvs,
    )


def expected_vertex_count(frame_count: int, radial_segments: int, end_radius: float) -> int:
    """Vertex count build_tube_mesh produces for the given inputs."""
    if frame_count < 2:
        return 0
    radial_segments = max(int(radial_segments), MIN_RADIAL_SEGMENTS)
    rings = frame_count - 1 if end_radius < TIP_EPSILON else frame_count
    return rings * radial_segments + 2


def tube_report(mesh: Mesh, frames: Optional[List[GrowthFrame]] = None) -> Dict[str, Any]:
    """
    Summarize a tube mesh.

    Parameters
    ----------
    mesh : Mesh
        Tube built by build_tube_mesh
    frames : list of GrowthFrame, optional
        The frames the tube was swept along

    Returns
    -------
    dict
        vertex_count, triangle_count, path_length (0 without frames),
        is_watertight, is_winding_consistent and any validation errors
    """
    report = {
        "vertex_count": mesh.vertex_count,
        "triangle_count": mesh.triangle_count,
        "path_length": path_length(frames) if frames else 0.0,
        "is_watertight": False,
        "is_winding_consistent": False,
        "errors": mesh.validate(),
    }
    if mesh.is_empty or report["errors"]:
        return report

    tm = mesh.to_trimesh()
    report["is_watertight"] = bool(tm.is_watertight)
    report["is_winding_consistent"] = bool(tm.is_winding_consistent)
    return report
