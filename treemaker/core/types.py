"""
Geometry value types shared by the growth path, tube builder and sinks.

COORDINATE FRAME
----------------
Branches grow along local +Z. Ring vertices of a tube lie in the local XY
plane of each growth frame.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, TYPE_CHECKING
import numpy as np
from scipy.spatial.transform import Rotation

if TYPE_CHECKING:
    import trimesh

FORWARD_AXIS = np.array([0.0, 0.0, 1.0])


@dataclass
class GrowthFrame:
    """One sample along a branch centerline."""
    position: np.ndarray
    orientation: Rotation = field(default_factory=Rotation.identity)

    @property
    def forward(self) -> np.ndarray:
        """Unit growth direction of this frame."""
        return self.orientation.apply(FORWARD_AXIS)

    @property
    def quaternion(self) -> np.ndarray:
        """Orientation as (x, y, z, w)."""
        return self.orientation.as_quat()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "position": [float(v) for v in self.position],
            "rotation": [float(v) for v in self.quaternion],
        }


@dataclass
class Mesh:
    """
    Indexed triangle mesh with per-vertex normals and UVs.

    Invariants: ``len(normals) == len(uvs) == len(vertices)`` and every
    triangle index is ``< len(vertices)``.
    """
    vertices: np.ndarray
    triangles: np.ndarray
    normals: np.ndarray
    uvs: np.ndarray

    @classmethod
    def empty(cls) -> "Mesh":
        return cls(
            vertices=np.zeros((0, 3), dtype=np.float64),
            triangles=np.zeros((0, 3), dtype=np.int64),
            normals=np.zeros((0, 3), dtype=np.float64),
            uvs=np.zeros((0, 2), dtype=np.float64),
        )

    @property
    def is_empty(self) -> bool:
        return len(self.vertices) == 0

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        return len(self.triangles)

    def validate(self) -> List[str]:
        """
        Check the mesh invariants.

        Returns
        -------
        List[str]
            Validation error messages (empty if valid)
        """
        errors = []
        n = len(self.vertices)

        if self.vertices.ndim != 2 or (n and self.vertices.shape[1] != 3):
            errors.append(f"vertices must have shape (N, 3), got {self.vertices.shape}")
        if len(self.normals) != n:
            errors.append(f"normals count {len(self.normals)} != vertex count {n}")
        if len(self.uvs) != n:
            errors.append(f"uvs count {len(self.uvs)} != vertex count {n}")
        if len(self.triangles):
            if self.triangles.min() < 0 or self.triangles.max() >= n:
                errors.append(
                    f"triangle indices must be in [0, {n}), "
                    f"got [{self.triangles.min()}, {self.triangles.max()}]"
                )
        if len(self.normals) and not errors:
            lengths = np.linalg.norm(self.normals, axis=1)
            if not np.allclose(lengths, 1.0, atol=1e-6):
                errors.append("normals must be unit length")

        return errors

    def to_trimesh(self, material: Optional[Any] = None) -> "trimesh.Trimesh":
        """
        Convert to a ``trimesh.Trimesh`` without merging or reordering vertices.

        Parameters
        ----------
        material : trimesh.visual.material.Material, optional
            Material attached through the UV texture visuals
        """
        import trimesh

        mesh = trimesh.Trimesh(
            vertices=self.vertices,
            faces=self.triangles,
            vertex_normals=self.normals,
            process=False,
        )
        mesh.visual = trimesh.visual.TextureVisuals(uv=self.uvs, material=material)
        return mesh

    @classmethod
    def from_trimesh(cls, mesh: "trimesh.Trimesh", uvs: Optional[np.ndarray] = None) -> "Mesh":
        """
        Build a Mesh from a trimesh primitive.

        If ``uvs`` is not given, UVs are taken from the mesh visuals when present,
        otherwise generated by a cylindrical projection around the Z axis.
        """
        vertices = np.asarray(mesh.vertices, dtype=np.float64)

        if uvs is None:
            visual_uv = getattr(mesh.visual, "uv", None)
            if visual_uv is not None and len(visual_uv) == len(vertices):
                uvs = np.asarray(visual_uv, dtype=np.float64)
            else:
                uvs = cylindrical_uvs(vertices)

        normals = np.asarray(mesh.vertex_normals, dtype=np.float64).copy()
        lengths = np.linalg.norm(normals, axis=1) if len(normals) else np.zeros(0)
        degenerate = lengths < 1e-12
        normals[degenerate] = FORWARD_AXIS
        lengths[degenerate] = 1.0
        if len(normals):
            normals = normals / lengths[:, None]

        return cls(
            vertices=vertices.copy(),
            triangles=np.asarray(mesh.faces, dtype=np.int64).copy(),
            normals=normals,
            uvs=np.asarray(uvs, dtype=np.float64),
        )


def cylindrical_uvs(vertices: np.ndarray) -> np.ndarray:
    """Project vertices onto a cylinder around Z: u = azimuth, v = normalized height."""
    if len(vertices) == 0:
        return np.zeros((0, 2), dtype=np.float64)

    u = (np.arctan2(vertices[:, 1], vertices[:, 0]) / (2 * np.pi)) % 1.0
    z = vertices[:, 2]
    extent = z.max() - z.min()
    if extent > 1e-12:
        v = (z - z.min()) / extent
    else:
        v = np.zeros_like(z)
    return np.column_stack([u, v])
