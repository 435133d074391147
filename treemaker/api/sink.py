"""
Scene sinks that receive generated meshes and nodes.

The generator talks to a sink through three operations: ``create_mesh``,
``create_node`` and ``attach_child``. SceneGraphSink keeps everything in
memory as plain records; TrimeshSceneSink additionally turns the records
into a ``trimesh.Scene`` that can be exported to GLB.

COORDINATE FRAME
----------------
Records are Z-up (branches grow along +Z). TrimeshSceneSink can rotate the
root nodes to glTF's Y-up convention when building the scene.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union, TYPE_CHECKING
import numpy as np
import logging
from scipy.spatial.transform import Rotation

from ..core.types import Mesh

if TYPE_CHECKING:
    import trimesh

logger = logging.getLogger(__name__)

DEFAULT_MATERIALS = {
    "Bark": (0.55, 0.27, 0.07, 1.0),
    "Leaves": (0.1, 0.6, 0.1, 1.0),
}

# Z-up to Y-up: rotate -90 degrees about X
_Z_UP_TO_Y_UP = Rotation.from_euler("x", -90.0, degrees=True)


class SceneGraphError(RuntimeError):
    """Raised when the sink API is used with invalid handles or links."""
    pass


@dataclass
class MeshRecord:
    """A mesh registered with a sink."""
    handle: int
    name: str
    mesh: Mesh
    material: Optional[str] = None


@dataclass
class NodeRecord:
    """A scene node registered with a sink."""
    handle: int
    name: str
    mesh: Optional[int]
    position: np.ndarray
    rotation: np.ndarray  # quaternion (x, y, z, w)
    scale: np.ndarray
    children: List[int] = field(default_factory=list)
    parent: Optional[int] = None

    def matrix(self) -> np.ndarray:
        """Local 4x4 transform: translation * rotation * scale."""
        m = np.eye(4)
        m[:3, :3] = Rotation.from_quat(self.rotation).as_matrix() * self.scale[None, :]
        m[:3, 3] = self.position
        return m

    def to_dict(self) -> Dict[str, Any]:
        return {
            "handle": self.handle,
            "name": self.name,
            "mesh": self.mesh,
            "position": self.position.tolist(),
            "rotation": self.rotation.tolist(),
            "scale": self.scale.tolist(),
            "children": list(self.children),
            "parent": self.parent,
        }


class SceneSink(ABC):
    """Interface the tree generators write into."""

    @abstractmethod
    def create_mesh(
        self,
        name: str,
        vertices: np.ndarray,
        triangles: np.ndarray,
        normals: np.ndarray,
        uvs: np.ndarray,
        material: Optional[str] = None,
    ) -> int:
        """Register a mesh and return its handle."""
        pass

    @abstractmethod
    def create_node(
        self,
        name: str,
        mesh_handle: Optional[int],
        position: Sequence[float] = (0.0, 0.0, 0.0),
        rotation: Sequence[float] = (0.0, 0.0, 0.0, 1.0),
        scale: Sequence[float] = (1.0, 1.0, 1.0),
    ) -> int:
        """Create a node (optionally referencing a mesh) and return its handle."""
        pass

    @abstractmethod
    def attach_child(self, parent_handle: int, child_handle: int) -> None:
        """Make ``child_handle`` a child of ``parent_handle``."""
        pass


class SceneGraphSink(SceneSink):
    """
    In-memory sink recording meshes and nodes.

    Handles are sequential integers in creation order, so a deterministic
    generator yields deterministic handles.
    """

    def __init__(self):
        self.meshes: List[MeshRecord] = []
        self.nodes: List[NodeRecord] = []

    def create_mesh(
        self,
        name: str,
        vertices: np.ndarray,
        triangles: np.ndarray,
        normals: np.ndarray,
        uvs: np.ndarray,
        material: Optional[str] = None,
    ) -> int:
        mesh = Mesh(
            vertices=np.asarray(vertices, dtype=np.float64).reshape(-1, 3),
            triangles=np.asarray(triangles, dtype=np.int64).reshape(-1, 3),
            normals=np.asarray(normals, dtype=np.float64).reshape(-1, 3),
            uvs=np.asarray(uvs, dtype=np.float64).reshape(-1, 2),
        )
        errors = mesh.validate()
        if errors:
            raise SceneGraphError(f"Invalid mesh '{name}': " + "; ".join(errors))

        handle = len(self.meshes)
        self.meshes.append(MeshRecord(handle=handle, name=name, mesh=mesh, material=material))
        return handle

    def create_node(
        self,
        name: str,
        mesh_handle: Optional[int],
        position: Sequence[float] = (0.0, 0.0, 0.0),
        rotation: Sequence[float] = (0.0, 0.0, 0.0, 1.0),
        scale: Sequence[float] = (1.0, 1.0, 1.0),
    ) -> int:
        if mesh_handle is not None:
            self.mesh(mesh_handle)

        handle = len(self.nodes)
        self.nodes.append(NodeRecord(
            handle=handle,
            name=name,
            mesh=mesh_handle,
            position=np.asarray(position, dtype=np.float64).reshape(3),
            rotation=np.asarray(rotation, dtype=np.float64).reshape(4),
            scale=np.asarray(scale, dtype=np.float64).reshape(3),
        ))
        return handle

    def attach_child(self, parent_handle: int, child_handle: int) -> None:
        parent = self.node(parent_handle)
        child = self.node(child_handle)

        if parent_handle == child_handle:
            raise SceneGraphError(f"Node {child_handle} cannot be its own child")
        if child.parent is not None:
            raise SceneGraphError(
                f"Node {child_handle} ('{child.name}') already has parent {child.parent}"
            )

        child.parent = parent_handle
        parent.children.append(child_handle)

    def node(self, handle: int) -> NodeRecord:
        if not isinstance(handle, (int, np.integer)) or not 0 <= handle < len(self.nodes):
            raise SceneGraphError(f"Unknown node handle: {handle}")
        return self.nodes[handle]

    def mesh(self, handle: int) -> MeshRecord:
        if not isinstance(handle, (int, np.integer)) or not 0 <= handle < len(self.meshes):
            raise SceneGraphError(f"Unknown mesh handle: {handle}")
        return self.meshes[handle]

    def roots(self) -> List[int]:
        return [n.handle for n in self.nodes if n.parent is None]

    def walk(self, handle: int) -> Iterator[NodeRecord]:
        """Pre-order traversal starting at ``handle``."""
        stack = [handle]
        while stack:
            node = self.node(stack.pop())
            yield node
            stack.extend(reversed(node.children))

    def node_by_name(self, name: str) -> NodeRecord:
        for node in self.nodes:
            if node.name == name:
                return node
        raise KeyError(name)


class TrimeshSceneSink(SceneGraphSink):
    """
    Sink that builds a ``trimesh.Scene`` for export.

    Parameters
    ----------
    materials : dict, optional
        Material name -> RGBA base colour (floats in [0, 1]). Defaults to
        DEFAULT_MATERIALS.
    up_axis : str
        "z" keeps the generator's frame, "y" rotates root nodes so +Z maps to +Y.
    """

    def __init__(
        self,
        materials: Optional[Dict[str, Tuple[float, float, float, float]]] = None,
        up_axis: str = "y",
    ):
        super().__init__()
        if up_axis not in ("y", "z"):
            raise ValueError(f"up_axis must be 'y' or 'z', got {up_axis!r}")
        self.materials = dict(DEFAULT_MATERIALS)
        if materials:
            self.materials.update(materials)
        self.up_axis = up_axis

    def _material(self, name: Optional[str]):
        import trimesh

        if name is None:
            return None
        color = self.materials.get(name, (0.8, 0.8, 0.8, 1.0))
        return trimesh.visual.material.PBRMaterial(
            name=name,
            baseColorFactor=[float(c) for c in color],
            metallicFactor=0.0,
            roughnessFactor=1.0,
        )

    def to_scene(self) -> "trimesh.Scene":
        """Build a trimesh scene mirroring the recorded node hierarchy."""
        import trimesh

        scene = trimesh.Scene()
        geometries = {}
        for record in self.meshes:
            geometries[record.handle] = record.mesh.to_trimesh(self._material(record.material))

        # Pre-order from each root so parents are added before their children
        for root in self.roots():
            for node in self.walk(root):
                matrix = node.matrix()
                if node.parent is None and self.up_axis == "y":
                    up = np.eye(4)
                    up[:3, :3] = _Z_UP_TO_Y_UP.as_matrix()
                    matrix = up @ matrix

                parent_name = self.nodes[node.parent].name if node.parent is not None else None

                if node.mesh is not None:
                    scene.add_geometry(
                        geometries[node.mesh],
                        node_name=node.name,
                        geom_name=self.meshes[node.mesh].name,
                        parent_node_name=parent_name,
                        transform=matrix,
                    )
                else:
                    scene.graph.update(
                        frame_from=parent_name or scene.graph.base_frame,
                        frame_to=node.name,
                        matrix=matrix,
                    )

        return scene

    def export(self, path: Union[str, Path], file_type: str = "glb") -> Path:
        """
        Export the scene. Errors from the exporter or filesystem propagate.
        """
        path = Path(path)
        scene = self.to_scene()
        scene.export(file_obj=str(path), file_type=file_type)
        logger.info(f"Exported scene with {len(self.nodes)} nodes to {path}")
        return path


__all__ = [
    "SceneSink",
    "SceneGraphSink",
    "TrimeshSceneSink",
    "SceneGraphError",
    "MeshRecord",
    "NodeRecord",
    "DEFAULT_MATERIALS",
]
