"""
Hand-off of generated geometry to external renderers.

Nothing here shades or lights anything: these helpers only repackage the
buffers of a GenerationResult for pyvista or a matplotlib preview, and work
out how a camera should frame them.
"""
import math
import numpy as np
import matplotlib.pyplot as plt
import pyvista as pv
from mpl_toolkits.mplot3d.art3d import Poly3DCollection
from typing import NamedTuple

from l_systems_mesh.bounds import Bounds
from l_systems_mesh.config import InstanceShape
from l_systems_mesh.frames import FORWARD


class CameraFit(NamedTuple):
    scale: float
    center: np.ndarray
    size: np.ndarray
    distance: float
    far: float


def fit_camera(bounds: Bounds, fov_deg: float = 60.0, target_height: float = 60.0,
               auto_scale: bool = True) -> CameraFit:
    """
    Frame a structure: optional auto-scale to `target_height`, then the camera
    distance at which the largest dimension fits the field of view.
    """
    size = bounds.size.copy()
    center = bounds.center.copy()
    scale = 1.0
    if auto_scale and size[1] > 0:
        scale = bounds.auto_scale_factor(target_height)
        size *= scale
        center *= scale

    max_dim = float(size.max())
    distance = abs(max_dim / 2 / math.tan(math.radians(fov_deg) / 2)) * 1.5
    return CameraFit(scale, center, size, distance, max(2000.0, distance * 5))


def mesh_to_polydata(result) -> pv.PolyData:
    """Triangle mesh of a continuous-mode result, with vertex colours as `RGB`."""
    if result.mesh is None:
        raise ValueError("Result has no continuous mesh, it was generated in discrete mode")

    mesh = result.mesh
    faces = np.hstack([np.full((len(mesh.indices), 1), 3, dtype=np.int64), mesh.indices.astype(np.int64)])
    poly = pv.PolyData(mesh.positions, faces.ravel())
    if mesh.colors is not None:
        poly.point_data["RGB"] = mesh.colors
    return poly


def segment_endpoints(result) -> np.ndarray:
    """(N, 2, 3) start/end points recovered from discrete instance transforms."""
    if not result.segments:
        return np.zeros((0, 2, 3))
    ends = []
    for segment in result.segments:
        t = segment.transform
        half = t.rotation.apply(FORWARD) * t.scale[1] / 2
        ends.append((t.position - half, t.position + half))
    return np.array(ends)


def segments_to_polydata(result) -> pv.PolyData:
    """Line cells for discrete instances, with the start height as `height`."""
    ends = segment_endpoints(result)
    n = len(ends)
    points = ends.reshape(-1, 3)
    lines = np.column_stack([np.full(n, 2), np.arange(0, 2 * n, 2), np.arange(1, 2 * n, 2)])
    poly = pv.PolyData(points, lines=lines.ravel()) if n else pv.PolyData()
    if n:
        poly.cell_data["height"] = np.array([s.height for s in result.segments])
    return poly


def instance_primitive(shape: InstanceShape, resolution: int = 8) -> pv.PolyData:
    """Unit primitive of a discrete instance: width 1, height 1 along +Y, centred."""
    if InstanceShape(shape) is InstanceShape.BOX:
        primitive = pv.Box(bounds=(-0.5, 0.5, -0.5, 0.5, -0.5, 0.5))
    else:
        primitive = pv.Cylinder(center=(0, 0, 0), direction=(0, 1, 0), radius=0.5, height=1.0,
                                resolution=resolution)
    return primitive.triangulate()


def instances_to_polydata(result) -> pv.PolyData:
    """
    One copy of the instance primitive per discrete segment, placed by its
    transform matrix, with the segment colour repeated on its points as `RGB`.
    """
    matrices = result.segment_matrices()
    if not len(matrices):
        return pv.PolyData()

    primitive = instance_primitive(result.instance_shape)
    points = np.asarray(primitive.points, dtype=np.float64)
    triangles = np.asarray(primitive.faces).reshape(-1, 4)[:, 1:]
    n_points = len(points)

    homogeneous = np.hstack([points, np.ones((n_points, 1))])
    world = np.einsum('nij,pj->npi', matrices, homogeneous)[..., :3].reshape(-1, 3)
    offsets = np.arange(len(matrices)) * n_points
    all_triangles = (triangles[None, :, :] + offsets[:, None, None]).reshape(-1, 3)
    faces = np.hstack([np.full((len(all_triangles), 1), 3), all_triangles]).astype(np.int64)

    poly = pv.PolyData(world, faces.ravel())
    if result.segment_colors is not None:
        poly.point_data["RGB"] = np.repeat(result.segment_colors, n_points, axis=0)
    return poly


def leaves_to_polydata(result) -> pv.PolyData:
    positions = np.array([leaf.current.position for leaf in result.leaves]).reshape(-1, 3)
    poly = pv.PolyData(positions)
    if len(positions):
        poly.point_data["scale"] = np.array([leaf.current.scale[0] for leaf in result.leaves])
    return poly


def to_polydata(result) -> pv.PolyData:
    if result.mesh is not None:
        return mesh_to_polydata(result)
    return instances_to_polydata(result)


def plot_result(result, save_path: str = None, elev: float = 20, azim: float = 45, show: bool = False):
    """
    Matplotlib preview of a result (Y-up world drawn with matplotlib's Z up).

    Args:
        result: GenerationResult to draw
        save_path: Optional path to save the figure
        elev: Elevation angle for 3D view
        azim: Azimuth angle for 3D view
        show: Call plt.show() after drawing
    """
    fig = plt.figure(figsize=(8, 8))
    ax = fig.add_subplot(111, projection='3d')

    def swap(points):
        return points[..., [0, 2, 1]]

    if result.mesh is not None and len(result.mesh.indices):
        triangles = swap(result.mesh.positions[result.mesh.indices])
        face_colors = result.mesh.colors[result.mesh.indices].mean(axis=1)
        ax.add_collection3d(Poly3DCollection(triangles, facecolors=face_colors, linewidths=0))
    elif result.segments:
        ends = swap(segment_endpoints(result))
        for (start, end), color in zip(ends, result.segment_colors):
            xs, ys, zs = zip(start, end)
            ax.plot(xs, ys, zs, color=color, linewidth=1.0)

    if result.leaves:
        leaves = swap(np.array([leaf.current.position for leaf in result.leaves]))
        ax.scatter(leaves[:, 0], leaves[:, 1], leaves[:, 2], color=result.config.color_leaf, s=8)

    lo, hi = swap(result.bounds.min), swap(result.bounds.max)
    if not result.bounds.is_empty:
        half = max(float((hi - lo).max()) / 2, 1e-6)
        mid = (lo + hi) / 2
        ax.set_xlim(mid[0] - half, mid[0] + half)
        ax.set_ylim(mid[1] - half, mid[1] + half)
        ax.set_zlim(mid[2] - half, mid[2] + half)

    ax.set_xlabel("X")
    ax.set_ylabel("Z")
    ax.set_zlabel("Y")
    ax.set_title(result.config.description or result.stats())
    ax.view_init(elev=elev, azim=azim)
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight', facecolor='white')
    if show:
        plt.show()
    return fig
