import numpy as np
from scipy.spatial.transform import Rotation
from typing import List, NamedTuple

from l_systems_mesh.config import MAX_SEGMENTS, InstanceShape
from l_systems_mesh.interpreter import Emitter, TurtleState


class Transform(NamedTuple):
    position: np.ndarray
    # Scalar-last (x, y, z, w), as scipy returns it
    quaternion: np.ndarray
    scale: np.ndarray

    @classmethod
    def from_rotation(cls, position, rotation: Rotation, scale) -> "Transform":
        return cls(np.array(position, dtype=np.float64), rotation.as_quat(), np.array(scale, dtype=np.float64))

    @property
    def rotation(self) -> Rotation:
        return Rotation.from_quat(self.quaternion)

    def matrix(self) -> np.ndarray:
        """4x4 affine matrix: translate * rotate * scale."""
        m = np.eye(4)
        m[:3, :3] = self.rotation.as_matrix() * self.scale[None, :]
        m[:3, 3] = self.position
        return m

    def scaled(self, factor: float) -> "Transform":
        return self._replace(scale=self.scale * factor)


class SegmentInstance(NamedTuple):
    transform: Transform
    # World height of the segment start, for height colouring
    height: float
    # Per-segment gradual taper decay
    taper: float


class InstanceEmitter(Emitter):
    """
    Turns each forward-draw into an independent unit box or cylinder.

    The instance is centred on the segment midpoint, oriented like the turtle
    and scaled to (width, step, width). Nothing is shared between instances,
    so no ring bookkeeping is needed.
    """

    def __init__(self, shape: InstanceShape = InstanceShape.CYLINDER, max_segments: int = MAX_SEGMENTS):
        self.shape = InstanceShape(shape)
        self.max_segments = max_segments
        self.segments: List[SegmentInstance] = []

    def segment(self, state: TurtleState, start: np.ndarray, end: np.ndarray, decay: float):
        transform = Transform.from_rotation(
            (start + end) / 2,
            state.orientation,
            (state.width, state.step, state.width),
        )
        self.segments.append(SegmentInstance(transform, float(start[1]), decay))

    def exhausted(self) -> bool:
        return len(self.segments) > self.max_segments


def instance_matrices(transforms: List[Transform]) -> np.ndarray:
    """Stack transforms into an (N, 4, 4) array for instanced drawing."""
    if not transforms:
        return np.zeros((0, 4, 4))
    return np.stack([t.matrix() for t in transforms])
