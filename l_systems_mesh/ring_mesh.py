import numpy as np
from scipy.spatial.transform import Rotation
from typing import List, NamedTuple, Optional

from l_systems_mesh.config import MAX_VERTICES
from l_systems_mesh.frames import X_AXIS, forward_of, minimal_rotation, normalize
from l_systems_mesh.interpreter import Emitter, TurtleState

# Consecutive rings whose headings agree less than this get a pivot ring
PIVOT_THRESHOLD = 0.999


class RingFrame(NamedTuple):
    forward: np.ndarray
    # Zero-angle radial direction of the ring
    axis: np.ndarray


class RingRef(NamedTuple):
    start_index: int
    ring_index: int


class MeshBuffers:
    """
    Append-only vertex and triangle storage.

    Vertices and triangles are collected per ring and concatenated once by
    `freeze`. Triangle indices only ever reference vertices appended before them.
    """

    def __init__(self):
        self._vertex_chunks: List[np.ndarray] = []
        self._index_chunks: List[np.ndarray] = []
        self.vertex_count = 0
        self.triangle_count = 0

        self.positions: Optional[np.ndarray] = None
        self.indices: Optional[np.ndarray] = None
        self.colors: Optional[np.ndarray] = None

    def add_vertices(self, vertices: np.ndarray) -> int:
        start = self.vertex_count
        self._vertex_chunks.append(vertices)
        self.vertex_count += len(vertices)
        return start

    def add_triangles(self, triangles: np.ndarray):
        self._index_chunks.append(triangles)
        self.triangle_count += len(triangles)

    def freeze(self):
        """Concatenate the collected chunks into flat float32/uint32 arrays."""
        if self._vertex_chunks:
            self.positions = np.concatenate(self._vertex_chunks).astype(np.float32)
        else:
            self.positions = np.zeros((0, 3), dtype=np.float32)
        if self._index_chunks:
            self.indices = np.concatenate(self._index_chunks).astype(np.uint32)
        else:
            self.indices = np.zeros((0, 3), dtype=np.uint32)
        self._vertex_chunks, self._index_chunks = [], []
        return self


class RingMeshEmitter(Emitter):
    """
    Builds one connected tube mesh out of rings of radial vertices.

    Each ring lies in the plane perpendicular to the turtle heading. Its
    zero-angle axis is carried over from the ring it connects to by the
    minimal rotation between the two headings (parallel transport), so the
    tube does not twist along bends. When the heading changed since the last
    ring, a zero-length pivot ring at the pre-taper width bridges the turn.
    """

    def __init__(self, radial_segments: int = 8, max_vertices: int = MAX_VERTICES):
        self.radial_segments = radial_segments
        self.max_vertices = max_vertices
        self.buffers = MeshBuffers()
        self.frames: List[RingFrame] = []
        self.pivot_count = 0

        angles = np.arange(radial_segments) * (2 * np.pi / radial_segments)
        self._cos = np.cos(angles)
        self._sin = np.sin(angles)

        j = np.arange(radial_segments)
        j_next = (j + 1) % radial_segments
        # Triangles (a, d, c) and (a, b, d) per radial edge, relative to ring starts
        self._edge_lower = np.stack([j, j_next], axis=1)

    @property
    def ring_count(self) -> int:
        return len(self.frames)

    def add_ring(
        self,
        center: np.ndarray,
        orientation: Rotation,
        radius: float,
        ref_frame: Optional[RingFrame] = None,
    ) -> RingRef:
        forward = forward_of(orientation)

        if ref_frame is None:
            axis = normalize(orientation.apply(X_AXIS))
        else:
            transport = minimal_rotation(ref_frame.forward, forward)
            axis = normalize(transport.apply(ref_frame.axis))

        ring_index = len(self.frames)
        self.frames.append(RingFrame(forward, axis))

        binormal = normalize(np.cross(forward, axis))
        offsets = np.outer(self._cos, axis) + np.outer(self._sin, binormal)
        start_index = self.buffers.add_vertices(center + radius * offsets)
        return RingRef(start_index, ring_index)

    def connect(self, lower: RingRef, upper: RingRef):
        """Two triangles per radial edge between consecutive rings."""
        a = lower.start_index + self._edge_lower[:, 0]
        b = lower.start_index + self._edge_lower[:, 1]
        c = upper.start_index + self._edge_lower[:, 0]
        d = upper.start_index + self._edge_lower[:, 1]

        triangles = np.empty((2 * self.radial_segments, 3), dtype=np.int64)
        triangles[0::2] = np.stack([a, d, c], axis=1)
        triangles[1::2] = np.stack([a, b, d], axis=1)
        self.buffers.add_triangles(triangles)

    def start(self, state: TurtleState):
        state.ring = self.add_ring(state.position, state.orientation, state.width / 2)

    def segment(self, state: TurtleState, start: np.ndarray, end: np.ndarray, decay: float):
        lower = state.ring
        lower_frame = self.frames[lower.ring_index]

        if np.dot(lower_frame.forward, state.forward) < PIVOT_THRESHOLD:
            # state.width already holds the end-of-segment width
            start_width = state.width / decay if decay > 0 else state.width
            pivot = self.add_ring(start, state.orientation, start_width / 2, lower_frame)
            self.connect(lower, pivot)
            self.pivot_count += 1
            lower = pivot

        upper = self.add_ring(end, state.orientation, state.width / 2, self.frames[lower.ring_index])
        self.connect(lower, upper)
        state.ring = upper

    def exhausted(self) -> bool:
        return self.buffers.vertex_count > self.max_vertices
