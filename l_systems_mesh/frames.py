import numpy as np
from scipy.spatial.transform import Rotation

# Local turtle axes. The heading is local +Y.
X_AXIS = np.array([1.0, 0.0, 0.0])
FORWARD = np.array([0.0, 1.0, 0.0])
Z_AXIS = np.array([0.0, 0.0, 1.0])


def local_rotation(axis: np.ndarray, angle: float) -> Rotation:
    """Rotation of `angle` radians about a unit `axis`."""
    return Rotation.from_rotvec(axis * angle)


def forward_of(orientation: Rotation) -> np.ndarray:
    """Heading of the turtle for the given orientation, normalized."""
    direction = orientation.apply(FORWARD)
    return direction / np.linalg.norm(direction)


def normalize(vec: np.ndarray) -> np.ndarray:
    norm = np.linalg.norm(vec)
    if norm < 1e-12:
        return vec
    return vec / norm


def minimal_rotation(src: np.ndarray, dst: np.ndarray) -> Rotation:
    """
    Smallest rotation that maps unit vector `src` onto unit vector `dst`.

    Parallel and anti-parallel inputs are handled explicitly: identity for
    the first, a half turn about any axis perpendicular to `src` for the second.
    """
    cross = np.cross(src, dst)
    sin_theta = np.linalg.norm(cross)
    cos_theta = float(np.clip(np.dot(src, dst), -1.0, 1.0))

    if sin_theta < 1e-9:
        if cos_theta > 0.0:
            return Rotation.identity()
        # Anti-parallel: pick the helper axis least aligned with src
        helper = X_AXIS if abs(src[0]) < 0.9 else FORWARD
        axis = normalize(np.cross(src, helper))
        return Rotation.from_rotvec(axis * np.pi)

    angle = np.arctan2(sin_theta, cos_theta)
    return Rotation.from_rotvec(cross / sin_theta * angle)
