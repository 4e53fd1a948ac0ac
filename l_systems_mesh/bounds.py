import numpy as np
from matplotlib.colors import to_rgb
from typing import Tuple


class Bounds:
    """
    Running axis-aligned extents of every position the turtle reaches.

    Only reports extents. Ratios built from them (colour gradients, auto
    scaling) must guard against zero size themselves.
    """

    def __init__(self):
        self.min = np.full(3, np.inf)
        self.max = np.full(3, -np.inf)

    def update(self, point: np.ndarray):
        np.minimum(self.min, point, out=self.min)
        np.maximum(self.max, point, out=self.max)

    @property
    def is_empty(self) -> bool:
        return bool(np.any(self.min > self.max))

    @property
    def size(self) -> np.ndarray:
        if self.is_empty:
            return np.zeros(3)
        return self.max - self.min

    @property
    def center(self) -> np.ndarray:
        if self.is_empty:
            return np.zeros(3)
        return (self.min + self.max) / 2

    @property
    def height(self) -> float:
        return float(self.size[1])

    def auto_scale_factor(self, target_height: float = 60.0) -> float:
        """Uniform scale that brings the structure to `target_height`; 1.0 if flat."""
        if self.height <= 0:
            return 1.0
        return target_height / self.height

    def as_tuple(self) -> Tuple[Tuple[float, float, float], Tuple[float, float, float]]:
        return tuple(self.min.tolist()), tuple(self.max.tolist())

    def __repr__(self):
        return f"Bounds(min={self.min.tolist()}, max={self.max.tolist()})"


def height_colors(heights: np.ndarray, bounds: Bounds, base_color, tip_color) -> np.ndarray:
    """
    Blend base to tip colour by each height's position within the bounds.

    Returns an (N, 3) float32 RGB array. A structure with no height extent
    gets the base colour everywhere.
    """
    heights = np.asarray(heights, dtype=np.float64)
    base = np.array(to_rgb(base_color))
    tip = np.array(to_rgb(tip_color))

    y_range = bounds.height or 1.0
    y_min = 0.0 if bounds.is_empty else bounds.min[1]
    t = np.clip((heights - y_min) / y_range, 0.0, 1.0)

    return (base[None, :] + (tip - base)[None, :] * t[:, None]).astype(np.float32)
