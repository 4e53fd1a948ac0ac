import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict

from l_systems_mesh.grammar import MAX_STRING_LENGTH

# Safety caps on interpreter output
MAX_SEGMENTS = 400_000
MAX_VERTICES = 10_000_000

# Range of the logarithmic width control
MIN_WIDTH = 0.01
MAX_WIDTH = 50.0


class RenderMode(str, Enum):
    CONTINUOUS = "continuous"
    DISCRETE = "discrete"


class InstanceShape(str, Enum):
    CYLINDER = "cylinder"
    BOX = "box"


def width_from_slider(position: float) -> float:
    """Map a [0, 1] slider position onto the logarithmic width range."""
    return MIN_WIDTH * (MAX_WIDTH / MIN_WIDTH) ** position


@dataclass
class LSystemConfig:
    """
    Every option a generation run reads.

    Args:
        axiom: Starting symbol string
        rules: Newline-separated `SYMBOL=REPLACEMENT` lines
        iterations: Number of rewrite passes
        angle: Base rotation angle in degrees
        angle_variance: Maximum random deviation of each rotation, in degrees
        step_length: Length of one forward-draw
        width: Starting branch width
        taper: Width factor applied by a taper-mark
        leaf_scale: Multiplier on the leaf base size
        tips_only: Only place leaves where the branch does not grow further
        mode: Continuous tube mesh or discrete per-segment instances
        instance_shape: Primitive used by discrete instances
        radial_segments: Vertices per ring in continuous mode
        color_base, color_tip, color_leaf: Any matplotlib colour spec
    """
    axiom: str = "F"
    rules: str = "F=F[+F][-F]"
    iterations: int = 4
    angle: float = 25.0
    angle_variance: float = 0.0
    step_length: float = 1.0
    width: float = 0.5
    taper: float = 0.7
    leaf_scale: float = 1.0
    tips_only: bool = False
    mode: RenderMode = RenderMode.CONTINUOUS
    instance_shape: InstanceShape = InstanceShape.CYLINDER
    radial_segments: int = 8
    color_base: str = "#5d4037"
    color_tip: str = "#22c55e"
    color_leaf: str = "#f0abfc"
    max_string_length: int = MAX_STRING_LENGTH
    max_segments: int = MAX_SEGMENTS
    max_vertices: int = MAX_VERTICES
    description: str = field(default="", compare=False)

    def __post_init__(self):
        self.mode = RenderMode(self.mode)
        self.instance_shape = InstanceShape(self.instance_shape)
        self.iterations = max(0, int(self.iterations))

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "LSystemConfig":
        """Build a config from a dict, ignoring keys that are not options."""
        names = {f.name for f in dataclasses.fields(cls)}
        return cls(**{k: v for k, v in values.items() if k in names})

    def replace(self, **changes) -> "LSystemConfig":
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        values = dataclasses.asdict(self)
        values["mode"] = self.mode.value
        values["instance_shape"] = self.instance_shape.value
        return values
