import dataclasses
import logging
import numpy as np
from dataclasses import dataclass
from scipy.spatial.transform import Rotation
from typing import Any, List, Optional

from l_systems_mesh.bounds import Bounds
from l_systems_mesh.frames import FORWARD, X_AXIS, Z_AXIS, forward_of, local_rotation
from l_systems_mesh.lookahead import (BRANCH_CLOSE, BRANCH_OPEN, FORWARD_SYMBOLS,
                                      LEAF_SYMBOLS, TAPER_MARK)
from l_systems_mesh.taper import TaperPolicy

logger = logging.getLogger(__name__)

TURN_AROUND = "|"

# symbol -> (local axis, sign)
ROTATIONS = {
    "+": (Z_AXIS, 1.0),
    "-": (Z_AXIS, -1.0),
    "&": (X_AXIS, 1.0),
    "^": (X_AXIS, -1.0),
    "\\": (FORWARD, 1.0),
    "/": (FORWARD, -1.0),
    "<": (FORWARD, 1.0),
    ">": (FORWARD, -1.0),
}


@dataclass
class TurtleState:
    position: np.ndarray
    orientation: Rotation
    step: float
    width: float
    # Gradual taper run
    decay: float = 1.0
    segments_remaining: int = 0
    taper_target: Optional[int] = None
    # Last ring emitted on this branch (continuous mode only)
    ring: Any = None

    @classmethod
    def initial(cls, step: float, width: float) -> "TurtleState":
        return cls(position=np.zeros(3), orientation=Rotation.identity(), step=step, width=width)

    @property
    def forward(self) -> np.ndarray:
        return forward_of(self.orientation)

    def snapshot(self) -> "TurtleState":
        # Rotation and ring references are immutable, only the position needs a copy
        return dataclasses.replace(self, position=self.position.copy())


class BranchStack:
    """LIFO of turtle snapshots, one per unmatched branch-open."""

    def __init__(self):
        self._saved: List[TurtleState] = []

    def push(self, state: TurtleState):
        self._saved.append(state.snapshot())

    def pop(self, state: TurtleState) -> TurtleState:
        """Return the most recent snapshot, or `state` itself if nothing is saved."""
        if not self._saved:
            return state
        return self._saved.pop()

    def __len__(self):
        return len(self._saved)


class Emitter:
    """
    Geometry sink driven by the interpreter.

    Subclasses turn forward-draws into either a connected tube mesh or
    independent instances.
    """

    def start(self, state: TurtleState):
        pass

    def segment(self, state: TurtleState, start: np.ndarray, end: np.ndarray, decay: float):
        raise NotImplementedError

    def exhausted(self) -> bool:
        return False


class TurtleInterpreter:
    """
    Walks an L-string left to right and drives one turtle state.

    Forward-draws go to the emitter, leaf symbols to the leaf placer, and
    every position the turtle reaches goes to the bounds. Unknown symbols
    are ignored.
    """

    def __init__(
        self,
        emitter: Emitter,
        leaves,
        bounds: Bounds,
        angle: float,
        angle_variance: float = 0.0,
        step_length: float = 1.0,
        width: float = 1.0,
        taper: float = 1.0,
        rng: np.random.Generator = None,
    ):
        """
        Args:
            emitter: Receives every forward-draw segment
            leaves: Leaf placer, or None to skip leaf symbols
            bounds: Accumulates the turtle positions
            angle: Base rotation angle in radians
            angle_variance: Max random deviation per rotation, in radians
            step_length: Forward-draw length
            width: Starting width
            taper: Taper factor shared by both taper behaviours
            rng: Random source for the angle variance
        """
        self.emitter = emitter
        self.leaves = leaves
        self.bounds = bounds
        self.angle = angle
        self.angle_variance = angle_variance
        self.step_length = step_length
        self.width = width
        self.taper = TaperPolicy(taper)
        self.rng = rng if rng is not None else np.random.default_rng()

        self.stack = BranchStack()
        self.segment_count = 0
        self.truncated = False

    def _angle(self) -> float:
        if self.angle_variance == 0:
            return self.angle
        return self.angle + self.rng.uniform(-self.angle_variance, self.angle_variance)

    def run(self, lstring: str) -> TurtleState:
        """Interpret the whole string; returns the final turtle state."""
        state = TurtleState.initial(self.step_length, self.width)
        self.bounds.update(state.position)
        self.emitter.start(state)

        for i, ch in enumerate(lstring):
            if ch in FORWARD_SYMBOLS:
                self._forward(lstring, i, state)
                if self.emitter.exhausted():
                    logger.warning(
                        f"Output limit reached after {self.segment_count} segments "
                        f"(symbol {i} of {len(lstring)}), stopping."
                    )
                    self.truncated = True
                    break

            elif ch in LEAF_SYMBOLS:
                if self.leaves is not None:
                    self.leaves.place(lstring, i, state)

            elif ch in ROTATIONS:
                axis, sign = ROTATIONS[ch]
                state.orientation = state.orientation * local_rotation(axis, sign * self._angle())

            elif ch == TURN_AROUND:
                state.orientation = state.orientation * local_rotation(Z_AXIS, np.pi)

            elif ch == TAPER_MARK:
                self.taper.on_mark(i, state)

            elif ch == BRANCH_OPEN:
                self.stack.push(state)
                self.taper.reset(state)

            elif ch == BRANCH_CLOSE:
                # The restored ring is the parent's, so siblings fan out from it
                state = self.stack.pop(state)

        return state

    def _forward(self, lstring: str, index: int, state: TurtleState):
        start = state.position
        end = start + state.forward * state.step

        decay = self.taper.before_segment(lstring, index, state)
        self.emitter.segment(state, start, end, decay)

        state.position = end
        self.bounds.update(end)
        self.segment_count += 1
