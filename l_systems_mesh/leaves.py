import numpy as np
from typing import List, NamedTuple

from l_systems_mesh.frames import FORWARD, X_AXIS, local_rotation
from l_systems_mesh.instances import Transform
from l_systems_mesh.lookahead import is_branch_tip


class LeafInstance(NamedTuple):
    # Transform at the preset size; `current` is `base` times the leaf scale
    base: Transform
    current: Transform


class LeafPlacer:
    """
    Emits one leaf quad per leaf symbol.

    The leaf sits at the turtle position with the turtle orientation plus a
    random twist (a local X then Y rotation, each in [0, 1) radians). Its
    base size is half the configured step length. With `tips_only`, leaves
    are suppressed wherever the branch keeps growing after them.
    """

    def __init__(self, step_length: float, leaf_scale: float = 1.0, tips_only: bool = False, rng=None):
        self.base_scale = step_length * 0.5
        self.leaf_scale = leaf_scale
        self.tips_only = tips_only
        self.rng = rng if rng is not None else np.random.default_rng()
        self.leaves: List[LeafInstance] = []

    def place(self, lstring: str, index: int, state) -> bool:
        """Place a leaf for the symbol at `index`; False when it was filtered out."""
        if self.tips_only and not is_branch_tip(lstring, index):
            return False

        twist = local_rotation(X_AXIS, self.rng.random()) * local_rotation(FORWARD, self.rng.random())
        s = self.base_scale
        base = Transform.from_rotation(state.position, state.orientation * twist, (s, s, s))
        self.leaves.append(LeafInstance(base, base.scaled(self.leaf_scale)))
        return True


def rescale_leaves(leaves: List[LeafInstance], leaf_scale: float) -> List[LeafInstance]:
    """Recompute every current transform from its base one."""
    return [LeafInstance(leaf.base, leaf.base.scaled(leaf_scale)) for leaf in leaves]
