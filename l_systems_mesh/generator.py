import logging
import numpy as np
from typing import List, Optional

from l_systems_mesh.bounds import Bounds, height_colors
from l_systems_mesh.config import InstanceShape, LSystemConfig, RenderMode
from l_systems_mesh.grammar import Grammar
from l_systems_mesh.instances import InstanceEmitter, SegmentInstance, Transform, instance_matrices
from l_systems_mesh.interpreter import TurtleInterpreter
from l_systems_mesh.leaves import LeafInstance, LeafPlacer, rescale_leaves
from l_systems_mesh.ring_mesh import MeshBuffers, RingMeshEmitter

logger = logging.getLogger(__name__)


class GenerationContext:
    """
    Everything a single generation request owns.

    Created per request and dropped once its result has been handed over;
    nothing in it is shared between runs.
    """

    def __init__(self, config: LSystemConfig, rng: np.random.Generator = None):
        self.config = config
        self.rng = rng if rng is not None else np.random.default_rng()
        self.bounds = Bounds()

        if config.mode is RenderMode.CONTINUOUS:
            self.emitter = RingMeshEmitter(config.radial_segments, config.max_vertices)
        else:
            self.emitter = InstanceEmitter(config.instance_shape, config.max_segments)

        self.leaves = LeafPlacer(
            config.step_length,
            leaf_scale=config.leaf_scale,
            tips_only=config.tips_only,
            rng=self.rng,
        )
        self.interpreter = TurtleInterpreter(
            self.emitter,
            self.leaves,
            self.bounds,
            angle=np.radians(config.angle),
            angle_variance=np.radians(config.angle_variance),
            step_length=config.step_length,
            width=config.width,
            taper=config.taper,
            rng=self.rng,
        )

    def run(self, lstring: str) -> "GenerationResult":
        self.interpreter.run(lstring)

        mesh = None
        segments = None
        instance_shape = None
        pivot_count = 0
        if isinstance(self.emitter, RingMeshEmitter):
            mesh = self.emitter.buffers.freeze()
            pivot_count = self.emitter.pivot_count
        else:
            segments = self.emitter.segments
            instance_shape = self.emitter.shape

        result = GenerationResult(
            config=self.config,
            lstring=lstring,
            bounds=self.bounds,
            mesh=mesh,
            segments=segments,
            instance_shape=instance_shape,
            leaves=self.leaves.leaves,
            segment_count=self.interpreter.segment_count,
            pivot_count=pivot_count,
            truncated=self.interpreter.truncated,
        )
        result.recolor()
        return result


class GenerationResult:
    """Output buffers of one run, ready for the renderer."""

    def __init__(
        self,
        config: LSystemConfig,
        lstring: str,
        bounds: Bounds,
        mesh: Optional[MeshBuffers] = None,
        segments: Optional[List[SegmentInstance]] = None,
        instance_shape: Optional[InstanceShape] = None,
        leaves: List[LeafInstance] = None,
        segment_count: int = 0,
        pivot_count: int = 0,
        truncated: bool = False,
    ):
        self.config = config
        self.lstring = lstring
        self.bounds = bounds
        self.mesh = mesh
        self.segments = segments
        self._instance_shape = instance_shape
        self.leaves = leaves or []
        self.segment_count = segment_count
        self.pivot_count = pivot_count
        self.truncated = truncated
        self.segment_colors: Optional[np.ndarray] = None

    @property
    def mode(self) -> RenderMode:
        return RenderMode.CONTINUOUS if self.mesh is not None else RenderMode.DISCRETE

    @property
    def instance_shape(self) -> InstanceShape:
        """Primitive the discrete instances were built for."""
        return self._instance_shape or self.config.instance_shape

    @property
    def leaf_count(self) -> int:
        return len(self.leaves)

    def stats(self) -> str:
        return f"Segments: {self.segment_count} | Leaves: {self.leaf_count}"

    def recolor(self, base_color=None, tip_color=None):
        """Recompute vertex or instance colours from stored heights."""
        base_color = base_color or self.config.color_base
        tip_color = tip_color or self.config.color_tip

        if self.mesh is not None:
            self.mesh.colors = height_colors(self.mesh.positions[:, 1], self.bounds, base_color, tip_color)
        else:
            heights = np.array([s.height for s in self.segments], dtype=np.float64)
            self.segment_colors = height_colors(heights, self.bounds, base_color, tip_color)

    def set_leaf_scale(self, leaf_scale: float):
        """Resize every leaf from its base transform, without re-running the turtle."""
        self.leaves = rescale_leaves(self.leaves, leaf_scale)

    def segment_matrices(self) -> np.ndarray:
        return instance_matrices([s.transform for s in self.segments or []])

    def leaf_matrices(self) -> np.ndarray:
        return instance_matrices([leaf.current for leaf in self.leaves])

    def leaf_transforms(self) -> List[Transform]:
        return [leaf.current for leaf in self.leaves]


class LSystemGenerator:
    """
    Runs expansion and interpretation for one request at a time.

    A request that arrives while another generation is in flight is dropped,
    not queued.
    """

    def __init__(self):
        self.is_generating = False

    def generate(self, config: LSystemConfig, rng: np.random.Generator = None) -> Optional[GenerationResult]:
        """
        Build geometry for `config`.

        Args:
            config: Grammar, turtle and output options
            rng: Random source for angle variance and leaf twist

        Returns:
            The finished result, or None if a generation was already running.
        """
        if self.is_generating:
            logger.debug("Generation already in progress, request dropped")
            return None

        self.is_generating = True
        try:
            grammar = Grammar.from_text(config.axiom, config.rules)
            lstring = grammar.expand(config.iterations, config.max_string_length)
            logger.debug(f"Expanded {grammar!r} to {len(lstring)} symbols")

            result = GenerationContext(config, rng).run(lstring)
            logger.debug(f"{result.stats()} | Pivots: {result.pivot_count} | {result.bounds!r}")
            return result
        finally:
            self.is_generating = False
