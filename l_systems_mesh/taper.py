from l_systems_mesh.lookahead import scan_taper_run


class TaperPolicy:
    """
    Decides the width of each segment before it is emitted.

    Two behaviours share the taper factor:

    - Instantaneous: a taper-mark multiplies the current width by `taper`.
    - Gradual: before a forward-draw with no run in progress, the rest of the
      current branch is scanned for a taper-mark. If one is found after N
      forward-draws, every one of those N segments multiplies the width by
      `taper ** (1 / N)`, so the width has shrunk by exactly `taper` once the
      mark is reached. That mark is then consumed without tapering again.

    All run state (decay, segments_remaining, taper_target) lives on the
    turtle state so that branch push/pop saves and restores it.
    """

    def __init__(self, taper: float):
        # A negative factor would flip the width sign, and its fractional
        # powers are complex
        self.taper = max(taper, 0.0)
        # Gradual runs never widen the branch
        self.run_taper = min(self.taper, 1.0)

    def before_segment(self, lstring: str, index: int, state) -> float:
        """
        Apply the per-segment decay for the forward-draw at `index`.

        Returns the decay that was applied to `state.width`.
        """
        if state.segments_remaining <= 0:
            scan = scan_taper_run(lstring, index)
            if scan.found and scan.segments > 0:
                state.decay = self.run_taper ** (1.0 / scan.segments)
                state.segments_remaining = scan.segments
                state.taper_target = scan.mark_index
            else:
                self.reset(state)

        state.width *= state.decay
        if state.segments_remaining > 0:
            state.segments_remaining -= 1
        return state.decay

    def on_mark(self, index: int, state):
        """Handle a taper-mark: end the gradual run it closes, or taper now."""
        if index == state.taper_target:
            self.reset(state)
        else:
            state.width *= self.taper

    @staticmethod
    def reset(state):
        state.decay = 1.0
        state.segments_remaining = 0
        state.taper_target = None
