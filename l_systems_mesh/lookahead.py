"""
Forward scans over the L-string used by the interpreter.

Both scans are pure: they take the string and a start index and never touch
turtle state.
"""
from typing import NamedTuple, Optional

FORWARD_SYMBOLS = frozenset("FG")
LEAF_SYMBOLS = frozenset("LP")
TAPER_MARK = "!"
BRANCH_OPEN = "["
BRANCH_CLOSE = "]"


class TaperScan(NamedTuple):
    """Result of a gradual-taper lookahead."""
    found: bool
    segments: int
    # Index of the taper-mark that ends the run, None when not found
    mark_index: Optional[int]


def scan_taper_run(lstring: str, start: int) -> TaperScan:
    """
    Count forward-draws from `start` up to the next taper-mark in scope.

    Only symbols at the starting bracket depth are considered: nested
    branches are skipped over, and an unmatched branch-close ends the scope.
    Forward-draws inside nested branches are not counted, and a taper-mark
    inside them does not end the run.
    """
    depth = 0
    count = 0
    for i in range(start, len(lstring)):
        ch = lstring[i]
        if ch == BRANCH_OPEN:
            depth += 1
        elif ch == BRANCH_CLOSE:
            if depth == 0:
                break
            depth -= 1
        elif depth == 0:
            if ch == TAPER_MARK:
                return TaperScan(True, count, i)
            if ch in FORWARD_SYMBOLS:
                count += 1
    return TaperScan(False, count, None)


def is_branch_tip(lstring: str, index: int) -> bool:
    """
    True when no further growth follows `index` in the same branch.

    Scanning stops at the first forward-draw or branch-open (growth follows)
    or at a branch-close or the end of the string (this is a tip). Every
    other symbol is skipped.
    """
    for i in range(index + 1, len(lstring)):
        ch = lstring[i]
        if ch in FORWARD_SYMBOLS or ch == BRANCH_OPEN:
            return False
        if ch == BRANCH_CLOSE:
            return True
    return True
