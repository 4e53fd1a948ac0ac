import logging
from typing import Dict, Mapping

logger = logging.getLogger(__name__)

# Expansion stops once the string grows past this many symbols
MAX_STRING_LENGTH = 1_000_000


class Grammar:
    """
    Axiom plus single-symbol production rules.

    Symbols without a rule rewrite to themselves. The rule mapping is copied
    on construction and never changed afterwards.
    """

    def __init__(self, axiom: str, rules: Mapping[str, str] = None):
        self.axiom = axiom
        self._rules = dict(rules or {})

    @classmethod
    def from_text(cls, axiom: str, rules_text: str) -> "Grammar":
        """Build a grammar from newline-separated `SYMBOL=REPLACEMENT` lines."""
        return cls(axiom, parse_rules(rules_text))

    @property
    def rules(self) -> Dict[str, str]:
        return dict(self._rules)

    def rewrite(self, lstring: str) -> str:
        """Apply every rule once, in parallel, preserving symbol order."""
        return "".join(self._rules.get(ch, ch) for ch in lstring)

    def expand(self, iterations: int, max_length: int = MAX_STRING_LENGTH) -> str:
        return expand(self, iterations, max_length)

    def __repr__(self):
        return f"Grammar(axiom={self.axiom!r}, rules={self._rules!r})"


def parse_rules(rules_text: str) -> Dict[str, str]:
    """
    Parse rule lines of the form `F=FF[+F]`.

    Lines without `=`, with an empty replacement, or whose left side is not a
    single symbol are skipped. Both sides are stripped of surrounding
    whitespace; only the first `=` separates them.
    """
    rules = {}
    for line in rules_text.splitlines():
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key, value = key.strip(), value.strip()
        if len(key) == 1 and value:
            rules[key] = value
    return rules


def expand(grammar: Grammar, iterations: int, max_length: int = MAX_STRING_LENGTH) -> str:
    """
    Rewrite the axiom `iterations` times.

    If an iteration produces a string longer than `max_length`, expansion
    stops there and that string is returned as it is.
    """
    current = grammar.axiom
    for i in range(max(0, int(iterations))):
        current = grammar.rewrite(current)
        if len(current) > max_length:
            logger.warning(
                f"L-system string too long after {i + 1} of {iterations} iterations "
                f"({len(current)} symbols), truncated."
            )
            break
    return current
