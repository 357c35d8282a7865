"""
Version range matching for version-gated rules.

A range expression is a dotted pattern over version components:

    3.8.          any 3.8.x (the trailing dot requires a following component)
    3.{7-9}.      3.7.x, 3.8.x or 3.9.x
    3.10.{0-8}    3.10.0 through 3.10.8
    3.{7,9,11}.*  3.7.x, 3.9.x or 3.11.x
    3.11.0        exactly 3.11.0 (also inside e.g. "3.11.0rc1")

Matching is lexical containment: the compiled expression is searched for
anywhere inside the declared version string, the same way a literal
substring would be. Nothing here parses or orders versions semantically,
so "python-3.8.2-custom" matches "3.8." while "3.11.0" does not match "3.1".
The one structural guard is that a final numeric component may not be
followed by another digit ("3.10.{0-8}" does not match "3.10.80").
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Iterable, Optional

from secbuddy.errors import VersionRangeError

logger = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r"^\d+$")
_SET_ITEM_RE = re.compile(r"^(\d+)(?:-(\d+))?$")


def _component_numbers(body: str, expression: str) -> list[int]:
    """Expand the inside of a brace set ("7-9,11") into a sorted list of ints."""
    numbers: set[int] = set()
    for item in body.split(","):
        m = _SET_ITEM_RE.match(item.strip())
        if m is None:
            raise VersionRangeError(f"Invalid component set {{{body}}} in {expression!r}")
        low = int(m.group(1))
        high = int(m.group(2)) if m.group(2) is not None else low
        if high < low:
            raise VersionRangeError(f"Empty range {low}-{high} in {expression!r}")
        numbers.update(range(low, high + 1))
    return sorted(numbers)


def _component_regex(component: str, expression: str) -> str:
    if _NUMBER_RE.match(component):
        return re.escape(component)
    if component == "*":
        return r"\d+"
    if len(component) >= 3 and component[0] == "{" and component[-1] == "}":
        numbers = _component_numbers(component[1:-1], expression)
        # Longest first so alternation never stops at a shorter prefix ("1" vs "15").
        alternatives = sorted((str(n) for n in numbers), key=len, reverse=True)
        return "(?:" + "|".join(alternatives) + ")"
    raise VersionRangeError(f"Invalid version component {component!r} in {expression!r}")


@lru_cache(maxsize=256)
def compile_range(expression: str) -> re.Pattern[str]:
    """
    Compile a range expression into a search pattern.

    Raises:
        VersionRangeError: if the expression is empty or has a component that
            is not a number, "*", or a brace set like "{0-8}".
    """
    if not isinstance(expression, str) or not expression.strip():
        raise VersionRangeError(f"Empty version range expression: {expression!r}")

    text = expression.strip()
    open_ended = text.endswith(".")
    components = text[:-1].split(".") if open_ended else text.split(".")

    parts = [_component_regex(c, expression) for c in components]
    regex = r"\.".join(parts)
    if open_ended:
        regex += r"\."
    else:
        regex += r"(?!\d)"
    return re.compile(regex)


def matches(declared_version: Optional[str], range_expressions: Iterable[str]) -> bool:
    """
    Return True if declared_version contains a match for any range expression.

    An empty list of expressions never matches, nor does a missing or empty
    declared version. Every expression is compiled before searching, so a
    single malformed expression raises VersionRangeError regardless of its
    position in the list.
    """
    patterns = [compile_range(expr) for expr in range_expressions]
    if not patterns or not declared_version:
        return False
    return any(p.search(declared_version) for p in patterns)
