# Context signals: per-scan booleans derived from auxiliary evidence in the document text.

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContextSignal:
    """
    A named boolean computed once per scan.

    The signal is True when `marker` (a regex, distinct from any rule's own
    detection pattern) occurs anywhere in the document. Context-gated rules
    refer to a signal by name and share its value for the whole scan.
    """

    name: str
    marker: str
    description: str = ""


MAKEFILE_REFERENCED = ContextSignal(
    name="makefile-referenced",
    marker=r"\bmakefile",
    description="The document references a makefile build artifact.",
)

BUILTIN_SIGNALS: dict[str, ContextSignal] = {
    MAKEFILE_REFERENCED.name: MAKEFILE_REFERENCED,
}


def compute_signal(text: str, signal: ContextSignal) -> bool:
    """Search the full text once for the signal's marker."""
    try:
        found = re.search(signal.marker, text) is not None
    except re.error as exc:
        logger.warning("Context signal %s has an invalid marker pattern: %s", signal.name, exc)
        return False
    logger.debug("Context signal %s = %s", signal.name, found)
    return found


def compute_signals(text: str, signals: Iterable[ContextSignal]) -> dict[str, bool]:
    """
    Compute each distinct signal exactly once and return {name: value}.

    If two signals share a name the first one wins; later duplicates are
    ignored rather than triggering another full-text search.
    """
    values: dict[str, bool] = {}
    for signal in signals:
        if signal.name in values:
            continue
        values[signal.name] = compute_signal(text, signal)
    return values
