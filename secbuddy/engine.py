"""
Detection engine: run a rule catalog over a document and collect diagnostics.

A scan is a pure function of (text, config, catalog):

1. Context signals the catalog depends on are computed once.
2. Every rule's activation is resolved once, before any matching.
3. Active rules run in catalog order. Each rule walks its own matches
   through the whole document; matches of one rule never overlap each
   other, but two rules may report overlapping spans.
4. The problem cap is global. Once it is reached the scan stops and
   returns what it has so far.

Nothing here does I/O or keeps state between scans, so documents can be
scanned concurrently and re-scanning the same input gives the same result.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from secbuddy.config import Config, get_default_config
from secbuddy.findings.models import Diagnostic
from secbuddy.rules.base import Rule, resolve_rule_set
from secbuddy.rules.catalog import CATALOGS, catalog_for, required_signals
from secbuddy.signals import compute_signals

logger = logging.getLogger(__name__)


def scan(text: str, config: Optional[Config], catalog: Sequence[Rule]) -> list[Diagnostic]:
    """
    Scan text with the given catalog and return diagnostics in emission order.

    A missing config means the default configuration. Rule defects (unknown
    toggle, malformed version range, pattern that does not compile) only
    disable the affected rule.
    """
    if config is None:
        config = get_default_config()

    signals = compute_signals(text, required_signals(catalog))
    rule_set = resolve_rule_set(catalog, config, signals)

    diagnostics: list[Diagnostic] = []
    cap = config.problem_cap
    for resolved in rule_set:
        if not resolved.active:
            continue
        for match in resolved.rule.find_matches(text):
            if len(diagnostics) >= cap:
                logger.debug("Problem cap of %d reached at rule %s; stopping scan", cap, resolved.rule.id)
                return diagnostics
            diagnostics.append(resolved.rule.diagnostic(match))

    logger.debug(
        "Scan complete: %d diagnostic(s) from %d active rule(s)",
        len(diagnostics),
        sum(1 for r in rule_set if r.active),
    )
    return diagnostics


def scan_document(text: str, config: Optional[Config], language: str) -> list[Diagnostic]:
    """Scan text with the catalog registered for a language family ("c" or "python")."""
    if language not in CATALOGS:
        logger.warning("No rule catalog for language %r; nothing to scan", language)
        return []
    return scan(text, config, catalog_for(language))
