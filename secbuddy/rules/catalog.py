# Rule catalogs per language family, and what the engine needs to know about them.

from __future__ import annotations

from typing import Iterable, Sequence

from secbuddy.rules.base import ContextGate, Rule, Toggle
from secbuddy.rules.python_checks import PYTHON_RULES
from secbuddy.rules.unsafe_functions import C_RULES
from secbuddy.signals import BUILTIN_SIGNALS, ContextSignal

# Order inside each catalog decides which diagnostics survive the problem cap.
CATALOGS: dict[str, tuple[Rule, ...]] = {
    "c": C_RULES,
    "python": PYTHON_RULES,
}


def catalog_for(language: str) -> tuple[Rule, ...]:
    """Return the rule catalog for a language family, or () if there is none."""
    return CATALOGS.get(language, ())


def all_rules() -> Iterable[Rule]:
    for catalog in CATALOGS.values():
        yield from catalog


def default_toggles() -> dict[str, bool]:
    """Every toggle declared by a catalog, switched on."""
    return {
        rule.activation.name: True
        for rule in all_rules()
        if isinstance(rule.activation, Toggle)
    }


def required_signals(catalog: Sequence[Rule]) -> list[ContextSignal]:
    """The context signals the catalog's context-gated rules depend on, each listed once."""
    signals: list[ContextSignal] = []
    seen: set[str] = set()
    for rule in catalog:
        activation = rule.activation
        if not isinstance(activation, ContextGate) or activation.signal in seen:
            continue
        seen.add(activation.signal)
        signal = BUILTIN_SIGNALS.get(activation.signal)
        if signal is not None:
            signals.append(signal)
    return signals
