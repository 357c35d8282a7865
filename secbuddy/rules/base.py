# Rule model: a detection pattern, a finding message and an activation predicate.
# Concrete catalogs (unsafe_functions, python_checks) are plain tuples of Rule values;
# the engine is the only code that evaluates them.

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Iterator, Mapping, Optional, Sequence

from secbuddy import versions
from secbuddy.errors import ActivationError, UnknownSignalError
from secbuddy.findings.models import Diagnostic

if TYPE_CHECKING:
    from secbuddy.config import Config

logger = logging.getLogger(__name__)

MATCH_PLACEHOLDER = "{match}"

# Arguments of a call: anything but parentheses, with nested groups up to _MAX_NESTING deep.
_MAX_NESTING = 3


def _nested_args(depth: int) -> str:
    if depth == 0:
        return r"[^()]*"
    inner = _nested_args(depth - 1)
    return rf"[^()]*(?:\({inner}\)[^()]*)*"


_CALL_ARGS = _nested_args(_MAX_NESTING)


def call_pattern(function: str) -> str:
    """
    Pattern for a call to `function`, e.g. "strcpy(buf, f(g(x)))".

    The leading word boundary keeps "gets" from matching inside "fgets" and
    "sprintf" from matching inside "vsprintf". When the arguments cannot be
    balanced (deeper nesting, a stray ")" inside a string, a missing close)
    the call is still reported, with the span cut at the first point the
    argument text stops balancing, or at "name(" if nothing balances.
    """
    return rf"\b{re.escape(function)}\s*\((?:{_CALL_ARGS}\))?"


@lru_cache(maxsize=256)
def _compile(pattern: str, flags: int) -> Optional[re.Pattern[str]]:
    try:
        return re.compile(pattern, flags)
    except re.error as exc:
        logger.warning("Rule pattern %r does not compile: %s", pattern, exc)
        return None


class Activation(ABC):
    """Decides whether a rule takes part in a scan."""

    kind: str

    @abstractmethod
    def resolve(self, config: "Config", signals: Mapping[str, bool]) -> bool:
        """
        Return True if the rule is active for this scan.

        May raise ActivationError for configuration defects; callers treat
        that as inactive.
        """
        ...


@dataclass(frozen=True)
class Always(Activation):
    kind = "unconditional"

    def resolve(self, config: "Config", signals: Mapping[str, bool]) -> bool:
        return True


@dataclass(frozen=True)
class Toggle(Activation):
    """Active iff the named boolean setting is on."""

    name: str
    kind = "toggle"

    def resolve(self, config: "Config", signals: Mapping[str, bool]) -> bool:
        return config.is_enabled(self.name)


@dataclass(frozen=True)
class VersionGate(Activation):
    """Active iff the declared version matches any of the range expressions."""

    ranges: tuple[str, ...]
    kind = "version"

    def resolve(self, config: "Config", signals: Mapping[str, bool]) -> bool:
        return versions.matches(config.declared_version, self.ranges)


@dataclass(frozen=True)
class ContextGate(Activation):
    """Active iff the named context signal is True for this document."""

    signal: str
    kind = "context"

    def resolve(self, config: "Config", signals: Mapping[str, bool]) -> bool:
        try:
            return signals[self.signal]
        except KeyError:
            raise UnknownSignalError(self.signal) from None


@dataclass(frozen=True)
class Rule:
    """
    One detectable condition.

    - id: unique rule identifier (e.g. "strcpy"), reported as the diagnostic code
    - name: human-readable name
    - pattern: regex source searched in the raw document text
    - message: finding text; "{match}" is replaced by the matched text
    - activation: one of Always, Toggle, VersionGate, ContextGate
    - remediation: optional short fix hint, shown by the console reporter
    - references: published identifiers (e.g. CVE ids) cited by the message
    """

    id: str
    name: str
    pattern: str
    message: str
    activation: Activation = Always()
    flags: int = 0
    remediation: str = ""
    references: tuple[str, ...] = ()

    @property
    def compiled(self) -> Optional[re.Pattern[str]]:
        """The compiled pattern, or None if the pattern is defective."""
        return _compile(self.pattern, self.flags)

    def is_active(self, config: "Config", signals: Mapping[str, bool]) -> bool:
        """Resolve the activation; defects (bad pattern, unknown toggle, bad range) mean inactive."""
        if self.compiled is None:
            return False
        try:
            return bool(self.activation.resolve(config, signals))
        except ActivationError as exc:
            logger.warning("Rule %s disabled: %s: %s", self.id, type(exc).__name__, exc)
            return False

    def find_matches(self, text: str) -> Iterator[re.Match[str]]:
        """Yield non-overlapping matches, each search starting at the previous match's end."""
        compiled = self.compiled
        if compiled is None:
            return
        for match in compiled.finditer(text):
            if match.end() == match.start():
                continue
            yield match

    def render_message(self, match: re.Match[str]) -> str:
        return self.message.replace(MATCH_PLACEHOLDER, match.group(0))

    def diagnostic(self, match: re.Match[str]) -> Diagnostic:
        return Diagnostic(
            start_offset=match.start(),
            end_offset=match.end(),
            message=self.render_message(match),
            rule_id=self.id,
        )


@dataclass(frozen=True)
class ResolvedRule:
    """A rule paired with its activation flag for one scan."""

    rule: Rule
    active: bool


def resolve_rule_set(
    catalog: Sequence[Rule],
    config: "Config",
    signals: Mapping[str, bool],
) -> list[ResolvedRule]:
    """Resolve every rule's activation once, keeping catalog order."""
    return [ResolvedRule(rule=rule, active=rule.is_active(config, signals)) for rule in catalog]
