# Exception types shared by the rule model, the version matcher and the config loader.

from __future__ import annotations


class ActivationError(Exception):
    """A rule's activation could not be resolved; the rule is treated as inactive."""


class UnknownToggleError(ActivationError, KeyError):
    """A toggle-gated rule names a toggle the configuration does not know."""


class UnknownSignalError(ActivationError, KeyError):
    """A context-gated rule names a signal that was not computed for this scan."""


class VersionRangeError(ActivationError, ValueError):
    """A version range expression could not be compiled."""


class ConfigError(Exception):
    """A settings file is unreadable or contains invalid values."""
