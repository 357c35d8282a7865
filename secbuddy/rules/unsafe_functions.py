# Unsafe C function usage: calls to standard library functions without bounds checking.

from __future__ import annotations

from secbuddy.rules.base import Rule, Toggle, call_pattern

# (function, safer alternative), in catalog order
UNSAFE_C_FUNCTIONS: tuple[tuple[str, str], ...] = (
    ("strcpy", "strncpy"),
    ("gets", "fgets"),
    ("stpcpy", "stpncpy"),
    ("strcat", "strncat"),
    ("strcmp", "strncmp"),
    ("sprintf", "snprintf"),
    ("vsprintf", "snprintf"),
)


def _unsafe_call_rule(function: str, alternative: str) -> Rule:
    return Rule(
        id=function,
        name=f"Unsafe call to {function}()",
        pattern=call_pattern(function),
        message=(
            f"{function}() is vulnerable to buffer overflow attacks. "
            f"Consider using {alternative}()."
        ),
        activation=Toggle(f"c.{function}"),
        remediation=f"Replace {function}() with the bounded {alternative}() and pass the destination size.",
    )


C_RULES: tuple[Rule, ...] = tuple(
    _unsafe_call_rule(function, alternative) for function, alternative in UNSAFE_C_FUNCTIONS
)
