"""
Python checks: risky patterns and library calls with known CVEs.

Unlike the C catalog, most of these rules are not simple toggles. mktemp()
is only reported when the document also references a makefile, and the
email.utils and hashlib findings depend on the Python version the user
declared in their settings.
"""

from __future__ import annotations

import re

from secbuddy.rules.base import ContextGate, Rule, Toggle, VersionGate, call_pattern
from secbuddy.signals import MAKEFILE_REFERENCED

# email.utils.parseaddr()/getaddresses() mis-parse addresses with special characters
CVE_2023_27043_RANGES = ("3.10.", "3.9.", "3.8.", "3.7.")

# Buffer overflow in the SHA-3 implementation (XKCP) behind hashlib; fixed in
# 3.7.16, 3.8.16, 3.9.16, 3.10.9 and 3.11.1
CVE_2022_37454_RANGES = ("3.{7-9}.{0-15}", "3.10.{0-8}", "3.11.0")

ERROR_MESSAGES = Rule(
    id="error-messages",
    name="Error message disclosure",
    pattern=r"\berror",
    flags=re.IGNORECASE,
    message=(
        "Error messages can lead to vulnerabilities if this code is used as part of a client. "
        'To turn these messages off, go to the extension settings and disable "Error Message Checks"'
    ),
    activation=Toggle("python.error_messages"),
    remediation="Log details server-side and show clients a generic message.",
)

INPUT_VALIDATION = Rule(
    id="input-validation",
    name="Unvalidated input",
    pattern=call_pattern("input"),
    message=(
        "Ensure that there is input validation for this! You can turn these reminders off "
        'in the extension\'s settings under "Input Validation"'
    ),
    activation=Toggle("python.input_validation"),
    remediation="Validate type, length and allowed characters before using input() results.",
)

MKTEMP = Rule(
    id="mktemp",
    name="Insecure temporary file",
    pattern=call_pattern("mktemp"),
    message="{match} can overwrite existing temp files, consider using mkstemp() (CVE-2023-2800)",
    activation=ContextGate(MAKEFILE_REFERENCED.name),
    remediation="Use tempfile.mkstemp() or tempfile.NamedTemporaryFile().",
    references=("CVE-2023-2800",),
)

EMAIL_UTILS = Rule(
    id="email-utils",
    name="email.utils address parsing",
    pattern=r"\bemail\.utils",
    message=(
        "{match} This package is vulnerable in your current version of python. Consider updating "
        "or avoid the use of email.utils.parseaddr() and email.utils.getaddresses() (CVE-2023-27043)"
    ),
    activation=VersionGate(CVE_2023_27043_RANGES),
    remediation="Upgrade Python or validate addresses before calling email.utils.",
    references=("CVE-2023-27043",),
)

HASHLIB = Rule(
    id="hashlib",
    name="hashlib SHA-3 buffer overflow",
    pattern=r"\bhashlib\b",
    message=(
        "{match} The SHA-3 functions in your current version of python can overflow a buffer "
        "on very large inputs. Consider updating (CVE-2022-37454)"
    ),
    activation=VersionGate(CVE_2022_37454_RANGES),
    remediation="Upgrade to Python 3.7.16, 3.8.16, 3.9.16, 3.10.9, 3.11.1 or later.",
    references=("CVE-2022-37454",),
)

PYTHON_RULES: tuple[Rule, ...] = (
    ERROR_MESSAGES,
    INPUT_VALIDATION,
    MKTEMP,
    EMAIL_UTILS,
    HASHLIB,
)
