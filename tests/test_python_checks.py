"""Unit tests for the Python catalog: toggles, version-gated CVE checks and the makefile signal."""

from secbuddy.config import Config
from secbuddy.engine import scan
from secbuddy.rules.python_checks import PYTHON_RULES


def _run_rules(source: str, config: Config | None = None) -> list:
    return scan(source, config or Config(), PYTHON_RULES)


def _ids(diagnostics) -> list:
    return [d.rule_id for d in diagnostics]


class TestHashlib:
    SOURCE = "import hashlib\n\ndigest = hashlib.sha3_256(data).hexdigest()\n"

    def test_vulnerable_version_reports_cve(self):
        """3.9.5 is in the CVE-2022-37454 range: one diagnostic per hashlib reference."""
        diagnostics = _run_rules("import hashlib\n", Config(declared_version="3.9.5"))
        assert _ids(diagnostics) == ["hashlib"]
        assert "CVE-2022-37454" in diagnostics[0].message

    def test_fixed_version_reports_nothing(self):
        assert _run_rules("import hashlib\n", Config(declared_version="3.12.0")) == []

    def test_patched_releases_are_not_flagged(self):
        for version in ("3.9.16", "3.10.9", "3.11.1"):
            assert _run_rules(self.SOURCE, Config(declared_version=version)) == [], version

    def test_last_vulnerable_releases_are_flagged(self):
        for version in ("3.7.15", "3.9.15", "3.10.8", "3.11.0"):
            assert len(_run_rules(self.SOURCE, Config(declared_version=version))) == 2, version

    def test_default_version_is_not_vulnerable(self):
        assert _run_rules(self.SOURCE) == []


class TestEmailUtils:
    SOURCE = "from email.utils import parseaddr\n"

    def test_vulnerable_version(self):
        diagnostics = _run_rules(self.SOURCE, Config(declared_version="3.10.4"))
        assert _ids(diagnostics) == ["email-utils"]
        d = diagnostics[0]
        assert self.SOURCE[d.start_offset:d.end_offset] == "email.utils"
        assert d.message.startswith("email.utils ")
        assert "CVE-2023-27043" in d.message

    def test_newer_version(self):
        assert _run_rules(self.SOURCE, Config(declared_version="3.11.2")) == []


class TestMktemp:
    def test_requires_makefile_reference(self):
        source = "import tempfile\npath = tempfile.mktemp()\n"
        assert _run_rules(source) == []

    def test_reported_when_makefile_is_referenced(self):
        source = "import tempfile\n# generated for the makefile\npath = tempfile.mktemp(suffix='.mk')\n"
        diagnostics = _run_rules(source)
        assert _ids(diagnostics) == ["mktemp"]
        assert diagnostics[0].message.startswith("mktemp(suffix='.mk') can overwrite")
        assert "CVE-2023-2800" in diagnostics[0].message

    def test_mkstemp_is_not_flagged(self):
        assert _run_rules("# makefile\nfd, path = tempfile.mkstemp()\n") == []


class TestToggles:
    def test_error_mentions(self):
        source = "raise error('bad')\nERROR_CODE = 1\n"
        assert _ids(_run_rules(source)) == ["error-messages", "error-messages"]

    def test_error_anchored_at_word_start(self):
        assert _run_rules("raise ValueError('bad')\n") == []

    def test_error_toggle_off(self):
        assert _run_rules("error", Config(toggles={"python.error_messages": False})) == []

    def test_input_call(self):
        source = "name = input('Name: ')\n"
        diagnostics = _run_rules(source)
        assert _ids(diagnostics) == ["input-validation"]
        assert source[diagnostics[0].start_offset:diagnostics[0].end_offset] == "input('Name: ')"

    def test_nested_input_call(self):
        source = "n = int(input(prompt(name())))\n"
        diagnostics = _run_rules(source)
        assert _ids(diagnostics) == ["input-validation"]
        assert source[diagnostics[0].start_offset:diagnostics[0].end_offset] == "input(prompt(name()))"

    def test_input_toggle_off(self):
        assert _run_rules("input()", Config(toggles={"python.input_validation": False})) == []

    def test_raw_input_is_not_input(self):
        assert _run_rules("name = raw_input()\n") == []


def test_catalog_order_on_mixed_document():
    source = (
        "# makefile helper\n"
        "import email.utils, tempfile\n"
        "name = input()\n"
        "tmp = tempfile.mktemp()\n"
        "print('error')\n"
    )
    diagnostics = _run_rules(source, Config(declared_version="3.8.10"))
    assert _ids(diagnostics) == ["error-messages", "input-validation", "mktemp", "email-utils"]
