# Per-file analysis context: store file path, source text and language, and map
# engine offsets back to 1-based line/column positions for reporting.

import logging
from bisect import bisect_right
from pathlib import Path
from typing import Optional

from secbuddy.findings.models import Diagnostic, Finding, Location

logger = logging.getLogger(__name__)

LANGUAGE_BY_SUFFIX = {
    ".c": "c",
    ".h": "c",
    ".py": "python",
}


def language_for_path(path: Path) -> Optional[str]:
    """Return the language family for a file by extension, or None if unsupported."""
    return LANGUAGE_BY_SUFFIX.get(path.suffix.lower())


def _line_starts(text: str) -> list[int]:
    starts = [0]
    for index, ch in enumerate(text):
        if ch == "\n":
            starts.append(index + 1)
    return starts


class FileContext:
    """
    Per-file state for scanning: path, decoded source text and language family.

    Use position_at(offset) to turn engine offsets into line/column and
    get_source_span(context, start, end) for snippets.
    """

    def __init__(self, path: Path, text: str, language: str) -> None:
        self.path = path
        self.text = text
        self.language = language
        self._line_starts: Optional[list[int]] = None

    @property
    def line_count(self) -> int:
        return len(self._starts())

    def _starts(self) -> list[int]:
        if self._line_starts is None:
            self._line_starts = _line_starts(self.text)
        return self._line_starts

    def position_at(self, offset: int) -> tuple[int, int]:
        """
        Return the 1-based (line, column) of a character offset.

        Offsets past the end of the text are clamped to the end.
        """
        offset = max(0, min(offset, len(self.text)))
        starts = self._starts()
        line_index = bisect_right(starts, offset) - 1
        return line_index + 1, offset - starts[line_index] + 1


def get_source_span(context: FileContext, start: int, end: int) -> str:
    """Return the text between two character offsets."""
    return context.text[start:end]


def to_finding(context: FileContext, diagnostic: Diagnostic) -> Finding:
    """Resolve a diagnostic's offsets against its file."""
    line, column = context.position_at(diagnostic.start_offset)
    end_line, end_column = context.position_at(diagnostic.end_offset)
    return Finding(
        rule_id=diagnostic.rule_id,
        message=diagnostic.message,
        severity=diagnostic.severity,
        source=diagnostic.source,
        location=Location(
            path=context.path,
            line=line,
            column=column,
            end_line=end_line,
            end_column=end_column,
            snippet=get_source_span(context, diagnostic.start_offset, diagnostic.end_offset),
        ),
    )


def create_context(path: Path, language: Optional[str] = None) -> Optional[FileContext]:
    """
    Read a source file into a FileContext.

    - Unreadable file (permission, missing): returns None and logs an error.
    - Unsupported extension with no explicit language: returns None and logs a warning.
    - Invalid UTF-8 is decoded with replacement characters, never rejected.
    """
    if language is None:
        language = language_for_path(path)
    if language is None:
        logger.warning("Unsupported file type, skipping: %s", path)
        return None

    try:
        source = path.read_bytes()
    except OSError as e:
        logger.error("Failed to read file %s: %s", path, e)
        return None

    text = source.decode("utf-8", errors="replace")
    logger.info("Loaded %s (%s): %d character(s)", path, language, len(text))
    return FileContext(path=path, text=text, language=language)


def load_contexts(paths: list[Path]) -> list[FileContext]:
    """
    Read multiple files into FileContexts.

    Unreadable or unsupported files are skipped (logged). Order matches
    input order; failed files are omitted.
    """
    contexts: list[FileContext] = []
    for path in paths:
        ctx = create_context(path)
        if ctx is not None:
            contexts.append(ctx)
    return contexts
