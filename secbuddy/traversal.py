"""
File system traversal: walk directories and collect scannable source files.

Collects files whose extension maps to a rule catalog (.c, .h, .py) while
skipping build output, dependency folders, VCS metadata and virtualenvs.

Typical usage:
    from pathlib import Path
    from secbuddy.traversal import find_source_files

    files = find_source_files(Path("./my_project"))
    c_only = find_source_files(Path("./my_project"), languages={"c"})
"""

import logging
from pathlib import Path
from typing import Callable, Optional, Set

from secbuddy.context import language_for_path

logger = logging.getLogger(__name__)

# Default directories to ignore during traversal
DEFAULT_IGNORE_DIRS: Set[str] = {
    # Build and distribution directories
    "build",
    "dist",
    "out",
    "bin",
    "obj",
    # Dependency and package directories
    "node_modules",
    "vendor",
    "third_party",
    "site-packages",
    # Version control
    ".git",
    ".svn",
    ".hg",
    # IDE and editor directories
    ".vscode",
    ".idea",
    # Python virtual environments and caches
    "venv",
    ".venv",
    "env",
    ".tox",
    "__pycache__",
    ".mypy_cache",
    ".pytest_cache",
}


def is_source_file(path: Path, languages: Optional[Set[str]] = None) -> bool:
    """
    Check if a file belongs to a supported language family.

    Examples:
        >>> is_source_file(Path("main.c"))
        True
        >>> is_source_file(Path("app.py"), languages={"c"})
        False
    """
    language = language_for_path(path)
    if language is None:
        return False
    return languages is None or language in languages


def should_ignore_directory(dir_path: Path, ignore_dirs: Set[str]) -> bool:
    """Only the directory name is checked, not the full path."""
    return dir_path.name in ignore_dirs


def find_source_files(
    root: Path,
    languages: Optional[Set[str]] = None,
    ignore_dirs: Optional[Set[str]] = None,
    follow_symlinks: bool = False,
    filter_fn: Optional[Callable[[Path], bool]] = None,
) -> list[Path]:
    """
    Recursively find all scannable source files in a directory tree.

    Args:
        root: Root directory to start traversal from.
        languages: Language families to collect (e.g. {"c"}); None means all.
        ignore_dirs: Directory names to skip. If None, uses DEFAULT_IGNORE_DIRS.
        follow_symlinks: If False (default), symlinks are skipped.
        filter_fn: Optional extra predicate a file must satisfy.

    Returns:
        Paths of all matching files, sorted for deterministic ordering.

    Raises:
        FileNotFoundError: If the root directory does not exist.
        NotADirectoryError: If root is not a directory.
    """
    if ignore_dirs is None:
        ignore_dirs = DEFAULT_IGNORE_DIRS

    root = root.resolve()

    if not root.exists():
        logger.error("Root directory does not exist: %s", root)
        raise FileNotFoundError(f"Root directory does not exist: {root}")

    if not root.is_dir():
        logger.error("Root path is not a directory: %s", root)
        raise NotADirectoryError(f"Root path is not a directory: {root}")

    logger.info("Starting traversal from: %s", root)

    collected_files: list[Path] = []
    # Resolved directories already walked; followed symlinks may loop back
    visited: set[Path] = set()

    def _walk_directory(current_dir: Path) -> None:
        resolved = current_dir.resolve()
        if resolved in visited:
            logger.debug("Already visited, skipping: %s", current_dir)
            return
        visited.add(resolved)
        try:
            for entry in current_dir.iterdir():
                if entry.is_symlink() and not follow_symlinks:
                    logger.debug("Skipping symlink: %s", entry)
                    continue

                if entry.is_dir():
                    if should_ignore_directory(entry, ignore_dirs):
                        logger.debug("Ignoring directory: %s", entry)
                        continue
                    _walk_directory(entry)

                elif entry.is_file() and is_source_file(entry, languages):
                    if filter_fn is not None and not filter_fn(entry):
                        logger.debug("Filtered out by custom filter: %s", entry)
                        continue
                    collected_files.append(entry)

        except PermissionError as e:
            logger.warning("Permission denied accessing directory %s: %s", current_dir, e)
        except OSError as e:
            logger.warning("Error accessing directory %s: %s", current_dir, e)

    _walk_directory(root)

    collected_files.sort()

    logger.info(
        "Traversal complete: found %d source file(s) in %s",
        len(collected_files),
        root,
    )

    return collected_files
