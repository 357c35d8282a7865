from __future__ import annotations

"""
Typer CLI entry point: the host around the detection engine.

The engine only turns (text, config) into diagnostics. This module does
the surrounding plumbing for command-line use:
- resolves the settings snapshot (settings file, then CLI overrides)
- finds .c/.h/.py files for a file or directory target
- scans each file with its language family's catalog
- converts offsets to line/column and prints findings (rich table or JSON)
"""

import logging
from pathlib import Path
from typing import List, Optional

import typer

from secbuddy.config import Config, find_config_file, get_default_config, load_config
from secbuddy.context import language_for_path, load_contexts, to_finding
from secbuddy.engine import scan_document
from secbuddy.errors import ConfigError
from secbuddy.findings.models import Finding
from secbuddy.reporting.console import findings_to_json, print_findings
from secbuddy.rules.base import ContextGate, Toggle, VersionGate
from secbuddy.rules.catalog import CATALOGS
from secbuddy.traversal import find_source_files

logger = logging.getLogger(__name__)

app = typer.Typer(help="sec-buddy - flag known-vulnerable API usage in C and Python source files.")


@app.callback()
def _main(
    debug: bool = typer.Option(False, "--debug", help="Log engine decisions to stderr."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _collect_files(target: Path, follow_symlinks: bool = False) -> List[Path]:
    """
    Resolve a target path into the list of files to scan.

    - A supported file (.c, .h, .py) is scanned on its own
    - A directory is walked with traversal.find_source_files()
    """
    if target.is_file():
        if language_for_path(target) is None:
            raise typer.BadParameter(f"Unsupported file type (expected .c, .h or .py): {target}")
        return [target]

    if target.is_dir():
        files = find_source_files(target, follow_symlinks=follow_symlinks)
        if not files:
            logger.warning("No source files found under %s", target)
        return files

    raise typer.BadParameter(f"Target path is neither a file nor a directory: {target}")


def _resolve_config(
    target: Path,
    config_path: Optional[Path],
    max_problems: Optional[int],
    python_version: Optional[str],
    disable: List[str],
) -> Config:
    if config_path is None:
        config_path = find_config_file(target)
    try:
        config = load_config(config_path) if config_path is not None else get_default_config()
    except ConfigError as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc

    unknown = [name for name in disable if name not in config.toggles]
    if unknown:
        raise typer.BadParameter(f"Unknown toggle(s): {', '.join(unknown)}", param_hint="--disable")

    return config.with_overrides(
        problem_cap=max_problems,
        declared_version=python_version,
        toggles={name: False for name in disable},
    )


@app.command()
def analyze(
    target: Path = typer.Argument(
        ...,
        exists=True,
        readable=True,
        resolve_path=True,
        help="Source file or directory to analyze.",
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        exists=True,
        dir_okay=False,
        help="Settings file (.secbuddy.toml or pyproject.toml). Searched upwards from TARGET if omitted.",
    ),
    max_problems: Optional[int] = typer.Option(
        None, "--max-problems", min=0, help="Maximum findings per file."
    ),
    python_version: Optional[str] = typer.Option(
        None, "--python-version", help="Target Python version for version-dependent checks."
    ),
    disable: List[str] = typer.Option(
        [], "--disable", "-d", help="Toggle to switch off, e.g. c.strcmp (repeatable)."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print findings as JSON."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show remediation hints."),
    follow_symlinks: bool = typer.Option(
        False, "--follow-symlinks", help="Follow symbolic links when walking a directory."
    ),
) -> None:
    """
    Analyze a single file or all supported files under a directory.

    Exits with code 1 when any finding is reported.
    """
    config = _resolve_config(target, config_path, max_problems, python_version, disable)
    # Unreadable files are logged and left out by load_contexts
    contexts = load_contexts(_collect_files(target, follow_symlinks=follow_symlinks))
    analyzed = [ctx.path for ctx in contexts]

    all_findings: List[Finding] = []
    for ctx in contexts:
        diagnostics = scan_document(ctx.text, config, ctx.language)
        all_findings.extend(to_finding(ctx, d) for d in diagnostics)

    if as_json:
        typer.echo(findings_to_json(all_findings))
    else:
        print_findings(all_findings, analyzed_files=analyzed, verbose=verbose)

    if all_findings:
        raise typer.Exit(code=1)


@app.command("rules")
def list_rules() -> None:
    """List every rule per language family, in catalog order, with how it is activated."""
    for language, catalog in CATALOGS.items():
        typer.echo(f"{language}:")
        for rule in catalog:
            activation = rule.activation
            if isinstance(activation, Toggle):
                how = f"toggle {activation.name}"
            elif isinstance(activation, VersionGate):
                how = f"python version in {', '.join(activation.ranges)}"
            elif isinstance(activation, ContextGate):
                how = f"when signal {activation.signal} is present"
            else:
                how = "always"
            refs = f" ({', '.join(rule.references)})" if rule.references else ""
            typer.echo(f"  {rule.id:<18} {rule.name}{refs} [{how}]")


def main() -> None:
    """Entry point for `python -m secbuddy.main` and the `secbuddy` script."""
    app()


if __name__ == "__main__":
    main()
