"""notes command - extract release notes from a local changelog."""

from __future__ import annotations

from pathlib import Path

import typer

from autorelease.cli.commands._helpers import exit_user_error, exit_with_code
from autorelease.cli.context import build_context
from autorelease.core.errors import ErrorCode
from autorelease.release.changelog import extract_latest_release_notes, iter_sections


def notes(
    changelog: Path = typer.Argument(Path("CHANGELOG.md"), help="Changelog file."),
    version: str | None = typer.Option(None, "--version", "-v", help="Version, e.g. v1.2.3."),
    package_name: str | None = typer.Option(
        None, "--package-name", help="Package block to select in multi-package changelogs."
    ),
    list_versions: bool = typer.Option(False, "--list", help="List every release heading."),
) -> None:
    """Print the changelog section for a version (stdout stays pipe-friendly)."""
    # Diagnostics go to stderr so `autorelease notes ... > body.md` stays clean.
    console = build_context(stderr=True).console

    try:
        text = changelog.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        exit_user_error(f"cannot read {changelog}: {e}", console)

    if list_versions:
        for heading, body in iter_sections(text):
            lines = len(body.splitlines()) if body else 0
            typer.echo(f"{heading.version}\t{lines} lines\t{heading.text.strip()}")
        exit_with_code(int(ErrorCode.OK))

    if version is None:
        exit_user_error("missing --version", console, hint="or pass --list")

    section = extract_latest_release_notes(text, version, package_name)
    if section is None:
        console.warning(f"no entry for {version} in {changelog}")
        exit_with_code(int(ErrorCode.NOT_FOUND))

    typer.echo(section)
