"""github-release command - publish the merged release PR as a GitHub release."""

from __future__ import annotations

from pathlib import Path

import typer

from autorelease.cli.commands._helpers import (
    exit_on_release_error,
    exit_user_error,
    exit_with_code,
    load_release_config,
)
from autorelease.cli.context import build_context
from autorelease.core.config import ReleaseConfig, resolve_token
from autorelease.core.result import Err
from autorelease.forge.http import HttpClient, RealHttpClient
from autorelease.output.errors import outcome_exit_code
from autorelease.release.publisher import ReleasePublisher


def make_http(config: ReleaseConfig) -> HttpClient:
    return RealHttpClient(token=config.token)


def github_release(
    repo_url: str | None = typer.Option(
        None, "--repo-url", help="Repository (owner/name or GitHub URL)."
    ),
    config_path: Path | None = typer.Option(
        None, "--config", help="autorelease.toml to read defaults from."
    ),
    label: str | None = typer.Option(None, "--label", help="Pending label on release PRs."),
    published_label: str | None = typer.Option(
        None, "--published-label", help="Label added once the release exists."
    ),
    package_name: str | None = typer.Option(None, "--package-name"),
    release_type: str | None = typer.Option(
        None, "--release-type", help="Manifest used to guess the package name (node, python, ...)."
    ),
    api_url: str | None = typer.Option(None, "--api-url"),
    changelog_path: str | None = typer.Option(None, "--changelog-path"),
    path: str | None = typer.Option(None, "--path", help="Monorepo package directory."),
    draft: bool = typer.Option(False, "--draft", help="Create the release as a draft."),
    token: str | None = typer.Option(
        None, "--token", help="API token (defaults to $GITHUB_TOKEN).", show_default=False
    ),
) -> None:
    """Create a GitHub release for the most recently merged release PR."""
    ctx = build_context()
    console = ctx.console

    base = load_release_config(config_path=config_path, repo_url=repo_url, console=console)
    try:
        config = base.with_overrides(
            label=label,
            published_label=published_label,
            package_name=package_name,
            release_type=release_type,
            api_url=api_url,
            changelog_path=changelog_path,
            path=path,
            # --draft only ever enables drafts.
            draft=draft or None,
            token=token,
        )
    except ValueError as e:
        exit_user_error(str(e), console)
    config = resolve_token(config)
    if not config.token:
        console.warning("no API token; unauthenticated requests cannot create releases")

    console.header(f"release {config.repo_url}")
    publisher = ReleasePublisher(config, http=make_http(config), console=console)
    result = publisher.create_release()
    if isinstance(result, Err):
        exit_on_release_error(result.error, console)

    outcome = result.value
    if not outcome.notes_found:
        console.warning(f"{outcome.release.tag_name} was published with an empty body")
    exit_with_code(outcome_exit_code(outcome))
