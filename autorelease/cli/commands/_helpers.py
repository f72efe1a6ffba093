"""Shared helpers for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer

from autorelease.core.config import ReleaseConfig, load_config
from autorelease.core.errors import ErrorCode
from autorelease.core.result import Err
from autorelease.output.console import ConsoleProtocol, Style
from autorelease.output.errors import print_release_error, release_error_exit_code
from autorelease.release.errors import ReleaseError


def exit_with_code(code: int) -> NoReturn:
    raise typer.Exit(code=code)


def exit_user_error(message: str, console: ConsoleProtocol, *, hint: str | None = None) -> NoReturn:
    console.error(message)
    if hint:
        console.print(f"hint: {hint}", Style.DIM)
    raise typer.Exit(code=int(ErrorCode.USER_ERROR))


def exit_on_release_error(error: ReleaseError, console: ConsoleProtocol) -> NoReturn:
    print_release_error(error, console)
    raise typer.Exit(code=release_error_exit_code(error))


def load_release_config(
    *,
    config_path: Path | None,
    repo_url: str | None,
    console: ConsoleProtocol,
) -> ReleaseConfig:
    """Config from --config (if any), with --repo-url taking precedence."""
    if config_path is not None:
        loaded = load_config(config_path)
        if isinstance(loaded, Err):
            exit_user_error(loaded.error.message, console)
        config = loaded.value
        if repo_url is None:
            return config
        try:
            return config.with_overrides(repo_url=repo_url)
        except ValueError as e:
            exit_user_error(str(e), console)

    if repo_url is None:
        exit_user_error(
            "missing repository",
            console,
            hint="pass --repo-url owner/name or --config autorelease.toml",
        )
    try:
        return ReleaseConfig(repo_url=repo_url)
    except ValueError as e:
        exit_user_error(str(e), console)
