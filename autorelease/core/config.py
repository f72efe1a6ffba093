"""Typed release configuration.

A ReleaseConfig is built once per release attempt, from an optional
`autorelease.toml` file plus command line overrides, and is read-only
afterwards.

Example `autorelease.toml`:

    [release]
    repo_url = "googleapis/foo"
    release_type = "node"
    label = "autorelease: pending"
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_int, get_str, get_table

__all__ = [
    "ConfigError",
    "ReleaseConfig",
    "load_config",
    "normalize_repo_url",
    "resolve_token",
    "DEFAULT_API_URL",
    "DEFAULT_CHANGELOG_PATH",
    "DEFAULT_PENDING_LABEL",
    "DEFAULT_PUBLISHED_LABEL",
    "DEFAULT_PAGE_SIZE",
    "TOKEN_ENV_VAR",
]

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_CHANGELOG_PATH = "CHANGELOG.md"
DEFAULT_PENDING_LABEL = "autorelease: pending"
DEFAULT_PUBLISHED_LABEL = "autorelease: tagged"
# Release PRs are usually merged right before this runs; one page is enough.
DEFAULT_PAGE_SIZE = 100

TOKEN_ENV_VAR = "GITHUB_TOKEN"

_REPO_SLUG_RE = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


def normalize_repo_url(value: str) -> str | None:
    """Reduce a repository reference to `owner/name`.

    Accepts `owner/name`, `https://github.com/owner/name` and the same with a
    `.git` suffix or trailing slash. Returns None when the value does not
    name a repository.
    """
    s = value.strip()
    for prefix in ("https://github.com/", "http://github.com/", "git@github.com:"):
        if s.startswith(prefix):
            s = s[len(prefix) :]
            break
    s = s.rstrip("/")
    if s.endswith(".git"):
        s = s[: -len(".git")]
    if not _REPO_SLUG_RE.match(s):
        return None
    return s


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Configuration for one release attempt."""

    repo_url: str
    label: str = DEFAULT_PENDING_LABEL
    published_label: str = DEFAULT_PUBLISHED_LABEL
    package_name: str | None = None
    api_url: str = DEFAULT_API_URL
    release_type: str | None = None
    changelog_path: str = DEFAULT_CHANGELOG_PATH
    # Monorepo sub-directory holding the changelog and manifest.
    path: str | None = None
    token: str | None = None
    draft: bool = False
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        slug = normalize_repo_url(self.repo_url)
        if slug is None:
            raise ValueError(f"invalid repo_url (expected owner/name): {self.repo_url!r}")
        object.__setattr__(self, "repo_url", slug)
        object.__setattr__(self, "api_url", self.api_url.rstrip("/"))
        if self.page_size < 1:
            raise ValueError(f"page_size must be positive: {self.page_size}")

    def __repr__(self) -> str:
        token = "***" if self.token else None
        return (
            f"ReleaseConfig(repo_url={self.repo_url!r}, label={self.label!r}, "
            f"package_name={self.package_name!r}, release_type={self.release_type!r}, "
            f"api_url={self.api_url!r}, token={token!r})"
        )

    def repo_path(self, file: str) -> str:
        """Path of `file` inside the repository, honoring the monorepo prefix."""
        if not self.path:
            return file
        return f"{self.path.strip('/')}/{file}"

    def with_overrides(self, **overrides: object) -> ReleaseConfig:
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if not changes:
            return self
        return replace(self, **changes)  # type: ignore[arg-type]

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ReleaseConfig:
        """Create a ReleaseConfig from parsed TOML.

        The `[release]` table is used when present, otherwise the root table.

        Raises:
            ValueError: If `repo_url` is missing or a value has the wrong type.
        """
        table: StrDict = get_table(data, "release") or dict(data)

        repo_url = get_str(table, "repo_url")
        if repo_url is None:
            raise ValueError("missing required key: repo_url")

        if "draft" in table and get_bool(table, "draft") is None:
            raise ValueError("draft must be a boolean")
        if "page_size" in table and get_int(table, "page_size") is None:
            raise ValueError("page_size must be an integer")

        return cls(
            repo_url=repo_url,
            label=get_str(table, "label") or DEFAULT_PENDING_LABEL,
            published_label=get_str(table, "published_label") or DEFAULT_PUBLISHED_LABEL,
            package_name=get_str(table, "package_name"),
            api_url=get_str(table, "api_url") or DEFAULT_API_URL,
            release_type=get_str(table, "release_type"),
            changelog_path=get_str(table, "changelog_path") or DEFAULT_CHANGELOG_PATH,
            path=get_str(table, "path"),
            token=get_str(table, "token"),
            draft=get_bool(table, "draft") or False,
            page_size=get_int(table, "page_size") or DEFAULT_PAGE_SIZE,
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load and parse a release configuration from a TOML file.

    Args:
        path: Path to autorelease.toml

    Returns:
        Ok(ReleaseConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(ReleaseConfig.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def resolve_token(config: ReleaseConfig, environ: Mapping[str, str] | None = None) -> ReleaseConfig:
    """Fill the API token from GITHUB_TOKEN when the config has none."""
    if config.token:
        return config
    env = os.environ if environ is None else environ
    token = env.get(TOKEN_ENV_VAR, "").strip()
    if not token:
        return config
    return replace(config, token=token)
