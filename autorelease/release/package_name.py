"""Guess a package name from the ecosystem manifest on the default branch.

The name is only a hint for picking the right block of a multi-package
changelog, so every failure here is soft: the release goes ahead without it.
"""

from __future__ import annotations

import json
import re
import tomllib
from collections.abc import Callable
from dataclasses import dataclass

from autorelease.core.config import ReleaseConfig
from autorelease.core.result import Err, Ok, Result
from autorelease.core.structured import as_str_dict, get_nested, get_str
from autorelease.forge.github import get_file_text
from autorelease.forge.http import HttpClient
from autorelease.output.console import ConsoleProtocol
from autorelease.release.errors import ReleaseError

ManifestParser = Callable[[str], str | None]


@dataclass(frozen=True, slots=True)
class ManifestRule:
    path: str
    parse: ManifestParser


@dataclass(frozen=True, slots=True)
class PackageNameResolution:
    name: str | None
    # Why the manifest lookup failed, when it did.
    warning: ReleaseError | None = None


def _json_name(text: str) -> str | None:
    try:
        data = as_str_dict(json.loads(text))
    except json.JSONDecodeError:
        return None
    if data is None:
        return None
    return get_str(data, "name")


def _toml_name(*tables: tuple[str, ...]) -> ManifestParser:
    def parse(text: str) -> str | None:
        try:
            data: dict[str, object] = tomllib.loads(text)
        except tomllib.TOMLDecodeError:
            return None
        for keys in tables:
            table = get_nested(data, *keys)
            name = get_str(table, "name") if table is not None else None
            if name is not None:
                return name
        return None

    return parse


_PUBSPEC_NAME_RE = re.compile(r"^name:\s*['\"]?(?P<name>[\w.-]+)['\"]?\s*$", re.MULTILINE)


def _pubspec_name(text: str) -> str | None:
    m = _PUBSPEC_NAME_RE.search(text)
    return m.group("name") if m is not None else None


MANIFESTS: dict[str, ManifestRule] = {
    "node": ManifestRule("package.json", _json_name),
    "php": ManifestRule("composer.json", _json_name),
    "php-yoshi": ManifestRule("composer.json", _json_name),
    "python": ManifestRule("pyproject.toml", _toml_name(("project",), ("tool", "poetry"))),
    "rust": ManifestRule("Cargo.toml", _toml_name(("package",))),
    "dart": ManifestRule("pubspec.yaml", _pubspec_name),
}


def parse_manifest(release_type: str, text: str) -> Result[str, ReleaseError]:
    rule = MANIFESTS.get(release_type)
    if rule is None:
        return Err(ReleaseError(kind="config", message=f"unknown release type: {release_type}"))
    name = rule.parse(text)
    if name is None:
        return Err(
            ReleaseError(
                kind="malformed",
                message=f"no package name in {rule.path}",
                hint=f"release type: {release_type}",
            )
        )
    return Ok(name)


def resolve_package_name(
    *,
    http: HttpClient,
    config: ReleaseConfig,
    ref: str,
    console: ConsoleProtocol,
) -> PackageNameResolution:
    if config.package_name:
        return PackageNameResolution(name=config.package_name)
    if not config.release_type:
        return PackageNameResolution(name=None)

    rule = MANIFESTS.get(config.release_type)
    if rule is None:
        return PackageNameResolution(
            name=None,
            warning=ReleaseError(
                kind="config",
                message=f"no manifest known for release type '{config.release_type}'",
            ),
        )

    path = config.repo_path(rule.path)
    release_type = config.release_type
    parsed = get_file_text(
        http=http, api_url=config.api_url, repo=config.repo_url, path=path, ref=ref
    ).and_then(lambda text: parse_manifest(release_type, text))
    if isinstance(parsed, Err):
        console.warning(f"package name not resolved: {parsed.error.message}")
        return PackageNameResolution(name=None, warning=parsed.error)

    console.print(f"package name: {parsed.value} (from {path})")
    return PackageNameResolution(name=parsed.value)
