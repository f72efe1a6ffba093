"""Extract the release notes for one version from a CHANGELOG.

Changelogs written by different generations of release tooling coexist in
the same file, so a line is classified by a small set of recognition rules
rather than by one heading grammar:

    ## 1.2.0 (2019-05-29)                  version first (optionally v1.2.0)
    ## [1.2.0](https://...) (2019-05-29)   version as a markdown link
    ### [1.1.1](https://...)               patch entries one level deeper
    ## 2019-01-30 - v2.1.0                 date first
    ### v2.0.0                             old generator, level 3

Multi-package changelogs (php-yoshi) group one batch heading per release
with one nested block per package:

    ## 0.105.0

    <details><summary>google/cloud-automl 1.0.0</summary>
    ...
    </details>

Package blocks may also be sub-headings (`### google/cloud-automl 1.0.0`)
or bullet groups (`* google/cloud-automl 1.0.0` followed by indented items).

A release section runs from its heading to the next release heading of any
level, or to the next other heading at level 2 or above. Every release
heading shares one rank whatever its depth; `### Features` under a release
is a category, not a boundary.
"""

from __future__ import annotations

import re
import textwrap
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Literal, TypeAlias

from autorelease.release.version import normalize_version

__all__ = [
    "ContentLine",
    "DetailsEnd",
    "Heading",
    "PackageEntry",
    "Token",
    "extract_latest_release_notes",
    "iter_sections",
    "iter_tokens",
]

_VERSION = r"(?P<version>\d+\.\d+\.\d+(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?)"
# What may follow a version: end of text, whitespace, "](", "(", ":" or ",".
_AFTER_VERSION = r"\]?(?=$|[\s(:,])"
_PACKAGE = r"(?P<package>[@A-Za-z][\w@./-]*)"

# ATX headings need a space after the hashes; "#42 was closed" is prose.
_HEADING_RE = re.compile(r"^(?P<hashes>#{1,6})(?:\s+(?P<text>.*?))?\s*$")
_FENCE_RE = re.compile(r"^\s*(```|~~~)")

_VERSION_FIRST_RE = re.compile(rf"^\[?[vV]?{_VERSION}{_AFTER_VERSION}")
_DATE_FIRST_RE = re.compile(
    r"^(?:\d{4}-\d{2}-\d{2}|\d{2}-\d{2}-\d{4}|\d{4}/\d{2}/\d{2})\s*-?\s*"
    rf"\[?[vV]?{_VERSION}{_AFTER_VERSION}"
)
_PACKAGE_HEADING_RE = re.compile(
    rf"^\[?{_PACKAGE}(?:@|\s+)\[?[vV]?{_VERSION}{_AFTER_VERSION}"
)
_SUMMARY_RE = re.compile(
    rf"<summary>\s*{_PACKAGE}(?:@|\s+)[vV]?{_VERSION}\s*</summary>"
)
_BULLET_RE = re.compile(
    rf"^[*-]\s+(?:\*\*)?{_PACKAGE}(?:\*\*)?(?:@|\s+)(?:\*\*)?\[?[vV]?{_VERSION}\]?(?:\*\*)?:?\s*$"
)

# Words that read like a package prefix but only introduce a release heading.
_RELEASE_WORDS = frozenset({"release", "version", "v"})


@dataclass(frozen=True, slots=True)
class Heading:
    level: int
    text: str
    version: str | None = None
    package: str | None = None

    @property
    def is_release(self) -> bool:
        """A version heading not scoped to a package."""
        return self.version is not None and self.package is None


@dataclass(frozen=True, slots=True)
class PackageEntry:
    """Opening line of a nested per-package block."""

    text: str
    package: str
    version: str
    style: Literal["summary", "bullet"]


@dataclass(frozen=True, slots=True)
class DetailsEnd:
    text: str


@dataclass(frozen=True, slots=True)
class ContentLine:
    text: str


Token: TypeAlias = Heading | PackageEntry | DetailsEnd | ContentLine


def _classify_heading(level: int, text: str, raw: str) -> Heading:
    for rule in (_VERSION_FIRST_RE, _DATE_FIRST_RE):
        m = rule.match(text)
        if m is not None:
            return Heading(level=level, text=raw, version=m.group("version"))

    m = _PACKAGE_HEADING_RE.match(text)
    if m is not None:
        package = m.group("package")
        if package.lower() in _RELEASE_WORDS:
            return Heading(level=level, text=raw, version=m.group("version"))
        return Heading(level=level, text=raw, version=m.group("version"), package=package)

    return Heading(level=level, text=raw)


def iter_tokens(changelog_text: str) -> Iterator[Token]:
    """Lazily classify every line of a changelog."""
    in_fence = False
    for raw in changelog_text.replace("\r\n", "\n").split("\n"):
        # Match on the trimmed line, but keep content verbatim: two trailing
        # spaces are a markdown hard break.
        line = raw.rstrip()

        if _FENCE_RE.match(line):
            in_fence = not in_fence
            yield ContentLine(raw)
            continue
        if in_fence:
            yield ContentLine(raw)
            continue

        m = _HEADING_RE.match(line)
        if m is not None:
            yield _classify_heading(len(m.group("hashes")), m.group("text") or "", line)
            continue

        m = _SUMMARY_RE.search(line)
        if m is not None:
            yield PackageEntry(line, m.group("package"), m.group("version"), "summary")
            continue

        if "</details>" in line:
            yield DetailsEnd(line)
            continue

        m = _BULLET_RE.match(line)
        if m is not None:
            yield PackageEntry(line, m.group("package"), m.group("version"), "bullet")
            continue

        yield ContentLine(raw)


def _render(lines: Sequence[str]) -> str:
    start = 0
    end = len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return "\n".join(lines[start:end])


def _release_body(tokens: Sequence[Token], index: int) -> list[Token]:
    heading = tokens[index]
    assert isinstance(heading, Heading)
    stop_level = min(heading.level, 2)

    body: list[Token] = []
    for token in tokens[index + 1 :]:
        if isinstance(token, Heading) and (token.is_release or token.level <= stop_level):
            break
        body.append(token)
    return body


def _summary_block(tokens: Sequence[Token], index: int) -> list[str]:
    opening = tokens[index]
    if "</details>" in opening.text:
        return []
    lines: list[str] = []
    for token in tokens[index + 1 :]:
        if isinstance(token, DetailsEnd):
            break
        # A bullet entry such as "* google-gax 2.0.0" is just an item here.
        if isinstance(token, PackageEntry) and token.style == "summary":
            break
        if isinstance(token, Heading) and token.is_release:
            break
        lines.append(token.text)
    return lines


def _bullet_block(tokens: Sequence[Token], index: int) -> list[str]:
    lines: list[str] = []
    for token in tokens[index + 1 :]:
        if not isinstance(token, ContentLine):
            break
        if token.text.strip() and not token.text[:1].isspace():
            break
        lines.append(token.text)
    return textwrap.dedent("\n".join(lines)).split("\n")


def _heading_block(tokens: Sequence[Token], index: int) -> list[str]:
    heading = tokens[index]
    assert isinstance(heading, Heading)
    lines: list[str] = []
    for token in tokens[index + 1 :]:
        if isinstance(token, DetailsEnd | PackageEntry):
            break
        if isinstance(token, Heading) and (token.is_release or token.level <= heading.level):
            break
        lines.append(token.text)
    return lines


def _same_package(found: str, wanted: str) -> bool:
    return found.casefold() == wanted.strip().casefold()


def _find_package_block(
    tokens: Sequence[Token],
    *,
    package: str | None,
    version: str | None,
) -> list[str] | None:
    """First nested package block matching `package` and/or `version`."""
    for index, token in enumerate(tokens):
        if isinstance(token, PackageEntry):
            if token.style == "bullet" and package is None:
                # Too easy to confuse with an ordinary bullet without a package to anchor on.
                continue
            found_package, found_version = token.package, token.version
        elif isinstance(token, Heading) and token.package is not None:
            assert token.version is not None
            found_package, found_version = token.package, token.version
        else:
            continue

        if package is not None and not _same_package(found_package, package):
            continue
        if version is not None and found_version != version:
            continue

        if isinstance(token, Heading):
            return _heading_block(tokens, index)
        if token.style == "summary":
            return _summary_block(tokens, index)
        return _bullet_block(tokens, index)
    return None


def extract_latest_release_notes(
    changelog_text: str,
    version: str,
    package_name: str | None = None,
) -> str | None:
    """Return the notes documenting `version`, or None when nothing matches.

    The whole document is scanned, so newer entries above the requested one
    (for example when the previous release was a patch) are skipped rather
    than returned. The first, most recent, matching heading wins.

    Args:
        changelog_text: Full changelog markdown
        version: Requested version, with or without a leading "v"
        package_name: In multi-package changelogs, narrow the result to
            this package's nested block

    Returns:
        The section body without its heading, trimmed of blank edge lines
        ("" when the section exists but is empty), or None.
    """
    target = normalize_version(version)
    if not target:
        return None

    tokens = list(iter_tokens(changelog_text))
    package = package_name.strip() if package_name and package_name.strip() else None

    for index, token in enumerate(tokens):
        if isinstance(token, Heading) and token.is_release and token.version == target:
            body = _release_body(tokens, index)
            if package is not None:
                nested = _find_package_block(body, package=package, version=None)
                if nested is not None:
                    return _render(nested)
            return _render([t.text for t in body])

    nested = _find_package_block(tokens, package=package, version=target)
    if nested is not None:
        return _render(nested)
    return None


def iter_sections(changelog_text: str) -> Iterator[tuple[Heading, str]]:
    """Yield every release heading with its rendered section body."""
    tokens = list(iter_tokens(changelog_text))
    for index, token in enumerate(tokens):
        if isinstance(token, Heading) and token.is_release:
            yield token, _render([t.text for t in _release_body(tokens, index)])
