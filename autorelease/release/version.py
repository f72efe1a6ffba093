from __future__ import annotations

import re
from dataclasses import dataclass

_VERSION_RE = re.compile(
    r"^[vV]?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?P<suffix>(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?)$"
)


@dataclass(frozen=True, slots=True)
class VersionTag:
    major: int
    minor: int
    patch: int
    # Pre-release and/or build metadata, including the leading "-" or "+".
    suffix: str = ""

    @property
    def version(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}{self.suffix}"

    @property
    def tag(self) -> str:
        return f"v{self.version}"

    @property
    def is_prerelease(self) -> bool:
        return self.suffix.startswith("-")

    def __str__(self) -> str:
        return self.tag


def parse_version_tag(text: str) -> VersionTag | None:
    m = _VERSION_RE.match(text.strip())
    if m is None:
        return None
    return VersionTag(int(m.group(1)), int(m.group(2)), int(m.group(3)), m.group("suffix"))


def normalize_version(text: str) -> str:
    """Strip whitespace and one leading "v" so "v1.2.3" and "1.2.3" compare equal."""
    s = text.strip()
    if s[:1] in ("v", "V"):
        s = s[1:]
    return s
