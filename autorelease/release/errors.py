"""Error type for the release flow."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    # Expected absence: no merged release PR, missing file, no changelog entry.
    "not_found",
    # Upstream data contract violation: bad branch name, unparsable payload.
    "malformed",
    # API call failed or answered with a non-success status.
    "transport",
    # Invalid local configuration.
    "config",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    kind: ReleaseErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message
