from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from autorelease.release.errors import ReleaseError
from autorelease.release.version import VersionTag


@dataclass(frozen=True, slots=True)
class PullRequestSummary:
    """Read-only snapshot of a pull request as listed by the forge."""

    number: int
    head_label: str  # owner:branch
    base_label: str
    labels: frozenset[str]
    merged_at: str | None  # None: closed without merge

    @property
    def is_merged(self) -> bool:
        return bool(self.merged_at)


@dataclass(frozen=True, slots=True)
class ReleaseCandidate:
    """A merged release PR and the version its branch encodes."""

    pull: PullRequestSummary
    version: VersionTag


@dataclass(frozen=True, slots=True)
class ReleaseRequest:
    tag_name: str
    name: str
    body: str
    target_commitish: str
    draft: bool = False
    prerelease: bool = False

    def as_payload(self) -> dict[str, object]:
        return {
            "tag_name": self.tag_name,
            "name": self.name,
            "body": self.body,
            "target_commitish": self.target_commitish,
            "draft": self.draft,
            "prerelease": self.prerelease,
        }


@dataclass(frozen=True, slots=True)
class CreatedRelease:
    """The forge's answer to a create-release call; it is authoritative."""

    tag_name: str
    html_url: str | None = None
    id: int | None = None


@dataclass(frozen=True, slots=True)
class LabelFailure:
    action: Literal["add", "remove"]
    label: str
    error: ReleaseError


@dataclass(frozen=True, slots=True)
class ReleaseOutcome:
    """Result of a release attempt that got as far as creating the release.

    Label bookkeeping after creation is not transactional: failures are
    collected in `label_failures` instead of undoing the release.
    """

    release: CreatedRelease
    candidate: ReleaseCandidate
    notes_found: bool
    label_failures: tuple[LabelFailure, ...] = ()
    warnings: tuple[ReleaseError, ...] = ()

    @property
    def labels_consistent(self) -> bool:
        return not self.label_failures
