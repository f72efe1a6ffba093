from __future__ import annotations

import re

from autorelease.core.config import ReleaseConfig
from autorelease.core.result import Err, Ok, Result
from autorelease.forge.github import list_closed_pulls
from autorelease.forge.http import HttpClient
from autorelease.output.console import ConsoleProtocol, Style
from autorelease.release.errors import ReleaseError
from autorelease.release.model import PullRequestSummary, ReleaseCandidate
from autorelease.release.version import VersionTag, parse_version_tag

# owner:release-v1.2.3, or owner:release-<component>-v1.2.3 in monorepos.
_RELEASE_BRANCH_RE = re.compile(
    r"^(?:[^:]+:)?release-(?:(?P<component>[\w.-]+?)-)?v(?P<version>\d+\.\d+\.\d+\S*)$"
)


def parse_release_branch(head_label: str) -> Result[VersionTag, ReleaseError]:
    m = _RELEASE_BRANCH_RE.match(head_label.strip())
    version = parse_version_tag(m.group("version")) if m is not None else None
    if version is None:
        return Err(
            ReleaseError(
                kind="malformed",
                message=f"release PR head branch does not encode a version: {head_label}",
                hint="expected <owner>:release-v<major>.<minor>.<patch>",
            )
        )
    return Ok(version)


def _first_merged_with_label(
    pulls: list[PullRequestSummary], label: str
) -> PullRequestSummary | None:
    for pull in pulls:
        if label in pull.labels and pull.is_merged:
            return pull
    return None


def find_merged_release_pr(
    *,
    http: HttpClient,
    config: ReleaseConfig,
    console: ConsoleProtocol,
) -> Result[ReleaseCandidate, ReleaseError]:
    """Most recently merged PR carrying the pending label, with its version.

    Only the first page of closed PRs is scanned.
    """
    pulls = list_closed_pulls(
        http=http,
        api_url=config.api_url,
        repo=config.repo_url,
        per_page=config.page_size,
    )
    if isinstance(pulls, Err):
        return pulls

    console.print(f"scanned {len(pulls.value)} closed PRs for '{config.label}'", Style.DIM)
    pull = _first_merged_with_label(pulls.value, config.label)
    if pull is None:
        return Err(
            ReleaseError(
                kind="not_found",
                message=f"no merged PR labeled '{config.label}' in {config.repo_url}",
                hint=f"only the {config.page_size} most recently closed PRs are checked",
            )
        )

    version = parse_release_branch(pull.head_label)
    if isinstance(version, Err):
        return version

    return Ok(ReleaseCandidate(pull=pull, version=version.value))
