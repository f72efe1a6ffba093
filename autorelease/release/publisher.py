"""Publish a GitHub release for the most recently merged release PR.

Sequence (each step needs the previous one):
1. default branch
2. merged release PR and its version; abort here leaves the forge untouched
3. package name, unless configured
4. changelog at the default branch
5. notes for the version; missing notes degrade to an empty body
6. create the release
7. add the published label, 8. remove the pending label

Steps 7 and 8 run after the release exists and are never rolled back: their
failures are returned in ReleaseOutcome.label_failures next to the created
release. No step is retried here; GET retries belong to the transport.
"""

from __future__ import annotations

from autorelease.core.config import ReleaseConfig
from autorelease.core.result import Err, Ok, Result
from autorelease.forge import github
from autorelease.forge.http import HttpClient, RealHttpClient
from autorelease.output.console import ConsoleProtocol, RichConsole, Style
from autorelease.release.changelog import extract_latest_release_notes
from autorelease.release.errors import ReleaseError
from autorelease.release.locator import find_merged_release_pr
from autorelease.release.model import (
    LabelFailure,
    ReleaseCandidate,
    ReleaseOutcome,
    ReleaseRequest,
)
from autorelease.release.package_name import resolve_package_name


def branch_ref(branch: str) -> str:
    return f"refs/heads/{branch}"


class ReleasePublisher:
    """Runs one release attempt for one repository.

    Instances hold no state between attempts and share nothing with each
    other, so publishers for different repositories can run side by side.
    """

    def __init__(
        self,
        config: ReleaseConfig,
        *,
        http: HttpClient,
        console: ConsoleProtocol,
    ) -> None:
        self.config = config
        self.http = http
        self.console = console

    def _fetch_notes(
        self,
        *,
        ref: str,
        candidate: ReleaseCandidate,
        package_name: str | None,
    ) -> tuple[str | None, ReleaseError | None]:
        path = self.config.repo_path(self.config.changelog_path)
        text = github.get_file_text(
            http=self.http,
            api_url=self.config.api_url,
            repo=self.config.repo_url,
            path=path,
            ref=ref,
        )
        if isinstance(text, Err):
            self.console.warning(
                f"changelog unavailable, releasing with an empty body: {text.error.message}"
            )
            return None, text.error

        notes = extract_latest_release_notes(text.value, candidate.version.tag, package_name)
        if notes is None:
            error = ReleaseError(
                kind="not_found",
                message=f"no entry for {candidate.version.tag} in {path}",
            )
            self.console.warning(f"{error.message}; releasing with an empty body")
            return None, error

        self.console.block("release notes", notes)
        return notes, None

    def _move_labels(self, number: int) -> tuple[LabelFailure, ...]:
        failures: list[LabelFailure] = []

        added = github.add_labels(
            http=self.http,
            api_url=self.config.api_url,
            repo=self.config.repo_url,
            number=number,
            labels=[self.config.published_label],
        )
        if isinstance(added, Err):
            self.console.error(added.error.pretty())
            failures.append(
                LabelFailure(action="add", label=self.config.published_label, error=added.error)
            )
        else:
            self.console.success(f"labeled #{number} '{self.config.published_label}'")

        removed = github.remove_label(
            http=self.http,
            api_url=self.config.api_url,
            repo=self.config.repo_url,
            number=number,
            label=self.config.label,
        )
        if isinstance(removed, Err):
            self.console.error(removed.error.pretty())
            failures.append(
                LabelFailure(action="remove", label=self.config.label, error=removed.error)
            )
        else:
            self.console.success(f"removed '{self.config.label}' from #{number}")

        return tuple(failures)

    def create_release(self) -> Result[ReleaseOutcome, ReleaseError]:
        config = self.config

        branch = github.get_default_branch(
            http=self.http, api_url=config.api_url, repo=config.repo_url
        )
        if isinstance(branch, Err):
            return branch
        ref = branch_ref(branch.value)
        self.console.print(f"default branch: {branch.value}", Style.DIM)

        located = find_merged_release_pr(http=self.http, config=config, console=self.console)
        if isinstance(located, Err):
            return located
        candidate = located.value
        self.console.success(
            f"found release PR #{candidate.pull.number} for {candidate.version.tag}"
        )

        warnings: list[ReleaseError] = []
        resolution = resolve_package_name(
            http=self.http, config=config, ref=ref, console=self.console
        )
        if resolution.warning is not None:
            warnings.append(resolution.warning)

        notes, notes_error = self._fetch_notes(
            ref=ref, candidate=candidate, package_name=resolution.name
        )
        if notes_error is not None:
            warnings.append(notes_error)

        tag = candidate.version.tag
        request = ReleaseRequest(
            tag_name=tag,
            name=f"{resolution.name} {tag}" if resolution.name else tag,
            body=notes or "",
            target_commitish=branch.value,
            draft=config.draft,
            prerelease=candidate.version.is_prerelease,
        )
        created = github.create_release(
            http=self.http, api_url=config.api_url, repo=config.repo_url, request=request
        )
        if isinstance(created, Err):
            return created
        release = created.value
        self.console.success(f"created release {release.html_url or release.tag_name}")

        failures = self._move_labels(candidate.pull.number)
        if failures:
            self.console.warning(
                f"release {release.tag_name} exists but labels on #{candidate.pull.number} "
                "are inconsistent"
            )

        return Ok(
            ReleaseOutcome(
                release=release,
                candidate=candidate,
                notes_found=notes is not None,
                label_failures=failures,
                warnings=tuple(warnings),
            )
        )


def create_release(
    config: ReleaseConfig,
    *,
    http: HttpClient | None = None,
    console: ConsoleProtocol | None = None,
) -> Result[ReleaseOutcome, ReleaseError]:
    """Run one release attempt with the real transport unless one is given."""
    publisher = ReleasePublisher(
        config,
        http=http if http is not None else RealHttpClient(token=config.token),
        console=console if console is not None else RichConsole(),
    )
    return publisher.create_release()
