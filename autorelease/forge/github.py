"""GitHub REST operations used by the release flow.

Each function wraps one API call, validates the payload it gets back and
maps failures onto ReleaseError kinds:
- transport: the call failed or answered with a non-success status
- not_found: a file that was looked up does not exist (404 on contents)
- malformed: the call succeeded but the payload is not what GitHub sends
"""

from __future__ import annotations

import base64
import binascii
from urllib.parse import quote

from autorelease.core.result import Err, Ok, Result
from autorelease.core.structured import as_obj_list, as_str_dict, get_list, get_str, get_table
from autorelease.forge.http import HttpClient, HttpError
from autorelease.release.errors import ReleaseError
from autorelease.release.model import CreatedRelease, PullRequestSummary, ReleaseRequest


def _transport_error(error: HttpError, message: str) -> ReleaseError:
    return ReleaseError(kind="transport", message=message, hint=str(error))


def _repo_url(api_url: str, repo: str) -> str:
    return f"{api_url}/repos/{repo}"


def get_default_branch(
    *,
    http: HttpClient,
    api_url: str,
    repo: str,
) -> Result[str, ReleaseError]:
    url = _repo_url(api_url, repo)
    result = http.request_json("GET", url)
    if isinstance(result, Err):
        return Err(_transport_error(result.error, f"failed to fetch repository: {repo}"))

    data = as_str_dict(result.value)
    if data is None:
        return Err(ReleaseError(kind="malformed", message=f"unexpected repo payload: {repo}"))

    branch = get_str(data, "default_branch")
    if branch is None:
        return Err(
            ReleaseError(kind="malformed", message=f"missing default_branch: {repo}", hint=url)
        )
    return Ok(branch)


def _parse_pull(item: object) -> PullRequestSummary | None:
    d = as_str_dict(item)
    if d is None:
        return None

    number = d.get("number")
    if isinstance(number, bool) or not isinstance(number, int):
        return None

    head = get_table(d, "head")
    head_label = get_str(head, "label") if head is not None else None
    if head_label is None:
        return None

    base = get_table(d, "base")
    base_label = (get_str(base, "label") if base is not None else None) or ""

    labels: set[str] = set()
    for raw in get_list(d, "labels") or []:
        label = as_str_dict(raw)
        if label is None:
            continue
        name = get_str(label, "name")
        if name is not None:
            labels.add(name)

    return PullRequestSummary(
        number=number,
        head_label=head_label,
        base_label=base_label,
        labels=frozenset(labels),
        merged_at=get_str(d, "merged_at"),
    )


def list_closed_pulls(
    *,
    http: HttpClient,
    api_url: str,
    repo: str,
    per_page: int,
) -> Result[list[PullRequestSummary], ReleaseError]:
    """First page of closed PRs, most recently merged first."""
    url = (
        f"{_repo_url(api_url, repo)}/pulls"
        f"?state=closed&per_page={per_page}&sort=merged_at&direction=desc"
    )
    result = http.request_json("GET", url)
    if isinstance(result, Err):
        return Err(_transport_error(result.error, f"failed to list pull requests: {repo}"))

    raw = as_obj_list(result.value)
    if raw is None:
        return Err(ReleaseError(kind="malformed", message=f"unexpected pulls payload: {repo}"))

    out: list[PullRequestSummary] = []
    for item in raw:
        pull = _parse_pull(item)
        if pull is not None:
            out.append(pull)
    return Ok(out)


def get_file_text(
    *,
    http: HttpClient,
    api_url: str,
    repo: str,
    path: str,
    ref: str,
) -> Result[str, ReleaseError]:
    """Fetch a file through the Contents API, decoded and with LF line endings."""
    url = f"{_repo_url(api_url, repo)}/contents/{quote(path)}?ref={quote(ref, safe='/')}"
    result = http.request_json("GET", url)
    if isinstance(result, Err):
        if result.error.status == 404:
            return Err(
                ReleaseError(kind="not_found", message=f"file not found: {path}@{ref}", hint=url)
            )
        return Err(_transport_error(result.error, f"failed to fetch {path}@{ref}"))

    data = as_str_dict(result.value)
    if data is None:
        return Err(
            ReleaseError(kind="malformed", message=f"unexpected contents payload: {path}", hint=url)
        )

    enc = get_str(data, "encoding")
    content = data.get("content")
    if not isinstance(content, str) or (enc is not None and enc != "base64"):
        return Err(
            ReleaseError(
                kind="malformed", message=f"unexpected contents encoding for {path}", hint=url
            )
        )

    try:
        raw = base64.b64decode(content, validate=False)
    except (binascii.Error, ValueError) as e:
        return Err(
            ReleaseError(kind="malformed", message=f"failed to decode contents: {e}", hint=url)
        )

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        return Err(
            ReleaseError(kind="malformed", message=f"invalid UTF-8 in contents: {e}", hint=url)
        )
    return Ok(text.replace("\r\n", "\n"))


def create_release(
    *,
    http: HttpClient,
    api_url: str,
    repo: str,
    request: ReleaseRequest,
) -> Result[CreatedRelease, ReleaseError]:
    url = f"{_repo_url(api_url, repo)}/releases"
    result = http.request_json("POST", url, request.as_payload())
    if isinstance(result, Err):
        return Err(
            _transport_error(result.error, f"failed to create release {request.tag_name}")
        )

    data = as_str_dict(result.value)
    if data is None:
        return Err(ReleaseError(kind="malformed", message="unexpected release payload", hint=url))

    tag_name = get_str(data, "tag_name")
    if tag_name is None:
        return Err(ReleaseError(kind="malformed", message="missing tag_name in release", hint=url))

    release_id = data.get("id")
    return Ok(
        CreatedRelease(
            tag_name=tag_name,
            html_url=get_str(data, "html_url"),
            id=release_id if isinstance(release_id, int) else None,
        )
    )


def add_labels(
    *,
    http: HttpClient,
    api_url: str,
    repo: str,
    number: int,
    labels: list[str],
) -> Result[None, ReleaseError]:
    url = f"{_repo_url(api_url, repo)}/issues/{number}/labels"
    result = http.request_json("POST", url, labels)
    if isinstance(result, Err):
        return Err(_transport_error(result.error, f"failed to add labels to #{number}"))
    return Ok(None)


def remove_label(
    *,
    http: HttpClient,
    api_url: str,
    repo: str,
    number: int,
    label: str,
) -> Result[None, ReleaseError]:
    url = f"{_repo_url(api_url, repo)}/issues/{number}/labels/{quote(label, safe='')}"
    result = http.request_json("DELETE", url)
    if isinstance(result, Err):
        return Err(_transport_error(result.error, f"failed to remove label from #{number}"))
    return Ok(None)
