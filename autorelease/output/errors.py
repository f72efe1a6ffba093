"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from autorelease.core.errors import ErrorCode
from autorelease.output.console import Style
from autorelease.release.errors import ReleaseError

if TYPE_CHECKING:
    from autorelease.output.console import ConsoleProtocol
    from autorelease.release.model import ReleaseOutcome

__all__ = ["print_release_error", "release_error_exit_code", "outcome_exit_code"]


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    """Print a release error with its hint dimmed underneath."""
    match error:
        case ReleaseError(kind="not_found", message=message):
            console.warning(message)
        case ReleaseError(message=message):
            console.error(message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def release_error_exit_code(error: ReleaseError) -> int:
    match error.kind:
        case "not_found":
            return int(ErrorCode.NOT_FOUND)
        case "malformed":
            return int(ErrorCode.DATA_ERROR)
        case "transport":
            return int(ErrorCode.NETWORK_ERROR)
        case "config":
            return int(ErrorCode.USER_ERROR)
    return int(ErrorCode.USER_ERROR)


def outcome_exit_code(outcome: ReleaseOutcome) -> int:
    if outcome.labels_consistent:
        return int(ErrorCode.OK)
    return int(ErrorCode.PARTIAL)
