"""Process exit codes.

CI jobs branch on these, so "nothing to release" (2) must stay distinct
from a broken release branch (3) or an unreachable forge (4). Keep the
numbers stable.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    OK = 0
    USER_ERROR = 1  # bad flags, unreadable or invalid autorelease.toml
    NOT_FOUND = 2  # no merged release PR, no changelog section
    DATA_ERROR = 3  # release branch or manifest that cannot be parsed
    NETWORK_ERROR = 4  # forge unreachable or answering with an error
    PARTIAL = 5  # release published, label bookkeeping failed

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")
