"""Ok/Err values returned by every step of the release flow.

Forge calls, file decoding and config loading hand back a Result rather
than raising. The publisher then decides per step whether a failure aborts
publication (no release PR, unreadable branch) or only degrades it
(missing CHANGELOG entry, unknown package name).

    match get_default_branch(http=http, api_url=api, repo="googleapis/foo"):
        case Ok(branch):
            ref = f"refs/heads/{branch}"
        case Err(error):
            return Err(error)

Steps that feed each other chain with `and_then`:

    name = get_file_text(...).and_then(lambda text: parse_manifest("node", text))
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T

    def and_then(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Feed the value into the next fallible step."""
        return f(self.value)

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    error: E

    def and_then(self, f: Callable[[object], object]) -> Err[E]:
        """Short-circuit: the next step never runs."""
        return self

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result: TypeAlias = Ok[T] | Err[E]
