"""Console output abstraction.

Release checkpoints (PR found, notes extracted, release created, labels
moved) are reported through ConsoleProtocol so services never print
directly. RichConsole is the production backend; MockConsole captures
records for tests.

Both backends share one table of level prefixes, so a line reads the same
("warning: no entry for v1.2.3 in CHANGELOG.md") whether it went to a
terminal or into a test assertion.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "OutputRecord",
    "RichConsole",
    "Style",
]


class Style(Enum):
    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()
    HEADER = auto()
    BLOCK = auto()  # verbatim multi-line content (release notes)

    def __str__(self) -> str:
        return self.name.lower()


# Leveled messages: prefix shown before the text, Rich style of the prefix.
_LEVELS: dict[Style, tuple[str, str]] = {
    Style.SUCCESS: ("OK", "green"),
    Style.ERROR: ("error:", "red bold"),
    Style.WARNING: ("warning:", "yellow"),
    Style.INFO: ("info:", "cyan"),
}

# Rich styles for whole-line output.
_LINE_STYLES: dict[Style, str] = {
    Style.DIM: "dim",
    Style.HEADER: "blue bold",
    Style.BLOCK: "grey70",
}


class ConsoleProtocol(Protocol):
    """What services may do with the terminal."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def header(self, message: str) -> None: ...

    def block(self, title: str, content: str) -> None:
        """Show a titled block of verbatim text, e.g. extracted release notes."""
        ...

    def newline(self) -> None: ...


class RichConsole:
    """Console backed by Rich.

    Args:
        stderr: Write to stderr instead of stdout (keeps stdout clean for
            commands that print data, like `autorelease notes`).
    """

    def __init__(self, *, stderr: bool = False) -> None:
        # Rich is only needed once something is actually printed.
        from rich.console import Console

        self._console = Console(stderr=stderr, highlight=False)

    def _leveled(self, style: Style, message: str) -> None:
        from rich.text import Text

        prefix, prefix_style = _LEVELS[style]
        line = Text()
        line.append(prefix, style=prefix_style)
        line.append(f" {message}")
        self._console.print(line)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        if style in _LEVELS:
            self._leveled(style, message)
            return
        self._console.print(message, style=_LINE_STYLES.get(style, ""), markup=False)

    def success(self, message: str) -> None:
        self._leveled(Style.SUCCESS, message)

    def error(self, message: str) -> None:
        self._leveled(Style.ERROR, message)

    def warning(self, message: str) -> None:
        self._leveled(Style.WARNING, message)

    def info(self, message: str) -> None:
        self._leveled(Style.INFO, message)

    def header(self, message: str) -> None:
        self._console.print()
        self.print(message, Style.HEADER)

    def block(self, title: str, content: str) -> None:
        from rich.panel import Panel
        from rich.text import Text

        body = Text(content or "(empty)", style=_LINE_STYLES[Style.BLOCK])
        self._console.print(Panel(body, title=Text(title), title_align="left", expand=False))

    def newline(self) -> None:
        self._console.print()


@dataclass(frozen=True, slots=True)
class OutputRecord:
    message: str
    style: Style


@dataclass
class MockConsole:
    """Captures every line as an OutputRecord, level prefixes included."""

    outputs: list[OutputRecord] = field(default_factory=list[OutputRecord])

    def _record(self, message: str, style: Style) -> None:
        if style in _LEVELS:
            message = f"{_LEVELS[style][0]} {message}"
        self.outputs.append(OutputRecord(message, style))

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._record(message, style)

    def success(self, message: str) -> None:
        self._record(message, Style.SUCCESS)

    def error(self, message: str) -> None:
        self._record(message, Style.ERROR)

    def warning(self, message: str) -> None:
        self._record(message, Style.WARNING)

    def info(self, message: str) -> None:
        self._record(message, Style.INFO)

    def header(self, message: str) -> None:
        self._record(message, Style.HEADER)

    def block(self, title: str, content: str) -> None:
        self._record(f"{title}\n{content}", Style.BLOCK)

    def newline(self) -> None:
        self._record("", Style.DEFAULT)

    # Assertion helpers

    @property
    def messages(self) -> list[str]:
        return [record.message for record in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def styles(self) -> set[Style]:
        return {record.style for record in self.outputs}

    def has_error(self) -> bool:
        return Style.ERROR in self.styles()

    def has_warning(self) -> bool:
        return Style.WARNING in self.styles()

    def find(self, substring: str) -> list[OutputRecord]:
        """Records whose message contains `substring`."""
        return [record for record in self.outputs if substring in record.message]

    def count(self, style: Style) -> int:
        return sum(record.style is style for record in self.outputs)
