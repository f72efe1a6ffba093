from __future__ import annotations

from dataclasses import dataclass

from autorelease.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    console: ConsoleProtocol


def build_context(*, stderr: bool = False) -> CLIContext:
    return CLIContext(console=RichConsole(stderr=stderr))
