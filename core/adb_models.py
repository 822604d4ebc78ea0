"""
ADB Data Models Module
Data classes for command execution results.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class CommandStatus(Enum):
    """Outcome classification of a single tool invocation."""
    SUCCESS = "success"
    NON_ZERO_EXIT = "non_zero_exit"
    TIMEOUT = "timeout"
    SPAWN_FAILURE = "spawn_failure"


@dataclass(frozen=True)
class CommandResult:
    """Merged output and outcome of one external command."""
    status: CommandStatus
    output: str = ""
    exit_code: Optional[int] = None
    command: tuple[str, ...] = field(default=(), compare=False)

    @property
    def ok(self) -> bool:
        return self.status is CommandStatus.SUCCESS

    @property
    def text(self) -> str:
        """Output stripped of surrounding whitespace."""
        return self.output.strip()

    def describe(self) -> str:
        """Return a one-line human-readable summary of the outcome."""
        if self.status is CommandStatus.SUCCESS:
            return "OK"
        if self.status is CommandStatus.TIMEOUT:
            return "Command timed out"
        if self.status is CommandStatus.SPAWN_FAILURE:
            return f"Could not start command: {self.text or 'executable not found'}"
        return f"Command failed (exit {self.exit_code}): {self.text}"
