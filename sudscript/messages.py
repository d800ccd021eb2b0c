"""Collection of import diagnostics, with optional forwarding to :mod:`logging`."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Iterator

_log = logging.getLogger("sudscript")


class Severity(enum.Enum):
    """How serious a diagnostic message is."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def logging_level(self) -> int:
        return {
            Severity.ERROR: logging.ERROR,
            Severity.WARNING: logging.WARNING,
            Severity.INFO: logging.INFO,
        }[self]


@dataclass(frozen=True)
class Message:
    """A single diagnostic produced while importing a script."""

    severity: Severity
    text: str

    def __str__(self) -> str:
        return f"{self.severity.value}: {self.text}"


class MessageLogger:
    """Accumulates messages; used as a context manager it reports them on exit.

    When ``write_to_log`` is true, leaving the ``with`` block (or calling
    :meth:`flush`) sends every collected message to the ``sudscript`` logger.
    Messages are never discarded by flushing, so several import stages can
    share one logger.
    """

    def __init__(self, write_to_log: bool = True) -> None:
        self.write_to_log = write_to_log
        self.messages: list[Message] = []
        self._flushed = 0

    def add_message(self, severity: Severity, text: str) -> Message:
        message = Message(Severity(severity), str(text))
        self.messages.append(message)
        return message

    def error(self, text: str) -> Message:
        return self.add_message(Severity.ERROR, text)

    def warning(self, text: str) -> Message:
        return self.add_message(Severity.WARNING, text)

    def info(self, text: str) -> Message:
        return self.add_message(Severity.INFO, text)

    def has_errors(self) -> bool:
        return any(m.severity is Severity.ERROR for m in self.messages)

    def num_errors(self) -> int:
        return sum(1 for m in self.messages if m.severity is Severity.ERROR)

    def clear(self) -> None:
        """Forget every collected message."""
        self.messages.clear()
        self._flushed = 0

    def flush(self) -> None:
        """Send messages not yet reported to the ``sudscript`` logger."""
        if not self.write_to_log:
            return
        pending = self.messages[self._flushed:]
        for message in pending:
            _log.log(message.severity.logging_level, "%s", message.text)
        self._flushed = len(self.messages)
        if pending:
            _log.warning("There were issues with the import.")

    def __iter__(self) -> Iterator[Message]:
        return iter(self.messages)

    def __len__(self) -> int:
        return len(self.messages)

    def __enter__(self) -> "MessageLogger":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.flush()