"""Error taxonomy shared by the channel and the bridge."""

from __future__ import annotations


class StreamWorkerError(Exception):
    """Base class for every error raised by streamworker."""


class ProtocolViolation(StreamWorkerError):
    """A channel invariant was broken by the calling code."""


class WorkerFault(StreamWorkerError):
    """A fault raised inside a worker's own logic."""

    def __init__(self, description: str) -> None:
        super().__init__(description)
        self.description = description


class AlreadyStarted(StreamWorkerError):
    """start() was called on a bridge that is already running."""


class NotStarted(StreamWorkerError):
    """A bridge operation needs start() to have been called first."""
