from __future__ import annotations

from dataclasses import dataclass
from typing import List, Union

Payload = Union[str, bytes]


@dataclass(frozen=True)
class Message:
    kind: str
    payload: Payload = ""

    def __post_init__(self) -> None:
        if not isinstance(self.kind, str):
            raise TypeError("Message.kind must be a str")
        if isinstance(self.payload, (bytearray, memoryview)):
            # take a private copy so the producer cannot mutate it later
            object.__setattr__(self, "payload", bytes(self.payload))
        elif not isinstance(self.payload, (str, bytes)):
            raise TypeError("Message.payload must be str or bytes")

    def to_pair(self) -> List[Payload]:
        return [self.kind, self.payload]


@dataclass(frozen=True)
class Completed:
    """Terminal sentinel for a worker that finished successfully."""


@dataclass(frozen=True)
class Failed:
    """Terminal sentinel for a worker that failed."""

    description: str


ChannelEntry = Union[Message, Completed, Failed]


def is_terminal(entry: ChannelEntry) -> bool:
    return isinstance(entry, (Completed, Failed))
