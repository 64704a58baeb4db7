from __future__ import annotations

from typing import List, Optional, Protocol, runtime_checkable

from .models import ChannelEntry


@runtime_checkable
class EntrySink(Protocol):
    def push(self, entry: ChannelEntry) -> None: ...


@runtime_checkable
class EntrySource(Protocol):
    def drain(
        self, block: bool = True, timeout: Optional[float] = None
    ) -> List[ChannelEntry]: ...
