"""Ordered, thread-safe message channel between a worker and its consumer."""

from .channel import Channel
from .models import ChannelEntry, Completed, Failed, Message, Payload, is_terminal
from .protocols import EntrySink, EntrySource

__all__ = [
    "Channel",
    "ChannelEntry",
    "Completed",
    "Failed",
    "Message",
    "Payload",
    "is_terminal",
    "EntrySink",
    "EntrySource",
]
