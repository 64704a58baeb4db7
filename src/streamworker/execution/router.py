from __future__ import annotations

from typing import Callable, Dict, List, Optional

from ..channel.models import Message, Payload

PayloadHandler = Callable[[Payload], None]


class KindRouter:
    """on_message callback that hands each payload to the handlers of its kind."""

    def __init__(self, fallback: Optional[Callable[[Message], None]] = None) -> None:
        self._handlers: Dict[str, List[PayloadHandler]] = {}
        self._fallback = fallback

    def on(self, kind: str, handler: PayloadHandler) -> "KindRouter":
        self._handlers.setdefault(kind, []).append(handler)
        return self

    def off(self, kind: str, handler: Optional[PayloadHandler] = None) -> None:
        if handler is None:
            self._handlers.pop(kind, None)
            return
        handlers = self._handlers.get(kind, [])
        if handler in handlers:
            handlers.remove(handler)

    def kinds(self) -> List[str]:
        return [kind for kind, handlers in self._handlers.items() if handlers]

    def __call__(self, message: Message) -> None:
        handlers = self._handlers.get(message.kind)
        if not handlers:
            if self._fallback is not None:
                self._fallback(message)
            return
        for handler in list(handlers):
            handler(message.payload)
