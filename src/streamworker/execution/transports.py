from __future__ import annotations

from typing import Any, Awaitable, Callable, Protocol, runtime_checkable

from ..channel.models import Message


@runtime_checkable
class MessageSender(Protocol):
    async def send_json(self, payload: Any) -> None: ...


class ZmqMessageSender(MessageSender):
    def __init__(self, endpoint: str, bind: bool = True) -> None:
        self._socket = _create_socket(endpoint, bind=bind, socket_type="PUSH")

    async def send_json(self, payload: Any) -> None:
        await self._socket.send_json(payload)

    def close(self, linger: int = 0) -> None:
        self._socket.close(linger=linger)


class ZmqMessageReceiver:
    def __init__(self, endpoint: str, bind: bool = False) -> None:
        self._socket = _create_socket(endpoint, bind=bind, socket_type="PULL")

    async def recv_json(self) -> Any:
        return await self._socket.recv_json()

    def close(self, linger: int = 0) -> None:
        self._socket.close(linger=linger)


def encode_message(message: Message) -> list:
    kind, payload = message.to_pair()
    if isinstance(payload, bytes):
        payload = payload.decode("latin-1")
    return [kind, payload]


def forward_to(sender: MessageSender) -> Callable[[Message], Awaitable[None]]:
    """Build an on_message callback that forwards ``[kind, payload]`` pairs."""

    async def _forward(message: Message) -> None:
        await sender.send_json(encode_message(message))

    return _forward


def _create_socket(endpoint: str, *, bind: bool, socket_type: str):
    try:
        import zmq  # type: ignore
        import zmq.asyncio  # type: ignore
    except ImportError as exc:
        raise RuntimeError("pyzmq is required for message forwarding") from exc
    context = zmq.asyncio.Context.instance()
    socket = context.socket(getattr(zmq, socket_type))
    if bind:
        socket.bind(endpoint)
    else:
        socket.connect(endpoint)
    return socket
