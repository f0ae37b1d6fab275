import contextlib
import struct
from typing import Any, Callable, Optional, Tuple

import anyio
import anyio.abc
import asyncstdlib
from anyio.streams.buffered import BufferedByteReceiveStream

from .abc import Connection
from .common import ConnectionFailed
from .contract import dumps, loads


FORMAT = "Q"
SIZE_LENGTH = 8


class TCPConnection(Connection):
    def __init__(
        self,
        stream: anyio.abc.ByteStream,
        deserialize: Callable[[bytes], Any] = loads,
        serialize: Callable[[Any], bytes] = dumps,
    ):
        self.stream = stream
        self.reader = BufferedByteReceiveStream(stream)
        self.serialize = serialize
        self.deserialize = deserialize
        self.send_lock = anyio.Lock()

    async def send(self, message: Tuple[Any, ...]) -> int:
        message_as_bytes = self.serialize(message)
        async with self.send_lock:
            await self.stream.send(struct.pack(FORMAT, len(message_as_bytes)) + message_as_bytes)
        return len(message_as_bytes)

    async def __anext__(self):
        try:
            length = await self.reader.receive_exactly(SIZE_LENGTH)
            return self.deserialize(
                await self.reader.receive_exactly(struct.unpack(FORMAT, length)[0])
            )
        except (
            anyio.IncompleteRead,
            anyio.EndOfStream,
            anyio.BrokenResourceError,
            anyio.ClosedResourceError,
        ):
            raise StopAsyncIteration()

    def __aiter__(self):
        return self

    async def aclose(self):
        await self.stream.aclose()

    def __str__(self) -> str:
        return f"TCPConnection({peer_name(self.stream)})"


def peer_name(stream: anyio.abc.ByteStream) -> Optional[str]:
    try:
        host, port = stream.extra(anyio.abc.SocketAttribute.remote_address)[:2]
    except anyio.TypedAttributeLookupError:
        return None
    return f"{host}:{port}"


@contextlib.asynccontextmanager
async def connect_to_tcp_server(
    host_name: str, port: int, timeout: Optional[float] = None, serialize=dumps, deserialize=loads
):
    try:
        with anyio.fail_after(timeout):
            stream = await anyio.connect_tcp(host_name, port)
    except TimeoutError:
        raise ConnectionFailed(f"Timed out connecting to {host_name}:{port}.") from None
    except OSError as e:
        raise ConnectionFailed(f"Cannot connect to {host_name}:{port}: {e}") from e
    connection = TCPConnection(stream, deserialize, serialize)
    async with asyncstdlib.closing(connection):
        yield connection
