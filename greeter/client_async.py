from __future__ import annotations

import contextlib
import logging
from itertools import count
from typing import Any, AsyncIterator, Dict, Optional

import anyio
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream

from .abc import Connection
from .common import CallFailed, CallTimeout, cancel_task_on_exit, scoped_insert
from .config import DEFAULT_TIMEOUT, Address
from .connection import connect_to_tcp_server
from .contract import EXCEPTION, GREET, OK, HelloReply, HelloRequest


def decode_result(code, status, result):
    if status == OK:
        return result
    if status == EXCEPTION:
        raise CallFailed(f"{code} failed on the server: {result}")
    raise CallFailed(f"Unexpected status {status!r} received for {code}.")


class AsyncClient:
    def __init__(self, connection: Connection) -> None:
        self.connection = connection
        self.request_id = count()
        self.pending_requests: Dict[int, MemoryObjectSendStream] = {}
        self.closed = False

    async def _send(self, *args):
        await self.connection.send(args)

    async def _process_messages_from_server(self):
        try:
            async for code, request_id, status, result in self.connection:
                if sink := self.pending_requests.get(request_id):
                    sink.send_nowait((status, result))
                else:
                    logging.warning(f"Ignoring {code} reply to request {request_id}.")
            logging.info("Connection closed by the server.")
        except Exception:
            logging.exception("Cannot decode a reply from the server, dropping the connection.")
            await self.connection.aclose()
        finally:
            self.closed = True
            for sink in list(self.pending_requests.values()):
                sink.close()

    @contextlib.contextmanager
    def _submit_request(self):
        sink, stream = anyio.create_memory_object_stream(1)
        request_id = next(self.request_id)
        with sink, stream:
            with scoped_insert(self.pending_requests, request_id, sink):
                yield request_id, stream

    async def _wait_for_reply(self, request_id: int, stream: MemoryObjectReceiveStream):
        try:
            return await stream.receive()
        except anyio.EndOfStream:
            raise CallFailed(f"Connection lost before request {request_id} completed.") from None

    async def _execute_request(self, code: str, payload: Any, timeout: Optional[float]) -> Any:
        if self.closed:
            raise CallFailed("Connection is closed.")
        try:
            with anyio.fail_after(timeout):
                with self._submit_request() as (request_id, stream):
                    await self._send(code, request_id, payload)
                    status, result = await self._wait_for_reply(request_id, stream)
        except TimeoutError:
            raise CallTimeout(f"{code} did not complete within {timeout} seconds.") from None
        except (anyio.BrokenResourceError, anyio.ClosedResourceError) as e:
            raise CallFailed(f"Cannot send {code} request: connection lost.") from e
        return decode_result(code, status, result)

    async def greet(self, name: str, timeout: Optional[float] = DEFAULT_TIMEOUT) -> HelloReply:
        return await self._execute_request(GREET, HelloRequest(name), timeout)


@contextlib.asynccontextmanager
async def create_async_client(connection: Connection) -> AsyncIterator[AsyncClient]:
    client = AsyncClient(connection)
    with cancel_task_on_exit(client._process_messages_from_server()):
        yield client


@contextlib.asynccontextmanager
async def connect(
    address: Address, timeout: Optional[float] = DEFAULT_TIMEOUT
) -> AsyncIterator[AsyncClient]:
    async with connect_to_tcp_server(address.host, address.port, timeout) as connection:
        async with create_async_client(connection) as client:
            yield client
