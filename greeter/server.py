from __future__ import annotations

import contextlib
import inspect
import logging
from typing import Any, Callable, Dict, Optional

import anyio
import anyio.abc
import asyncstdlib

from .abc import Connection
from .common import BindError, RemoteException, cancel_task_group_on_signal
from .config import Address
from .connection import TCPConnection
from .contract import EXCEPTION, GREET, OK, Greeter, HelloReply, HelloRequest, make_greeting


class GreeterService(Greeter):
    def greet(self, request: HelloRequest) -> HelloReply:
        logging.info(f"Received: {request.name}")
        return HelloReply(make_greeting(request.name))


class ClientSession:
    def __init__(self, server: Server, task_group: anyio.abc.TaskGroup, connection: Connection) -> None:
        self.server: Server = server
        self.task_group = task_group
        self.connection = connection

    async def send(self, code: str, request_id: int, status: str, value: Any) -> int:
        return await self.connection.send((code, request_id, status, value))

    async def evaluate(self, code: str, payload: Any):
        handler = self.server.handlers.get(code)
        if handler is None:
            raise RemoteException(f"Unknown code {code!r} with payload {payload!r}")
        result = handler(payload)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def run_request(self, code: str, request_id: int, payload: Any):
        status, result = OK, None
        try:
            result = await self.evaluate(code, payload)
        except anyio.get_cancelled_exc_class():
            raise
        except RemoteException as e:
            status, result = EXCEPTION, e
        except Exception as e:
            status, result = EXCEPTION, RemoteException(f"{type(e).__name__}: {e}")
        try:
            await self.send(code, request_id, status, result)
        except (anyio.BrokenResourceError, anyio.ClosedResourceError):
            logging.info(f"{self.connection} left before request {request_id} completed")

    async def process_messages(self):
        async for code, request_id, payload in self.connection:
            self.task_group.start_soon(self.run_request, code, request_id, payload)

    async def aclose(self):
        self.task_group.cancel_scope.cancel()


class Server:
    def __init__(self, greeter: Greeter) -> None:
        self.handlers: Dict[str, Callable[[Any], Any]] = {GREET: greeter.greet}

    @contextlib.asynccontextmanager
    async def on_new_connection(self, connection: Connection):
        async with anyio.create_task_group() as session_task_group:
            client_session = ClientSession(self, session_task_group, connection)
            logging.info(f"{connection} connected")
            try:
                async with asyncstdlib.closing(client_session):
                    yield client_session
            finally:
                logging.info(f"{connection} disconnected")

    async def handle_tcp_stream(self, stream: anyio.abc.ByteStream):
        async with asyncstdlib.closing(TCPConnection(stream)) as connection:
            try:
                async with self.on_new_connection(connection) as client_session:
                    await client_session.process_messages()
            except anyio.get_cancelled_exc_class():
                raise
            except Exception:
                logging.exception(f"Dropping {connection}")

async def bind_tcp_listener(address: Address) -> anyio.abc.Listener:
    try:
        return await anyio.create_tcp_listener(local_host=address.host, local_port=address.port)
    except OSError as e:
        raise BindError(f"Cannot listen on {address}: {e}") from e


def listening_port(listener: anyio.abc.Listener) -> int:
    return listener.extra(anyio.abc.SocketAttribute.local_port)


async def serve(listener: anyio.abc.Listener, greeter: Greeter):
    server = Server(greeter)
    async with listener:
        logging.info(f"Server listening on port {listening_port(listener)}")
        await listener.serve(server.handle_tcp_stream)


async def serve_tcp(
    address: Address,
    greeter: Optional[Greeter] = None,
    *,
    task_status: anyio.abc.TaskStatus = anyio.TASK_STATUS_IGNORED,
):
    listener = await bind_tcp_listener(address)
    task_status.started(listening_port(listener))
    await serve(listener, greeter or GreeterService())


async def start_tcp_server(address: Address, greeter: Optional[Greeter] = None):
    listener = await bind_tcp_listener(address)
    async with anyio.create_task_group() as task_group:
        task_group.start_soon(cancel_task_group_on_signal, task_group)
        task_group.start_soon(serve, listener, greeter or GreeterService())


def run_tcp_server(address: Address, greeter: Optional[Greeter] = None):
    anyio.run(start_tcp_server, address, greeter)
