from __future__ import annotations

import contextlib
import socket
from typing import AsyncIterator, Callable, Iterator, Optional, Set, Tuple

import anyio
import anyio.abc
from anyio.from_thread import start_blocking_portal

from greeter import Address, Greeter, GreeterService, HelloReply, serve_tcp
from greeter.contract import make_greeting

LOOPBACK = "127.0.0.1"
A_LITTLE_BIT_OF_TIME = 0.1
ENOUGH_TIME_TO_COMPLETE_ALL_PENDING_TASKS = 0.5
ERROR_MESSAGE = "an error occured"


class SlowGreeter(Greeter):
    def __init__(self, delay: float = 10, slow_names: Optional[Set[str]] = None) -> None:
        self.delay = delay
        self.slow_names = slow_names
        self.received = []
        self.cancelled = 0

    async def greet(self, request):
        self.received.append(request.name)
        if self.slow_names is None or request.name in self.slow_names:
            try:
                await anyio.sleep(self.delay)
            except anyio.get_cancelled_exc_class():
                self.cancelled += 1
                raise
        return HelloReply(make_greeting(request.name))


class FailingGreeter(Greeter):
    def greet(self, request):
        raise RuntimeError(ERROR_MESSAGE)


def unused_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((LOOPBACK, 0))
        return sock.getsockname()[1]


@contextlib.contextmanager
def occupied_port() -> Iterator[int]:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((LOOPBACK, 0))
        sock.listen()
        yield sock.getsockname()[1]


@contextlib.asynccontextmanager
async def running_server(
    greeter: Optional[Greeter] = None,
) -> AsyncIterator[Tuple[Address, Callable[[], None]]]:
    """Serve on an ephemeral loopback port, yielding its address and a stop callback."""
    async with anyio.create_task_group() as task_group:
        server_scope = anyio.CancelScope()

        async def run(*, task_status: anyio.abc.TaskStatus = anyio.TASK_STATUS_IGNORED):
            with server_scope:
                await serve_tcp(
                    Address(LOOPBACK, 0), greeter or GreeterService(), task_status=task_status
                )

        port = await task_group.start(run)
        try:
            yield Address(LOOPBACK, port), server_scope.cancel
        finally:
            server_scope.cancel()


@contextlib.contextmanager
def running_server_sync(
    greeter: Optional[Greeter] = None,
) -> Iterator[Tuple[Address, Callable[[], None]]]:
    with start_blocking_portal("asyncio") as portal:
        with portal.wrap_async_context_manager(running_server(greeter)) as (address, stop):
            yield address, lambda: portal.call(stop)
