import asyncio
import contextlib
import logging
import signal
from typing import Coroutine

import anyio
import anyio.abc


@contextlib.contextmanager
def scoped_insert(register, key, value):
    register[key] = value
    try:
        yield key, value
    finally:
        register.pop(key, None)


@contextlib.contextmanager
def cancel_task_on_exit(coroutine: Coroutine):
    task = asyncio.create_task(coroutine)
    try:
        yield task
    finally:
        task.cancel()


async def cancel_task_group_on_signal(task_group: anyio.abc.TaskGroup):
    with anyio.open_signal_receiver(signal.SIGINT, signal.SIGTERM) as signals:
        async for signum in signals:
            if signum == signal.SIGINT:
                logging.info("Ctrl+C pressed!")
            else:
                logging.info(f"Received signal {signum}, terminating.")

            task_group.cancel_scope.cancel()
            return


class RemoteException(Exception):
    """Use this to signal server side errors to clients."""

    pass


class GreeterError(Exception):
    """Base class of the errors which are fatal to a server or client process."""


class BindError(GreeterError):
    """The server could not acquire its listening address."""


class ConnectionFailed(GreeterError):
    """The client could not reach the server."""


class CallFailed(GreeterError):
    """The call did not complete: connection lost or server side error."""


class CallTimeout(CallFailed):
    """The call did not complete before its deadline."""
