__version__ = "0.1.0"
__author__ = "Francois du Vignaud"

__all__ = [
    "Address",
    "AsyncClient",
    "BindError",
    "CallFailed",
    "CallTimeout",
    "ConnectionFailed",
    "Greeter",
    "GreeterError",
    "GreeterService",
    "HelloReply",
    "HelloRequest",
    "RemoteException",
    "SyncClient",
    "connect",
    "create_async_client",
    "create_sync_client",
    "run_tcp_server",
    "serve_tcp",
    "start_tcp_server",
]

from .client_async import AsyncClient, connect, create_async_client
from .client_sync import SyncClient, create_sync_client
from .common import (
    BindError,
    CallFailed,
    CallTimeout,
    ConnectionFailed,
    GreeterError,
    RemoteException,
)
from .config import Address
from .contract import Greeter, HelloReply, HelloRequest
from .server import GreeterService, run_tcp_server, serve_tcp, start_tcp_server
