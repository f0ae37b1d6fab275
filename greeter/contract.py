"""The Greeter service contract shared by the server and the client.

A single operation, ``Greet``, takes a :class:`HelloRequest` and returns a
:class:`HelloReply`. Messages travel as pickled tuples; decoding only resolves
the classes listed in :data:`ALLOWED_GLOBALS`.
"""
from __future__ import annotations

import io
import pickle
from abc import ABCMeta, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Union

from .common import RemoteException

GREET = "Greet"

OK = "OK"
EXCEPTION = "Exception"

GREETING_PREFIX = "Hello "


@dataclass(frozen=True)
class HelloRequest:
    name: str


@dataclass(frozen=True)
class HelloReply:
    message: str


def make_greeting(name: str) -> str:
    return GREETING_PREFIX + name


class Greeter(metaclass=ABCMeta):
    @abstractmethod
    def greet(self, request: HelloRequest) -> Union[HelloReply, Awaitable[HelloReply]]:
        ...


ALLOWED_GLOBALS = {
    (HelloRequest.__module__, HelloRequest.__qualname__): HelloRequest,
    (HelloReply.__module__, HelloReply.__qualname__): HelloReply,
    (RemoteException.__module__, RemoteException.__qualname__): RemoteException,
}


class ContractUnpickler(pickle.Unpickler):
    def find_class(self, module, name):
        try:
            return ALLOWED_GLOBALS[(module, name)]
        except KeyError:
            raise pickle.UnpicklingError(f"{module}.{name} is not part of the contract") from None


def dumps(value: Any) -> bytes:
    return pickle.dumps(value)


def loads(data: bytes) -> Any:
    return ContractUnpickler(io.BytesIO(data)).load()
