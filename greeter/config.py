import argparse
import os
from typing import Mapping, NamedTuple, Optional

DEFAULT_PORT = 50051
DEFAULT_TIMEOUT = 1.0
DEFAULT_CLIENT_HOST = "localhost"
DEFAULT_NAME = "World"

HOST_VARIABLE = "GREETER_HOST"
PORT_VARIABLE = "GREETER_PORT"
TIMEOUT_VARIABLE = "GREETER_TIMEOUT"


class Address(NamedTuple):
    host: Optional[str]
    port: int

    def __str__(self) -> str:
        return f"{self.host or '*'}:{self.port}"


def server_parser(environ: Mapping[str, str] = os.environ) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="greeter-server", description="Serve the Greet operation")
    parser.add_argument(
        "--host",
        type=str,
        help="interface to listen on, all interfaces when omitted",
        default=environ.get(HOST_VARIABLE),
    )
    parser.add_argument(
        "--port", type=int, help="tcp port to use", default=environ.get(PORT_VARIABLE, str(DEFAULT_PORT))
    )
    return parser


def client_parser(environ: Mapping[str, str] = os.environ) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="greeter-client", description="Call the Greet operation once")
    parser.add_argument("name", type=str, help="name to greet", nargs="?", default=DEFAULT_NAME)
    parser.add_argument(
        "--host",
        type=str,
        help="server host name",
        default=environ.get(HOST_VARIABLE, DEFAULT_CLIENT_HOST),
    )
    parser.add_argument(
        "--port", type=int, help="server tcp port", default=environ.get(PORT_VARIABLE, str(DEFAULT_PORT))
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="seconds allowed for the call",
        default=environ.get(TIMEOUT_VARIABLE, str(DEFAULT_TIMEOUT)),
    )
    return parser


def address_from_args(args: argparse.Namespace) -> Address:
    return Address(args.host, args.port)
