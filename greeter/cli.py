"""Command line entry points of the greeter server and client.

Both functions return the process exit code instead of exiting so that they
can be driven from tests.
"""
import logging
import sys
from typing import List, Optional

from .client_sync import create_sync_client
from .common import BindError, GreeterError
from .config import address_from_args, client_parser, server_parser
from .server import run_tcp_server

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def server_main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    args = server_parser().parse_args(argv)
    try:
        run_tcp_server(address_from_args(args))
    except BindError as e:
        logging.error(f"Failed to serve: {e}")
        return 1
    return 0


def client_main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    args = client_parser().parse_args(argv)
    try:
        with create_sync_client(address_from_args(args), args.timeout) as client:
            reply = client.greet(args.name, args.timeout)
    except GreeterError as e:
        logging.error(f"Could not greet: {e}")
        return 1
    print(reply.message)
    return 0


def run_server():
    sys.exit(server_main())


def run_client():
    sys.exit(client_main())
