import time

import pytest

from greeter.cli import client_main, server_main
from greeter.config import (
    DEFAULT_CLIENT_HOST,
    DEFAULT_NAME,
    DEFAULT_PORT,
    DEFAULT_TIMEOUT,
    client_parser,
    server_parser,
)
from tests.utils import LOOPBACK, SlowGreeter, occupied_port, running_server_sync, unused_port


def test_client_defaults():
    args = client_parser(environ={}).parse_args([])
    assert (args.name, args.host, args.port, args.timeout) == (
        DEFAULT_NAME,
        DEFAULT_CLIENT_HOST,
        DEFAULT_PORT,
        DEFAULT_TIMEOUT,
    )


def test_client_environment():
    environ = {"GREETER_HOST": "example.org", "GREETER_PORT": "1234", "GREETER_TIMEOUT": "2.5"}
    args = client_parser(environ).parse_args([])
    assert (args.host, args.port, args.timeout) == ("example.org", 1234, 2.5)
    args = client_parser(environ).parse_args(["Ada", "--port", "4321"])
    assert (args.name, args.port) == ("Ada", 4321)


def test_server_defaults():
    args = server_parser(environ={}).parse_args([])
    assert (args.host, args.port) == (None, DEFAULT_PORT)
    args = server_parser(environ={"GREETER_PORT": "8080"}).parse_args(["--host", LOOPBACK])
    assert (args.host, args.port) == (LOOPBACK, 8080)


def test_client_prints_greeting(capsys):
    with running_server_sync() as (address, _):
        assert client_main(["World", "--host", address.host, "--port", str(address.port)]) == 0
    assert capsys.readouterr().out == "Hello World\n"


def test_client_empty_name(capsys):
    with running_server_sync() as (address, _):
        assert client_main(["", "--host", address.host, "--port", str(address.port)]) == 0
    assert capsys.readouterr().out == "Hello \n"


def test_client_without_server():
    start = time.monotonic()
    assert client_main(["--host", LOOPBACK, "--port", str(unused_port()), "--timeout", "1"]) == 1
    assert time.monotonic() - start < 2


def test_client_timeout(capsys):
    with running_server_sync(SlowGreeter()) as (address, _):
        argv = ["--host", address.host, "--port", str(address.port), "--timeout", "0.2"]
        assert client_main(argv) == 1
    assert capsys.readouterr().out == ""


def test_server_bind_failure(caplog):
    with occupied_port() as port:
        assert server_main(["--host", LOOPBACK, "--port", str(port)]) == 1
    assert "Failed to serve" in caplog.text


def test_server_bad_arguments():
    with pytest.raises(SystemExit):
        server_main(["--port", "not-a-port"])


@pytest.mark.parametrize(
    "environ", [{"GREETER_PORT": "not-a-port"}, {"GREETER_TIMEOUT": "soon"}]
)
def test_client_malformed_environment(environ, capsys):
    with pytest.raises(SystemExit) as e_info:
        client_parser(environ).parse_args([])
    assert e_info.value.code == 2
    assert "invalid" in capsys.readouterr().err


def test_server_malformed_environment(capsys):
    with pytest.raises(SystemExit) as e_info:
        server_parser({"GREETER_PORT": "not-a-port"}).parse_args([])
    assert e_info.value.code == 2
    assert "invalid int value" in capsys.readouterr().err
