import logging

import greeter
from greeter.config import DEFAULT_PORT
from greeter.contract import make_greeting


class CountingGreeter(greeter.Greeter):
    def __init__(self):
        self.calls = 0

    async def greet(self, request):
        self.calls += 1
        logging.info(f"Greeting #{self.calls}: {request.name}")
        return greeter.HelloReply(make_greeting(request.name))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    greeter.run_tcp_server(greeter.Address(None, DEFAULT_PORT), CountingGreeter())
