import contextlib
from typing import Iterator, Optional

from anyio.from_thread import BlockingPortal, start_blocking_portal

from .client_async import AsyncClient, connect
from .config import DEFAULT_TIMEOUT, Address
from .contract import HelloReply


class SyncClient:
    def __init__(self, portal: BlockingPortal, async_client: AsyncClient) -> None:
        self.portal = portal
        self.async_client: AsyncClient = async_client

    def greet(self, name: str, timeout: Optional[float] = DEFAULT_TIMEOUT) -> HelloReply:
        return self.portal.call(self.async_client.greet, name, timeout)


@contextlib.contextmanager
def create_sync_client(
    address: Address, timeout: Optional[float] = DEFAULT_TIMEOUT
) -> Iterator[SyncClient]:
    with start_blocking_portal("asyncio") as portal:
        with portal.wrap_async_context_manager(connect(address, timeout)) as async_client:
            yield SyncClient(portal, async_client)
