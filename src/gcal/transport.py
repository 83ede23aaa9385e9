"""
The HTTP transport the client sends through.  Anything with an async
send(httpx.Request) -> httpx.Response will do; test doubles included.
"""
from typing import Protocol, Self, runtime_checkable
import logging

import httpx

from .config import get_settings

logger = logging.getLogger(__name__)


@runtime_checkable
class Transport(Protocol):
    """
    Minimal transport capability.  Implementations report network and
    protocol failures by raising httpx.HTTPError (or OSError).  Connection
    pooling, TLS and timeouts are theirs to deal with.
    Must be safe to call concurrently if the client is shared across tasks.
    """

    async def send(self, request: httpx.Request) -> httpx.Response:
        ...


class HttpxTransport():
    """
    Default transport on top of httpx.AsyncClient.
    Either hand it a client you manage or let it create one with the
    configured timeout, in which case use it as an async context manager
    (or call aclose()) to release the connection pool.
    """

    def __init__(self, client: httpx.AsyncClient|None = None,
                 timeout: float|None = None) -> None:
        self._client = client
        self._owned = client is None
        self._timeout = timeout

    def __repr__(self) -> str:
        return f"{str(self.__class__)}:{'owned' if self._owned else 'shared'}"

    async def __aenter__(self) -> Self:
        _ = self.client
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            settings = get_settings()
            timeout = self._timeout if self._timeout is not None else settings['timeout']
            self._client = httpx.AsyncClient(timeout=timeout,
                                             headers={"User-Agent": settings['user_agent']})
            logger.debug("created httpx.AsyncClient timeout=%s", timeout)
        return self._client

    @property
    def closed(self) -> bool:
        return self._client is None or self._client.is_closed

    async def send(self, request: httpx.Request) -> httpx.Response:
        # the client's own default headers are merged by build_request(), not
        # by send(), so fold them in here without touching anything already set
        client = self.client
        for k, v in client.headers.items():
            if k not in request.headers:
                request.headers[k] = v
        # auth=None so a shared client's own auth never replaces the bearer header
        return await client.send(request, auth=None)

    async def aclose(self) -> None:
        """
        Close the underlying client, but only if we created it.
        """
        if self._owned and self._client is not None:
            await self._client.aclose()
            self._client = None
