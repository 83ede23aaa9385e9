"""
Core client.  The access token must already have been fetched, the OAuth
negotiation is not our business.  The client itself only implements the HTTP
verbs, each taking a Sendable that knows its own URL and body.  Use the
resource clients (CalendarListClient, CalendarClient, EventClient) to do the
actual transactional work.

Only one response condition is turned into an error here: an expired or
revoked token.  Every other non-200 response is handed back untouched, a 404
on a get and a 410 on a delete mean different things to different callers.
"""
from collections.abc import Mapping
from typing import Self
import logging

import httpx
from google.oauth2.credentials import Credentials

from .errors import INVALID_TOKEN_CHALLENGE, InvalidTokenError, TransportError
from .sendable import Sendable
from .transport import Transport

logger = logging.getLogger(__name__)

# verbs that carry a request body
_BODY_METHODS = ("POST", "PUT", "PATCH")


class GCalClient():
    """
    Holds the transport, the bearer token, optional extra headers and a debug flag.
    Token and headers never change on an instance, a refreshed token means a new
    client via with_token().  Copies share the transport object so they are cheap
    to hand out to several resource clients or tasks.
    """

    def __init__(self, transport: Transport, access_token: str) -> None:
        self._transport = transport
        self._access_token = str(access_token)
        self._headers: dict[str,str] = {}
        self._debug = False

    def __repr__(self) -> str:
        # never show the token
        return f"{str(self.__class__)}:{repr(self._transport)}:debug={self._debug}"

    @classmethod
    def from_credentials(cls, transport: Transport, credentials: Credentials) -> Self:
        """
        Build from google-auth credentials that the caller has already authorized.
        No refresh is attempted here, a missing or expired token is reported as such.
        """
        if not credentials.token:
            raise InvalidTokenError("Credentials carry no access token")
        if credentials.expired:
            raise InvalidTokenError()
        return cls(transport, credentials.token)

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def access_token(self) -> str:
        return self._access_token

    @property
    def headers(self) -> dict[str,str]:
        """Extra headers sent with every request (a copy)."""
        return dict(self._headers)

    @property
    def debug(self) -> bool:
        return self._debug

    def enable_debug(self) -> None:
        """
        Trace every request to the gcal.client logger at DEBUG level.
        There is no way back, set it before the client is shared.
        """
        self._debug = True

    def _derive(self, access_token: str|None = None,
                headers: Mapping[str,str]|None = None) -> Self:
        c = self.__class__(self._transport,
                           self._access_token if access_token is None else access_token)
        c._headers = dict(self._headers) if headers is None else {str(k): str(v) for k,v in headers.items()}
        c._debug = self._debug
        return c

    def copy(self) -> Self:
        return self._derive()

    def with_headers(self, headers: Mapping[str,str]) -> Self:
        """
        New client sharing this transport, sending headers with every request.
        Authorization can't be overridden this way, the bearer header always wins.
        """
        return self._derive(headers=headers)

    def with_token(self, access_token: str) -> Self:
        """
        New client sharing this transport but using a fresh access token.
        """
        return self._derive(access_token=access_token)

    def _trace(self, method: str, url: httpx.URL, target: Sendable) -> None:
        if not self._debug:
            return
        # tracing must never abort the call, anything odd about the body just shows as empty.
        # body_bytes() may be overridden so there is no telling what it raises
        try:
            body = target.body_bytes().decode("utf-8")
        except Exception:
            body = ""
        logger.debug("[%s] %s | %s", method, url, body)

    async def _send(self, method: str, target: Sendable, action: str|None) -> httpx.Response:
        url = target.url(action)
        self._trace(method, url, target)

        headers = httpx.Headers(self._headers)
        content = None
        if method in _BODY_METHODS:
            content = target.body_bytes()
            if "Content-Type" not in headers:
                headers["Content-Type"] = "application/json"
        # setting replaces every same-named header regardless of case
        headers["Authorization"] = f"Bearer {self._access_token}"
        request = httpx.Request(method, url, headers=headers, content=content)

        try:
            response = await self._transport.send(request)
        except (httpx.HTTPError, httpx.StreamError, OSError) as e:
            logger.debug("transport failed for [%s] %s: %s", method, url, e)
            raise TransportError(e) from e

        if response.status_code != 200:
            challenge = response.headers.get("WWW-Authenticate")
            if challenge is not None and challenge.startswith(INVALID_TOKEN_CHALLENGE):
                logger.warning("access token rejected for [%s] %s", method, url)
                raise InvalidTokenError()
        return response

    async def get(self, target: Sendable, action: str|None = None) -> httpx.Response:
        """Perform a GET request."""
        return await self._send("GET", target, action)

    async def post(self, target: Sendable, action: str|None = None) -> httpx.Response:
        """Perform a POST request."""
        return await self._send("POST", target, action)

    async def put(self, target: Sendable, action: str|None = None) -> httpx.Response:
        """Perform a PUT request."""
        return await self._send("PUT", target, action)

    async def patch(self, target: Sendable, action: str|None = None) -> httpx.Response:
        """Perform a PATCH request."""
        return await self._send("PATCH", target, action)

    async def delete(self, target: Sendable, action: str|None = None) -> httpx.Response:
        """Perform a DELETE request."""
        return await self._send("DELETE", target, action)
