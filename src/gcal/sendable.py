"""
Request descriptors.  A Sendable describes one logical API call: which
resource path, which query parameters, and what JSON body if any.
The client turns it into an actual HTTP request so resource code never
has to know about headers, auth or transports.
"""
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import quote
from zoneinfo import ZoneInfo
import datetime
import json

import httpx

from .config import get_settings
from .errors import UnknownError
from .resources import GCalResourceBase


def quote_segment(segment: Any) -> str:
    """
    Percent-encode a single path segment.  Calendar IDs are email addresses
    or contain '#' so nothing gets to be 'safe'.
    """
    return quote(str(segment), safe="")


def query_value(value: Any) -> str|list[str]|None:
    """
    Render a query parameter value the way the API expects it.
    None means 'leave it out'.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, datetime.datetime):
        # timeMin/timeMax MUST carry an offset, so a naive value is taken as UTC
        dt = value if value.tzinfo is not None else value.replace(tzinfo=datetime.timezone.utc)
        return dt.replace(microsecond=0).isoformat()
    if isinstance(value, datetime.date):
        return value.isoformat()
    if isinstance(value, (list, tuple, set, frozenset)):
        vals = [query_value(v) for v in value]
        return [v for v in vals if v is not None and not isinstance(v, list)]
    return str(value)


def _json_default(value: Any) -> Any:
    if isinstance(value, GCalResourceBase):
        return value.trim()
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    if isinstance(value, ZoneInfo):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {value.__class__.__name__} is not JSON serializable")


class Sendable(ABC):
    """
    Base for anything that can be handed to GCalClient.
    Subclasses provide path() and, as needed, query() and body().
    url() and body_bytes() must not have side effects, the client may call
    them more than once for the same request (debug tracing and sending).
    """

    @abstractmethod
    def path(self) -> str:
        """Resource path relative to the API base, e.g. 'users/me/calendarList'"""

    def query(self) -> Mapping[str, Any]:
        return {}

    def body(self) -> dict|list|GCalResourceBase|None:
        return None

    def url(self, action: str|None = None) -> httpx.URL:
        """
        Base URL + resource path + optional action segment + query string.
        """
        parts = [get_settings()['base_url'].rstrip('/'), self.path().strip('/')]
        if action:
            parts.append(str(action).strip('/'))
        raw = '/'.join(p for p in parts if p)
        params = []
        for k, v in self.query().items():
            val = query_value(v)
            if val is None:
                continue
            if isinstance(val, list):
                params.extend((k, i) for i in val)
            else:
                params.append((k, val))
        try:
            url = httpx.URL(raw, params=params)
        except httpx.InvalidURL as e:
            raise UnknownError(f"invalid url {raw}: {e}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise UnknownError(f"invalid url {raw}: relative URL without a base")
        return url

    def body_bytes(self) -> bytes:
        """
        JSON encoded body, or empty bytes for read operations.
        """
        b = self.body()
        if b is None:
            return b""
        try:
            # trim() runs fixup(), which parses dates and looks up time zones
            if isinstance(b, GCalResourceBase):
                b = b.trim()
            return json.dumps(b, default=_json_default, ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError, LookupError) as e:
            raise UnknownError(f"could not serialize request body: {e}") from e


@dataclass(frozen=True)
class Target(Sendable):
    """
    A ready-made Sendable for calls that have no dedicated resource client.
    path is relative to the API base, e.g. 'colors' or 'users/me/settings'.
    """
    resource: str
    params: Mapping[str, Any] = field(default_factory=dict)
    payload: dict|list|GCalResourceBase|None = field(default=None)

    def path(self) -> str:
        return self.resource

    def query(self) -> Mapping[str, Any]:
        return self.params

    def body(self) -> dict|list|GCalResourceBase|None:
        return self.payload
