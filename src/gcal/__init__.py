"""
gcal: a small typed async client for the Google Calendar v3 REST API.

The access token is expected to be fetched elsewhere, the OAuth negotiation
is not part of this library.  GCalClient only knows how to send a request
descriptor (a Sendable) through a transport with the bearer token attached,
and how to spot an expired token in the reply.  The resource clients do the
transactional work on top of it.

Python dataclasses are used for the resource structs and most of the logic is
translating between those and the raw dicts.

    import httpx
    from gcal import GCalClient, HttpxTransport, EventClient

    async with HttpxTransport() as transport:
        client = GCalClient(transport, access_token)
        events = EventClient(client)
        for event in await events.list("primary", start, end):
            print(event.id, event.summary)
"""
from .config import configure, get_settings, reset
from .errors import ClientError, InvalidTokenError, TransportError, UnknownError
from .resources import CalendarAccessRole, GCalResourceBase, SendUpdates
from .sendable import Sendable, Target
from .transport import HttpxTransport, Transport
from .client import GCalClient
from .calendar import (Calendar, CalendarClient, CalendarListClient, CalendarListEntry,
                       CalendarListTarget, CalendarTarget, ConferenceProperties)
from .events import Event, EventClient, EventDateTime, EventTarget

__all__ = [
    'configure',
    'get_settings',
    'reset',
    'ClientError',
    'InvalidTokenError',
    'TransportError',
    'UnknownError',
    'CalendarAccessRole',
    'GCalResourceBase',
    'SendUpdates',
    'Sendable',
    'Target',
    'Transport',
    'HttpxTransport',
    'GCalClient',
    'Calendar',
    'CalendarClient',
    'CalendarListClient',
    'CalendarListEntry',
    'CalendarListTarget',
    'CalendarTarget',
    'ConferenceProperties',
    'Event',
    'EventClient',
    'EventDateTime',
    'EventTarget',
]
