from collections.abc import Mapping
from dataclasses import dataclass, field, asdict
from typing import Any, List, Tuple
from zoneinfo import ZoneInfo
import datetime
import logging

from .calendar import Calendar, CalendarListEntry, calendar_id_of
from .client import GCalClient
from .resources import GCalResourceBase, SendUpdates, check_status, response_json
from .sendable import Sendable, quote_segment

logger = logging.getLogger(__name__)


@dataclass
class EventDateTime(GCalResourceBase):
    """
    The start/end/originalStartTime object of an event.
    An all-day event sends 'date', a timed one sends 'dateTime'; the two
    never go out together, if both are set 'dateTime' is kept.
    """
    date: datetime.date|str|None = field(default=None)
    dateTime: datetime.datetime|str|None = field(default=None)
    timeZone: ZoneInfo|str|None = field(default=None)

    def __bool__(self) -> bool:
        return bool(self.date) or bool(self.dateTime)

    def __str__(self) -> str:
        s = "<empty>"
        if self.dateTime:
            s = str(self.dateTime)
        elif self.date:
            s = str(self.date)
        if self.timeZone:
            s = f'{s}:{str(self.timeZone)}'
        return s

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        if self.date is not None and not isinstance(self.date, datetime.date):
            self.date = datetime.date.fromisoformat(str(self.date))
        if self.dateTime is not None and not isinstance(self.dateTime,datetime.datetime):
            self.dateTime = datetime.datetime.fromisoformat(str(self.dateTime)).replace(microsecond=0)
        if self.timeZone is not None and not isinstance(self.timeZone,ZoneInfo):
            self.timeZone = ZoneInfo(str(self.timeZone))
        # dateTime wins
        if self.dateTime and self.date:
            self.date = None

    def values(self) -> Tuple[datetime.date|datetime.datetime|None,ZoneInfo|None]:
        return (self.dateTime if self.dateTime else self.date, self.timeZone)

    def to_base(self) -> dict|None:
        """
        JSON-ready dict with only the keys that are set, or None when nothing is.
        Values are written with isoformat() so timestamps get RFC3339's 'T'.
        """
        self.fixup()
        base = { 'date': self.date.isoformat() if self.date else None,
                 'dateTime': self.dateTime.isoformat() if self.dateTime else None,
                 'timeZone': str(self.timeZone) if self.timeZone else None }

        for k in ['date', 'dateTime', 'timeZone']:
            if base[k] is None:
                del base[k]

        return None if not base else base


def _event_datetime(value: Any) -> EventDateTime|None:
    if value is None or isinstance(value, EventDateTime):
        return value
    return EventDateTime.from_dict(dict(value))


def _timestamp(value: Any) -> datetime.datetime|None:
    if value is None or isinstance(value, datetime.datetime):
        return value
    return datetime.datetime.fromisoformat(str(value)).replace(microsecond=0)


@dataclass
class Event(GCalResourceBase):
    """
    https://developers.google.com/calendar/api/v3/reference/events#resource-representations
    Representation of a calendar event.
    """
    kind: str|None = field(default=None)
    etag: str|None = field(default=None)
    id: str|None = field(default=None)
    status: str|None = field(default=None)
    htmlLink: str|None = field(default=None)
    created: datetime.datetime|str|None = field(default=None)
    updated: datetime.datetime|str|None = field(default=None)
    summary: str|None = field(default=None)
    description: str|None = field(default=None)
    location: str|None = field(default=None)
    colorId: str|None = field(default=None)
    creator: dict|None = field(default=None)
    organizer: dict|None = field(default=None)
    start: EventDateTime|dict|None = field(default=None)
    end: EventDateTime|dict|None = field(default=None)
    endTimeUnspecified: bool|None = field(default=None)
    recurrence: List[str]|None = field(default=None)
    recurringEventId: str|None = field(default=None)
    originalStartTime: EventDateTime|dict|None = field(default=None)
    transparency: str|None = field(default=None)
    visibility:str|None = field(default=None)
    iCalUID: str|None = field(default=None)
    sequence: int|None = field(default=None)
    attendees: List[dict]|None = field(default=None)
    attendeesOmitted: bool|None = field(default=None)
    extendedProperties: dict|None = field(default=None)
    hangoutLink: str|None = field(default=None)
    conferenceData: dict|None = field(default=None)
    gadget: dict|None = field(default=None)
    anyoneCanAddSelf: bool|None = field(default=None)
    guestsCanInviteOthers: bool|None = field(default=None)
    guestsCanModify: bool|None = field(default=None)
    guestsCanSeeOtherGuests: bool|None = field(default=None)
    privateCopy: bool|None = field(default=None)
    locked: bool|None = field(default=None)
    reminders: dict|None = field(default=None)
    source: dict|None = field(default=None)
    workingLocationProperties: dict|None = field(default=None)
    outOfOfficeProperties: dict|None = field(default=None)
    focusTimeProperties: dict|None = field(default=None)
    attachments: List[dict]|None = field(default=None)
    eventType: str|None = field(default=None)

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        self.created = _timestamp(self.created)
        self.updated = _timestamp(self.updated)
        self.start = _event_datetime(self.start)
        self.end = _event_datetime(self.end)
        self.originalStartTime = _event_datetime(self.originalStartTime)

    def __bool__(self) -> bool:
        return self.kind is not None and self.kind == "calendar#event" and bool(self.etag) and bool(self.id)

    def __str__(self) -> str:
        ret = "<empty>"
        if self:
            ret = f"{self.summary}<{self.id}>"
            if self.start and self.end:
                start, stz, end, _ = self.duration()
                ret += f"({str(start)}-->{str(end)}:{str(stz)})"
        return ret

    def __repr__(self) -> str:
        return f"{str(self.__class__)}:{str(self)}"

    def all_day(self) -> bool:
        """True when both ends are plain dates."""
        return (self.start is not None and self.end is not None and
                self.start.date is not None and self.end.date is not None)

    def duration(self) -> Tuple[datetime.date|datetime.datetime|None,ZoneInfo|None,
                                datetime.date|datetime.datetime|None,ZoneInfo|None]:
        """
        (start, start zone, end, end zone), each time being whichever of
        date/dateTime is set.
        """
        start = self.start.values() if self.start else (None, None)
        end = self.end.values() if self.end else (None, None)
        return (*start, *end)

    def set_duration(self, start: str|datetime.date|datetime.datetime,
                     end: str|datetime.date|datetime.datetime, tz: str|ZoneInfo|None = None) -> None:
        """
        Replace start and end.  Strings are parsed with fromisoformat().
        If either end is a plain date the event becomes all-day; so does a
        pair of timestamps that both fall exactly on midnight.  tz, when
        given, is written to both ends.
        """
        # datetime subclasses date, hence type() checks below
        s = start if isinstance(start,datetime.date) else str(start)
        if isinstance(s,str):
            s = datetime.datetime.fromisoformat(s).replace(microsecond=0)
        e = end if isinstance(end,datetime.date) else str(end)
        if isinstance(e,str):
            e = datetime.datetime.fromisoformat(e).replace(microsecond=0)
        if isinstance(s,datetime.datetime) and type(e) is datetime.date:
            s = s.date()
        if type(s) is datetime.date and isinstance(e,datetime.datetime):
            e = e.date()
        if isinstance(s,datetime.datetime):
            st = s.time()
            et = e.time()
            m = datetime.time.min
            if st == m and et == m:
                s = s.date()
                e = e.date()
        es = EventDateTime()
        ee = EventDateTime()
        if isinstance(s,datetime.datetime):
            es.dateTime = s
            ee.dateTime = e
        else:
            es.date = s
            ee.date = e
        t = None if tz is None else tz if isinstance(tz,ZoneInfo) else str(tz)
        if isinstance(t,str):
            t = ZoneInfo(t)
        es.timeZone = t
        ee.timeZone = t
        self.start = es
        self.end = ee

    def to_base(self) -> dict:
        """Nested times and timestamps rendered as strings."""
        self.fixup()
        b = asdict(self)
        for k in ['start', 'end', 'originalStartTime']:
            v = getattr(self, k)
            b[k] = v.to_base() if v else None
        for k in ['created', 'updated']:
            v = getattr(self, k)
            b[k] = v.isoformat() if v else None
        return b


def event_id_of(event: str|Event) -> str:
    eid = event.id if isinstance(event, Event) else event
    if not eid:
        raise ValueError("An event ID is required")
    return str(eid)


def _send_updates(value: SendUpdates|str|None, method: str) -> SendUpdates|None:
    if not value:
        return None
    try:
        return SendUpdates(str(value))
    except ValueError:
        raise ValueError(f"Invalid EventClient.{method}() sendUpdates value: {value}") from None


def _bounded(value: Any, tz: ZoneInfo|None) -> datetime.datetime|None:
    """
    timeMin and timeMax MUST have the tz offset applied.  Naive values take the
    requested timeZone, or UTC when there is none.  A plain date means midnight.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime.datetime):
        dt = value
    elif isinstance(value, datetime.date):
        dt = datetime.datetime.combine(value, datetime.time.min)
    else:
        dt = datetime.datetime.fromisoformat(str(value))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=tz if tz is not None else ZoneInfo('UTC'))
    return dt.replace(microsecond=0)


@dataclass(frozen=True)
class EventTarget(Sendable):
    """
    calendars/calendarId/events[/eventId]
    """
    calendar_id: str
    event_id: str|None = field(default=None)
    params: Mapping[str, Any] = field(default_factory=dict)
    event: Event|dict|None = field(default=None)

    def path(self) -> str:
        p = f"calendars/{quote_segment(self.calendar_id)}/events"
        if self.event_id:
            p = f"{p}/{quote_segment(self.event_id)}"
        return p

    def query(self) -> Mapping[str, Any]:
        return self.params

    def body(self) -> Event|dict|None:
        return self.event


class EventClient():
    """
    https://developers.google.com/calendar/api/v3/reference/events
    The method you will work with most, events in a single calendar.
    """

    def __init__(self, client: GCalClient) -> None:
        self._client = client

    @property
    def client(self) -> GCalClient:
        return self._client

    async def _collect(self, target: EventTarget, action: str|None = None) -> List[Event]:
        events = []
        page_token = None
        while True:
            page = EventTarget(calendar_id=target.calendar_id, event_id=target.event_id,
                               params={**target.params, "pageToken": page_token})
            response = response_json(await self._client.get(page, action))
            for e in response.get('items', []):
                events.append(Event.from_dict(e))
            page_token = response.get('nextPageToken', None)
            if not page_token:
                break
        return events

    def _result(self, event: Event|dict, response: dict) -> Event:
        # if an Event was passed in, fill that out, otherwise return a new object
        if isinstance(event, Event):
            event.update_fields(**response)
            return event
        return Event.from_dict(response)

    async def list(self, calendar_id: str|Calendar|CalendarListEntry = "primary",
                   start: datetime.datetime|datetime.date|str|None = None,
                   end: datetime.datetime|datetime.date|str|None = None,
                   **kwargs) -> List[Event]:
        """
        https://developers.google.com/calendar/api/v3/reference/events/list
        Entry point for all calendar events.  start/end are timeMin/timeMax, the
        kwargs are the very large number of other query parameters for this method
        so check the documentation.
        """
        cid = calendar_id_of(calendar_id)
        params = dict(kwargs)
        # paging is ours to handle
        params.pop('pageToken', None)
        tz = None
        kwtz = params.get('timeZone', None)
        if kwtz:
            tz = kwtz if isinstance(kwtz, ZoneInfo) else ZoneInfo(str(kwtz))
            params['timeZone'] = str(tz)
        else:
            params.pop('timeZone', None)
        if start is not None:
            params['timeMin'] = start
        if end is not None:
            params['timeMax'] = end
        for t in ['timeMin', 'timeMax']:
            if t in params:
                params[t] = _bounded(params[t], tz)
        return await self._collect(EventTarget(calendar_id=cid, params=params))

    async def get(self, calendar_id: str|Calendar|CalendarListEntry, event_id: str|Event,
                  maxAttendees: int = 0, timeZone: str|ZoneInfo|None = None) -> Event:
        """
        https://developers.google.com/calendar/api/v3/reference/events/get
        Get the event associated with the calendar and event IDs
        """
        params = {}
        if maxAttendees > 0:
            params['maxAttendees'] = maxAttendees
        if timeZone:
            params['timeZone'] = str(timeZone)
        target = EventTarget(calendar_id=calendar_id_of(calendar_id),
                             event_id=event_id_of(event_id), params=params)
        return Event.from_dict(response_json(await self._client.get(target)))

    async def instances(self, calendar_id: str|Calendar|CalendarListEntry, event_id: str|Event,
                        **kwargs) -> List[Event]:
        """
        https://developers.google.com/calendar/api/v3/reference/events/instances
        Expand a recurring event into its individual occurrences.
        """
        params = dict(kwargs)
        params.pop('pageToken', None)
        for t in ['timeMin', 'timeMax']:
            if t in params:
                params[t] = _bounded(params[t], None)
        target = EventTarget(calendar_id=calendar_id_of(calendar_id),
                             event_id=event_id_of(event_id), params=params)
        return await self._collect(target, action="instances")

    def _write_params(self, method: str, sendUpdates: SendUpdates|str|None, maxAttendees: int,
                      supportsAttachments: bool, conferenceDataVersion: int) -> dict:
        params = {"sendUpdates": _send_updates(sendUpdates, method),
                  "supportsAttachments": supportsAttachments or None,
                  "conferenceDataVersion": 1 if conferenceDataVersion else None}
        if maxAttendees > 0:
            params['maxAttendees'] = maxAttendees
        return params

    async def insert(self, calendar_id: str|Calendar|CalendarListEntry, event: Event|dict,
                     sendUpdates: SendUpdates|str|None = None,
                     maxAttendees: int = 0,
                     supportsAttachments: bool = False,
                     conferenceDataVersion: int = 0) -> Event:
        """
        https://developers.google.com/calendar/api/v3/reference/events/insert
        Insert a new event into the specified calendar
        """
        params = self._write_params("insert", sendUpdates, maxAttendees,
                                    supportsAttachments, conferenceDataVersion)
        target = EventTarget(calendar_id=calendar_id_of(calendar_id), params=params, event=event)
        return self._result(event, response_json(await self._client.post(target)))

    async def update(self, calendar_id: str|Calendar|CalendarListEntry, event: Event|dict,
                     sendUpdates: SendUpdates|str|None = None,
                     maxAttendees: int = 0,
                     supportsAttachments: bool = False,
                     conferenceDataVersion: int = 0) -> Event:
        """
        https://developers.google.com/calendar/api/v3/reference/events/update
        Replace the event on the specified calendar.
        """
        eid = event.id if isinstance(event, Event) else dict(event).get('id')
        params = self._write_params("update", sendUpdates, maxAttendees,
                                    supportsAttachments, conferenceDataVersion)
        target = EventTarget(calendar_id=calendar_id_of(calendar_id), event_id=event_id_of(eid),
                             params=params, event=event)
        return self._result(event, response_json(await self._client.put(target)))

    async def patch(self, calendar_id: str|Calendar|CalendarListEntry, event: Event|dict,
                    sendUpdates: SendUpdates|str|None = None,
                    maxAttendees: int = 0,
                    supportsAttachments: bool = False,
                    conferenceDataVersion: int = 0) -> Event:
        """
        https://developers.google.com/calendar/api/v3/reference/events/patch
        Only the filled-in fields are sent and changed.
        """
        eid = event.id if isinstance(event, Event) else dict(event).get('id')
        params = self._write_params("patch", sendUpdates, maxAttendees,
                                    supportsAttachments, conferenceDataVersion)
        target = EventTarget(calendar_id=calendar_id_of(calendar_id), event_id=event_id_of(eid),
                             params=params, event=event)
        return self._result(event, response_json(await self._client.patch(target)))

    async def delete(self, calendar_id: str|Calendar|CalendarListEntry, event_id: str|Event,
                     sendUpdates: SendUpdates|str|None = None) -> None:
        """
        https://developers.google.com/calendar/api/v3/reference/events/delete
        Delete the event with the associated calendar and event IDs.
        An event that is already gone (410) counts as deleted.
        """
        cid = calendar_id_of(calendar_id)
        eid = event_id_of(event_id)
        target = EventTarget(calendar_id=cid, event_id=eid,
                             params={"sendUpdates": _send_updates(sendUpdates, "delete")})
        logger.info("Deleting event %s from calendar %s", eid, cid)
        check_status(await self._client.delete(target), accept=(410,))

    async def quick_add(self, calendar_id: str|Calendar|CalendarListEntry, text: str,
                        sendUpdates: SendUpdates|str|None = None) -> Event:
        """
        https://developers.google.com/calendar/api/v3/reference/events/quickAdd
        Create an event from a free text description like 'Lunch with Bob tomorrow 1pm'
        """
        if not text:
            raise ValueError("EventClient.quick_add() requires text")
        target = EventTarget(calendar_id=calendar_id_of(calendar_id),
                             params={"text": text,
                                     "sendUpdates": _send_updates(sendUpdates, "quick_add")})
        return Event.from_dict(response_json(await self._client.post(target, action="quickAdd")))

    async def move(self, calendar_id: str|Calendar|CalendarListEntry, event_id: str|Event,
                   destination: str|Calendar|CalendarListEntry,
                   sendUpdates: SendUpdates|str|None = None) -> Event:
        """
        https://developers.google.com/calendar/api/v3/reference/events/move
        Move an event to another calendar, i.e. change its organizer.
        """
        target = EventTarget(calendar_id=calendar_id_of(calendar_id), event_id=event_id_of(event_id),
                             params={"destination": calendar_id_of(destination),
                                     "sendUpdates": _send_updates(sendUpdates, "move")})
        response = response_json(await self._client.post(target, action="move"))
        if isinstance(event_id, Event):
            return self._result(event_id, response)
        return Event.from_dict(response)
