from collections.abc import Mapping
from dataclasses import dataclass, field, asdict
from typing import Any, List, Self
from zoneinfo import ZoneInfo
import logging

from .client import GCalClient
from .resources import CalendarAccessRole, GCalResourceBase, check_status, response_json
from .sendable import Sendable, quote_segment

logger = logging.getLogger(__name__)


@dataclass
class ConferenceProperties(GCalResourceBase):
    """
    https://developers.google.com/calendar/api/v3/reference/calendars#conferenceProperties
    The types of conference solutions supported for a calendar,
    e.g. 'eventHangout', 'eventNamedHangout', 'hangoutsMeet'
    """
    allowedConferenceSolutionTypes: List[str]|None = field(default=None)

    def __bool__(self) -> bool:
        return bool(self.allowedConferenceSolutionTypes)


def _conference_properties(value: Any) -> ConferenceProperties|None:
    if value is None or isinstance(value, ConferenceProperties):
        return value
    return ConferenceProperties.from_dict(dict(value))


@dataclass
class CalendarListEntry(GCalResourceBase):
    """
    https://developers.google.com/calendar/api/v3/reference/calendarList#resource-representations
    The API treats a present-but-null field as a value so use None
    as the empty/default, trim() strips them before sending.
    """
    kind: str|None = field(default=None)
    etag: str|None = field(default=None)
    id: str|None = field(default=None)
    summary: str|None = field(default=None)
    description: str|None = field(default=None)
    location: str|None = field(default=None)
    timeZone: str|None = field(default=None)
    summaryOverride: str|None = field(default=None)
    colorId: str|None = field(default=None)
    backgroundColor: str|None = field(default=None)
    foregroundColor: str|None = field(default=None)
    hidden: bool|None = field(default=None)
    selected: bool|None = field(default=None)
    accessRole: CalendarAccessRole|str|None = field(default=None)
    defaultReminders: List[dict]|None = field(default=None)
    notificationSettings: dict|None = field(default=None)
    primary: bool|None = field(default=None)
    deleted: bool|None = field(default=None)
    conferenceProperties: ConferenceProperties|dict|None = field(default=None)

    def __post_init__(self) -> None:
        self.fixup()

    def __bool__(self) -> bool:
        return self.kind is not None and self.kind == "calendar#calendarListEntry" and bool(self.etag) and bool(self.id)

    def __str__(self) -> str:
        if self:
            return f"{self.id}:{self.summary}"
        return "<empty>"

    def __repr__(self) -> str:
        return f"{str(self.__class__)}:{str(self)}"

    def fixup(self) -> None:
        if self.accessRole is not None and not isinstance(self.accessRole, CalendarAccessRole):
            self.accessRole = CalendarAccessRole(str(self.accessRole))
        self.conferenceProperties = _conference_properties(self.conferenceProperties)

    def to_base(self) -> dict:
        self.fixup()
        b = asdict(self)
        b['accessRole'] = str(self.accessRole) if self.accessRole is not None else None
        b['conferenceProperties'] = self.conferenceProperties.trim() if self.conferenceProperties else None
        return b


@dataclass
class Calendar(GCalResourceBase):
    """
    https://developers.google.com/calendar/api/v3/reference/calendars#resource-representations
    Typically you'd interact with this via CalendarClient.get and an id, which is usually
    someone's email address
    """
    kind: str|None = field(default=None)
    etag: str|None = field(default=None)
    id: str|None = field(default=None)
    summary: str|None = field(default=None)
    description: str|None = field(default=None)
    location: str|None = field(default=None)
    timeZone: ZoneInfo|str|None = field(default=None)
    conferenceProperties: ConferenceProperties|dict|None = field(default=None)

    def __post_init__(self) -> None:
        self.fixup()

    def __bool__(self) -> bool:
        return self.kind is not None and self.kind == "calendar#calendar" and bool(self.etag) and bool(self.id)

    def __str__(self) -> str:
        if bool(self):
            return f"{self.summary}<{self.id}>"
        else:
            return "<empty>"

    def __repr__(self) -> str:
        return f"{str(self.__class__)}:{str(self)}"

    def to_base(self) -> dict:
        self.fixup()
        b = asdict(self)
        b['timeZone'] = str(self.timeZone) if self.timeZone is not None else None
        b['conferenceProperties'] = self.conferenceProperties.trim() if self.conferenceProperties else None
        return b

    def fixup(self) -> None:
        if self.timeZone is not None and not isinstance(self.timeZone,ZoneInfo):
            self.timeZone = ZoneInfo(str(self.timeZone))
        self.conferenceProperties = _conference_properties(self.conferenceProperties)


def calendar_id_of(calendar: str|Calendar|CalendarListEntry) -> str:
    cid = calendar.id if isinstance(calendar, (Calendar, CalendarListEntry)) else calendar
    if not cid:
        raise ValueError("A calendar ID is required")
    return str(cid)


@dataclass(frozen=True)
class CalendarListTarget(Sendable):
    """
    users/me/calendarList[/calendarId]
    """
    calendar_id: str|None = field(default=None)
    params: Mapping[str, Any] = field(default_factory=dict)
    entry: CalendarListEntry|dict|None = field(default=None)

    def path(self) -> str:
        p = "users/me/calendarList"
        if self.calendar_id:
            p = f"{p}/{quote_segment(self.calendar_id)}"
        return p

    def query(self) -> Mapping[str, Any]:
        return self.params

    def body(self) -> CalendarListEntry|dict|None:
        return self.entry


@dataclass(frozen=True)
class CalendarTarget(Sendable):
    """
    calendars[/calendarId]
    """
    calendar_id: str|None = field(default=None)
    params: Mapping[str, Any] = field(default_factory=dict)
    calendar: Calendar|dict|None = field(default=None)

    def path(self) -> str:
        p = "calendars"
        if self.calendar_id:
            p = f"{p}/{quote_segment(self.calendar_id)}"
        return p

    def query(self) -> Mapping[str, Any]:
        return self.params

    def body(self) -> Calendar|dict|None:
        return self.calendar


class CalendarListClient():
    """
    https://developers.google.com/calendar/api/v3/reference/calendarList
    The calendars on the user's calendar list.  This is the entry point for pulling out
    available calendars.  Start here to get calendar IDs for everything else.
    """

    def __init__(self, client: GCalClient) -> None:
        self._client = client

    @property
    def client(self) -> GCalClient:
        return self._client

    async def list(self, show_hidden: bool = False,
                   min_access_role: CalendarAccessRole|str|None = None,
                   show_deleted: bool = False) -> List[CalendarListEntry]:
        """
        https://developers.google.com/calendar/api/v3/reference/calendarList/list
        Follows nextPageToken until every entry is in.
        """
        role = None
        if min_access_role:
            try:
                role = CalendarAccessRole(str(min_access_role))
            except ValueError:
                raise ValueError(f"Invalid CalendarListClient.list() min_access_role: {min_access_role}") from None
        params = {"showHidden": show_hidden, "showDeleted": show_deleted, "minAccessRole": role}
        clist = []
        page_token = None
        while True:
            target = CalendarListTarget(params={**params, "pageToken": page_token})
            response = response_json(await self._client.get(target))
            for entry in response.get('items', []):
                clist.append(CalendarListEntry.from_dict(entry))
            page_token = response.get('nextPageToken', None)
            if not page_token:
                break
        return clist

    async def get(self, calendar_id: str|CalendarListEntry) -> CalendarListEntry:
        """
        https://developers.google.com/calendar/api/v3/reference/calendarList/get
        """
        target = CalendarListTarget(calendar_id=calendar_id_of(calendar_id))
        return CalendarListEntry.from_dict(response_json(await self._client.get(target)))

    def _result(self, entry: CalendarListEntry|dict, response: dict) -> CalendarListEntry:
        # if an entry was passed in, fill that out, otherwise return a new object
        if isinstance(entry, CalendarListEntry):
            entry.update_fields(**response)
            return entry
        return CalendarListEntry.from_dict(response)

    async def insert(self, entry: CalendarListEntry|dict,
                     colorRgbFormat: bool = False) -> CalendarListEntry:
        """
        https://developers.google.com/calendar/api/v3/reference/calendarList/insert
        Adds an existing calendar (by its id) to the user's list.
        """
        target = CalendarListTarget(params={"colorRgbFormat": colorRgbFormat or None}, entry=entry)
        return self._result(entry, response_json(await self._client.post(target)))

    async def update(self, entry: CalendarListEntry|dict,
                     colorRgbFormat: bool = False) -> CalendarListEntry:
        """
        https://developers.google.com/calendar/api/v3/reference/calendarList/update
        """
        cid = entry.id if isinstance(entry, CalendarListEntry) else dict(entry).get('id')
        target = CalendarListTarget(calendar_id=calendar_id_of(cid),
                                    params={"colorRgbFormat": colorRgbFormat or None}, entry=entry)
        return self._result(entry, response_json(await self._client.put(target)))

    async def patch(self, entry: CalendarListEntry|dict,
                    colorRgbFormat: bool = False) -> CalendarListEntry:
        """
        https://developers.google.com/calendar/api/v3/reference/calendarList/patch
        Only the filled-in fields are sent.
        """
        cid = entry.id if isinstance(entry, CalendarListEntry) else dict(entry).get('id')
        target = CalendarListTarget(calendar_id=calendar_id_of(cid),
                                    params={"colorRgbFormat": colorRgbFormat or None}, entry=entry)
        return self._result(entry, response_json(await self._client.patch(target)))

    async def delete(self, calendar_id: str|CalendarListEntry) -> None:
        """
        https://developers.google.com/calendar/api/v3/reference/calendarList/delete
        Removes the calendar from the user's list, the calendar itself stays.
        An entry that is already gone (410) counts as deleted.
        """
        cid = calendar_id_of(calendar_id)
        logger.info("Removing calendar %s from calendar list", cid)
        check_status(await self._client.delete(CalendarListTarget(calendar_id=cid)), accept=(410,))


class CalendarClient():
    """
    https://developers.google.com/calendar/api/v3/reference/calendars
    Metadata for calendars themselves, as opposed to their calendar list entries.
    """

    def __init__(self, client: GCalClient) -> None:
        self._client = client

    @property
    def client(self) -> GCalClient:
        return self._client

    def _result(self, calendar: Calendar|dict, response: dict) -> Calendar:
        if isinstance(calendar, Calendar):
            calendar.update_fields(**response)
            return calendar
        return Calendar.from_dict(response)

    async def get(self, calendar_id: str|Calendar|CalendarListEntry = "primary") -> Calendar:
        """
        https://developers.google.com/calendar/api/v3/reference/calendars/get
        The 'primary' default is the currently authenticated user.
        """
        target = CalendarTarget(calendar_id=calendar_id_of(calendar_id))
        return Calendar.from_dict(response_json(await self._client.get(target)))

    async def insert(self, calendar: Calendar|dict) -> Calendar:
        """
        https://developers.google.com/calendar/api/v3/reference/calendars/insert
        Creates a secondary calendar, summary is required.
        """
        summary = calendar.summary if isinstance(calendar, Calendar) else dict(calendar).get('summary')
        if not summary:
            raise ValueError("CalendarClient.insert() requires a summary")
        target = CalendarTarget(calendar=calendar)
        return self._result(calendar, response_json(await self._client.post(target)))

    async def update(self, calendar: Calendar|dict) -> Calendar:
        """
        https://developers.google.com/calendar/api/v3/reference/calendars/update
        Replaces the calendar metadata with what is passed in.
        """
        cid = calendar.id if isinstance(calendar, Calendar) else dict(calendar).get('id')
        target = CalendarTarget(calendar_id=calendar_id_of(cid), calendar=calendar)
        return self._result(calendar, response_json(await self._client.put(target)))

    async def patch(self, calendar: Calendar|dict) -> Calendar:
        """
        https://developers.google.com/calendar/api/v3/reference/calendars/patch
        """
        cid = calendar.id if isinstance(calendar, Calendar) else dict(calendar).get('id')
        target = CalendarTarget(calendar_id=calendar_id_of(cid), calendar=calendar)
        return self._result(calendar, response_json(await self._client.patch(target)))

    async def delete(self, calendar_id: str|Calendar|CalendarListEntry) -> None:
        """
        https://developers.google.com/calendar/api/v3/reference/calendars/delete
        Deletes a secondary calendar.  Use clear() for the primary one.
        """
        cid = calendar_id_of(calendar_id)
        logger.info("Deleting calendar %s", cid)
        check_status(await self._client.delete(CalendarTarget(calendar_id=cid)), accept=(410,))

    async def clear(self, calendar_id: str|Calendar|CalendarListEntry = "primary") -> None:
        """
        https://developers.google.com/calendar/api/v3/reference/calendars/clear
        Deletes every event on a primary calendar.
        """
        cid = calendar_id_of(calendar_id)
        logger.info("Clearing all events from calendar %s", cid)
        check_status(await self._client.post(CalendarTarget(calendar_id=cid), action="clear"))
