import datetime
from zoneinfo import ZoneInfo

import httpx
import pytest

from gcal import (Calendar, CalendarAccessRole, CalendarListEntry, ConferenceProperties,
                  Event, EventDateTime, SendUpdates, UnknownError)
from gcal.resources import check_status, response_json


def test_enums():
    assert SendUpdates("externalOnly") is SendUpdates.EXTERNAL_ONLY
    assert str(SendUpdates.NONE) == "none"
    assert CalendarAccessRole("freeBusyReader") is CalendarAccessRole.FREE_BUSY_READER
    with pytest.raises(ValueError):
        CalendarAccessRole("admin")


def test_from_dict_ignores_unknown_fields():
    entry = CalendarListEntry.from_dict({"kind": "calendar#calendarListEntry", "etag": "\"1\"",
                                         "id": "primary@example.com", "summary": "Me",
                                         "accessRole": "owner", "someNewField": 1,
                                         "conferenceProperties": {"allowedConferenceSolutionTypes": ["hangoutsMeet"]}})
    assert(entry)
    assert entry.accessRole is CalendarAccessRole.OWNER
    assert isinstance(entry.conferenceProperties, ConferenceProperties)
    assert entry.conferenceProperties.allowedConferenceSolutionTypes == ["hangoutsMeet"]
    assert str(entry) == "primary@example.com:Me"


def test_empty_resources():
    assert(not CalendarListEntry())
    assert(not Calendar.from_dict(None))
    assert(not Event())
    assert str(Event()) == "<empty>"
    assert(not ConferenceProperties())


def test_calendar_list_entry_to_base():
    entry = CalendarListEntry(id="a@example.com", accessRole="reader",
                              conferenceProperties={"allowedConferenceSolutionTypes": ["eventHangout"]})
    assert entry.trim() == {"id": "a@example.com", "accessRole": "reader",
                            "conferenceProperties": {"allowedConferenceSolutionTypes": ["eventHangout"]}}


def test_calendar_timezone():
    cal = Calendar(kind="calendar#calendar", etag="e", id="c1", summary="Work", timeZone="Europe/Paris")
    assert cal.timeZone == ZoneInfo("Europe/Paris")
    assert cal.trim() == {"kind": "calendar#calendar", "etag": "e", "id": "c1",
                          "summary": "Work", "timeZone": "Europe/Paris"}
    assert str(cal) == "Work<c1>"


def test_trim_keeps_falsy_scalars():
    entry = CalendarListEntry(id="x", hidden=False, selected=True, summary="")
    assert entry.trim() == {"id": "x", "hidden": False, "selected": True}


def test_update_fields():
    cal = Calendar(id="c1")
    updated = cal.update_fields(summary="New", timeZone="UTC", unknown="x", location=None)
    assert updated == ["summary", "timeZone"]
    assert cal.timeZone == ZoneInfo("UTC")


def test_event_date_time():
    edt = EventDateTime(date="2024-01-02", dateTime="2024-01-02T10:00:00.123+01:00", timeZone="Europe/Berlin")
    # dateTime wins over date
    assert edt.date is None
    assert edt.dateTime == datetime.datetime(2024, 1, 2, 10, 0, tzinfo=datetime.timezone(datetime.timedelta(hours=1)))
    assert edt.to_base() == {"dateTime": "2024-01-02T10:00:00+01:00", "timeZone": "Europe/Berlin"}
    assert EventDateTime().to_base() is None
    assert(not EventDateTime())


def test_event_from_api():
    e = Event.from_dict({"kind": "calendar#event", "etag": "\"3\"", "id": "ev1", "summary": "Sync",
                         "created": "2024-01-01T08:00:00.000Z",
                         "start": {"dateTime": "2024-02-01T09:00:00Z"},
                         "end": {"dateTime": "2024-02-01T10:00:00Z"}})
    assert(e)
    assert isinstance(e.start, EventDateTime)
    assert e.created == datetime.datetime(2024, 1, 1, 8, 0, tzinfo=datetime.timezone.utc)
    assert not e.all_day()
    start, stz, end, etz = e.duration()
    assert end - start == datetime.timedelta(hours=1)
    assert stz is None and etz is None
    assert e.to_base()['created'] == "2024-01-01T08:00:00+00:00"


def test_set_duration_all_day():
    e = Event(summary="Holiday")
    e.set_duration("2024-07-04T00:00:00", "2024-07-05T00:00:00")
    assert e.all_day()
    assert e.start.date == datetime.date(2024, 7, 4)
    assert e.trim()['end'] == {"date": "2024-07-05"}


def test_set_duration_timed():
    e = Event(summary="Call")
    e.set_duration(datetime.datetime(2024, 7, 4, 13, 30), "2024-07-04T14:00:00", tz="America/Chicago")
    assert not e.all_day()
    assert e.trim()['start'] == {"dateTime": "2024-07-04T13:30:00", "timeZone": "America/Chicago"}


def test_event_without_times():
    e = Event(kind="calendar#event", etag="e", id="x", summary="TBD")
    assert not e.all_day()
    assert e.duration() == (None, None, None, None)
    assert str(e) == "TBD<x>"


def test_check_status():
    assert check_status(httpx.Response(204)).status_code == 204
    assert check_status(httpx.Response(410), accept=(410,)).status_code == 410
    with pytest.raises(UnknownError) as e:
        check_status(httpx.Response(404, text="Not Found"))
    assert e.value.status_code == 404


def test_response_json_invalid():
    with pytest.raises(UnknownError):
        response_json(httpx.Response(200, text="<html>"))
