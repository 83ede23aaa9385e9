import datetime
from zoneinfo import ZoneInfo

import httpx
import pytest

from gcal import Calendar, Event, EventClient, SendUpdates, UnknownError

from conftest import ok

BASE = "https://www.googleapis.com/calendar/v3"


def event(id: str, summary: str = "Meeting") -> dict:
    return {"kind": "calendar#event", "etag": f"\"{id}\"", "id": id, "summary": summary,
            "start": {"dateTime": "2024-03-01T09:00:00Z"}, "end": {"dateTime": "2024-03-01T10:00:00Z"}}


async def test_list_window(client, transport):
    transport.responses = [ok({"items": [event("e1"), event("e2")], "nextPageToken": "n"}),
                           ok({"items": [event("e3")]})]
    start = datetime.datetime(2024, 3, 1, tzinfo=datetime.timezone.utc)
    events = await EventClient(client).list("team@example.com", start, start + datetime.timedelta(days=7),
                                            singleEvents=True, orderBy="startTime", pageToken="ignored")
    assert [e.id for e in events] == ["e1", "e2", "e3"]
    first, second = transport.requests
    assert first.url.path == "/calendar/v3/calendars/team@example.com/events"
    assert first.url.params["timeMin"] == "2024-03-01T00:00:00+00:00"
    assert first.url.params["timeMax"] == "2024-03-08T00:00:00+00:00"
    assert first.url.params["singleEvents"] == "true"
    assert "pageToken" not in first.url.params
    assert second.url.params["pageToken"] == "n"
    assert second.url.params["timeMin"] == "2024-03-01T00:00:00+00:00"


async def test_list_naive_times_use_time_zone(client, transport):
    transport.responses = [ok({"items": []})]
    await EventClient(client).list(Calendar(id="primary"), "2024-01-10T08:00:00", datetime.date(2024, 1, 11),
                                   timeZone=ZoneInfo("America/Los_Angeles"))
    params = transport.last.url.params
    assert params["timeMin"] == "2024-01-10T08:00:00-08:00"
    assert params["timeMax"] == "2024-01-11T00:00:00-08:00"
    assert params["timeZone"] == "America/Los_Angeles"


async def test_list_without_window(client, transport):
    transport.responses = [ok({"items": [event("e1")]})]
    events = await EventClient(client).list()
    assert len(events) == 1
    assert "timeMin" not in transport.last.url.params
    assert str(transport.last.url) == f"{BASE}/calendars/primary/events"


async def test_get(client, transport):
    transport.responses = [ok(event("e1", "Standup"))]
    e = await EventClient(client).get("primary", "e1", maxAttendees=5, timeZone="UTC")
    assert e.summary == "Standup"
    assert isinstance(e, Event)
    assert str(transport.last.url) == f"{BASE}/calendars/primary/events/e1?maxAttendees=5&timeZone=UTC"


async def test_get_missing(client, transport):
    transport.responses = [httpx.Response(404, json={"error": {"code": 404, "message": "Not Found"}})]
    with pytest.raises(UnknownError) as e:
        await EventClient(client).get("primary", "nope")
    assert e.value.status_code == 404


async def test_instances(client, transport):
    transport.responses = [ok({"items": [event("r1_20240301"), event("r1_20240308")]})]
    events = await EventClient(client).instances("primary", Event(id="r1"), maxResults=2)
    assert len(events) == 2
    assert transport.last.url.path == "/calendar/v3/calendars/primary/events/r1/instances"
    assert transport.last.url.params["maxResults"] == "2"


async def test_insert(client, transport):
    transport.responses = [ok(event("new1", "Lunch"))]
    e = Event(summary="Lunch")
    e.set_duration("2024-03-01T12:00:00", "2024-03-01T13:00:00", tz="Europe/London")
    result = await EventClient(client).insert("primary", e, sendUpdates=SendUpdates.ALL,
                                              conferenceDataVersion=1)
    assert result is e
    assert e.id == "new1"
    request = transport.last
    assert request.method == "POST"
    assert request.url.params["sendUpdates"] == "all"
    assert request.url.params["conferenceDataVersion"] == "1"
    assert "supportsAttachments" not in request.url.params
    assert transport.last_json() == {
        "summary": "Lunch",
        "start": {"dateTime": "2024-03-01T12:00:00", "timeZone": "Europe/London"},
        "end": {"dateTime": "2024-03-01T13:00:00", "timeZone": "Europe/London"},
    }


async def test_insert_bad_send_updates(client, transport):
    with pytest.raises(ValueError):
        await EventClient(client).insert("primary", {"summary": "x"}, sendUpdates="everyone")
    assert transport.requests == []


async def test_update_and_patch(client, transport):
    transport.responses = [ok(event("e1", "Renamed"))]
    events = EventClient(client)
    e = await events.update("primary", {"id": "e1", "summary": "Renamed"})
    assert e.summary == "Renamed"
    assert transport.last.method == "PUT"
    assert str(transport.last.url) == f"{BASE}/calendars/primary/events/e1"
    await events.patch("primary", e, sendUpdates="none")
    assert transport.last.method == "PATCH"
    assert transport.last.url.params["sendUpdates"] == "none"
    assert transport.last_json()["summary"] == "Renamed"


async def test_update_requires_event_id(client):
    with pytest.raises(ValueError):
        await EventClient(client).update("primary", Event(summary="no id"))


@pytest.mark.parametrize("status", [204, 410])
async def test_delete(status, client, transport):
    transport.responses = [httpx.Response(status)]
    await EventClient(client).delete("primary", "e1", sendUpdates="externalOnly")
    assert transport.last.method == "DELETE"
    assert transport.last.content == b""
    assert transport.last.url.params["sendUpdates"] == "externalOnly"


async def test_delete_forbidden(client, transport):
    transport.responses = [httpx.Response(403)]
    with pytest.raises(UnknownError):
        await EventClient(client).delete("primary", "e1")


async def test_quick_add(client, transport):
    transport.responses = [ok(event("qa1", "Lunch with Bob"))]
    e = await EventClient(client).quick_add("primary", "Lunch with Bob tomorrow 1pm")
    assert e.id == "qa1"
    assert transport.last.url.path == "/calendar/v3/calendars/primary/events/quickAdd"
    assert transport.last.url.params["text"] == "Lunch with Bob tomorrow 1pm"


async def test_move(client, transport):
    transport.responses = [ok(event("e1"))]
    e = await EventClient(client).move("primary", "e1", Calendar(id="team@example.com"))
    assert e.id == "e1"
    assert transport.last.url.path == "/calendar/v3/calendars/primary/events/e1/move"
    assert transport.last.url.params["destination"] == "team@example.com"
