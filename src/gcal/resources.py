from dataclasses import asdict, fields, is_dataclass
from enum import StrEnum
from typing import Any, List, Self

import httpx

from .errors import UnknownError


def check_status(response: httpx.Response, accept: tuple[int, ...] = ()) -> httpx.Response:
    """
    The client hands back anything that isn't an auth failure, so decide
    here what counts as success: any 2xx plus whatever the caller accepts.
    """
    status = response.status_code
    if not (200 <= status < 300 or status in accept):
        raise UnknownError(f"{status} {response.reason_phrase}: {response.text}", status_code=status)
    return response


def response_json(response: httpx.Response) -> Any:
    """Check the status and decode the JSON body."""
    check_status(response)
    try:
        return response.json()
    except ValueError as e:
        raise UnknownError(f"invalid JSON in response: {e}", status_code=response.status_code) from e


class SendUpdates(StrEnum):
    """
    Who gets notified about event changes.
    https://developers.google.com/calendar/api/v3/reference/events/insert#parameters
    """
    ALL = "all"
    EXTERNAL_ONLY = "externalOnly"
    NONE = "none"


class CalendarAccessRole(StrEnum):
    """
    Access level of the authenticated user on a calendar, lowest first.
    """
    FREE_BUSY_READER = "freeBusyReader"
    READER = "reader"
    WRITER = "writer"
    OWNER = "owner"


class GCalResourceBase():
    """
    Mixin for the resource dataclasses.  Turns JSON responses into instances
    and instances into request bodies.
    """

    @classmethod
    def from_dict(cls, data: dict|None) -> Self:
        """
        Build from a decoded JSON response.  The API grows fields over time
        so anything we don't have a field for is dropped rather than blowing
        up the constructor.
        """
        if not data:
            return cls()
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in dict(data).items() if k in names})

    def to_base(self) -> dict:
        """
        Plain dict of every field after fixup().  Subclasses with dates or
        zones override it to emit strings.
        """
        self.fixup()
        return asdict(self)

    def trim(self) -> dict|None:
        """
        Request body form: to_base() minus top-level keys that are None or an
        empty string/container.  0 and False are kept.  A null in a PATCH body
        clears the field on the server, so unset fields must not be sent.
        """
        b = self.to_base()
        if b:
            vals = dict(b.items())
            for k,v in vals.items():
                if v is None or (type(v) not in [int,bool,float] and not v):
                    del b[k]
        return b

    def fixup(self) -> None:
        """Normalise field values in place, e.g. parse date strings."""
        pass

    def update_fields(self, **kwargs) -> List[str]:
        """
        Copy the non-None values whose names are fields, used to write a
        response back into the object that was sent.  Returns the names set.
        """
        updated_fields = []
        if is_dataclass(self):
            flist = fields(self)
            for k,v in kwargs.items():
                for f in flist:
                    if v is not None and k == f.name:
                        setattr(self, k, v)
                        updated_fields.append(k)
            self.fixup()
        return updated_fields
