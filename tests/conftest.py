import json

import httpx
import pytest

import gcal
from gcal import GCalClient

TOKEN = "ya29.test-token"
EXPIRED_CHALLENGE = 'Bearer error="invalid_token", error_description="The access token expired"'


class StubTransport():
    """
    Records every request and answers from a queue of canned responses.
    The last response is repeated once the queue runs dry.
    """

    def __init__(self, *responses: httpx.Response|Exception) -> None:
        self.responses = list(responses) or [httpx.Response(200, json={})]
        self.requests: list[httpx.Request] = []

    async def send(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        r = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(r, Exception):
            raise r
        return r

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self):
        return json.loads(self.last.content)


def ok(payload=None, status: int = 200) -> httpx.Response:
    return httpx.Response(status, json={} if payload is None else payload)


@pytest.fixture(autouse=True)
def reset_settings():
    gcal.reset()
    yield
    gcal.reset()


@pytest.fixture
def transport() -> StubTransport:
    return StubTransport()


@pytest.fixture
def client(transport) -> GCalClient:
    return GCalClient(transport, TOKEN)
