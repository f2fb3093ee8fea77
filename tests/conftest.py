import json

import pytest


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=None, reason=""):
        self.status_code = status_code
        self._body = body
        if text is None:
            text = json.dumps(body) if body is not None else ""
        self.text = text
        self.reason = reason

    def json(self):
        if self._body is None:
            return json.loads(self.text)  # raises ValueError on junk
        return self._body


class FakeSession:
    """
    requests.Session stand-in with scripted behavior.
    Each entry in `behaviors` is either a FakeResponse or an exception to raise.
    """

    def __init__(self, behaviors=None):
        self.behaviors = list(behaviors or [])
        self.calls = []
        self.closed = False

    def _next(self):
        if not self.behaviors:
            raise AssertionError("no scripted response left")
        b = self.behaviors.pop(0)
        if isinstance(b, Exception):
            raise b
        return b

    def request(self, method, url, json=None, headers=None, timeout=None):
        self.calls.append(
            {"method": method, "url": url, "json": json, "headers": headers, "timeout": timeout}
        )
        return self._next()

    def get(self, url, timeout=None):
        self.calls.append({"method": "GET", "url": url, "json": None, "headers": None, "timeout": timeout})
        return self._next()

    def close(self):
        self.closed = True


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def sleep():
    return RecordingSleep()


def chat_body(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.fixture
def chat_response():
    return lambda content: FakeResponse(200, chat_body(content))
