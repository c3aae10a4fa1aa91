# petline/services/test_line_client.py

import base64
import hashlib
import hmac

import pytest
import requests

from petline.models.message import ImagePart, TextPart
from petline.services.line_client import LineApiError, LineMessagingClient


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload if payload is not None else {}
        self.text = str(self._payload)

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.headers = {}
        self.requests = []
        self.response = response or FakeResponse()
        self.error = error

    def request(self, method, url, timeout=None, **kwargs):
        self.requests.append((method, url, kwargs))
        if self.error:
            raise self.error
        return self.response


def test_multicast_payload():
    session = FakeSession()
    client = LineMessagingClient("token", "secret", session=session)

    client.multicast(["U1", "U2"], [TextPart(body="hi"), ImagePart(url="https://x/a.jpg")])

    method, url, kwargs = session.requests[0]
    assert method == "POST"
    assert url == "https://api.line.me/v2/bot/message/multicast"
    assert kwargs["json"] == {
        "to": ["U1", "U2"],
        "messages": [
            {"type": "text", "text": "hi"},
            {"type": "image", "originalContentUrl": "https://x/a.jpg", "previewImageUrl": "https://x/a.jpg"},
        ],
    }
    assert session.headers["Authorization"] == "Bearer token"


def test_get_profile():
    session = FakeSession(FakeResponse(payload={"userId": "U1", "displayName": "Alice"}))
    client = LineMessagingClient("token", session=session)

    assert client.get_profile("U1")["displayName"] == "Alice"
    assert session.requests[0][1] == "https://api.line.me/v2/bot/profile/U1"


def test_error_status_raises():
    session = FakeSession(FakeResponse(status_code=400, payload={"message": "The request body has 1 error(s)"}))
    client = LineMessagingClient("token", session=session)

    with pytest.raises(LineApiError) as exc_info:
        client.multicast(["U1"], [TextPart(body="hi")])
    assert exc_info.value.status_code == 400
    assert exc_info.value.details == {"message": "The request body has 1 error(s)"}


def test_network_error_raises_line_api_error():
    session = FakeSession(error=requests.ConnectionError("down"))
    client = LineMessagingClient("token", session=session)

    with pytest.raises(LineApiError):
        client.get_profile("U1")


def test_requires_access_token():
    with pytest.raises(ValueError):
        LineMessagingClient("", session=FakeSession())


def test_verify_signature():
    body = b'{"events":[]}'
    signature = base64.b64encode(hmac.new(b"secret", body, hashlib.sha256).digest()).decode()
    client = LineMessagingClient("token", "secret", session=FakeSession())

    assert client.verify_signature(body, signature) is True
    assert client.verify_signature(body, "forged") is False
    assert client.verify_signature(body, None) is False
    assert LineMessagingClient("token", session=FakeSession()).verify_signature(body, signature) is False
