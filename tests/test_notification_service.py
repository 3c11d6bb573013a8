import pytest
import requests

from meusaldo.models.settings import MessagingSettings
from meusaldo.services.notification_service import NotificationService


class StubResponse:
    def __init__(self, status_code=201, payload=None, reason="Created"):
        self.status_code = status_code
        self.reason = reason
        self._payload = payload

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class StubSession:
    def __init__(self, response=None, error=None):
        self.response = response or StubResponse()
        self.error = error
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error:
            raise self.error
        return self.response


@pytest.fixture
def settings():
    return MessagingSettings(
        server_url="https://evo.example.com/",
        instance_name="meusaldo",
        api_key="abc123",
    )


def test_send_text_posts_number_and_text(settings):
    session = StubSession()
    result = NotificationService(settings, session=session).send_text("5511999990000", "hi")

    assert result.success is True
    url, kwargs = session.calls[0]
    assert url == "https://evo.example.com/message/sendText/meusaldo"
    assert kwargs["headers"]["apikey"] == "abc123"
    assert kwargs["json"] == {"number": "5511999990000", "text": "hi"}
    assert kwargs["timeout"] > 0


def test_unconfigured_settings_do_not_send():
    session = StubSession()
    result = NotificationService(MessagingSettings(), session=session).send_text("55", "hi")
    assert result.success is False
    assert session.calls == []


def test_missing_number_does_not_send(settings):
    session = StubSession()
    assert NotificationService(settings, session=session).send_text("", "hi").success is False
    assert session.calls == []


def test_connection_error_becomes_failed_result(settings):
    session = StubSession(error=requests.ConnectionError("refused"))
    result = NotificationService(settings, session=session).send_text("55", "hi")
    assert result.success is False
    assert "server URL" in result.message


@pytest.mark.parametrize(
    "payload,expected",
    [
        ({"message": "Instance not found"}, "Instance not found"),
        ({"error": "Unauthorized"}, "Unauthorized"),
        ({"response": {"message": ["number does not exist"]}}, "['number does not exist']"),
        ({"status": 400}, '{"status": 400}'),
    ],
)
def test_error_payload_message_is_extracted(settings, payload, expected):
    session = StubSession(StubResponse(400, payload, "Bad Request"))
    result = NotificationService(settings, session=session).send_text("55", "hi")
    assert result.success is False
    assert result.message == f"Failed to send message: {expected}"


def test_non_json_error_falls_back_to_status(settings):
    session = StubSession(StubResponse(502, None, "Bad Gateway"))
    result = NotificationService(settings, session=session).send_text("55", "hi")
    assert result.message == "Failed to send message: Error 502: Bad Gateway"


def test_test_message_uses_fixed_text(settings):
    session = StubSession()
    NotificationService(settings, session=session).send_test_message("55")
    assert "mensagem de teste" in session.calls[0][1]["json"]["text"]
