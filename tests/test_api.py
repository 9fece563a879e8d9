import json

import pytest
from fastapi.testclient import TestClient

from mail_relay.api import create_app
from mail_relay.attachments import AttachmentResolver
from mail_relay.core import MailRelay
from mail_relay.dispatcher import MailDispatcher

JSON_HEADERS = {"Content-Type": "application/json"}
PAYLOAD = {"to": ["x@example.com"], "cc": ["", "y@example.com"], "subject": "S", "text": "T"}


@pytest.fixture
def client_and_transport(transport):
    relay = MailRelay(MailDispatcher(transport, sender="relay@example.com"), AttachmentResolver())
    client = TestClient(create_app(relay), raise_server_exceptions=False)
    return client, transport


def test_post_json_sends_email(client_and_transport):
    client, transport = client_and_transport

    response = client.post("/", content=json.dumps(PAYLOAD), headers=JSON_HEADERS)

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    assert response.json() == {"message": "Email sent successfully", "response": "250 2.0.0 OK queued"}
    sent = transport.sent[0]
    assert sent["To"] == "x@example.com"
    assert sent["Cc"] == "y@example.com"
    assert sent["From"] == "relay@example.com"


def test_any_path_is_the_relay_endpoint(client_and_transport):
    client, transport = client_and_transport

    response = client.post("/api/v1/send-mail", content=json.dumps(PAYLOAD), headers=JSON_HEADERS)

    assert response.status_code == 200
    assert len(transport.sent) == 1


def test_content_type_parameters_are_accepted(client_and_transport):
    client, _ = client_and_transport

    response = client.post(
        "/",
        content=json.dumps(PAYLOAD),
        headers={"Content-Type": "application/json; charset=utf-8"},
    )

    assert response.status_code == 200


@pytest.mark.parametrize("method", ["GET", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE", "PROPFIND"])
def test_other_methods_are_not_allowed(client_and_transport, method):
    client, transport = client_and_transport

    response = client.request(method, "/", content=json.dumps(PAYLOAD), headers=JSON_HEADERS)

    assert response.status_code == 405
    assert response.json() == {"error": "Method not allowed"}
    assert transport.sent == []


@pytest.mark.parametrize("content_type", ["text/plain", "application/x-www-form-urlencoded", None])
def test_non_json_content_type_is_not_allowed(client_and_transport, content_type):
    client, transport = client_and_transport
    headers = {"Content-Type": content_type} if content_type else {}

    response = client.post("/", content=json.dumps(PAYLOAD), headers=headers)

    assert response.status_code == 405
    assert response.json() == {"error": "Method not allowed"}
    assert transport.sent == []


def test_docs_routes_are_not_exposed(client_and_transport):
    client, _ = client_and_transport
    assert client.get("/docs").status_code == 405
    assert client.get("/openapi.json").status_code == 405


@pytest.mark.parametrize(
    ("body", "expected"),
    [
        ('{"to":["x@example.com"],"subject":"S"}', "Missing required fields in JSON"),
        ('{"to":["not-an-email"],"subject":"S","text":"T"}', "Invalid email address format"),
    ],
)
def test_validation_errors_return_400(client_and_transport, body, expected):
    client, transport = client_and_transport

    response = client.post("/", content=body, headers=JSON_HEADERS)

    assert response.status_code == 400
    assert response.json() == {"error": expected}
    assert transport.sent == []


def test_malformed_json_returns_400(client_and_transport):
    client, _ = client_and_transport

    response = client.post("/", content="{not json", headers=JSON_HEADERS)

    assert response.status_code == 400
    assert response.json()["error"].startswith("Error processing JSON request: ")
    assert set(response.json()) == {"error"}


def test_transport_failure_returns_500(failing_transport):
    relay = MailRelay(MailDispatcher(failing_transport, sender="relay@example.com"))
    client = TestClient(create_app(relay), raise_server_exceptions=False)

    response = client.post("/", content=json.dumps(PAYLOAD), headers=JSON_HEADERS)

    assert response.status_code == 500
    assert response.json() == {"error": "Error sending email", "details": "Connection refused"}


def test_unexpected_error_returns_json_500():
    class BrokenRelay:
        async def handle(self, chunks):
            raise RuntimeError("boom")

    client = TestClient(create_app(BrokenRelay()), raise_server_exceptions=False)

    response = client.post("/", content=json.dumps(PAYLOAD), headers=JSON_HEADERS)

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_line_breaks_in_subject_are_folded(client_and_transport):
    client, transport = client_and_transport
    payload = {"to": ["x@example.com"], "subject": "S\nBcc: evil@example.com", "text": "T"}

    response = client.post("/", content=json.dumps(payload), headers=JSON_HEADERS)

    assert response.status_code == 200
    sent = transport.sent[0]
    assert sent["Subject"] == "S Bcc: evil@example.com"
    assert "Bcc" not in sent
