import pytest


class FakeTransport:
    """Records every message it is asked to send."""

    def __init__(self, response="250 2.0.0 OK queued", error=None):
        self.response = response
        self.error = error
        self.sent = []

    async def send(self, message):
        self.sent.append(message)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def failing_transport():
    return FakeTransport(error=ConnectionRefusedError("Connection refused"))


@pytest.fixture
def make_transport():
    return FakeTransport
