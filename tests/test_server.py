import logging
import socket

import pytest

from mail_relay import server
from mail_relay.config_loader import RelaySettings
from mail_relay.errors import ConfigurationError

SETTINGS = RelaySettings(
    smtp_host="smtp.example.com",
    smtp_port=465,
    smtp_user="relay@example.com",
    smtp_password="secret",
    sender="noreply@example.com",
    log_dir=None,
)


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch):
    monkeypatch.setattr(server, "configure_logging", lambda *args, **kwargs: None)


def test_build_relay_wires_one_transport():
    relay = server.build_relay(SETTINGS)

    transport = relay.dispatcher.transport
    assert relay.dispatcher.sender == "noreply@example.com"
    assert (transport.host, transport.port, transport.use_tls) == ("smtp.example.com", 465, True)
    assert transport.user == "relay@example.com"


def test_build_app_shares_relay():
    app = server.build_app(SETTINGS)
    assert app.state.relay.dispatcher.sender == "noreply@example.com"


def test_bound_port_is_a_logged_server_error(caplog):
    with socket.create_server(("127.0.0.1", 0)) as blocker:
        port = blocker.getsockname()[1]
        settings = RelaySettings(
            smtp_host="smtp.example.com",
            sender="noreply@example.com",
            http_host="127.0.0.1",
            http_port=port,
            log_dir=None,
        )
        with caplog.at_level(logging.ERROR), pytest.raises(SystemExit) as exc_info:
            server.run(settings)

    assert exc_info.value.code == 1
    assert "Server error" in caplog.text


def test_main_exits_on_configuration_error(monkeypatch):
    def broken():
        raise ConfigurationError("SMTP host is not configured (MAIL_HOST)")

    monkeypatch.setattr(server, "load_settings", broken)

    with pytest.raises(SystemExit) as exc_info:
        server.main()
    assert exc_info.value.code == 2
