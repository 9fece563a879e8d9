"""Single-endpoint HTTP relay that delivers JSON-described emails over SMTP.

This package exposes one JSON-over-HTTP endpoint so internal systems can send
mail without holding SMTP credentials themselves. It includes:

- Validation of the request payload (recipients, subject, body)
- Best-effort resolution of local file attachments
- Delivery through a single, pre-configured SMTP transport (aiosmtplib)
- Mapping of every outcome onto exactly one JSON response

Example:
    Building the FastAPI application by hand::

        from mail_relay.api import create_app
        from mail_relay.attachments import AttachmentResolver
        from mail_relay.core import MailRelay
        from mail_relay.dispatcher import MailDispatcher
        from mail_relay.smtp import SMTPTransport

        transport = SMTPTransport("smtp.example.com", 465, "user", "secret")
        dispatcher = MailDispatcher(transport, sender="noreply@example.com")
        app = create_app(MailRelay(dispatcher, AttachmentResolver()))
"""

__version__ = "0.1.0"
