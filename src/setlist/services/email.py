"""Delivery of sign-in links.

Only a console backend exists: the message is written to the log and never
mailed. A real transport plugs in as another :class:`EmailBackend`.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from setlist.config import settings

logger = logging.getLogger(__name__)

APP_NAME = "Setlist Manager"


@dataclass(frozen=True)
class OutgoingEmail:
    to: str
    subject: str
    text: str
    html: str
    sender: str = ""


def render_magic_link_email(to: str, magic_link: str, expires_in_minutes: int) -> OutgoingEmail:
    """Sign-in email for ``magic_link``. The link is the only secret in it."""
    notice = f"This link expires in {expires_in_minutes} minutes and can be used once."
    ignore = "If you didn't ask to sign in, you can ignore this email."

    text = f"Sign in to {APP_NAME}:\n\n{magic_link}\n\n{notice}\n{ignore}\n"
    html = (
        f'<p><a href="{magic_link}">Sign in to {APP_NAME}</a></p>'
        f"<p>{notice}</p>"
        f"<p>{ignore}</p>"
    )
    return OutgoingEmail(
        to=to,
        subject=f"Your {APP_NAME} sign-in link",
        text=text,
        html=html,
        sender=settings.email_from,
    )


class EmailBackend(ABC):
    @abstractmethod
    async def send(self, message: OutgoingEmail) -> bool:
        """Deliver ``message``; False when the transport refused it."""


class ConsoleEmailBackend(EmailBackend):
    """Logs the plain text body in place of sending."""

    async def send(self, message: OutgoingEmail) -> bool:
        logger.info(
            f"Email not sent (console backend)\n"
            f"From: {message.sender}\nTo: {message.to}\nSubject: {message.subject}\n\n"
            f"{message.text}"
        )
        return True


def get_email_backend() -> EmailBackend:
    if settings.email_backend == "console":
        return ConsoleEmailBackend()
    raise ValueError(f"Unknown email backend: {settings.email_backend}")


class EmailService:
    def __init__(self, backend: EmailBackend | None = None):
        self._backend = backend

    @property
    def backend(self) -> EmailBackend:
        if self._backend is None:
            self._backend = get_email_backend()
        return self._backend

    async def send_magic_link(self, to: str, magic_link: str) -> bool:
        message = render_magic_link_email(to, magic_link, settings.magic_link_expiration_minutes)
        return await self.backend.send(message)


email_service = EmailService()
