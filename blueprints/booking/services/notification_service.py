"""
Booking notifications.

Managers hear about new requests; requesters hear about approvals and
rejections. Delivery is fire-and-forget: a failing sender is logged and
never undoes a committed decision.
"""

import smtplib
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.message import EmailMessage
from flask import current_app, has_app_context

from models.slot import format_slot_range
from models.user import get_space_managers

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    recipient: str
    subject: str
    body: str


# =============================================================================
# SENDERS
# =============================================================================

class BaseSender(ABC):
    """Base class for notification senders."""

    @abstractmethod
    def send(self, notification: Notification) -> dict:
        pass


class LogSender(BaseSender):
    """Writes notifications to the log and keeps them in an outbox."""

    def __init__(self):
        self.outbox = []

    def send(self, notification):
        self.outbox.append(notification)
        logger.info(f"[notification] to={notification.recipient} subject={notification.subject!r}")
        return {'success': True, 'message': 'Logged'}


class SmtpSender(BaseSender):
    """Sends notifications by e-mail through an SMTP server."""

    def __init__(self, server, port, sender, username=None, password=None, use_tls=True):
        self.server = server
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.use_tls = use_tls

    def send(self, notification):
        try:
            if not notification.recipient:
                return {'success': False, 'error': 'No email'}

            message = EmailMessage()
            message['Subject'] = notification.subject
            message['From'] = self.sender
            message['To'] = notification.recipient
            message.set_content(notification.body)

            with smtplib.SMTP(self.server, self.port, timeout=10) as smtp:
                if self.use_tls:
                    smtp.starttls()
                if self.username:
                    smtp.login(self.username, self.password)
                smtp.send_message(message)

            return {'success': True, 'message': 'Sent via Email'}
        except (smtplib.SMTPException, OSError) as e:
            return {'success': False, 'error': str(e)}


# =============================================================================
# SERVICE
# =============================================================================

def _describe(details: dict) -> str:
    slots = format_slot_range(details['start_slot'], details['end_slot'])
    return f"{details['space_name']} em {details['reservation_date']}, {slots}"


class NotificationService:
    """
    Flask extension building and dispatching booking notifications.

    init_app stores the app's sender in app.extensions['notification_sender'],
    chosen by NOTIFICATIONS_BACKEND ('log' or 'smtp'). A sender passed to
    the constructor overrides the app's one.
    """

    def __init__(self, app=None, sender: BaseSender = None):
        self._sender = sender
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        backend = app.config.get('NOTIFICATIONS_BACKEND', 'log')
        if backend == 'smtp':
            sender = SmtpSender(
                server=app.config.get('MAIL_SERVER', 'localhost'),
                port=app.config.get('MAIL_PORT', 587),
                sender=app.config.get('MAIL_SENDER'),
                username=app.config.get('MAIL_USERNAME'),
                password=app.config.get('MAIL_PASSWORD'),
                use_tls=app.config.get('MAIL_USE_TLS', True),
            )
        elif backend == 'log':
            sender = LogSender()
        else:
            raise ValueError(f'Unknown notifications backend: {backend!r}')
        app.extensions['notification_sender'] = sender

    @property
    def sender(self) -> BaseSender | None:
        if self._sender is not None:
            return self._sender
        if not has_app_context():
            return None
        return current_app.extensions.get('notification_sender')

    def dispatch(self, notification: Notification) -> bool:
        """Send one notification; failures are logged, never raised."""
        sender = self.sender
        if sender is None:
            logger.warning(f"No notification sender configured (to={notification.recipient})")
            return False

        try:
            result = sender.send(notification)
        except Exception:
            logger.exception(f"Notification sender crashed (to={notification.recipient})")
            return False

        if not result.get('success'):
            logger.warning(
                f"Notification to {notification.recipient} failed: {result.get('error')}"
            )
            return False
        return True

    def notify_new_request(self, details: dict) -> int:
        """
        Tell every manager of the space about a new pending request.

        Returns:
            Number of notifications delivered
        """
        managers = get_space_managers(details['space_id'])
        delivered = 0
        for manager in managers:
            delivered += self.dispatch(Notification(
                recipient=manager['email'],
                subject='Nova solicitação de agendamento',
                body=(
                    f"{details.get('user_name') or 'Um usuário'} solicitou "
                    f"{_describe(details)}. Acesse a agenda para aprovar ou rejeitar."
                ),
            ))
        return delivered

    def notify_approved(self, details: dict) -> bool:
        return self.dispatch(Notification(
            recipient=details['user_email'],
            subject='Agendamento aprovado',
            body=f"Seu agendamento de {_describe(details)} foi aprovado.",
        ))

    def notify_rejected(self, details: dict, auto: bool = False) -> bool:
        if auto:
            reason = 'Outro agendamento foi aprovado para o mesmo horário.'
        else:
            reason = 'O gestor do espaço rejeitou a solicitação.'
        return self.dispatch(Notification(
            recipient=details['user_email'],
            subject='Agendamento rejeitado',
            body=f"Seu agendamento de {_describe(details)} foi rejeitado. {reason}",
        ))
