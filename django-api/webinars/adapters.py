"""Django-backed implementations of the service ports."""

import logging
from concurrent.futures import ThreadPoolExecutor

from django.conf import settings
from django.core.mail import send_mail
from django.utils import timezone

from accounts.tokens import issue_guest_token, issue_session_token
from webinars.domain import Account, Webinar, WebinarId
from webinars.models import NewsletterMembership
from webinars.services.ports import Notifier, TokenIssuer

logger = logging.getLogger(__name__)

_mail_executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="webinar-mail")


def _confirmation_body(account: Account, webinar: Webinar) -> str:
    when = timezone.localtime(webinar.date).strftime("%d/%m/%Y à %H:%M")
    name = account.first_name or account.email
    return (
        f"Bonjour {name},\n\n"
        f"Votre inscription au webinaire « {webinar.title} » du {when} est confirmée.\n"
        "Le lien de connexion est disponible dans votre espace PharmIA.\n\n"
        "L'équipe PharmIA"
    )


def _send(subject: str, body: str, recipient: str) -> None:
    try:
        send_mail(subject, body, settings.DEFAULT_FROM_EMAIL, [recipient])
    except Exception:
        logger.exception("Confirmation email to %s failed", recipient)
    else:
        logger.info("Confirmation email sent to %s", recipient)


class DjangoNotifier(Notifier):
    """Sends mail through Django and records newsletter membership."""

    def registration_confirmed(self, account: Account, webinar: Webinar) -> None:
        subject = f"Confirmation d'inscription : {webinar.title}"
        body = _confirmation_body(account, webinar)
        if settings.PHARMIA_ASYNC_NOTIFICATIONS:
            _mail_executor.submit(_send, subject, body, account.email)
        else:
            _send(subject, body, account.email)

    def add_to_newsletter_group(self, email: str, group_name: str) -> None:
        _, created = NewsletterMembership.objects.get_or_create(email=email.lower(), group_name=group_name)
        if created:
            logger.info("Added %s to newsletter group %s", email, group_name)


class JwtTokenIssuer(TokenIssuer):
    def session_token(self, account: Account) -> str:
        return issue_session_token(str(account.id), account.role.value)

    def guest_token(self, account: Account, webinar_id: WebinarId) -> str:
        return issue_guest_token(str(account.id), str(webinar_id))
