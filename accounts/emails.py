"""
Transactional emails sent to users.
"""
import logging

from django.conf import settings
from django.core.mail import send_mail
from django.template.loader import render_to_string
from django.utils.translation import gettext as _

logger = logging.getLogger(__name__)


def _send(user, subject: str, template: str, context: dict):
    context = {'user': user, 'app_name': settings.APP_NAME, **context}
    body = render_to_string(f'accounts/emails/{template}.txt', context)

    try:
        send_mail(
            subject=subject,
            message=body,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[user.email],
            fail_silently=False,
        )
        logger.info(f"Email '{template}' sent to user {user.pk}")
    except Exception as e:
        logger.error(f"Failed to send '{template}' email to user {user.pk}: {str(e)}")
        raise


def send_verification_email(user, url: str):
    _send(user, _('Verify Email Address'), 'verify_email', {
        'url': url,
        'expire_minutes': settings.VERIFICATION_LINK_TIMEOUT // 60,
    })


def send_password_reset_email(user, url: str):
    _send(user, _('Reset Password Notification'), 'reset_password', {
        'url': url,
        'expire_minutes': settings.PASSWORD_RESET_TIMEOUT // 60,
    })
