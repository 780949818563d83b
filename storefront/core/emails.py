"""Transactional e-mails sent through Django's configured mail backend"""
import logging

from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


def _send(subject, body, recipient):
    try:
        send_mail(subject, body, settings.DEFAULT_FROM_EMAIL, [recipient], fail_silently=False)
        return True
    except Exception as e:
        logger.error(f"Failed to send '{subject}' to {recipient}: {str(e)}")
        return False


def send_verification_email(user, raw_token):
    url = f"{settings.FRONTEND_URL}/verify-email?token={raw_token}&email={user.email}"
    body = (
        f"Hi {user.name},\n\n"
        f"Please verify your BBN Nutrition account by opening the link below:\n\n{url}\n\n"
        f"The link expires in {settings.EMAIL_VERIFICATION_TOKEN_HOURS} hours."
    )
    return _send('Verify your BBN Nutrition account', body, user.email)


def send_password_reset_email(user, raw_token):
    url = f"{settings.FRONTEND_URL}/reset-password?token={raw_token}"
    body = (
        f"Hi {user.name},\n\n"
        f"You requested a password reset. Open the link below to choose a new password:\n\n{url}\n\n"
        f"The link expires in {settings.PASSWORD_RESET_TOKEN_MINUTES} minutes. "
        "If you did not request this, ignore this e-mail."
    )
    return _send('BBN Nutrition password reset', body, user.email)


def send_restock_email(user, product, added_to_cart=False):
    body = f"Hi {user.name},\n\nGood news! {product.name} is back in stock."
    if added_to_cart:
        body += "\n\nIt has been added to your cart automatically."
    body += f"\n\n{settings.FRONTEND_URL}/product/{product.id}"
    return _send(f"{product.name} is back in stock", body, user.email)


def send_email_otp(user, otp):
    body = (
        f"Hi {user.name},\n\n"
        f"Your BBN Nutrition email verification code is {otp}\n\n"
        f"The code expires in {settings.EMAIL_OTP_MINUTES} minutes. "
        "If you did not request this, ignore this e-mail."
    )
    return _send('BBN Nutrition email verification code', body, user.email)
