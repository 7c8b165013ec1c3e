# planora_core/notifications/email.py
"""
Outbound email notifier.

Fire-and-forget: every sender logs delivery failures and returns False;
it never raises into the operation that triggered it.
"""
from __future__ import annotations

import logging

from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


def _send(*, to: str, subject: str, body: str) -> bool:
    if not to:
        logger.warning("notifier: no recipient for %r", subject)
        return False
    try:
        send_mail(
            subject,
            body,
            getattr(settings, "PLANORA_NOTIFIER_FROM_EMAIL", None),
            [to],
            fail_silently=False,
        )
    except Exception:
        logger.exception("notifier: failed to send %r to %s", subject, to)
        return False
    return True


def send_business_activation_email(email: str, business_name: str) -> bool:
    return _send(
        to=email,
        subject=f"{business_name} is now active",
        body=(
            f"Good news! Your business \"{business_name}\" has been approved and is now active.\n"
            "You can sign in and start scheduling classes."
        ),
    )


def send_business_reactivation_email(email: str, business_name: str) -> bool:
    return _send(
        to=email,
        subject=f"{business_name} has been reactivated",
        body=f"Your business \"{business_name}\" has been reactivated. Your team and clients can sign in again.",
    )


def send_business_rejection_email(email: str, business_name: str, reason: str) -> bool:
    return _send(
        to=email,
        subject=f"Update on your application for {business_name}",
        body=(
            f"Unfortunately your business \"{business_name}\" was not approved.\n"
            f"Reason: {reason}"
        ),
    )


def send_employee_status_email(email: str, business_name: str, status: str, reason: str | None = None) -> bool:
    body = f"Your employee account at {business_name} is now {status}."
    if reason:
        body += f"\nReason: {reason}"
    return _send(to=email, subject=f"{business_name}: employee account {status}", body=body)
