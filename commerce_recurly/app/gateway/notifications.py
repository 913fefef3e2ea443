"""Handling of Recurly webhook notifications."""
from __future__ import annotations

import logging

from .models import RecurlyNotification

logger = logging.getLogger(__name__)

SUCCESSFUL_PAYMENT = "successful_payment_notification"


class RecurlyNotificationHandler:
    """Records notifications that matter to the store; others are ignored."""

    def handle(self, notification: RecurlyNotification) -> bool:
        if notification.notification_type != SUCCESSFUL_PAYMENT:
            logger.debug("Ignoring Recurly notification %s", notification.notification_type)
            return False

        logger.info(
            "Successful payment notification account=%s invoice=%s amount=%s %s",
            notification.account_code,
            notification.invoice_number,
            notification.amount,
            notification.currency,
        )
        return True


__all__ = ["RecurlyNotificationHandler", "SUCCESSFUL_PAYMENT"]
