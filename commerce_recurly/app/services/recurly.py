"""Application wiring for the Recurly gateway."""
from __future__ import annotations

import logging
from functools import lru_cache

from dotenv import load_dotenv

from ..clients import RecurlyClientFactory
from ..gateway import Messenger, RecurlyGateway, RecurlyNotificationHandler
from ..settings import load_gateway_config
from ..tokens import TokenRenderer

logger = logging.getLogger("commerce_recurly")


class LoggingMessenger(Messenger):
    """Messenger that records shopper-facing errors to the application logger."""

    def add_error(self, message: str) -> None:
        logger.error("Payment error shown to customer: %s", message)


@lru_cache(maxsize=1)
def get_recurly_gateway() -> RecurlyGateway:
    load_dotenv()
    configuration = load_gateway_config()
    logger.info(
        "Recurly gateway configured subdomain=%s mode=%s plan_variations=%s",
        configuration.subdomain,
        configuration.mode,
        ",".join(configuration.plan_product_variations),
    )
    return RecurlyGateway(
        configuration=configuration,
        client_factory=RecurlyClientFactory(timeout=configuration.request_timeout),
        renderer=TokenRenderer(),
        messenger=LoggingMessenger(),
    )


@lru_cache(maxsize=1)
def get_notification_handler() -> RecurlyNotificationHandler:
    return RecurlyNotificationHandler()


__all__ = ["LoggingMessenger", "get_notification_handler", "get_recurly_gateway"]
