"""Notifier that writes e-mails to the log instead of a mail server."""

from __future__ import annotations

import logging
from typing import Any

from storefront.application.notifications import Notifier

logger = logging.getLogger(__name__)


class LoggingNotifier(Notifier):

    def send_email(self, template: str, recipient: str, data: dict[str, Any]) -> None:
        logger.info(
            "e-mail %s to %s for order %s (total %s)",
            template, recipient, data.get("order_number"), data.get("total_amount"),
        )
