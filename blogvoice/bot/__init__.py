"""Messaging-platform integration: Telegram client and result delivery.

`blogvoice.bot.server` holds the polling server; it is imported explicitly
because it depends on the pipeline package.
"""

from .delivery import ResultDelivery, TelegramResultDelivery, failure_message
from .telegram_client import TelegramApiError, TelegramBotClient

__all__ = [
    "ResultDelivery",
    "TelegramApiError",
    "TelegramBotClient",
    "TelegramResultDelivery",
    "failure_message",
]
