# file: notifier.py
from decimal import Decimal
from typing import Optional

from models import TelegramTarget
from trade_logger import log_event


class Notifier:
    """
    Отправляет оператору алерт о низком балансе.

    Delivery to Telegram is not wired up: sink "stdout" prints the alert,
    every other sink records what would have been sent.
    """

    def __init__(self, telegram: Optional[TelegramTarget] = None):
        self.telegram = telegram

    def low_balance(self, symbol: str, currency: str, balance: Decimal, threshold: Decimal) -> dict:
        alert = {
            "symbol": symbol,
            "currency": currency,
            "balance": balance,
            "threshold": threshold,
        }
        message = (f"Low {currency} balance after DCA buy of {symbol}: "
                   f"{balance} < {threshold}")

        if self.telegram is not None and self.telegram.sink == "stdout":
            print(f"[ALERT] {message}")
            alert["delivered_to"] = "stdout"
        elif self.telegram is not None:
            alert["delivered_to"] = "telegram"
            alert["chat_id"] = self.telegram.chat_id
        else:
            alert["delivered_to"] = "none"

        log_event("LOW_BALANCE_ALERT", alert)
        return alert
