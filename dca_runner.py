# file: dca_runner.py
from typing import Optional

from exchange_wrapper import Exchange, Order
from models import NormalizedPlan
from notifier import Notifier
from trade_logger import log_event

# Checked in order, so "USDT" wins over "USD". "USD" also matches before
# "FDUSD", which keeps the historical lookup order of earlier releases.
COMMON_QUOTES = ["USDT", "USDC", "BUSD", "USD", "BTC", "ETH", "FDUSD"]


def extract_quote_currency(symbol: str) -> str:
    """'BTC-USDT' -> 'USDT'; 'BTCUSDT' -> 'USDT' по списку известных котировок."""
    if "-" in symbol:
        parts = symbol.split("-")
        if len(parts) != 2:
            raise ValueError(f"invalid symbol format: {symbol}")
        return parts[1]

    for quote in COMMON_QUOTES:
        if symbol.endswith(quote):
            return quote

    raise ValueError(f"unable to extract quote currency from symbol: {symbol}")


async def check_balance_and_notify(plan: NormalizedPlan, exchange: Exchange, notifier: Notifier) -> Optional[dict]:
    """Проверяет остаток после покупки; алерт, если он ниже порога."""
    quote_currency = extract_quote_currency(plan.symbol)
    balance = await exchange.get_balance(quote_currency)
    log_event("BALANCE_CHECKED", {"currency": quote_currency, "balance": balance, "threshold": plan.balance_threshold})

    if balance < plan.balance_threshold:
        return notifier.low_balance(plan.symbol, quote_currency, balance, plan.balance_threshold)
    return None


async def run_dca(plan: NormalizedPlan, exchange: Exchange, notifier: Notifier) -> dict:
    """
    Исполняет одну итерацию DCA: рыночная покупка, затем проверка баланса.

    A failed balance check is logged but does not fail the run, since the
    order has already been placed.
    """
    log_event("DCA_STARTED", {
        "exchange": plan.exchange,
        "symbol": plan.symbol,
        "quote_amount": plan.quote_amount,
        "dry_run": plan.dry_run,
    })

    order: Order = await exchange.place_market_buy_order(plan.symbol, plan.quote_amount)
    log_event("DCA_ORDER_EXECUTED", order.model_dump())

    result = {"order": order, "alert": None}
    if plan.balance_threshold > 0:
        try:
            result["alert"] = await check_balance_and_notify(plan, exchange, notifier)
        except Exception as e:
            log_event("BALANCE_CHECK_FAILED", {"symbol": plan.symbol, "error": str(e)})

    return result
