# file: unifier.py
from decimal import Decimal
from typing import Any, Dict

from amounts import parse_decimal
from models import (
    BinanceCredentials,
    NormalizedPlan,
    OkxCredentials,
    OkxInlineCredentials,
    TelegramTarget,
    TradingInstruction,
)


def bag_str(bag: Dict[str, Any], key: str) -> str:
    """Строковое значение из config-словаря; отсутствующий или нестроковый ключ даёт ''."""
    value = bag.get(key)
    return value if isinstance(value, str) else ""


def to_normalized_plan(instruction: TradingInstruction) -> NormalizedPlan:
    """
    Converts a parsed v2 instruction into a NormalizedPlan.

    Amounts are parsed again so the call is safe on an instruction that was
    never passed through parse_instruction. Unknown exchanges get no
    credential record; they are rejected later when the exchange is built.
    """
    strategy = instruction.strategy
    quote_amount = parse_decimal(strategy.quote_amount, "quoteAmount")
    balance_threshold = Decimal(0)
    if strategy.balance_threshold:
        balance_threshold = parse_decimal(strategy.balance_threshold, "balanceThreshold")

    plan = NormalizedPlan(
        exchange=instruction.exchange.name.lower(),
        symbol=strategy.symbol.upper(),
        quote_amount=quote_amount,
        balance_threshold=balance_threshold,
        dry_run=instruction.flags.dry_run,
        order_type=strategy.order_type or "market",
    )
    populate_credentials(instruction, plan)

    telegram = instruction.notifications.telegram
    if telegram is not None:
        plan.telegram = TelegramTarget(chat_id=bag_str(telegram.config, "chatId"))
        if telegram.type == "ssm":
            plan.telegram.bot_token_path = bag_str(telegram.config, "botTokenPath")
        # "inline" and "env" are accepted but carry no token material yet.

    return plan


def populate_credentials(instruction: TradingInstruction, plan: NormalizedPlan) -> None:
    source = instruction.exchange.credentials
    bag = source.config

    if plan.exchange == "binance":
        plan.binance = BinanceCredentials()
        if source.type == "ssm":
            plan.binance.api_key_path = bag_str(bag, "apiKeyPath")
            plan.binance.api_secret_path = bag_str(bag, "apiSecretPath")

    elif plan.exchange == "okx":
        # The SSM-shaped record is always present for okx, even for inline creds.
        plan.okx = OkxCredentials()
        if source.type == "ssm":
            plan.okx.api_key_path = bag_str(bag, "apiKeyPath")
            plan.okx.api_secret_path = bag_str(bag, "apiSecretPath")
            plan.okx.passphrase_path = bag_str(bag, "passphrasePath")
        elif source.type == "inline":
            plan.okx_inline = OkxInlineCredentials(
                api_key=bag_str(bag, "apiKey"),
                api_secret=bag_str(bag, "apiSecret"),
                passphrase=bag_str(bag, "passphrase"),
            )
