# file: legacy_parser.py
from decimal import Decimal

from pydantic import ValidationError

from amounts import parse_decimal
from errors import InvalidAmount, MalformedInput, MissingField
from models import (
    BinanceCredentials,
    LegacyInstruction,
    NormalizedPlan,
    OkxCredentials,
    OkxInlineCredentials,
    TelegramTarget,
)
from payload_parser import check_version, describe_validation_error


def resolve_symbol(instruction: LegacyInstruction) -> str:
    dca = instruction.dca
    symbol = dca.symbol.strip().upper()
    if symbol:
        return symbol
    if not dca.target_asset or not dca.order_currency:
        raise MissingField("dca.symbol", "dca.symbol or (dca.targetAsset+orderCurrency) required")
    return f"{dca.target_asset.upper()}-{dca.order_currency.upper()}"


def parse_legacy(raw: bytes) -> NormalizedPlan:
    """
    Парсит старый плоский формат события сразу в NormalizedPlan.

    Unlike the v2 path, the quote amount must be strictly positive here.
    """
    try:
        instruction = LegacyInstruction.model_validate_json(raw)
    except ValidationError as e:
        raise MalformedInput(describe_validation_error(e)) from e

    check_version(instruction.version)

    exchange = instruction.exchange.strip().lower()
    if not exchange:
        raise MissingField("exchange")

    symbol = resolve_symbol(instruction)

    raw_amount = instruction.dca.quote_amount
    quote_amount = parse_decimal(raw_amount, "dca.quoteAmount")
    if quote_amount <= 0:
        raise InvalidAmount("dca.quoteAmount", raw_amount, "must be positive")

    balance_threshold = Decimal(0)
    threshold_text = instruction.dca.balance_threshold.strip()
    if threshold_text:
        balance_threshold = parse_decimal(threshold_text, "dca.balanceThreshold")

    plan = NormalizedPlan(
        exchange=exchange,
        symbol=symbol,
        quote_amount=quote_amount,
        balance_threshold=balance_threshold,
        dry_run=instruction.flags.dry_run,
    )

    creds = instruction.credentials
    if exchange == "okx" and creds.okx is not None:
        plan.okx = OkxCredentials(
            api_key_path=creds.okx.api_key_path,
            api_secret_path=creds.okx.api_secret_path,
            passphrase_path=creds.okx.passphrase_path,
        )
        if creds.okx.inline is not None:
            plan.okx_inline = OkxInlineCredentials(
                api_key=creds.okx.inline.api_key,
                api_secret=creds.okx.inline.api_secret,
                passphrase=creds.okx.inline.passphrase,
            )
    elif exchange == "binance" and creds.binance is not None:
        plan.binance = BinanceCredentials(
            api_key_path=creds.binance.api_key_path,
            api_secret_path=creds.binance.api_secret_path,
        )

    telegram = instruction.notifications.telegram
    if telegram is not None:
        plan.telegram = TelegramTarget(
            bot_token_path=telegram.bot_token_path,
            chat_id=telegram.chat_id,
            sink=telegram.sink.strip().lower(),
        )

    return plan
