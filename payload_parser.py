# file: payload_parser.py
from pydantic import ValidationError

from amounts import parse_decimal
from errors import MalformedInput, MissingField, UnsupportedVersion
from models import TradingInstruction

SUPPORTED_VERSION = "v2"
DEFAULT_ORDER_TYPE = "market"


def describe_validation_error(e: ValidationError) -> str:
    """Первая ошибка pydantic в виде 'path.to.field: message'."""
    first = e.errors()[0]
    loc = ".".join(str(part) for part in first.get("loc", ()))
    return f"{loc}: {first['msg']}" if loc else first["msg"]


def check_version(version: str) -> None:
    if version.lower() != SUPPORTED_VERSION:
        raise UnsupportedVersion(version)


def parse_instruction(raw: bytes) -> TradingInstruction:
    """
    Парсит событие в новом формате v2 и проверяет обязательные поля.

    Quote amount only has to be a valid decimal here; positivity is
    enforced by the legacy path alone.
    """
    try:
        instruction = TradingInstruction.model_validate_json(raw)
    except ValidationError as e:
        raise MalformedInput(describe_validation_error(e)) from e

    check_version(instruction.version)

    if not instruction.exchange.name:
        raise MissingField("exchange.name", "exchange name is required")

    strategy = instruction.strategy
    if not strategy.symbol:
        raise MissingField("strategy.symbol", "strategy symbol is required")
    if not strategy.quote_amount:
        raise MissingField("strategy.quoteAmount", "strategy quoteAmount is required")

    parse_decimal(strategy.quote_amount, "quoteAmount")
    if strategy.balance_threshold:
        parse_decimal(strategy.balance_threshold, "balanceThreshold")

    if not strategy.order_type:
        strategy.order_type = DEFAULT_ORDER_TYPE

    return instruction
