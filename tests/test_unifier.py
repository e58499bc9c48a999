# file: tests/test_unifier.py
from decimal import Decimal

import pytest

from conftest import make_v2_payload, to_raw
from errors import InvalidAmount
from models import CredentialSource, DCAStrategy, ExchangeConfig, TradingInstruction
from payload_parser import parse_instruction
from unifier import to_normalized_plan


def plan_for(**overrides):
    return to_normalized_plan(parse_instruction(to_raw(make_v2_payload(**overrides))))


def test_binance_ssm_round_trip():
    plan = plan_for(exchange={
        "name": "binance",
        "credentials": {"type": "ssm", "config": {"apiKeyPath": "/a", "apiSecretPath": "/b"}},
    })

    assert plan.exchange == "binance"
    assert plan.binance.api_key_path == "/a"
    assert plan.binance.api_secret_path == "/b"
    assert plan.okx is None
    assert plan.okx_inline is None


def test_amounts_are_exact_decimals(v2_payload):
    plan = to_normalized_plan(parse_instruction(to_raw(v2_payload)))

    assert plan.quote_amount == Decimal("10.00")
    assert plan.balance_threshold == Decimal("5000.00")
    assert plan.dry_run is True
    assert plan.order_type == "market"


def test_missing_threshold_is_zero():
    plan = plan_for(strategy={"symbol": "BTC-USDT", "quoteAmount": "10"})
    assert plan.balance_threshold == Decimal(0)


def test_okx_inline_credentials():
    plan = plan_for(exchange={
        "name": "okx",
        "credentials": {"type": "inline", "config": {"apiKey": "k", "apiSecret": "s", "passphrase": "p"}},
    })

    assert plan.binance is None
    # SSM-shaped record is allocated but empty
    assert plan.okx is not None
    assert plan.okx.api_key_path == ""
    assert plan.okx.api_secret_path == ""
    assert plan.okx.passphrase_path == ""
    assert plan.okx_inline.api_key == "k"
    assert plan.okx_inline.api_secret == "s"
    assert plan.okx_inline.passphrase == "p"


def test_okx_ssm_credentials():
    plan = plan_for(exchange={
        "name": "OKX",
        "credentials": {"type": "ssm", "config": {
            "apiKeyPath": "/okx/key", "apiSecretPath": "/okx/secret", "passphrasePath": "/okx/pass",
        }},
    })

    assert plan.exchange == "okx"
    assert plan.okx.passphrase_path == "/okx/pass"
    assert plan.okx_inline is None


def test_wrong_typed_bag_fields_are_left_empty():
    plan = plan_for(exchange={
        "name": "binance",
        "credentials": {"type": "ssm", "config": {"apiKeyPath": 42, "apiSecretPath": None}},
    })

    assert plan.binance.api_key_path == ""
    assert plan.binance.api_secret_path == ""


def test_binance_non_ssm_credentials_leave_record_empty():
    plan = plan_for(exchange={
        "name": "binance",
        "credentials": {"type": "inline", "config": {"apiKey": "k", "apiSecret": "s"}},
    })
    assert plan.binance.api_key_path == ""
    assert plan.okx_inline is None


def test_unknown_exchange_has_no_credentials():
    plan = plan_for(exchange={"name": "Kraken", "credentials": {"type": "ssm", "config": {}}})

    assert plan.exchange == "kraken"
    assert plan.binance is None
    assert plan.okx is None
    assert plan.okx_inline is None


def test_symbol_is_upper_cased():
    plan = plan_for(strategy={"symbol": "btc-usdt", "quoteAmount": "10"})
    assert plan.symbol == "BTC-USDT"


def test_telegram_ssm(v2_payload):
    plan = to_normalized_plan(parse_instruction(to_raw(v2_payload)))

    assert plan.telegram.chat_id == "123456789"
    assert plan.telegram.bot_token_path == "/myapp/telegram/token"


@pytest.mark.parametrize("kind", ["inline", "env"])
def test_telegram_non_ssm_has_no_token(kind):
    plan = plan_for(notifications={"telegram": {"type": kind, "config": {"chatId": "42", "botTokenPath": "/t"}}})

    assert plan.telegram.chat_id == "42"
    assert plan.telegram.bot_token_path == ""


def test_no_telegram_block():
    plan = plan_for(notifications={})
    assert plan.telegram is None


def test_unvalidated_instruction_with_bad_amount():
    instruction = TradingInstruction(
        version="v2",
        exchange=ExchangeConfig(name="binance", credentials=CredentialSource()),
        strategy=DCAStrategy(symbol="BTC-USDT", quote_amount="ten"),
    )
    with pytest.raises(InvalidAmount) as exc_info:
        to_normalized_plan(instruction)
    assert exc_info.value.field == "quoteAmount"


def test_unvalidated_instruction_with_bad_threshold():
    instruction = TradingInstruction(
        version="v2",
        exchange=ExchangeConfig(name="binance"),
        strategy=DCAStrategy(symbol="BTC-USDT", quote_amount="10", balance_threshold="lots"),
    )
    with pytest.raises(InvalidAmount) as exc_info:
        to_normalized_plan(instruction)
    assert exc_info.value.field == "balanceThreshold"


def test_null_threshold_and_config_normalize_to_empty():
    payload = make_v2_payload(strategy={"symbol": "btc-usdt", "quoteAmount": "10", "balanceThreshold": None})
    payload["exchange"]["credentials"]["config"] = None
    plan = to_normalized_plan(parse_instruction(to_raw(payload)))

    assert plan.balance_threshold == Decimal(0)
    assert plan.binance.api_key_path == ""
