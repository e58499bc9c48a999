# file: tests/conftest.py
import json
import pytest
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient


@pytest.fixture(scope="function", autouse=True)
def setup_for_every_test(monkeypatch, tmp_path):
    # Every test gets its own event log database
    monkeypatch.setenv("DATABASE_FILE", str(tmp_path / "test_app_db.sqlite"))
    monkeypatch.setenv("EXCHANGE_SANDBOX", "true")

    from db_setup import setup_database
    setup_database()

    yield


@pytest.fixture
def test_app_client():
    """TestClient for the app; lifespan runs against the per-test database."""
    from main import app
    with TestClient(app) as client:
        yield client


def make_v2_payload(**overrides) -> dict:
    payload = {
        "version": "v2",
        "exchange": {
            "name": "binance",
            "credentials": {
                "type": "ssm",
                "config": {
                    "apiKeyPath": "/myapp/binance/apiKey",
                    "apiSecretPath": "/myapp/binance/apiSecret",
                },
            },
        },
        "strategy": {
            "symbol": "BTC-USDT",
            "quoteAmount": "10.00",
            "balanceThreshold": "5000.00",
            "orderType": "market",
        },
        "notifications": {
            "telegram": {
                "type": "ssm",
                "config": {
                    "botTokenPath": "/myapp/telegram/token",
                    "chatId": "123456789",
                },
            }
        },
        "flags": {"dryRun": True},
    }
    payload.update(overrides)
    return payload


def to_raw(payload: dict) -> bytes:
    return json.dumps(payload).encode()


@pytest.fixture
def v2_payload():
    return make_v2_payload()


@pytest.fixture
def mock_exchange():
    """Mock of the Exchange interface for runner tests."""
    from exchange_wrapper import Order
    from decimal import Decimal

    exchange = AsyncMock(name="mock_exchange")
    exchange.place_market_buy_order.return_value = Order(
        id="order-1", symbol="BTC-USDT", quantity=Decimal("0.0002"),
        price=Decimal("50000"), status="filled",
    )
    exchange.get_balance.return_value = Decimal("10000")
    exchange.close = AsyncMock()
    return exchange
