# file: exchange_wrapper.py
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional

import ccxt.async_support as ccxt
from pydantic import BaseModel

from errors import CredentialResolutionError, UnsupportedExchangeError
from models import NormalizedPlan
from trade_logger import log_event, log_trade_execution

SUPPORTED_EXCHANGES = ("binance", "okx")

MOCK_BALANCE = Decimal("10000")
MOCK_PRICE = Decimal("50000")


class Order(BaseModel):
    """Результат исполнения ордера."""
    id: str
    symbol: str
    side: str = "buy"
    type: str = "market"
    quantity: Decimal = Decimal(0)  # filled quantity
    price: Decimal = Decimal(0)     # average fill price
    status: str = ""                # "filled", "partial", "rejected"


class Exchange(ABC):
    async def init(self):
        pass

    async def close(self):
        pass

    @abstractmethod
    async def get_balance(self, asset: str) -> Decimal:
        ...

    @abstractmethod
    async def place_market_buy_order(self, symbol: str, quote_amount: Decimal) -> Order:
        """symbol is a pair like 'BTC-USDT'; quote_amount is what to spend in the quote currency."""


class MockExchange(Exchange):
    """Биржа для dry run: ничего не отправляет, возвращает фиксированные данные."""

    async def get_balance(self, asset: str) -> Decimal:
        return MOCK_BALANCE

    async def place_market_buy_order(self, symbol: str, quote_amount: Decimal) -> Order:
        return Order(
            id="mock-order-12345",
            symbol=symbol,
            quantity=quote_amount / MOCK_PRICE,
            price=MOCK_PRICE,
            status="filled",
        )


def to_ccxt_symbol(symbol: str) -> str:
    """'BTC-USDT' -> 'BTC/USDT'. Symbols without a dash are passed through."""
    return symbol.replace("-", "/")


def to_decimal(value) -> Decimal:
    return Decimal(str(value)) if value is not None else Decimal(0)


class AsyncExchangeWrapper(Exchange):
    def __init__(self, exchange_id: str, api_key: str, secret_key: str,
                 passphrase: Optional[str] = None, testnet: bool = True):
        if exchange_id not in SUPPORTED_EXCHANGES:
            raise UnsupportedExchangeError(f"unsupported exchange: {exchange_id}")
        if not api_key or not secret_key:
            raise CredentialResolutionError("API key and secret must be provided.")

        self.exchange_id = exchange_id
        self.testnet = testnet
        config = {
            'apiKey': api_key,
            'secret': secret_key,
            'options': {'defaultType': 'spot'},
        }
        if passphrase:
            config['password'] = passphrase
        self.exchange = getattr(ccxt, exchange_id)(config)
        if self.testnet:
            self.exchange.set_sandbox_mode(True)

    async def init(self):
        try:
            await self.exchange.load_markets()
            print(f"Successfully connected to {self.exchange_id}. Sandbox mode: {self.testnet}")
        except Exception:
            await self.close()
            raise

    async def close(self):
        if self.exchange:
            await self.exchange.close()

    async def get_balance(self, asset: str) -> Decimal:
        balance = await self.exchange.fetch_balance()
        return to_decimal(balance.get(asset, {}).get('free'))

    async def place_market_buy_order(self, symbol: str, quote_amount: Decimal) -> Order:
        """Рыночная покупка на фиксированную сумму в валюте котировки."""
        ccxt_symbol = to_ccxt_symbol(symbol)
        try:
            raw = await self.exchange.create_market_buy_order_with_cost(ccxt_symbol, float(quote_amount))
        except Exception as e:
            log_trade_execution({'symbol': symbol, 'quote_amount': quote_amount, 'error': str(e)})
            raise
        log_trade_execution(raw)
        return Order(
            id=str(raw.get('id', '')),
            symbol=symbol,
            side=raw.get('side') or "buy",
            type=raw.get('type') or "market",
            quantity=to_decimal(raw.get('filled')),
            price=to_decimal(raw.get('average')),
            status=raw.get('status') or "",
        )


def create_exchange(plan: NormalizedPlan, sandbox: bool = True) -> Exchange:
    """
    Выбирает реализацию биржи для плана.

    Only inline credentials can be used directly; SSM paths need a secret
    store this process does not talk to.
    """
    if plan.dry_run:
        log_event("EXCHANGE_SELECTED", {"exchange": plan.exchange, "mode": "mock"})
        return MockExchange()

    if plan.exchange == "binance":
        raise CredentialResolutionError(
            "binance credentials are only available as SSM paths, which cannot be resolved here"
        )
    if plan.exchange == "okx":
        if plan.okx_inline is None:
            raise CredentialResolutionError(
                "okx credentials are SSM paths, which cannot be resolved here; use inline credentials"
            )
        log_event("EXCHANGE_SELECTED", {"exchange": plan.exchange, "mode": "live", "sandbox": sandbox})
        return AsyncExchangeWrapper(
            "okx",
            api_key=plan.okx_inline.api_key,
            secret_key=plan.okx_inline.api_secret,
            passphrase=plan.okx_inline.passphrase,
            testnet=sandbox,
        )
    raise UnsupportedExchangeError(f"unsupported exchange: {plan.exchange}")
