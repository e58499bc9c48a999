# file: models.py
from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class _Payload(BaseModel):
    # JSON uses camelCase, code uses snake_case. Unknown keys are ignored,
    # wrong JSON types are not coerced.
    model_config = ConfigDict(populate_by_name=True, strict=True)

    @field_validator("*", mode="before")
    @classmethod
    def null_to_default(cls, value: Any, info: ValidationInfo) -> Any:
        """JSON null означает «не задано»: поле получает значение по умолчанию."""
        if value is None:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        return value


# ==============================================================================
# v2 nested payload
# ==============================================================================
class CredentialSource(_Payload):
    type: str = ""  # "inline", "env", "ssm"
    config: Dict[str, Any] = Field(default_factory=dict)


class ExchangeConfig(_Payload):
    name: str = ""  # "binance", "okx"
    credentials: CredentialSource = Field(default_factory=CredentialSource)
    region: str = ""


class DCAStrategy(_Payload):
    symbol: str = ""  # "BTC-USDT"
    quote_amount: str = Field(default="", alias="quoteAmount")
    balance_threshold: str = Field(default="", alias="balanceThreshold")
    order_type: str = Field(default="", alias="orderType")


class TelegramConfig(_Payload):
    type: str = ""  # "inline", "env", "ssm"
    config: Dict[str, Any] = Field(default_factory=dict)


class NotificationConfig(_Payload):
    telegram: Optional[TelegramConfig] = None


class RuntimeFlags(_Payload):
    dry_run: bool = Field(default=False, alias="dryRun")


class TradingInstruction(_Payload):
    """Инструкция DCA в новом (вложенном) формате v2, как она пришла в событии."""
    version: str = ""
    exchange: ExchangeConfig = Field(default_factory=ExchangeConfig)
    strategy: DCAStrategy = Field(default_factory=DCAStrategy)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    flags: RuntimeFlags = Field(default_factory=RuntimeFlags)


# ==============================================================================
# Legacy flat payload
# ==============================================================================
class LegacyDCA(_Payload):
    symbol: str = ""
    target_asset: str = Field(default="", alias="targetAsset")
    order_currency: str = Field(default="", alias="orderCurrency")
    quote_amount: str = Field(default="", alias="quoteAmount")
    balance_threshold: str = Field(default="", alias="balanceThreshold")


class LegacyOkxInline(_Payload):
    api_key: str = Field(default="", alias="apiKey")
    api_secret: str = Field(default="", alias="apiSecret")
    passphrase: str = ""


class LegacyOkxEnv(_Payload):
    api_key_env: str = Field(default="", alias="apiKeyEnv")
    api_secret_env: str = Field(default="", alias="apiSecretEnv")
    passphrase_env: str = Field(default="", alias="passphraseEnv")


class LegacyOkxCredentials(_Payload):
    api_key_path: str = Field(default="", alias="apiKeyPath")
    api_secret_path: str = Field(default="", alias="apiSecretPath")
    passphrase_path: str = Field(default="", alias="passphrasePath")
    inline: Optional[LegacyOkxInline] = None
    env: Optional[LegacyOkxEnv] = None


class LegacyBinanceInline(_Payload):
    api_key: str = Field(default="", alias="apiKey")
    api_secret: str = Field(default="", alias="apiSecret")


class LegacyBinanceEnv(_Payload):
    api_key_env: str = Field(default="", alias="apiKeyEnv")
    api_secret_env: str = Field(default="", alias="apiSecretEnv")


class LegacyBinanceCredentials(_Payload):
    api_key_path: str = Field(default="", alias="apiKeyPath")
    api_secret_path: str = Field(default="", alias="apiSecretPath")
    inline: Optional[LegacyBinanceInline] = None
    env: Optional[LegacyBinanceEnv] = None


class LegacyCredentials(_Payload):
    okx: Optional[LegacyOkxCredentials] = None
    binance: Optional[LegacyBinanceCredentials] = None


class LegacyTelegramInline(_Payload):
    bot_token: str = Field(default="", alias="botToken")


class LegacyTelegramEnv(_Payload):
    bot_token_env: str = Field(default="", alias="botTokenEnv")


class LegacyTelegram(_Payload):
    bot_token_path: str = Field(default="", alias="botTokenPath")
    chat_id: str = Field(default="", alias="chatID")
    sink: str = ""  # "stdout" | default telegram
    inline: Optional[LegacyTelegramInline] = None
    env: Optional[LegacyTelegramEnv] = None


class LegacyNotifications(_Payload):
    telegram: Optional[LegacyTelegram] = None


class LegacyInstruction(_Payload):
    """Старый плоский формат: биржа строкой, креды по фиксированным полям."""
    version: str = ""
    exchange: str = ""
    dca: LegacyDCA = Field(default_factory=LegacyDCA)
    credentials: LegacyCredentials = Field(default_factory=LegacyCredentials)
    notifications: LegacyNotifications = Field(default_factory=LegacyNotifications)
    flags: RuntimeFlags = Field(default_factory=RuntimeFlags)


# ==============================================================================
# Normalized plan
# ==============================================================================
class BinanceCredentials(BaseModel):
    api_key_path: str = ""
    api_secret_path: str = ""


class OkxCredentials(BaseModel):
    api_key_path: str = ""
    api_secret_path: str = ""
    passphrase_path: str = ""


class OkxInlineCredentials(BaseModel):
    api_key: str = ""
    api_secret: str = ""
    passphrase: str = ""


class TelegramTarget(BaseModel):
    bot_token_path: str = ""
    chat_id: str = ""
    sink: str = ""


class NormalizedPlan(BaseModel):
    """Проверенный план исполнения, не зависящий от формата входного события."""
    exchange: str
    symbol: str
    quote_amount: Decimal
    balance_threshold: Decimal = Decimal(0)
    dry_run: bool = False
    order_type: str = "market"

    # At most one exchange slot is filled, the one named by `exchange`.
    binance: Optional[BinanceCredentials] = None
    okx: Optional[OkxCredentials] = None
    okx_inline: Optional[OkxInlineCredentials] = None

    telegram: Optional[TelegramTarget] = None
