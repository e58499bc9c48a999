# file: trade_logger.py
import json
from datetime import datetime, timezone

from db_utils import get_db_connection


def log_event(event_type: str, payload: dict):
    """
    Универсальная функция для логирования любого события бота.
    Записывает событие в таблицу 'trade_log' и дублирует его в stdout.

    Args:
        event_type (str): Тип события (например, 'INSTRUCTION_PARSED', 'ORDER_PLACED').
        payload (dict): Словарь с дополнительными данными о событии.
    """
    conn = None
    try:
        conn = get_db_connection()

        # Nested dicts stay JSON; Decimal and other objects fall back to str.
        payload_str = json.dumps(payload, default=str)

        record = {
            "timestamp_utc": datetime.now(timezone.utc).isoformat(timespec='microseconds'),
            "event_type": event_type,
            "payload_json": payload_str
        }

        with conn:
            conn.execute(
                "INSERT INTO trade_log (timestamp_utc, event_type, payload_json) VALUES (:timestamp_utc, :event_type, :payload_json)",
                record
            )

        print(f"[LOG] Event: {event_type} | Payload: {payload}")

    except Exception as e:
        # A failed log write must never fail the invocation.
        print(f"[LOGGING_ERROR] Failed to log event '{event_type}'. Error: {e}")
    finally:
        if conn:
            conn.close()


def log_instruction(instruction: dict):
    """Логирует разобранную инструкцию DCA. Inline secrets are masked."""
    log_event("INSTRUCTION_PARSED", payload=mask_secrets(instruction))


def log_trade_execution(order_result: dict):
    """
    Логирует результат размещения ордера.
    Тип события (успех/неудача) определяется по наличию ключа 'error'.
    """
    payload = order_result.copy()

    if payload.get('error'):
        event_type = "ORDER_FAILED"
    else:
        event_type = "ORDER_PLACED"

    log_event(event_type, payload=payload)


SECRET_KEYS = {"apiKey", "apiSecret", "passphrase", "botToken", "api_key", "api_secret"}


def mask_secrets(data):
    if isinstance(data, dict):
        return {k: ("***" if k in SECRET_KEYS and v else mask_secrets(v)) for k, v in data.items()}
    if isinstance(data, list):
        return [mask_secrets(v) for v in data]
    return data
