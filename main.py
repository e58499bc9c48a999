# file: main.py
import asyncio
import os
import sys
from contextlib import asynccontextmanager
from typing import Literal, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel

load_dotenv()

from db_setup import setup_database
from db_utils import fetch_events
from dca_runner import run_dca
from errors import ExchangeSetupError, PayloadError
from exchange_wrapper import create_exchange
from legacy_parser import parse_legacy
from models import NormalizedPlan
from notifier import Notifier
from payload_parser import parse_instruction
from trade_logger import log_event, log_instruction
from unifier import to_normalized_plan


def env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class ExecutionContext(BaseModel):
    """Где и как запущен обработчик. Passed in explicitly by the caller."""
    mode: Literal["http", "local"] = "http"
    sandbox: bool = True


def build_plan(raw: bytes, legacy: bool = False) -> NormalizedPlan:
    if legacy:
        return parse_legacy(raw)
    instruction = parse_instruction(raw)
    log_instruction(instruction.model_dump(by_alias=True))
    return to_normalized_plan(instruction)


async def handle_request(raw: bytes, ctx: ExecutionContext, legacy: bool = False) -> dict:
    """Один вызов DCA: разбор события, нормализация, покупка, проверка баланса."""
    plan = build_plan(raw, legacy=legacy)
    log_event("PLAN_NORMALIZED", {
        "mode": ctx.mode,
        "exchange": plan.exchange,
        "symbol": plan.symbol,
        "quote_amount": plan.quote_amount,
        "balance_threshold": plan.balance_threshold,
        "dry_run": plan.dry_run,
    })

    exchange = create_exchange(plan, sandbox=ctx.sandbox)
    await exchange.init()
    try:
        result = await run_dca(plan, exchange, Notifier(plan.telegram))
    finally:
        await exchange.close()

    return {
        "status": "executed",
        "dry_run": plan.dry_run,
        "order": result["order"].model_dump(mode="json"),
        "low_balance_alert": result["alert"] is not None,
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_database()
    log_event("APP_STARTUP", {"message": "DCA handler ready."})
    yield
    log_event("APP_SHUTDOWN", {"message": "DCA handler stopped."})

app = FastAPI(title="DCA Bot", version="2.0.0", lifespan=lifespan)


def get_context() -> ExecutionContext:
    return ExecutionContext(mode="http", sandbox=env_flag("EXCHANGE_SANDBOX", True))


async def invoke(request: Request, legacy: bool) -> dict:
    raw = await request.body()
    try:
        return await handle_request(raw, get_context(), legacy=legacy)
    except PayloadError as e:
        log_event("PAYLOAD_REJECTED", {"kind": e.kind, "error": str(e)})
        raise HTTPException(status_code=400, detail={"kind": e.kind, "detail": str(e)})
    except ExchangeSetupError as e:
        log_event("EXCHANGE_SETUP_FAILED", {"error": str(e)})
        raise HTTPException(status_code=422, detail={"kind": type(e).__name__, "detail": str(e)})


@app.get("/ping")
async def ping():
    return {"status": "ok"}


@app.post("/dca")
async def dca(request: Request):
    return await invoke(request, legacy=False)


@app.post("/dca/legacy")
async def dca_legacy(request: Request):
    return await invoke(request, legacy=True)


@app.get("/events")
async def events(event_type: Optional[str] = None, limit: int = 20):
    return fetch_events(event_type=event_type, limit=limit)


async def run_local(path: str) -> dict:
    print(f"Running in local mode, reading {path} ...")
    with open(path, "rb") as f:
        raw = f.read()
    setup_database()
    ctx = ExecutionContext(mode="local", sandbox=env_flag("EXCHANGE_SANDBOX", True))
    return await handle_request(raw, ctx)


if __name__ == "__main__":
    event_file = sys.argv[1] if len(sys.argv) > 1 else os.getenv("LOCAL_EVENT_FILE", "local_event.json")
    try:
        print(asyncio.run(run_local(event_file)))
    except (OSError, PayloadError, ExchangeSetupError) as e:
        print(f"error in handle_request: {e}")
        sys.exit(1)
