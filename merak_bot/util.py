# merak_bot/util.py
import asyncio
import json
import logging
import math
import random
import sys
import time
from typing import Awaitable, Callable, Optional

from web3 import Web3

# --- pretty logging utils ---
RESET = "\x1b[0m"
COLORS = {
    "DEBUG": "\x1b[38;5;245m",
    "INFO":  "\x1b[38;5;39m",
    "WARNING": "\x1b[38;5;214m",
    "ERROR": "\x1b[38;5;203m",
    "CRITICAL": "\x1b[38;5;197m",
}


class _HumanFormatter(logging.Formatter):
    def __init__(self, color: bool = True):
        super().__init__()
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        level = record.levelname
        ts = time.strftime("%H:%M:%S", time.localtime(record.created))
        msg = record.getMessage()
        if record.exc_info:
            msg = f"{msg}\n{self.formatException(record.exc_info)}"
        tag = "warn" if level == "WARNING" else level.lower()
        if self.color:
            color = COLORS.get(level, "")
            return f"[{ts}] {color}{tag:>5}{RESET} {msg}"
        return f"[{ts}] {tag:>5} {msg}"


class _JsonFormatter(logging.Formatter):
    def __init__(self, debug: bool = False):
        super().__init__()
        self.debug = debug

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": round(record.created, 3),
            "level": record.levelname.lower(),
            "msg": record.getMessage(),
            "logger": record.name,
        }
        if self.debug and record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


_log = None
_debug = False


def get_logger(name="merak"):
    global _log
    return _log if _log else init_logging(name=name)


def init_logging(level: str = "INFO", color: bool = True, as_json: bool = False,
                 debug: bool = False, name="merak"):
    global _log, _debug
    log = logging.getLogger(name)
    lvl = getattr(logging, level.upper(), logging.INFO)
    log.setLevel(lvl)
    h = logging.StreamHandler(sys.stdout)
    h.setLevel(lvl)
    h.setFormatter(_JsonFormatter(debug) if as_json else _HumanFormatter(color))
    # avoid duplicate handlers
    log.handlers[:] = [h]
    log.propagate = False
    _log = log
    _debug = debug
    return log


def on_error(log, msg: str, exc: Exception = None):
    if _debug and exc:
        log.exception(msg)
    else:
        log.error(f"{msg}: {exc}" if exc else msg)


# --- pretty helpers ---
def short(x: object, keep: int = 6) -> str:
    if x is None:
        return "-"
    s = str(x)
    if s.startswith("0x") and len(s) > 2*keep+2:
        return f"{s[:2+keep]}…{s[-keep:]}"
    if len(s) > keep*2:
        return f"{s[:keep]}…{s[-keep:]}"
    return s


def fmt_amount(raw_amount: int, decimals: int) -> str:
    if decimals <= 0:
        return str(raw_amount)
    q = 10 ** decimals
    whole = raw_amount // q
    frac = raw_amount % q
    if frac == 0:
        return f"{whole:,}"
    # trim trailing zeros, limit length
    s = f"{frac:0{decimals}d}".rstrip("0")
    s = s[:8]
    return f"{whole:,}.{s}"


def fmt_duration(ms: int) -> str:
    seconds = max(int(ms) // 1000, 0)
    return f"{seconds // 60}m {seconds % 60}s"


# --- pauses ---
JITTER_LOW = 0.8
JITTER_HIGH = 1.2


def jittered_ms(duration_ms: int, use_jitter: bool = False) -> int:
    """Delay actually slept by :func:`pause`: ``duration_ms`` scaled by a
    uniform factor in [0.8, 1.2] and floored when ``use_jitter`` is set."""
    if not use_jitter:
        return int(duration_ms)
    return math.floor(duration_ms * random.uniform(JITTER_LOW, JITTER_HIGH))


async def pause(duration_ms: int, use_jitter: bool = False) -> int:
    ms = jittered_ms(duration_ms, use_jitter)
    await asyncio.sleep(max(ms, 0) / 1000)
    return ms


async def countdown(duration_ms: int,
                    on_tick: Optional[Callable[[int], None]] = None,
                    interval_ms: int = 10_000,
                    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep) -> None:
    """Sleep ``duration_ms`` in ``interval_ms`` slices, reporting what is left."""
    remaining = max(int(duration_ms), 0)
    while remaining > 0:
        if on_tick:
            on_tick(remaining)
        step = min(interval_ms, remaining)
        await sleep(step / 1000)
        remaining -= step


# --- tx helpers ---
def to_checksum(addr: str) -> str:
    return Web3.to_checksum_address(addr)


def build_tx_base(w3: Web3, from_addr: str, gas_limit: int):
    return {
        "from": from_addr,
        "nonce": w3.eth.get_transaction_count(from_addr),
        "gasPrice": w3.eth.gas_price,
        "gas": gas_limit,
    }


def erc20_min_abi():
    # balanceOf, decimals, symbol, approve, allowance
    return [
        {"constant":True,"inputs":[{"name":"owner","type":"address"}],"name":"balanceOf","outputs":[{"name":"","type":"uint256"}],"type":"function"},
        {"constant":True,"inputs":[],"name":"decimals","outputs":[{"name":"","type":"uint8"}],"type":"function"},
        {"constant":True,"inputs":[],"name":"symbol","outputs":[{"name":"","type":"string"}],"type":"function"},
        {"constant":False,"inputs":[{"name":"spender","type":"address"},{"name":"value","type":"uint256"}],"name":"approve","outputs":[{"name":"","type":"bool"}],"type":"function"},
        {"constant":True,"inputs":[{"name":"owner","type":"address"},{"name":"spender","type":"address"}],"name":"allowance","outputs":[{"name":"","type":"uint256"}],"type":"function"},
    ]


def wrapped_native_abi():
    # WETH9: deposit
    return [
        {"name":"deposit","type":"function","stateMutability":"payable","inputs":[],"outputs":[]},
    ]


def swap_router_v3_abi():
    # exactInputSingle + exactInput
    return [
      {
        "name":"exactInputSingle","type":"function","stateMutability":"payable",
        "inputs":[{"name":"params","type":"tuple","components":[
          {"name":"tokenIn","type":"address"},
          {"name":"tokenOut","type":"address"},
          {"name":"fee","type":"uint24"},
          {"name":"recipient","type":"address"},
          {"name":"deadline","type":"uint256"},
          {"name":"amountIn","type":"uint256"},
          {"name":"amountOutMinimum","type":"uint256"},
          {"name":"sqrtPriceLimitX96","type":"uint160"}
        ]}],
        "outputs":[{"name":"amountOut","type":"uint256"}]
      },
      {
        "name":"exactInput","type":"function","stateMutability":"payable",
        "inputs":[{"name":"params","type":"tuple","components":[
          {"name":"path","type":"bytes"},
          {"name":"recipient","type":"address"},
          {"name":"deadline","type":"uint256"},
          {"name":"amountIn","type":"uint256"},
          {"name":"amountOutMinimum","type":"uint256"}
        ]}],
        "outputs":[{"name":"amountOut","type":"uint256"}]
      }
    ]


def v3_factory_abi():
    # getPool(tokenA, tokenB, fee)
    return [
      {"name":"getPool","type":"function","stateMutability":"view",
       "inputs":[{"name":"tokenA","type":"address"},{"name":"tokenB","type":"address"},{"name":"fee","type":"uint24"}],
       "outputs":[{"name":"pool","type":"address"}]}
    ]


def position_manager_abi():
    # createAndInitializePoolIfNecessary + mint
    return [
      {"name":"createAndInitializePoolIfNecessary","type":"function","stateMutability":"payable",
       "inputs":[{"name":"token0","type":"address"},{"name":"token1","type":"address"},{"name":"fee","type":"uint24"},{"name":"sqrtPriceX96","type":"uint160"}],
       "outputs":[{"name":"pool","type":"address"}]},
      {"name":"mint","type":"function","stateMutability":"payable",
       "inputs":[{"name":"params","type":"tuple","components":[
          {"name":"token0","type":"address"},
          {"name":"token1","type":"address"},
          {"name":"fee","type":"uint24"},
          {"name":"tickLower","type":"int24"},
          {"name":"tickUpper","type":"int24"},
          {"name":"amount0Desired","type":"uint256"},
          {"name":"amount1Desired","type":"uint256"},
          {"name":"amount0Min","type":"uint256"},
          {"name":"amount1Min","type":"uint256"},
          {"name":"recipient","type":"address"},
          {"name":"deadline","type":"uint256"}
       ]}],
       "outputs":[
         {"name":"tokenId","type":"uint256"},
         {"name":"liquidity","type":"uint128"},
         {"name":"amount0","type":"uint256"},
         {"name":"amount1","type":"uint256"},
       ]}
    ]
