# merak_bot/liquidity.py
from typing import Any, Optional, Tuple

from web3 import Web3

from .chain import WalletSession
from .dex import ZERO_ADDRESS, addr_of, ensure_allowance, send_and_wait
from .models import TransactionOutcome
from .util import (
    get_logger, short, to_checksum, v3_factory_abi, position_manager_abi, build_tx_base
)
log = get_logger()

# full-range-ish ticks, multiples of 10 (fee 500 tick spacing)
TICK_LOWER = -70000
TICK_UPPER = 70000


def get_pool(session: WalletSession, tokenA_like: Any, tokenB_like: Any, fee: int) -> str:
    tokenA = addr_of(session, tokenA_like)
    tokenB = addr_of(session, tokenB_like)
    factory = session.w3.eth.contract(address=to_checksum(session.settings.v3_factory), abi=v3_factory_abi())
    pool = factory.functions.getPool(tokenA, tokenB, int(fee)).call()
    return Web3.to_checksum_address(pool) if int(pool, 16) != 0 else ZERO_ADDRESS


def sort_tokens(a: str, b: str) -> Tuple[str, str, bool]:
    if a.lower() < b.lower():
        return a, b, False
    return b, a, True


def pm_create_pool_if_needed(session: WalletSession, tokenA_like: Any, tokenB_like: Any, fee: int,
                             sqrt_price_x96: Optional[int] = None) -> Tuple[Optional[str], str]:
    w3, acct = session.w3, session.account
    tokenA = addr_of(session, tokenA_like)
    tokenB = addr_of(session, tokenB_like)
    pool = get_pool(session, tokenA, tokenB, fee)
    if pool != ZERO_ADDRESS:
        return None, pool
    token0, token1, _ = sort_tokens(tokenA, tokenB)
    sqrt_price = sqrt_price_x96 or (1 << 96)
    pm = w3.eth.contract(address=to_checksum(session.settings.pos_manager), abi=position_manager_abi())
    tx = build_tx_base(w3, acct.address, session.settings.gas_limit_default)
    tx_data = pm.functions.createAndInitializePoolIfNecessary(token0, token1, int(fee), int(sqrt_price)).build_transaction(tx)
    outcome = send_and_wait(session, tx_data)
    if not outcome.ok:
        raise RuntimeError(f"pool create {short(token0)}/{short(token1)} failed: {outcome.error}")
    return outcome.tx_hash, get_pool(session, token0, token1, fee)


def pm_mint(
    session: WalletSession, tokenA_like: Any, tokenB_like: Any,
    amountA: int, amountB: int, fee: int, tickLower: int, tickUpper: int,
    amountAMin: int = 0, amountBMin: int = 0, recipient: Optional[str] = None
) -> TransactionOutcome:
    w3, acct = session.w3, session.account
    tokenA = addr_of(session, tokenA_like)
    tokenB = addr_of(session, tokenB_like)
    token0, token1, flipped = sort_tokens(tokenA, tokenB)
    amt0, amt1 = (amountB, amountA) if flipped else (amountA, amountB)
    min0, min1 = (amountBMin, amountAMin) if flipped else (amountAMin, amountBMin)
    pm = w3.eth.contract(address=to_checksum(session.settings.pos_manager), abi=position_manager_abi())
    params = {
        "token0": token0,
        "token1": token1,
        "fee": int(fee),
        "tickLower": int(tickLower),
        "tickUpper": int(tickUpper),
        "amount0Desired": int(amt0),
        "amount1Desired": int(amt1),
        "amount0Min": int(min0),
        "amount1Min": int(min1),
        "recipient": recipient or acct.address,
        "deadline": int(w3.eth.get_block("latest")["timestamp"]) + int(session.settings.swap_deadline_sec),
    }
    tx = build_tx_base(w3, acct.address, session.settings.gas_limit_default)
    tx_data = pm.functions.mint(params).build_transaction(tx)
    return send_and_wait(session, tx_data)


def ensure_pool_and_add_liquidity(session: WalletSession, token0, token1, fee: int,
                                  amt0: int, amt1: int, min0: int = 0, min1: int = 0) -> TransactionOutcome:
    pos_manager = session.settings.pos_manager
    pool = get_pool(session, token0, token1, fee)
    if pool == ZERO_ADDRESS:
        log.info("lp ensure: creating pool (create+init)")
        txh, pool_addr = pm_create_pool_if_needed(session, token0, token1, fee)
        if txh:
            log.info(f"lp ensure: pool created tx={short(txh)} addr={short(pool_addr)}")

    # approvals
    ensure_allowance(session, token0, pos_manager, amt0)
    ensure_allowance(session, token1, pos_manager, amt1)

    outcome = pm_mint(session, token0, token1, amt0, amt1, fee,
                      tickLower=TICK_LOWER, tickUpper=TICK_UPPER, amountAMin=min0, amountBMin=min1)
    log.debug(f"lp mint {token0}/{token1} fee={fee} tx={short(outcome.tx_hash)}")
    return outcome
