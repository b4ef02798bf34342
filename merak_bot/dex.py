# merak_bot/dex.py
import json
from typing import Any, Sequence

from web3 import Web3
from web3.types import TxParams

from .chain import WalletSession
from .config import ConfigError, WRAPPED_NATIVE
from .models import TransactionOutcome
from .util import (
    get_logger, short, fmt_amount, to_checksum, erc20_min_abi, wrapped_native_abi,
    swap_router_v3_abi, build_tx_base
)
log = get_logger()

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def addr_of(session: WalletSession, token_like: Any) -> str:
    """
    Принимает: 'WETH' | '0xabc...' | {'address':'0xabc', ...}
    Возвращает: checksum-адрес
    """
    if isinstance(token_like, dict):
        token_like = token_like.get("address")
    if isinstance(token_like, str) and not token_like.startswith("0x"):
        try:
            token_like = session.settings.token(token_like).address
        except ConfigError:
            pass
    if not isinstance(token_like, str) or not token_like.startswith("0x"):
        raise ValueError(f"Bad token value for address: {token_like!r}")
    return to_checksum(token_like)


def decimals_of(session: WalletSession, token_like: Any) -> int:
    if isinstance(token_like, str):
        for t in session.settings.tokens:
            if token_like == t.symbol or token_like.lower() == t.address.lower():
                return int(t.decimals)
    return 18


def receipt_payload(receipt) -> dict:
    # AttributeDict/HexBytes -> plain JSON types
    return json.loads(Web3.to_json(receipt))


def send_and_wait(session: WalletSession, tx_data: TxParams, timeout: int = 180) -> TransactionOutcome:
    w3, acct = session.w3, session.account
    signed = acct.sign_transaction(tx_data)
    txh = w3.eth.send_raw_transaction(signed.raw_transaction)
    rec = w3.eth.wait_for_transaction_receipt(txh, timeout=timeout)
    tx_hash = Web3.to_hex(txh)
    payload = receipt_payload(rec)
    if rec["status"] == 1:
        return TransactionOutcome.success(tx_hash, payload)
    return TransactionOutcome.failure(f"transaction reverted (status {rec['status']})", tx_hash, payload)


def erc20(session: WalletSession, token_like: Any):
    return session.w3.eth.contract(address=addr_of(session, token_like), abi=erc20_min_abi())


def ensure_allowance(session: WalletSession, token_like: Any, spender_like: Any, amount: int) -> str | None:
    w3, acct = session.w3, session.account
    token_addr = addr_of(session, token_like)
    spender_addr = addr_of(session, spender_like)
    c = erc20(session, token_addr)
    current = c.functions.allowance(acct.address, spender_addr).call()
    if current >= amount:
        return None
    gas_default = session.settings.gas_limit_default
    tx: TxParams = build_tx_base(w3, acct.address, gas_default)
    tx["gas"] = max(gas_default // 5, 60000)
    tx_data = c.functions.approve(spender_addr, int(amount)).build_transaction(tx)
    outcome = send_and_wait(session, tx_data)
    if not outcome.ok:
        raise RuntimeError(f"approve {short(token_addr)} -> {short(spender_addr)} failed: {outcome.error}")
    log.debug(f"approve {short(token_addr)} -> {short(spender_addr)} {amount} | {short(outcome.tx_hash)}")
    return outcome.tx_hash


def wrap_native(session: WalletSession, amount: int) -> TransactionOutcome:
    """deposit() on the wrapped-native token with ``value = amount``."""
    w3, acct = session.w3, session.account
    s = session.settings
    weth = w3.eth.contract(address=addr_of(session, WRAPPED_NATIVE), abi=wrapped_native_abi())
    tx: TxParams = build_tx_base(w3, acct.address, s.gas_limit_default // 4)
    tx["value"] = int(amount)
    tx_data = weth.functions.deposit().build_transaction(tx)
    return send_and_wait(session, tx_data)


def encode_path(addresses: Sequence[str], fee: int) -> bytes:
    # token(20) | fee(3) | token(20) ...
    out = b""
    for i, a in enumerate(addresses):
        if i:
            out += int(fee).to_bytes(3, "big")
        out += Web3.to_bytes(hexstr=a)
    return out


def _deadline(session: WalletSession) -> int:
    return int(session.w3.eth.get_block("latest")["timestamp"]) + int(session.settings.swap_deadline_sec)


def swap_exact_input(
    session: WalletSession, path: Sequence[Any], amount_in: int,
    min_amount_out: int = 0, fee: int | None = None, recipient: str | None = None
) -> TransactionOutcome:
    """Swap ``amount_in`` of ``path[0]`` along ``path``; two tokens go through
    exactInputSingle, longer routes through exactInput."""
    w3, acct = session.w3, session.account
    s = session.settings
    if len(path) < 2:
        raise ValueError("swap path needs at least 2 tokens")
    tokens = [addr_of(session, t) for t in path]
    fee = int(fee or s.v3_fee)
    router_addr = to_checksum(s.router)

    ensure_allowance(session, tokens[0], router_addr, amount_in)

    router = w3.eth.contract(address=router_addr, abi=swap_router_v3_abi())
    tx: TxParams = build_tx_base(w3, acct.address, s.gas_limit_default)
    if len(tokens) == 2:
        params = {
            "tokenIn": tokens[0],
            "tokenOut": tokens[1],
            "fee": fee,
            "recipient": recipient or acct.address,
            "deadline": _deadline(session),
            "amountIn": int(amount_in),
            "amountOutMinimum": int(min_amount_out),
            "sqrtPriceLimitX96": 0,
        }
        tx_data = router.functions.exactInputSingle(params).build_transaction(tx)
    else:
        params = {
            "path": encode_path(tokens, fee),
            "recipient": recipient or acct.address,
            "deadline": _deadline(session),
            "amountIn": int(amount_in),
            "amountOutMinimum": int(min_amount_out),
        }
        tx_data = router.functions.exactInput(params).build_transaction(tx)
    outcome = send_and_wait(session, tx_data)
    amount_str = fmt_amount(int(amount_in), decimals_of(session, path[0]))
    log.debug(f"v3 swap {'->'.join(short(t) for t in tokens)} in={amount_str} minOut={min_amount_out} fee={fee} | {short(outcome.tx_hash)}")
    return outcome
