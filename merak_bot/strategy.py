# merak_bot/strategy.py
import asyncio
from functools import partial
from typing import List, Optional, Sequence

from .chain import WalletSession
from .config import LiquidityConfig, Settings, SwapConfig, WrapConfig
from .dex import swap_exact_input, wrap_native
from .liquidity import ensure_pool_and_add_liquidity
from .models import OperationKind, OperationSpec, TransactionOutcome

# web3 is blocking; submissions run in a worker thread


async def run_wrap(session: WalletSession, cfg: WrapConfig) -> TransactionOutcome:
    return await asyncio.to_thread(wrap_native, session, cfg.amount)


async def run_swap(session: WalletSession, cfg: SwapConfig) -> TransactionOutcome:
    return await asyncio.to_thread(
        swap_exact_input, session, cfg.path, cfg.amount, cfg.min_output
    )


async def run_liquidity(session: WalletSession, cfg: LiquidityConfig) -> TransactionOutcome:
    return await asyncio.to_thread(
        ensure_pool_and_add_liquidity, session, cfg.token0, cfg.token1,
        session.settings.v3_fee, cfg.amount0, cfg.amount1, cfg.min0, cfg.min1,
    )


def build_operations(settings: Settings, session: Optional[WalletSession]) -> List[OperationSpec]:
    """wrap -> swaps -> liquidity provisions. Only the wrap is critical: every
    later step spends the wrapped balance."""
    ops = [OperationSpec(
        name="wrap",
        label=settings.wrap.label,
        kind=OperationKind.WRAP,
        execute=partial(run_wrap, session, settings.wrap),
        enabled=settings.wrap.enabled,
        critical=True,
    )]
    for sw in settings.swaps:
        ops.append(OperationSpec(
            name=f"swap_{sw.key}",
            label=sw.label,
            kind=OperationKind.SWAP,
            execute=partial(run_swap, session, sw),
            enabled=sw.enabled,
        ))
    for lp in settings.liquidity:
        ops.append(OperationSpec(
            name=f"liquidity_{lp.key}",
            label=lp.label,
            kind=OperationKind.LIQUIDITY,
            execute=partial(run_liquidity, session, lp),
            enabled=lp.enabled,
        ))
    return ops


def count_enabled(specs: Sequence[OperationSpec], kind: OperationKind) -> int:
    return sum(1 for op in specs if op.kind is kind and op.enabled)
