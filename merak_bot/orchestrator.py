# merak_bot/orchestrator.py
import asyncio
import time
from typing import Awaitable, Callable, List, Optional, Sequence

from eth_account.signers.local import LocalAccount

from .chain import WalletSession, open_session
from .config import NATIVE_DECIMALS, NATIVE_SYMBOL, Settings
from .executor import TransactionExecutor
from .models import GlobalStats, OperationSpec, WalletStats
from .proxies import select_proxy
from .recorder import TransactionRecorder
from .reporter import (
    LogReporter, SMALL_DIVIDER, config_summary, report_network,
    report_run_summary, report_wallet_summary,
)
from .sequencer import OperationSequencer
from .strategy import build_operations
from .util import fmt_amount, get_logger, pause, short
log = get_logger()

SessionFactory = Callable[[LocalAccount, Settings, Optional[str]], WalletSession]
OperationsBuilder = Callable[[Settings, Optional[WalletSession]], List[OperationSpec]]


class NoWalletsError(RuntimeError):
    pass


async def _has_enough_balance(session: WalletSession, settings: Settings) -> bool:
    try:
        balance = await asyncio.to_thread(session.native_balance)
    except Exception as e:
        log.warning(f"failed to check balance: {e}")
        return True
    log.info(f"BALANCE {fmt_amount(balance, NATIVE_DECIMALS)} {NATIVE_SYMBOL}")
    need = settings.wrap.amount
    if settings.wrap.enabled and balance < need:
        log.warning(
            f"insufficient balance ({fmt_amount(balance, NATIVE_DECIMALS)} {NATIVE_SYMBOL}) for wrapping "
            f"({fmt_amount(need, NATIVE_DECIMALS)} {NATIVE_SYMBOL} required), skipping wallet"
        )
        return False
    return True


async def process_wallet(account: LocalAccount, index: int, proxy: Optional[str], settings: Settings,
                         session_factory: SessionFactory = open_session,
                         operations_builder: OperationsBuilder = build_operations,
                         retry_sleep: Callable[..., Awaitable[object]] = pause,
                         tx_sleep: Optional[Callable[[int], Awaitable[object]]] = None) -> WalletStats:
    session = session_factory(account, settings, proxy)
    report_network(log, proxy, settings.network.name)
    log.info(f"WALLET processing {short(session.address, 4)} ({index + 1})")
    log.info(SMALL_DIVIDER)

    if settings.check_balance and not await _has_enough_balance(session, settings):
        return WalletStats()

    reporter = LogReporter(session.address, settings.network.explorer_url, log)
    recorder = TransactionRecorder(settings.transactions_dir) if settings.track_transactions else None
    executor = TransactionExecutor(session.address, observer=reporter, recorder=recorder, sleep=retry_sleep)
    sequencer = OperationSequencer(executor, settings, sleep=tx_sleep)

    stats = await sequencer.run_sequence(operations_builder(settings, session))
    report_wallet_summary(log, session.address, stats)
    return stats


async def run_all(wallets: Sequence[LocalAccount], proxies: Sequence[str], settings: Settings,
                  session_factory: SessionFactory = open_session,
                  operations_builder: OperationsBuilder = build_operations,
                  sleep: Callable[..., Awaitable[object]] = pause,
                  tx_sleep: Optional[Callable[[int], Awaitable[object]]] = None) -> GlobalStats:
    """Process every wallet strictly one after another and fold their stats."""
    if not wallets:
        raise NoWalletsError("no valid wallet keys loaded")
    started = time.monotonic()
    log.info(f"configuration: {config_summary(operations_builder(settings, None))}")

    stats = GlobalStats()
    completed = 0
    n = len(wallets)
    for i, account in enumerate(wallets):
        log.info(f"processing wallet {i + 1}/{n} ({round(i / n * 100)}% complete)")
        proxy = select_proxy(proxies, i, settings.rotate_proxies)
        wallet_stats = await process_wallet(
            account, i, proxy, settings,
            session_factory=session_factory,
            operations_builder=operations_builder,
            retry_sleep=sleep,
            tx_sleep=tx_sleep,
        )
        stats.add(wallet_stats)
        completed += 1

        if i < n - 1:
            log.info(f"waiting {settings.delay_between_wallets_ms / 1000:g}s before next wallet...")
            await sleep(settings.delay_between_wallets_ms, settings.use_jitter)

    report_run_summary(log, completed, n, stats, int((time.monotonic() - started) * 1000))
    return stats
