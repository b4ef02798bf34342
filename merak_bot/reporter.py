# merak_bot/reporter.py
from typing import Optional, Sequence

from .executor import ExecutionObserver
from .models import OperationKind, OperationSpec, RunStats, TransactionOutcome
from .proxies import mask_proxy
from .strategy import count_enabled
from .util import fmt_duration, get_logger, short

DIVIDER = "━" * 80
SMALL_DIVIDER = "─" * 40


class LogReporter(ExecutionObserver):
    """Writes executor/sequencer progress for one wallet to the bot logger."""

    def __init__(self, address: str, explorer_url: str = "", log=None):
        self.address = address
        self.explorer_url = explorer_url.rstrip("/")
        self.log = log or get_logger()

    def tx_link(self, tx_hash: Optional[str]) -> str:
        if not tx_hash:
            return "transaction hash unavailable"
        if self.explorer_url:
            return f"{self.explorer_url}/tx/{tx_hash}"
        return tx_hash

    def on_attempt(self, label, attempt, max_attempts):
        suffix = f" (attempt {attempt}/{max_attempts})" if attempt > 1 else ""
        self.log.info(f"executing {label}{suffix}")

    def on_success(self, label, outcome: TransactionOutcome):
        self.log.info(f"SUCCESS {label} for {short(self.address, 4)}")
        self.log.info(f"  └─ {self.tx_link(outcome.tx_hash)}")

    def on_retry(self, label, attempt, max_attempts, error, delay_ms):
        self.log.warning(f"{label} failed (attempt {attempt}/{max_attempts}): {error}")
        self.log.info(f"retrying in {delay_ms / 1000:g}s...")

    def on_failure(self, label, attempts, error):
        self.log.error(f"FAILED {label} for {short(self.address, 4)}")
        self.log.error(f"  └─ error: {error}")

    def on_skip(self, label):
        self.log.info(f"skipping {label} (disabled in config)")

    def on_wait(self, remaining_ms):
        self.log.info(f"next transaction in {fmt_duration(remaining_ms)}")


def config_summary(specs: Sequence[OperationSpec]) -> str:
    wrap = "on" if count_enabled(specs, OperationKind.WRAP) else "off"
    swaps = count_enabled(specs, OperationKind.SWAP)
    lps = count_enabled(specs, OperationKind.LIQUIDITY)
    return f"wrapping {wrap}, {swaps} swaps, {lps} liquidity provisions"


def report_network(log, proxy: Optional[str], network: str) -> None:
    if proxy:
        log.info(f"PROXY connected via {mask_proxy(proxy)}")
    else:
        log.info(f"NETWORK connected directly to {network}")


def report_wallet_summary(log, address: str, stats: RunStats) -> None:
    log.info(SMALL_DIVIDER)
    log.info(
        f"SUMMARY wallet {short(address, 4)}: {stats.successful} successful, "
        f"{stats.failed} failed ({stats.executed} executed), {stats.skipped} skipped, {stats.total} total"
    )


def report_run_summary(log, completed: int, total_wallets: int, stats: RunStats, elapsed_ms: int) -> None:
    log.info(DIVIDER)
    log.info(
        f"COMPLETE processed {completed}/{total_wallets} wallets with "
        f"{stats.successful} successful and {stats.failed} failed transactions"
    )
    log.info(f"runtime: {fmt_duration(elapsed_ms)}")
    log.info(DIVIDER)
