# merak_bot/sequencer.py
import enum
from typing import Awaitable, Callable, Optional, Sequence

from .config import Settings
from .executor import CriticalOperationError, ExecutionObserver, TransactionExecutor
from .models import OperationSpec, WalletStats
from .util import countdown, get_logger, jittered_ms
log = get_logger()


class SequenceState(str, enum.Enum):
    PENDING = "pending"
    RUNNING = "running"
    SHORT_CIRCUITED = "short_circuited"
    COMPLETED = "completed"


class OperationSequencer:
    """Runs an ordered list of operations for one wallet.

    Every visited spec counts toward ``total``. A disabled spec is skipped
    (``skipped``), it never triggers the critical short-circuit. A failing
    critical spec stops the sequence.
    """

    def __init__(self, executor: TransactionExecutor, settings: Settings,
                 observer: Optional[ExecutionObserver] = None,
                 sleep: Optional[Callable[[int], Awaitable[object]]] = None,
                 tick_ms: int = 10_000):
        self.executor = executor
        self.settings = settings
        self.observer = observer or executor.observer
        self.tick_ms = tick_ms
        self.sleep = sleep or self._countdown
        self.state = SequenceState.PENDING
        self.stats = WalletStats()

    async def _countdown(self, ms: int) -> None:
        await countdown(ms, self.observer.on_wait, self.tick_ms)

    async def run_sequence(self, specs: Sequence[OperationSpec]) -> WalletStats:
        s = self.settings
        self.state = SequenceState.RUNNING
        last = len(specs) - 1
        for i, spec in enumerate(specs):
            self.stats.total += 1
            if not spec.enabled:
                self.stats.skipped += 1
                self.observer.on_skip(spec.label)
                continue

            try:
                ok = await self.executor.execute(
                    spec.execute, spec.label, s.max_retries, s.retry_delay_ms, critical=spec.critical
                )
            except CriticalOperationError as e:
                log.debug(f"critical failure: {e}")
                ok = False

            if ok:
                self.stats.successful += 1
                if i < last and s.delay_between_tx_ms > 0:
                    await self.sleep(jittered_ms(s.delay_between_tx_ms, s.use_jitter))
                continue

            self.stats.failed += 1
            if spec.critical:
                log.warning(f"{spec.label} failed, skipping remaining operations")
                self.state = SequenceState.SHORT_CIRCUITED
                return self.stats

        self.state = SequenceState.COMPLETED
        return self.stats
