# merak_bot/executor.py
from dataclasses import asdict
from typing import Awaitable, Callable, Optional

from .models import Action, TransactionOutcome
from .recorder import TransactionRecorder
from .util import get_logger, on_error, pause
log = get_logger()


class CriticalOperationError(RuntimeError):
    def __init__(self, label: str, attempts: int, error: str):
        super().__init__(f"{label} failed after {attempts} attempt(s): {error}")
        self.label = label
        self.attempts = attempts
        self.error = error


class ExecutionObserver:
    """Progress hooks for the executor and sequencer. All no-ops here."""

    def on_attempt(self, label: str, attempt: int, max_attempts: int) -> None:
        pass

    def on_success(self, label: str, outcome: TransactionOutcome) -> None:
        pass

    def on_retry(self, label: str, attempt: int, max_attempts: int, error: str, delay_ms: int) -> None:
        pass

    def on_failure(self, label: str, attempts: int, error: str) -> None:
        pass

    def on_skip(self, label: str) -> None:
        pass

    def on_wait(self, remaining_ms: int) -> None:
        pass


class TransactionExecutor:
    """Runs one submission with retry.

    ``sleep`` is the pause used between attempts; the retry delay is never
    jittered.
    """

    def __init__(self, address: str,
                 observer: Optional[ExecutionObserver] = None,
                 recorder: Optional[TransactionRecorder] = None,
                 sleep: Callable[..., Awaitable[object]] = pause):
        self.address = address
        self.observer = observer or ExecutionObserver()
        self.recorder = recorder
        self.sleep = sleep

    async def execute(self, action: Action, label: str, max_attempts: int,
                      retry_delay_ms: int, critical: bool = False) -> bool:
        max_attempts = max(int(max_attempts), 1)
        attempt = 1
        while True:
            self.observer.on_attempt(label, attempt, max_attempts)
            try:
                outcome = await action()
                error = None if outcome.ok else (outcome.error or f"status {outcome.status}")
            except Exception as e:
                outcome = None
                error = str(e) or type(e).__name__

            if error is None:
                self.observer.on_success(label, outcome)
                self._persist(outcome, label)
                return True

            if attempt >= max_attempts:
                self.observer.on_failure(label, attempt, error)
                if critical:
                    raise CriticalOperationError(label, attempt, error)
                return False

            self.observer.on_retry(label, attempt, max_attempts, error, retry_delay_ms)
            await self.sleep(retry_delay_ms)
            attempt += 1

    def _persist(self, outcome: TransactionOutcome, label: str) -> None:
        if self.recorder is None:
            return
        payload = outcome.payload if outcome.payload is not None else asdict(outcome)
        try:
            path = self.recorder.record(payload, self.address, label)
            log.debug(f"tx record saved: {path}")
        except Exception as e:
            on_error(log, "failed to store transaction", e)
