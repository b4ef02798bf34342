import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from merak_bot.executor import CriticalOperationError, ExecutionObserver, TransactionExecutor

from conftest import failed, ok

ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


def make_executor(recorder=None):
    observer = MagicMock(spec=ExecutionObserver)
    sleep = AsyncMock()
    return TransactionExecutor(ADDRESS, observer=observer, recorder=recorder, sleep=sleep), observer, sleep


@pytest.mark.asyncio
async def test_succeeds_on_third_attempt_after_two_retry_pauses():
    executor, observer, sleep = make_executor()
    action = AsyncMock(side_effect=[failed("nonce too low"), RuntimeError("rpc down"), ok("0x01")])

    assert await executor.execute(action, "Swap", max_attempts=3, retry_delay_ms=5000) is True

    assert action.await_count == 3
    assert sleep.await_count == 2
    sleep.assert_awaited_with(5000)
    assert observer.on_retry.call_count == 2
    observer.on_success.assert_called_once()
    observer.on_failure.assert_not_called()
    assert observer.method_calls[-1][0] == "on_success"


@pytest.mark.asyncio
async def test_success_stops_immediately():
    executor, observer, sleep = make_executor()
    action = AsyncMock(return_value=ok())
    assert await executor.execute(action, "Swap", 5, 1000) is True
    assert action.await_count == 1
    sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_exhausted_non_critical_returns_false():
    executor, observer, sleep = make_executor()
    action = AsyncMock(return_value=failed("reverted"))
    assert await executor.execute(action, "Swap", 3, 10) is False
    assert action.await_count == 3
    assert sleep.await_count == 2
    observer.on_failure.assert_called_once_with("Swap", 3, "reverted")


@pytest.mark.asyncio
async def test_exhausted_critical_raises():
    executor, observer, _ = make_executor()
    action = AsyncMock(side_effect=ConnectionError("timeout"))
    with pytest.raises(CriticalOperationError) as ei:
        await executor.execute(action, "AOGI Wrapping", 2, 0, critical=True)
    assert ei.value.label == "AOGI Wrapping"
    assert ei.value.attempts == 2
    assert "timeout" in str(ei.value)
    observer.on_failure.assert_called_once()


@pytest.mark.asyncio
async def test_success_is_recorded_when_tracking():
    recorder = MagicMock()
    executor, _, _ = make_executor(recorder)
    outcome = ok("0x02")
    await executor.execute(AsyncMock(return_value=outcome), "LP Deposit", 1, 0)
    recorder.record.assert_called_once_with(outcome.payload, ADDRESS, "LP Deposit")


@pytest.mark.asyncio
async def test_recording_errors_are_swallowed():
    recorder = MagicMock()
    recorder.record.side_effect = OSError("disk full")
    executor, _, _ = make_executor(recorder)
    with patch("merak_bot.executor.log") as log:
        assert await executor.execute(AsyncMock(return_value=ok()), "Swap", 1, 0) is True
    log.error.assert_called_once()


@pytest.mark.asyncio
async def test_failures_are_not_recorded():
    recorder = MagicMock()
    executor, _, _ = make_executor(recorder)
    await executor.execute(AsyncMock(return_value=failed()), "Swap", 1, 0)
    recorder.record.assert_not_called()
