import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from merak_bot.util import countdown, fmt_amount, fmt_duration, jittered_ms, pause, short


def test_jittered_ms_without_jitter_is_exact():
    assert jittered_ms(5000, False) == 5000


def test_jitter_samples_stay_in_band_and_average_out():
    base = 10_000
    samples = [jittered_ms(base, True) for _ in range(1000)]
    assert all(0.8 * base <= s <= 1.2 * base for s in samples)
    assert all(isinstance(s, int) for s in samples)
    mean = sum(samples) / len(samples)
    assert abs(mean - base) <= 0.02 * base


@pytest.mark.asyncio
async def test_pause_sleeps_jittered_duration():
    with patch("merak_bot.util.asyncio.sleep", new_callable=AsyncMock) as sleep, \
         patch("merak_bot.util.random.uniform", return_value=1.1):
        ms = await pause(1000, True)
    assert ms == 1100
    sleep.assert_awaited_once_with(1.1)


@pytest.mark.asyncio
async def test_countdown_reports_remaining_time():
    ticks = MagicMock()
    sleep = AsyncMock()
    await countdown(25_000, ticks, interval_ms=10_000, sleep=sleep)
    assert [c.args[0] for c in ticks.call_args_list] == [25_000, 15_000, 5_000]
    assert [c.args[0] for c in sleep.await_args_list] == [10.0, 10.0, 5.0]


def test_short_and_amount_helpers():
    assert short("0x" + "a" * 40) == "0xaaaaaa…aaaaaa"
    assert short(None) == "-"
    assert fmt_amount(1_500_000_000_000_000_000, 18) == "1.5"
    assert fmt_amount(2**255, 0) == str(2**255)
    assert fmt_duration(125_000) == "2m 5s"
