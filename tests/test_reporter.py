from unittest.mock import MagicMock

from merak_bot.models import RunStats, TransactionOutcome
from merak_bot.reporter import LogReporter, report_wallet_summary


def test_wallet_summary_reports_executed_and_skipped():
    log = MagicMock()
    report_wallet_summary(log, "0x" + "ab" * 20, RunStats(total=5, successful=2, failed=1, skipped=2))
    line = log.info.call_args.args[0]
    assert "2 successful" in line
    assert "1 failed (3 executed)" in line
    assert "2 skipped" in line
    assert "5 total" in line


def test_success_links_to_explorer():
    log = MagicMock()
    reporter = LogReporter("0x" + "ab" * 20, "https://explorer.example/", log)
    reporter.on_success("Swap", TransactionOutcome.success("0xfeed"))
    assert log.info.call_args.args[0].endswith("https://explorer.example/tx/0xfeed")
