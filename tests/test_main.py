from dataclasses import replace
from unittest.mock import AsyncMock, patch

from merak_bot import __main__ as entry
from merak_bot.config import ConfigError

from conftest import HARDHAT_MNEMONIC


def test_no_valid_wallets_exits_non_zero(settings, tmp_path):
    s = replace(settings, mnemonic_file=str(tmp_path / "mnemonic.txt"), proxy_file=str(tmp_path / "proxy.txt"))
    with patch.object(entry, "load_settings", return_value=s):
        assert entry.main() == 1


def test_bad_configuration_exits_non_zero():
    with patch.object(entry, "load_settings", side_effect=ConfigError("MAX_RETRIES must be >= 1")):
        assert entry.main() == 1


def test_uncaught_error_exits_non_zero(settings, tmp_path):
    f = tmp_path / "mnemonic.txt"
    f.write_text(HARDHAT_MNEMONIC + "\n")
    s = replace(settings, mnemonic_file=str(f), proxy_file=str(tmp_path / "proxy.txt"))
    with patch.object(entry, "load_settings", return_value=s), \
         patch.object(entry, "run_all", AsyncMock(side_effect=RuntimeError("boom"))):
        assert entry.main() == 1


def test_successful_run_exits_zero(settings, tmp_path):
    f = tmp_path / "mnemonic.txt"
    f.write_text(HARDHAT_MNEMONIC + "\n")
    s = replace(settings, mnemonic_file=str(f), proxy_file=str(tmp_path / "proxy.txt"))
    run_all = AsyncMock()
    with patch.object(entry, "load_settings", return_value=s), patch.object(entry, "run_all", run_all):
        assert entry.main() == 0
    wallets, proxies, passed = run_all.await_args.args
    assert len(wallets) == 1 and proxies == [] and passed is s
