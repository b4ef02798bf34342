import dataclasses

import pytest

from merak_bot.config import ConfigError, load_settings


def test_defaults():
    s = load_settings(env={})
    assert s.network.name == "testnet"
    assert s.max_retries == 3
    assert s.retry_delay_ms == 5000
    assert s.delay_between_tx_ms == 60000
    assert s.check_balance is True
    assert s.track_transactions is False
    assert s.use_jitter is True
    assert s.rotate_proxies is True
    assert s.wrap.enabled is True
    assert len(s.swaps) == 4
    assert len(s.liquidity) == 3


def test_env_overrides_keep_integer_precision():
    huge = 2**256 - 1
    s = load_settings(env={
        "MAX_RETRIES": "5",
        "USE_JITTER": "0",
        "WRAP_ENABLED": "false",
        "WRAP_AMOUNT": str(huge),
        "SWAP_WAOGI_USDC_ENABLED": "no",
        "SWAP_WAOGI_USDC_PATH": "wAOGI,WETH,USDC",
        "LIQUIDITY_USDC_WETH_AMOUNT1": "123456789012345678901234567890",
        "RPC_URL": "http://localhost:8545",
    })
    assert s.max_retries == 5
    assert s.use_jitter is False
    assert s.wrap.enabled is False
    assert s.wrap.amount == huge
    swap = next(sw for sw in s.swaps if sw.key == "wAOGI_USDC")
    assert swap.enabled is False
    assert swap.path == ("wAOGI", "WETH", "USDC")
    lp = next(lp for lp in s.liquidity if lp.key == "USDC_WETH")
    assert lp.amount1 == 123456789012345678901234567890
    assert s.network.rpc_url == "http://localhost:8545"


def test_settings_are_immutable():
    s = load_settings(env={})
    with pytest.raises(dataclasses.FrozenInstanceError):
        s.max_retries = 10


@pytest.mark.parametrize("env", [
    {"MAX_RETRIES": "0"},
    {"MAX_RETRIES": "three"},
    {"RETRY_DELAY_MS": "-1"},
    {"NETWORK": "devnet"},
    {"WRAP_AMOUNT": str(2**256)},
    {"SWAP_WAOGI_USDC_PATH": "wAOGI,DOGE"},
])
def test_invalid_values_are_rejected(env):
    with pytest.raises(ConfigError):
        load_settings(env=env)


def test_overrides_apply_last():
    s = load_settings(env={"MAX_RETRIES": "4"}, overrides={"max_retries": 7})
    assert s.max_retries == 7
    with pytest.raises(ConfigError):
        load_settings(env={}, overrides={"no_such_field": 1})
