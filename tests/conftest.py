import pytest

from merak_bot.config import load_settings
from merak_bot.models import TransactionOutcome

HARDHAT_MNEMONIC = "test test test test test test test test test test test junk"
HARDHAT_ADDRESS_0 = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
HARDHAT_KEY_1 = "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d"
HARDHAT_ADDRESS_1 = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"


@pytest.fixture
def settings():
    return load_settings(env={}, overrides={
        "retry_delay_ms": 0,
        "delay_between_tx_ms": 0,
        "delay_between_wallets_ms": 0,
        "check_balance": False,
        "use_jitter": False,
    })


def ok(tx_hash="0xabc"):
    return TransactionOutcome.success(tx_hash, {"transactionHash": tx_hash, "status": 1})


def failed(error="reverted"):
    return TransactionOutcome.failure(error)
