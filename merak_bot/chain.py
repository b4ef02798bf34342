# merak_bot/chain.py
from dataclasses import dataclass
from typing import Optional

from eth_account.signers.local import LocalAccount
from web3 import Web3

from .config import Settings


def get_w3(rpc_url: str, proxy: Optional[str] = None, timeout: int = 30) -> Web3:
    assert rpc_url, "RPC_URL required (.env)"
    request_kwargs = {"timeout": timeout}
    if proxy:
        request_kwargs["proxies"] = {"http": proxy, "https": proxy}
    return Web3(Web3.HTTPProvider(rpc_url, request_kwargs=request_kwargs))


@dataclass(frozen=True)
class WalletSession:
    """Submission context bound to one wallet and (optionally) one proxy."""
    w3: Web3
    account: LocalAccount
    settings: Settings
    proxy: Optional[str] = None

    @property
    def address(self) -> str:
        return self.account.address

    def native_balance(self) -> int:
        return int(self.w3.eth.get_balance(self.account.address))


def open_session(account: LocalAccount, settings: Settings, proxy: Optional[str] = None) -> WalletSession:
    w3 = get_w3(settings.network.rpc_url, proxy, settings.rpc_timeout)
    return WalletSession(w3=w3, account=account, settings=settings, proxy=proxy)
