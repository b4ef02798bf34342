# merak_bot/wallets.py
import os
import re
from typing import Iterator, List, Tuple

from eth_account import Account
from eth_account.signers.local import LocalAccount

from .util import get_logger, short
log = get_logger()

Account.enable_unaudited_hdwallet_features()

_PRIVATE_KEY_RE = re.compile(r"^(0x)?[0-9a-fA-F]{64}$")


def iter_secret_lines(text: str) -> Iterator[Tuple[int, str]]:
    """Yield (position, line) for non-blank, non-comment lines; position is
    1-based among the yielded lines."""
    pos = 0
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        pos += 1
        yield pos, line


def make_account(secret: str) -> LocalAccount:
    if _PRIVATE_KEY_RE.match(secret):
        return Account.from_key(secret)
    return Account.from_mnemonic(" ".join(secret.split()))


def load_wallet_keys(file_path: str = "mnemonic.txt") -> List[LocalAccount]:
    if not os.path.exists(file_path):
        log.error(f"{file_path} not found, create it with your mnemonics (one per line)")
        return []
    try:
        with open(file_path, encoding="utf-8") as f:
            text = f.read()
    except OSError as e:
        log.error(f"failed to read mnemonics: {e}")
        return []

    accounts = []
    for pos, secret in iter_secret_lines(text):
        try:
            acct = make_account(secret)
        except Exception as e:
            log.warning(f"mnemonic at line {pos} is invalid: {e}")
            continue
        log.debug(f"wallet {pos}: {short(acct.address)}")
        accounts.append(acct)
    return accounts
