# merak_bot/proxies.py
import os
import random
import re
from typing import List, Optional, Sequence

from .util import get_logger
from .wallets import iter_secret_lines
log = get_logger()

_CREDS_RE = re.compile(r"//[^/@]*@")


def normalize_proxy(line: str) -> str:
    # host:port и user:pass@host:port без схемы считаем http
    if "://" not in line:
        return f"http://{line}"
    return line


def load_proxies(file_path: str = "proxy.txt") -> List[str]:
    if not os.path.exists(file_path):
        return []
    try:
        with open(file_path, encoding="utf-8") as f:
            text = f.read()
    except OSError as e:
        log.error(f"failed to read proxies: {e}")
        return []
    return [normalize_proxy(line) for _, line in iter_secret_lines(text)]


def select_proxy(proxies: Sequence[str], wallet_index: int, rotate: bool) -> Optional[str]:
    if not proxies:
        return None
    if rotate:
        return proxies[wallet_index % len(proxies)]
    return random.choice(proxies)


def mask_proxy(proxy: Optional[str]) -> str:
    if not proxy:
        return "-"
    return _CREDS_RE.sub("//***@", proxy)
