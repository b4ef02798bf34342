# merak_bot/recorder.py
import json
import os
import re
import time
from typing import Any, Dict, Optional

_WS_RE = re.compile(r"\s+")


def record_name(address: str, label: str, epoch_ms: Optional[int] = None) -> str:
    if epoch_ms is None:
        epoch_ms = int(time.time() * 1000)
    return f"{epoch_ms}_{address[:8]}_{_WS_RE.sub('_', label)}.json"


class TransactionRecorder:
    """Writes one pretty-printed JSON file per successful submission."""

    def __init__(self, directory: str = "transactions"):
        self.directory = directory

    def record(self, payload: Dict[str, Any], address: str, label: str) -> str:
        os.makedirs(self.directory, exist_ok=True)
        path = os.path.join(self.directory, record_name(address, label))
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
        return path

    @staticmethod
    def load(path: str) -> Dict[str, Any]:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
