# merak_bot/models.py
import enum
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

SUCCESS = "success"
FAILURE = "failure"


class OperationKind(str, enum.Enum):
    WRAP = "wrap"
    SWAP = "swap"
    LIQUIDITY = "liquidity"


@dataclass(frozen=True)
class TransactionOutcome:
    status: str
    tx_hash: Optional[str] = None
    error: Optional[str] = None
    payload: Optional[Dict[str, Any]] = None

    @property
    def ok(self) -> bool:
        return self.status == SUCCESS

    @classmethod
    def success(cls, tx_hash: Optional[str] = None, payload: Optional[Dict[str, Any]] = None):
        return cls(SUCCESS, tx_hash=tx_hash, payload=payload)

    @classmethod
    def failure(cls, error: str, tx_hash: Optional[str] = None, payload: Optional[Dict[str, Any]] = None):
        return cls(FAILURE, tx_hash=tx_hash, error=error, payload=payload)


Action = Callable[[], Awaitable[TransactionOutcome]]


@dataclass(frozen=True)
class OperationSpec:
    name: str
    label: str
    kind: OperationKind
    execute: Action
    enabled: bool = True
    critical: bool = False


@dataclass
class RunStats:
    """Counters for one wallet (WalletStats) or the whole run (GlobalStats).

    Disabled operations are counted in ``total`` and ``skipped`` only, so
    ``total == successful + failed + skipped`` always holds and
    ``total == successful + failed`` whenever nothing was skipped.
    """
    total: int = 0
    successful: int = 0
    failed: int = 0
    skipped: int = 0

    @property
    def executed(self) -> int:
        return self.successful + self.failed

    def add(self, other: "RunStats") -> "RunStats":
        self.total += other.total
        self.successful += other.successful
        self.failed += other.failed
        self.skipped += other.skipped
        return self


WalletStats = RunStats
GlobalStats = RunStats
