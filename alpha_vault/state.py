"""
Vault state aggregate

Everything the vault owns and mutates: configuration, range bounds, the
rebalance clock, the protocol fee snapshot, accrued protocol fees and the
manager handoff. Registered with the Chain so atomic() can roll it back.
"""

from dataclasses import dataclass, field
from typing import Iterator, Optional

from .chain import Stateful
from .config import VaultConfig
from .types import TickRange, UNSET_RANGE


@dataclass
class RangeSet:
    """full 은 생성 시 고정, base/limit 은 리밸런스마다 함께 갱신"""
    full: TickRange
    base: TickRange = UNSET_RANGE
    limit: TickRange = UNSET_RANGE

    def __iter__(self) -> Iterator[TickRange]:
        return iter((self.full, self.base, self.limit))


@dataclass
class RebalanceClock:
    last_timestamp: int = 0
    last_tick: int = 0


@dataclass
class VaultState(Stateful):
    config: VaultConfig
    ranges: RangeSet
    manager: str
    protocol_fee: int
    clock: RebalanceClock = field(default_factory=RebalanceClock)
    pending_manager: Optional[str] = None
    accrued_protocol_fees_0: int = 0
    accrued_protocol_fees_1: int = 0
