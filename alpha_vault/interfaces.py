"""
External capabilities consumed by the vault

The vault only talks to the AMM pool and the governance factory through
these interfaces, so any implementation (the in-memory SimulatedPool, a
scripted test double, an on-chain adapter) can be plugged in.
"""

from abc import ABC, abstractmethod
from typing import Callable, List, Sequence, Tuple

from .tokens import Token
from .types import PositionInfo

# (amount0, amount1) owed to the pool for a mint; the callee must pay them
MintCallback = Callable[[int, int], None]


class Pool(ABC):
    """Concentrated-liquidity pool capability"""

    address: str
    token0: Token
    token1: Token

    @property
    @abstractmethod
    def tick_spacing(self) -> int:
        ...

    @abstractmethod
    def current_tick_and_price(self) -> Tuple[int, int]:
        """Return (tick, sqrt_price_x96)"""

    @abstractmethod
    def observe(self, seconds_agos: Sequence[int]) -> List[int]:
        """Tick cumulatives (tick × seconds) at now - s for each s"""

    @abstractmethod
    def mint(
        self,
        owner: str,
        tick_lower: int,
        tick_upper: int,
        liquidity: int,
        callback: MintCallback
    ) -> Tuple[int, int]:
        """Add liquidity; callback must push the owed amounts before return"""

    @abstractmethod
    def burn(self, owner: str, tick_lower: int, tick_upper: int, liquidity: int) -> Tuple[int, int]:
        """Remove liquidity; amounts are credited to tokens owed, not transferred"""

    @abstractmethod
    def collect(
        self,
        owner: str,
        recipient: str,
        tick_lower: int,
        tick_upper: int,
        amount0_max: int,
        amount1_max: int
    ) -> Tuple[int, int]:
        """Transfer up to the requested owed amounts to recipient"""

    @abstractmethod
    def position(self, owner: str, tick_lower: int, tick_upper: int) -> PositionInfo:
        ...


class Factory(ABC):
    """Governance capability"""

    @abstractmethod
    def protocol_fee(self) -> int:
        """Current protocol fee on the 1e6 scale"""

    @abstractmethod
    def governance(self) -> str:
        ...
