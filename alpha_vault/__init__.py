"""
Alpha Vault - 집중 유동성 풀링 볼트

Modules:
- vault: 공개 연산 (예치, 출금, 리밸런스, 관리)
- shares / fees / ledger / rebalance: 볼트 내부 회계
- geometry: 틱 정렬과 범위 배치
- math: 정수 정밀도 유동성/틱/수수료 수학
- sim: 인메모리 풀과 팩토리
"""

from .chain import Chain
from .config import VaultConfig, settings
from .errors import (
    VaultError,
    InvalidConfig,
    ZeroInput,
    InvalidRecipient,
    SlippageExceeded,
    ZeroCross,
    SupplyCapExceeded,
    NotEligible,
    Unauthorized,
    ArithmeticOverflow,
    ReentrantCall,
    InvalidToken,
)
from .tokens import Token
from .types import TickRange, DepositResult, WithdrawResult
from .vault import AlphaVault

__version__ = "0.1.0"
