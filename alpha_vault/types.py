"""
Alpha Vault 데이터 타입 정의

틱 범위, 풀 포지션 스냅샷, 볼트 연산 결과.
모든 수량 필드는 온체인 정밀도를 위해 int 타입 사용.
"""

from dataclasses import dataclass
from typing import NamedTuple


@dataclass(frozen=True)
class TickRange:
    """틱 구간 [lower, upper)

    lower == upper == 0 은 아직 배치되지 않은 범위를 뜻합니다.
    """
    lower: int
    upper: int

    def contains(self, tick: int) -> bool:
        """현재 틱에서 이 범위의 유동성이 활성 상태인지"""
        return self.lower <= tick < self.upper


UNSET_RANGE = TickRange(0, 0)


class PositionInfo(NamedTuple):
    """풀이 기록한 포지션 상태 (owner, lower, upper 단위)"""
    liquidity: int
    fee_growth_inside_0_last_x128: int
    fee_growth_inside_1_last_x128: int
    tokens_owed_0: int
    tokens_owed_1: int


EMPTY_POSITION = PositionInfo(0, 0, 0, 0, 0)


class RangeLayout(NamedTuple):
    """리밸런스 시 현재 틱 기준으로 계산한 후보 범위"""
    base: TickRange
    bid: TickRange
    ask: TickRange


class BurnCollectResult(NamedTuple):
    """burn + collect 결과 (protocol fee 차감 후)"""
    burned0: int
    burned1: int
    fees_to_vault0: int
    fees_to_vault1: int


class DepositResult(NamedTuple):
    shares: int
    amount0: int
    amount1: int


class WithdrawResult(NamedTuple):
    amount0: int
    amount1: int
