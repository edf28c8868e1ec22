"""
Position Ledger - 볼트 포지션 조회와 총 보유량 계산

풀에 기록된 볼트의 full / base / limit 유동성을 읽고, 지금 가격에서
청산했을 때 받을 토큰 수량을 계산합니다.

총 보유량:
    total = (잔고 - 누적 protocol fee)
          + Σ_range [ amounts(L_range) + owed_range × (1e6 - protocol_fee) / 1e6 ]
"""

from typing import Tuple

from .constants import FEE_SCALE
from .interfaces import Pool
from .math.fixed_point import checked_sub, mul_div, to_uint128
from .math.liquidity_math import get_amounts_for_liquidity, get_liquidity_for_amounts
from .math.tick_math import get_sqrt_ratio_at_tick
from .state import VaultState
from .types import PositionInfo, TickRange


class PositionLedger:
    """Pool capability 위의 볼트 포지션 회계

    사용법:
        ledger = PositionLedger(pool, vault_address, state)
        ledger.poke(state.ranges.base)
        total0, total1 = ledger.total_amounts()
    """

    def __init__(self, pool: Pool, owner: str, state: VaultState):
        """
        Args:
            pool: 유동성을 예치할 풀
            owner: 풀에 기록되는 포지션 소유자 (볼트 주소)
            state: 범위와 protocol fee 스냅샷을 담은 볼트 상태
        """
        self.pool = pool
        self.owner = owner
        self.state = state

    def position(self, tick_range: TickRange) -> PositionInfo:
        return self.pool.position(self.owner, tick_range.lower, tick_range.upper)

    def liquidity(self, tick_range: TickRange) -> int:
        return self.position(tick_range).liquidity

    def poke(self, tick_range: TickRange) -> None:
        """유동성이 있으면 0 burn 으로 풀의 수수료 회계만 갱신"""
        if self.liquidity(tick_range) > 0:
            self.pool.burn(self.owner, tick_range.lower, tick_range.upper, 0)

    def poke_all(self) -> None:
        for tick_range in self.state.ranges:
            self.poke(tick_range)

    def available_balance0(self) -> int:
        return checked_sub(
            self.pool.token0.balance_of(self.owner), self.state.accrued_protocol_fees_0
        )

    def available_balance1(self) -> int:
        return checked_sub(
            self.pool.token1.balance_of(self.owner), self.state.accrued_protocol_fees_1
        )

    def amounts_for_liquidity(self, tick_range: TickRange, liquidity: int) -> Tuple[int, int]:
        """현재 가격에서 liquidity 를 청산하면 받을 수량 (내림)"""
        if liquidity == 0:
            return 0, 0
        _, sqrt_price_x96 = self.pool.current_tick_and_price()
        return get_amounts_for_liquidity(
            sqrt_price_x96,
            get_sqrt_ratio_at_tick(tick_range.lower),
            get_sqrt_ratio_at_tick(tick_range.upper),
            liquidity,
        )

    def liquidity_for_amounts(self, tick_range: TickRange, amount0: int, amount1: int) -> int:
        """현재 가격에서 (amount0, amount1) 로 민트 가능한 최대 유동성"""
        _, sqrt_price_x96 = self.pool.current_tick_and_price()
        liquidity = get_liquidity_for_amounts(
            sqrt_price_x96,
            get_sqrt_ratio_at_tick(tick_range.lower),
            get_sqrt_ratio_at_tick(tick_range.upper),
            amount0,
            amount1,
        )
        return to_uint128(liquidity)

    def position_amounts(self, tick_range: TickRange) -> Tuple[int, int]:
        """범위를 지금 전부 청산하면 볼트에 귀속될 수량

        기록된 유동성의 토큰 환산액 + 미수령 토큰 중 protocol 몫을 뺀 부분.
        읽기 전용입니다.
        """
        info = self.position(tick_range)
        amount0, amount1 = self.amounts_for_liquidity(tick_range, info.liquidity)

        one_minus_fee = FEE_SCALE - self.state.protocol_fee
        amount0 += mul_div(info.tokens_owed_0, one_minus_fee, FEE_SCALE)
        amount1 += mul_div(info.tokens_owed_1, one_minus_fee, FEE_SCALE)
        return amount0, amount1

    def total_amounts(self) -> Tuple[int, int]:
        """가용 잔고 + full/base/limit 포지션 환산액"""
        total0 = self.available_balance0()
        total1 = self.available_balance1()
        for tick_range in self.state.ranges:
            amount0, amount1 = self.position_amounts(tick_range)
            total0 += amount0
            total1 += amount1
        return total0, total1

    def mint(self, tick_range: TickRange, liquidity: int) -> Tuple[int, int]:
        """유동성 예치 (0 이면 풀 호출 없음)

        풀이 요구 수량을 계산해 콜백하면 볼트 잔고에서 풀로 전송합니다.
        """
        if liquidity == 0:
            return 0, 0
        return self.pool.mint(
            self.owner, tick_range.lower, tick_range.upper, liquidity, self._pay_pool
        )

    def _pay_pool(self, amount0: int, amount1: int) -> None:
        if amount0 > 0:
            self.pool.token0.transfer(self.owner, self.pool.address, amount0)
        if amount1 > 0:
            self.pool.token1.transfer(self.owner, self.pool.address, amount1)
