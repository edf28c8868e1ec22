"""
Simulated Pool - 결정적 인메모리 집중 유동성 풀

볼트 테스트와 시뮬레이션에 쓰는 Pool capability 구현.

구현 범위:
- 틱별 liquidity_gross / liquidity_net / fee_growth_outside (백서 Section 6.3)
- 포지션별 fee_growth_inside_last / tokens_owed (백서 Section 6.4)
- 틱 누적값 오라클 (TWAP 용)
- move_tick(): 틱 크로싱을 포함한 가격 이동 (토큰 교환 없음)
- accrue_fees(): 활성 유동성에 스왑 수수료 분배

가격 이동은 토큰 교환 없이 틱만 바꾸므로, 포지션 구성 변화분은
풀이 보유한 준비금(reserve)에서 지급됩니다. 테스트에서는 풀 주소로
충분한 토큰을 먼저 mint 해 두세요.
"""

import bisect
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from ..chain import Chain, Stateful
from ..constants import MIN_TICK, MAX_TICK, Q128, TICK_SPACINGS
from ..interfaces import MintCallback, Pool
from ..math.fee_math import calculate_tokens_owed, fee_growth_inside
from ..math.liquidity_math import get_amounts_for_liquidity
from ..math.tick_math import get_sqrt_ratio_at_tick
from ..tokens import Token
from ..types import EMPTY_POSITION, PositionInfo


@dataclass
class TickState:
    """Tick-Indexed State"""
    liquidity_gross: int = 0
    liquidity_net: int = 0
    fee_growth_outside_0_x128: int = 0
    fee_growth_outside_1_x128: int = 0


@dataclass
class PositionState:
    """Position-Indexed State"""
    liquidity: int = 0
    fee_growth_inside_0_last_x128: int = 0
    fee_growth_inside_1_last_x128: int = 0
    tokens_owed_0: int = 0
    tokens_owed_1: int = 0


class SimulatedPool(Stateful, Pool):
    """인메모리 풀

    사용법:
        pool = SimulatedPool(chain, token0, token1, fee=3000, tick=0)
        token0.mint(pool.address, 10**30)   # 가격 이동용 준비금
        pool.move_tick(600)
        pool.accrue_fees(10**15, 10**15)
    """

    _transient = ("chain", "token0", "token1")

    def __init__(
        self,
        chain: Chain,
        token0: Token,
        token1: Token,
        fee: int = 3000,
        tick: int = 0,
        address: str = "pool"
    ):
        if fee not in TICK_SPACINGS:
            raise ValueError(f"unsupported fee tier: {fee}")
        if tick < MIN_TICK or tick > MAX_TICK:
            raise ValueError(f"tick out of range: {tick}")

        self.chain = chain
        self.token0 = token0
        self.token1 = token1
        self.address = address
        self.fee = fee
        self._tick_spacing = TICK_SPACINGS[fee]

        self.tick = tick
        self.sqrt_price_x96 = get_sqrt_ratio_at_tick(tick)
        self.liquidity = 0
        self.fee_growth_global_0_x128 = 0
        self.fee_growth_global_1_x128 = 0
        self.ticks: Dict[int, TickState] = {}
        self.positions: Dict[Tuple[str, int, int], PositionState] = {}

        # (timestamp, tick_cumulative), timestamp 오름차순
        self.observations: List[Tuple[int, int]] = [(chain.timestamp, 0)]

        chain.register(self)

    # ------------------------------------------------------------------
    # Pool capability
    # ------------------------------------------------------------------

    @property
    def tick_spacing(self) -> int:
        return self._tick_spacing

    def current_tick_and_price(self) -> Tuple[int, int]:
        return self.tick, self.sqrt_price_x96

    def observe(self, seconds_agos: Sequence[int]) -> List[int]:
        """각 seconds_ago 시점의 틱 누적값

        Raises:
            ValueError: 첫 관측 이전 시점을 요청한 경우
        """
        now = self.chain.timestamp
        return [self._tick_cumulative_at(now - seconds_ago) for seconds_ago in seconds_agos]

    def mint(
        self,
        owner: str,
        tick_lower: int,
        tick_upper: int,
        liquidity: int,
        callback: MintCallback
    ) -> Tuple[int, int]:
        self._check_ticks(tick_lower, tick_upper)
        if liquidity <= 0:
            raise ValueError(f"mint liquidity must be positive: {liquidity}")

        self._modify_position(owner, tick_lower, tick_upper, liquidity)
        amount0, amount1 = self._amounts_for_liquidity(tick_lower, tick_upper, liquidity, round_up=True)

        balance0_before = self.token0.balance_of(self.address)
        balance1_before = self.token1.balance_of(self.address)
        callback(amount0, amount1)
        if self.token0.balance_of(self.address) < balance0_before + amount0:
            raise ValueError(f"mint callback paid less than {amount0} token0")
        if self.token1.balance_of(self.address) < balance1_before + amount1:
            raise ValueError(f"mint callback paid less than {amount1} token1")

        return amount0, amount1

    def burn(self, owner: str, tick_lower: int, tick_upper: int, liquidity: int) -> Tuple[int, int]:
        self._check_ticks(tick_lower, tick_upper)
        key = (owner, tick_lower, tick_upper)
        position = self.positions.get(key)
        if position is None:
            raise ValueError(f"no position for {key}")
        if liquidity > position.liquidity:
            raise ValueError(f"burn {liquidity} exceeds position liquidity {position.liquidity}")

        self._modify_position(owner, tick_lower, tick_upper, -liquidity)
        amount0, amount1 = self._amounts_for_liquidity(tick_lower, tick_upper, liquidity, round_up=False)
        position.tokens_owed_0 += amount0
        position.tokens_owed_1 += amount1
        return amount0, amount1

    def collect(
        self,
        owner: str,
        recipient: str,
        tick_lower: int,
        tick_upper: int,
        amount0_max: int,
        amount1_max: int
    ) -> Tuple[int, int]:
        position = self.positions.get((owner, tick_lower, tick_upper))
        if position is None:
            return 0, 0

        amount0 = min(amount0_max, position.tokens_owed_0)
        amount1 = min(amount1_max, position.tokens_owed_1)
        position.tokens_owed_0 -= amount0
        position.tokens_owed_1 -= amount1
        if amount0 > 0:
            self.token0.transfer(self.address, recipient, amount0)
        if amount1 > 0:
            self.token1.transfer(self.address, recipient, amount1)
        return amount0, amount1

    def position(self, owner: str, tick_lower: int, tick_upper: int) -> PositionInfo:
        position = self.positions.get((owner, tick_lower, tick_upper))
        if position is None:
            return EMPTY_POSITION
        return PositionInfo(
            position.liquidity,
            position.fee_growth_inside_0_last_x128,
            position.fee_growth_inside_1_last_x128,
            position.tokens_owed_0,
            position.tokens_owed_1,
        )

    # ------------------------------------------------------------------
    # Market simulation
    # ------------------------------------------------------------------

    def move_tick(self, new_tick: int) -> None:
        """가격을 new_tick 으로 이동 (사이의 초기화된 틱을 모두 크로싱)"""
        if new_tick < MIN_TICK or new_tick > MAX_TICK:
            raise ValueError(f"tick out of range: {new_tick}")

        self._write_observation()

        if new_tick > self.tick:
            for tick_idx in sorted(self.ticks):
                if self.tick < tick_idx <= new_tick:
                    self._cross(tick_idx)
                    self.liquidity += self.ticks[tick_idx].liquidity_net
        elif new_tick < self.tick:
            for tick_idx in sorted(self.ticks, reverse=True):
                if new_tick < tick_idx <= self.tick:
                    self._cross(tick_idx)
                    self.liquidity -= self.ticks[tick_idx].liquidity_net

        self.tick = new_tick
        self.sqrt_price_x96 = get_sqrt_ratio_at_tick(new_tick)

    def accrue_fees(self, amount0: int, amount1: int) -> bool:
        """활성 유동성에 스왑 수수료 분배

        Returns:
            활성 유동성이 없어 분배하지 못했으면 False
        """
        if self.liquidity == 0:
            return False
        self.fee_growth_global_0_x128 += amount0 * Q128 // self.liquidity
        self.fee_growth_global_1_x128 += amount1 * Q128 // self.liquidity
        return True

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _check_ticks(self, tick_lower: int, tick_upper: int) -> None:
        if tick_lower >= tick_upper:
            raise ValueError(f"tick_lower must be below tick_upper: [{tick_lower}, {tick_upper}]")
        if tick_lower < MIN_TICK or tick_upper > MAX_TICK:
            raise ValueError(f"ticks out of range: [{tick_lower}, {tick_upper}]")
        if tick_lower % self._tick_spacing or tick_upper % self._tick_spacing:
            raise ValueError(f"ticks not aligned to spacing {self._tick_spacing}")

    def _amounts_for_liquidity(self, tick_lower: int, tick_upper: int, liquidity: int, round_up: bool):
        return get_amounts_for_liquidity(
            self.sqrt_price_x96,
            get_sqrt_ratio_at_tick(tick_lower),
            get_sqrt_ratio_at_tick(tick_upper),
            liquidity,
            round_up=round_up,
        )

    def _update_tick(self, tick_idx: int, liquidity_delta: int, upper: bool) -> None:
        state = self.ticks.get(tick_idx)
        if state is None:
            state = TickState()
            # 규약: 현재 틱 이하에서 초기화되면 지금까지의 성장은 모두 "아래"에서 발생한 것으로 간주
            if tick_idx <= self.tick:
                state.fee_growth_outside_0_x128 = self.fee_growth_global_0_x128
                state.fee_growth_outside_1_x128 = self.fee_growth_global_1_x128
            self.ticks[tick_idx] = state

        state.liquidity_gross += liquidity_delta
        state.liquidity_net += -liquidity_delta if upper else liquidity_delta

        if state.liquidity_gross == 0:
            del self.ticks[tick_idx]

    def _fee_growth_inside(self, tick_lower: int, tick_upper: int) -> Tuple[int, int]:
        lower = self.ticks.get(tick_lower, TickState())
        upper = self.ticks.get(tick_upper, TickState())
        inside0 = fee_growth_inside(
            tick_lower, tick_upper, self.tick, self.fee_growth_global_0_x128,
            lower.fee_growth_outside_0_x128, upper.fee_growth_outside_0_x128,
        )
        inside1 = fee_growth_inside(
            tick_lower, tick_upper, self.tick, self.fee_growth_global_1_x128,
            lower.fee_growth_outside_1_x128, upper.fee_growth_outside_1_x128,
        )
        return inside0, inside1

    def _modify_position(self, owner: str, tick_lower: int, tick_upper: int, liquidity_delta: int) -> None:
        key = (owner, tick_lower, tick_upper)
        position = self.positions.setdefault(key, PositionState())

        if liquidity_delta > 0:
            self._update_tick(tick_lower, liquidity_delta, upper=False)
            self._update_tick(tick_upper, liquidity_delta, upper=True)

        inside0, inside1 = self._fee_growth_inside(tick_lower, tick_upper)
        position.tokens_owed_0 += calculate_tokens_owed(
            position.liquidity, inside0, position.fee_growth_inside_0_last_x128
        )
        position.tokens_owed_1 += calculate_tokens_owed(
            position.liquidity, inside1, position.fee_growth_inside_1_last_x128
        )
        position.fee_growth_inside_0_last_x128 = inside0
        position.fee_growth_inside_1_last_x128 = inside1
        position.liquidity += liquidity_delta

        # 제거는 fee growth 계산 이후 (틱 삭제 시 outside 값이 사라지므로)
        if liquidity_delta < 0:
            self._update_tick(tick_lower, liquidity_delta, upper=False)
            self._update_tick(tick_upper, liquidity_delta, upper=True)

        if tick_lower <= self.tick < tick_upper:
            self.liquidity += liquidity_delta

    def _cross(self, tick_idx: int) -> None:
        state = self.ticks[tick_idx]
        state.fee_growth_outside_0_x128 = self.fee_growth_global_0_x128 - state.fee_growth_outside_0_x128
        state.fee_growth_outside_1_x128 = self.fee_growth_global_1_x128 - state.fee_growth_outside_1_x128

    def _write_observation(self) -> None:
        now = self.chain.timestamp
        last_timestamp, last_cumulative = self.observations[-1]
        if now == last_timestamp:
            return
        self.observations.append((now, last_cumulative + self.tick * (now - last_timestamp)))

    def _tick_cumulative_at(self, target: int) -> int:
        first_timestamp = self.observations[0][0]
        if target < first_timestamp:
            raise ValueError(f"observation too old: {target} < {first_timestamp}")

        last_timestamp, last_cumulative = self.observations[-1]
        if target >= last_timestamp:
            return last_cumulative + self.tick * (target - last_timestamp)

        timestamps = [timestamp for timestamp, _ in self.observations]
        i = bisect.bisect_right(timestamps, target) - 1
        before_timestamp, before_cumulative = self.observations[i]
        after_timestamp, after_cumulative = self.observations[i + 1]
        # 두 관측 사이 틱은 일정
        tick = (after_cumulative - before_cumulative) // (after_timestamp - before_timestamp)
        return before_cumulative + tick * (target - before_timestamp)
