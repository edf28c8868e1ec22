"""
Rebalance Controller - 전체 유동성 재배치

상태 전이:
    IDLE → EXITING   (full/base/limit 전체 유동성 burn + 수수료 수령)
         → REPRICING (현재 틱 기준 base/bid/ask 계산)
         → DEPLOYING (full → base → bid/ask 중 유동성이 큰 쪽 순서로 민트)
         → IDLE      (범위/시계 기록, protocol fee 재스냅샷)

리밸런스 가능 조건 (모두 만족해야 함):
    1. now >= last_timestamp + period
    2. |tick - last_tick| >= min_tick_move
    3. |tick - twap| <= max_twap_deviation
    4. tick 이 MIN_TICK/MAX_TICK 에서 max(base, limit) + tick_spacing 이내가 아님
"""

import logging
from enum import Enum
from typing import Optional

from .chain import Chain
from .constants import FEE_SCALE
from .errors import NotEligible
from .fees import FeeCollector
from .geometry import layout_ranges, near_boundary
from .interfaces import Factory
from .ledger import PositionLedger
from .math.fixed_point import mul_div, to_uint128, trunc_div
from .state import VaultState

logger = logging.getLogger(__name__)


class RebalancePhase(Enum):
    IDLE = "idle"
    EXITING = "exiting"
    REPRICING = "repricing"
    DEPLOYING = "deploying"


def twap_from_cumulatives(tick_cumulative_start: int, tick_cumulative_end: int, duration: int) -> int:
    """누적 틱 차이 / 기간, 0 방향 절삭"""
    return trunc_div(tick_cumulative_end - tick_cumulative_start, duration)


class RebalanceController:
    """리밸런스 게이트와 재배치 오케스트레이션"""

    def __init__(
        self,
        ledger: PositionLedger,
        collector: FeeCollector,
        factory: Factory,
        state: VaultState,
        chain: Chain
    ):
        self.ledger = ledger
        self.collector = collector
        self.factory = factory
        self.state = state
        self.chain = chain
        self.phase = RebalancePhase.IDLE

    def get_twap(self) -> int:
        duration = self.state.config.twap_duration
        start, end = self.ledger.pool.observe([duration, 0])
        return twap_from_cumulatives(start, end, duration)

    def ineligibility(self) -> Optional[NotEligible]:
        """리밸런스할 수 없는 이유 (가능하면 None)"""
        config = self.state.config
        clock = self.state.clock
        pool = self.ledger.pool
        now = self.chain.timestamp

        if now < clock.last_timestamp + config.period:
            return NotEligible("period", f"next rebalance at {clock.last_timestamp + config.period}")

        tick, _ = pool.current_tick_and_price()
        tick_move = abs(tick - clock.last_tick)
        if tick_move < config.min_tick_move:
            return NotEligible("tick move", f"{tick_move} < {config.min_tick_move}")

        twap = self.get_twap()
        deviation = abs(tick - twap)
        if deviation > config.max_twap_deviation:
            return NotEligible("twap deviation", f"|{tick} - {twap}| > {config.max_twap_deviation}")

        if near_boundary(tick, pool.tick_spacing, config.base_threshold, config.limit_threshold):
            return NotEligible("price near boundary", f"tick {tick}")

        return None

    def check_can_rebalance(self) -> None:
        """Raises NotEligible with the first failing condition"""
        reason = self.ineligibility()
        if reason is not None:
            raise reason

    def should_rebalance(self) -> bool:
        return self.ineligibility() is None

    def rebalance(self) -> None:
        self.check_can_rebalance()
        try:
            self._rebalance()
        finally:
            self.phase = RebalancePhase.IDLE

    def _rebalance(self) -> None:
        state = self.state
        ledger = self.ledger
        pool = ledger.pool
        ranges = state.ranges

        tick, _ = pool.current_tick_and_price()

        self.phase = RebalancePhase.EXITING
        for tick_range in ranges:
            self.collector.burn_and_collect(tick_range, ledger.liquidity(tick_range))

        self.phase = RebalancePhase.REPRICING
        layout = layout_ranges(
            tick, pool.tick_spacing, state.config.base_threshold, state.config.limit_threshold
        )

        self.phase = RebalancePhase.DEPLOYING
        balance0 = ledger.available_balance0()
        balance1 = ledger.available_balance1()
        logger.info("Snapshot tick=%d balance0=%d balance1=%d", tick, balance0, balance1)

        max_full_liquidity = ledger.liquidity_for_amounts(ranges.full, balance0, balance1)
        full_liquidity = to_uint128(
            mul_div(max_full_liquidity, state.config.full_range_weight, FEE_SCALE)
        )
        ledger.mint(ranges.full, full_liquidity)

        balance0 = ledger.available_balance0()
        balance1 = ledger.available_balance1()
        base_liquidity = ledger.liquidity_for_amounts(layout.base, balance0, balance1)
        ledger.mint(layout.base, base_liquidity)

        balance0 = ledger.available_balance0()
        balance1 = ledger.available_balance1()
        bid_liquidity = ledger.liquidity_for_amounts(layout.bid, balance0, balance1)
        ask_liquidity = ledger.liquidity_for_amounts(layout.ask, balance0, balance1)
        # 동률이면 ask
        if bid_liquidity > ask_liquidity:
            limit, limit_liquidity = layout.bid, bid_liquidity
        else:
            limit, limit_liquidity = layout.ask, ask_liquidity
        ledger.mint(limit, limit_liquidity)

        ranges.base = layout.base
        ranges.limit = limit
        state.clock.last_timestamp = self.chain.timestamp
        state.clock.last_tick = tick
        state.protocol_fee = self.factory.protocol_fee()

        logger.info(
            "Rebalance tick=%d full=%d base=[%d, %d]:%d limit=[%d, %d]:%d protocol_fee=%d",
            tick, full_liquidity,
            layout.base.lower, layout.base.upper, base_liquidity,
            limit.lower, limit.upper, limit_liquidity,
            state.protocol_fee,
        )
