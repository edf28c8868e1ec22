"""
Fee Collector - 유동성 회수, 수수료 수령, protocol fee 분배

collect 로 받은 토큰 중 burn 원금을 뺀 나머지가 수수료입니다.
수수료는 볼트에 스냅샷된 protocol fee 비율로 나뉘며, protocol 몫은
accrued_protocol_fees 에 적립되어 governance 가 인출할 때까지 볼트 잔고에 남습니다.

분배:
    fees_to_protocol = fees × f / 1e6   (내림)
    fees_to_vault    = fees - fees_to_protocol
"""

import logging
from typing import Tuple

from .constants import FEE_SCALE, UINT128_MAX
from .ledger import PositionLedger
from .math.fixed_point import checked_sub, mul_div
from .state import VaultState
from .types import BurnCollectResult, TickRange

logger = logging.getLogger(__name__)


def split_protocol_fee(fees: int, protocol_fee: int) -> Tuple[int, int]:
    """수수료를 (볼트 몫, protocol 몫) 으로 분배

    Example:
        >>> split_protocol_fee(1_000_000, 50_000)
        (950000, 50000)
    """
    to_protocol = mul_div(fees, protocol_fee, FEE_SCALE)
    return fees - to_protocol, to_protocol


class FeeCollector:
    """burn + collect 와 protocol fee 적립"""

    def __init__(self, ledger: PositionLedger, state: VaultState):
        self.ledger = ledger
        self.state = state

    def burn_and_collect(self, tick_range: TickRange, liquidity: int) -> BurnCollectResult:
        """범위에서 liquidity 를 회수하고 미수령 토큰 전부를 수령

        범위를 완전히 빠져나올 때는 기록된 전체 유동성을, 출금 시에는
        지분 비례 유동성을 넘깁니다. liquidity 가 0 이어도 쌓인 수수료는 수령합니다.

        Args:
            tick_range: 대상 범위
            liquidity: 회수할 유동성 (0 가능)

        Returns:
            BurnCollectResult(burned0, burned1, fees_to_vault0, fees_to_vault1)
        """
        pool = self.ledger.pool
        owner = self.ledger.owner

        burned0 = burned1 = 0
        if liquidity > 0:
            burned0, burned1 = pool.burn(owner, tick_range.lower, tick_range.upper, liquidity)

        collected0, collected1 = pool.collect(
            owner, owner, tick_range.lower, tick_range.upper, UINT128_MAX, UINT128_MAX
        )

        fees0 = checked_sub(collected0, burned0)
        fees1 = checked_sub(collected1, burned1)

        protocol_fee = self.state.protocol_fee
        fees_to_vault0, fees_to_protocol0 = split_protocol_fee(fees0, protocol_fee)
        fees_to_vault1, fees_to_protocol1 = split_protocol_fee(fees1, protocol_fee)
        self.state.accrued_protocol_fees_0 += fees_to_protocol0
        self.state.accrued_protocol_fees_1 += fees_to_protocol1

        logger.info(
            "CollectFees range=[%d, %d] vault=(%d, %d) protocol=(%d, %d)",
            tick_range.lower, tick_range.upper,
            fees_to_vault0, fees_to_vault1, fees_to_protocol0, fees_to_protocol1,
        )
        return BurnCollectResult(burned0, burned1, fees_to_vault0, fees_to_vault1)
