"""
Share Accounting - 지분 발행/소각 수학

예치 시 지분은 내림, 예치 수량은 올림으로 계산해 기존 보유자에게
유리하게 반올림합니다. 출금은 소각 전 총 지분 기준으로 잔고와 각 범위의
유동성/수수료를 비례 배분합니다 (모두 내림).

예치 (total0, total1 > 0):
    cross   = min(a0_desired × total1, a1_desired × total0)
    amount0 = (cross - 1) // total1 + 1
    amount1 = (cross - 1) // total0 + 1
    shares  = cross × supply // total0 // total1
"""

import logging

from .errors import ArithmeticOverflow, SlippageExceeded, SupplyCapExceeded, ZeroCross, ZeroInput
from .fees import FeeCollector
from .ledger import PositionLedger
from .math.fixed_point import mul_div, to_uint128
from .state import VaultState
from .tokens import Token
from .types import DepositResult, TickRange, WithdrawResult

logger = logging.getLogger(__name__)


def calc_shares_and_amounts(
    amount0_desired: int,
    amount1_desired: int,
    total_supply: int,
    total0: int,
    total1: int
) -> DepositResult:
    """현재 보유 비율에 맞춘 예치 수량과 발행 지분

    Args:
        amount0_desired: 예치 희망 token0
        amount1_desired: 예치 희망 token1
        total_supply: 현재 총 지분
        total0: 볼트 총 보유 token0
        total1: 볼트 총 보유 token1

    Returns:
        DepositResult(shares, amount0, amount1)

    Raises:
        ZeroCross: 희망 수량이 보유 비율에 비해 퇴화된 경우 (cross == 0)
    """
    if total_supply > 0 and total0 == 0 and total1 == 0:
        raise ArithmeticOverflow("vault has outstanding shares but no holdings")

    if total_supply == 0:
        # 첫 예치: 큰 쪽 토큰과 1:1 로 지분 단위를 정함
        amount0 = amount0_desired
        amount1 = amount1_desired
        shares = max(amount0, amount1)
    elif total0 == 0:
        amount0 = 0
        amount1 = amount1_desired
        shares = mul_div(amount1, total_supply, total1)
    elif total1 == 0:
        amount0 = amount0_desired
        amount1 = 0
        shares = mul_div(amount0, total_supply, total0)
    else:
        cross = min(amount0_desired * total1, amount1_desired * total0)
        if cross == 0:
            raise ZeroCross(
                f"desired amounts ({amount0_desired}, {amount1_desired}) "
                f"do not match holdings ratio ({total0}, {total1})"
            )
        amount0 = (cross - 1) // total1 + 1
        amount1 = (cross - 1) // total0 + 1
        shares = cross * total_supply // total0 // total1

    return DepositResult(shares, amount0, amount1)


class ShareAccounting:
    """예치/출금 흐름: 수량 계산, 토큰 이동, 지분 발행/소각"""

    def __init__(
        self,
        share_token: Token,
        ledger: PositionLedger,
        collector: FeeCollector,
        state: VaultState
    ):
        self.share_token = share_token
        self.ledger = ledger
        self.collector = collector
        self.state = state

    def deposit(
        self,
        sender: str,
        amount0_desired: int,
        amount1_desired: int,
        amount0_min: int,
        amount1_min: int,
        to: str
    ) -> DepositResult:
        if amount0_desired < 0 or amount1_desired < 0:
            raise ZeroInput("desired amounts must not be negative")
        if amount0_desired == 0 and amount1_desired == 0:
            raise ZeroInput("amount0_desired or amount1_desired must be positive")

        # 최신 수수료가 총 보유량에 반영되도록 먼저 poke
        self.ledger.poke_all()

        total_supply = self.share_token.total_supply
        total0, total1 = self.ledger.total_amounts()
        shares, amount0, amount1 = calc_shares_and_amounts(
            amount0_desired, amount1_desired, total_supply, total0, total1
        )

        if shares == 0:
            raise ZeroInput("deposit would mint zero shares")
        if amount0 < amount0_min:
            raise SlippageExceeded("amount0", amount0, amount0_min)
        if amount1 < amount1_min:
            raise SlippageExceeded("amount1", amount1, amount1_min)
        if total_supply + shares > self.state.config.max_total_supply:
            raise SupplyCapExceeded(
                f"supply {total_supply} + {shares} exceeds cap {self.state.config.max_total_supply}"
            )

        vault = self.ledger.owner
        pool = self.ledger.pool
        if amount0 > 0:
            pool.token0.transfer(sender, vault, amount0)
        if amount1 > 0:
            pool.token1.transfer(sender, vault, amount1)

        self.share_token.mint(to, shares)

        logger.info(
            "Deposit sender=%s to=%s shares=%d amount0=%d amount1=%d",
            sender, to, shares, amount0, amount1,
        )
        return DepositResult(shares, amount0, amount1)

    def withdraw(
        self,
        sender: str,
        shares: int,
        amount0_min: int,
        amount1_min: int,
        to: str
    ) -> WithdrawResult:
        if shares <= 0:
            raise ZeroInput("shares must be positive")

        total_supply = self.share_token.total_supply

        self.share_token.burn(sender, shares)

        # 유휴 잔고 비례분 (범위 회수로 잔고가 늘기 전에 계산)
        amount0 = mul_div(self.ledger.available_balance0(), shares, total_supply)
        amount1 = mul_div(self.ledger.available_balance1(), shares, total_supply)

        for tick_range in self.state.ranges:
            range0, range1 = self._burn_liquidity_share(tick_range, shares, total_supply)
            amount0 += range0
            amount1 += range1

        if amount0 < amount0_min:
            raise SlippageExceeded("amount0", amount0, amount0_min)
        if amount1 < amount1_min:
            raise SlippageExceeded("amount1", amount1, amount1_min)

        vault = self.ledger.owner
        pool = self.ledger.pool
        if amount0 > 0:
            pool.token0.transfer(vault, to, amount0)
        if amount1 > 0:
            pool.token1.transfer(vault, to, amount1)

        logger.info(
            "Withdraw sender=%s to=%s shares=%d amount0=%d amount1=%d",
            sender, to, shares, amount0, amount1,
        )
        return WithdrawResult(amount0, amount1)

    def _burn_liquidity_share(self, tick_range: TickRange, shares: int, total_supply: int):
        """범위 유동성의 지분 비례분을 회수하고 (원금 + 수수료 비례분) 반환"""
        total_liquidity = self.ledger.liquidity(tick_range)
        liquidity = mul_div(total_liquidity, shares, total_supply)
        if liquidity == 0:
            return 0, 0

        result = self.collector.burn_and_collect(tick_range, to_uint128(liquidity))
        amount0 = result.burned0 + mul_div(result.fees_to_vault0, shares, total_supply)
        amount1 = result.burned1 + mul_div(result.fees_to_vault1, shares, total_supply)
        return amount0, amount1
