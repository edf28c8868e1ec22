"""
Alpha Vault - 공개 연산

세 범위(full/base/limit)에 유동성을 나눠 담는 풀링 볼트.
예치자는 토큰 쌍을 넣고 총 보유량에 대한 비례 지분을 받습니다.

모든 변경 연산은:
- 첫 인자로 호출자 주소(sender)를 받고
- 재진입 플래그를 검사하며
- Chain.atomic() 안에서 실행되어 실패 시 부분 효과가 남지 않습니다.

사용법:
    vault = AlphaVault(pool, factory, chain, VaultConfig.from_settings(), manager="manager")
    shares, amount0, amount1 = vault.deposit(alice, 10**18, 10**18, 0, 0, alice)
    if vault.should_rebalance():
        vault.rebalance(keeper)
"""

import functools
import logging
from typing import Optional, Tuple

from pydantic import ValidationError

from .chain import Chain
from .config import VaultConfig
from .constants import UINT128_MAX, ZERO_ADDRESS
from .errors import (
    ArithmeticOverflow,
    InvalidConfig,
    InvalidRecipient,
    InvalidToken,
    ReentrantCall,
    Unauthorized,
)
from .fees import FeeCollector
from .geometry import check_threshold, full_range
from .interfaces import Factory, Pool
from .ledger import PositionLedger
from .math.fixed_point import checked_sub
from .rebalance import RebalanceController
from .shares import ShareAccounting
from .state import RangeSet, VaultState
from .tokens import Token
from .types import DepositResult, TickRange, WithdrawResult

logger = logging.getLogger(__name__)


def non_reentrant(method):
    """재진입 차단 + 원자적 실행"""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        if self._entered:
            raise ReentrantCall(f"{method.__name__} called during another vault operation")
        self._entered = True
        try:
            with self.chain.atomic():
                return method(self, *args, **kwargs)
        finally:
            self._entered = False

    return wrapper


class AlphaVault:
    """Pooled concentrated-liquidity vault"""

    def __init__(
        self,
        pool: Pool,
        factory: Factory,
        chain: Chain,
        config: VaultConfig,
        manager: str,
        address: str = "alpha-vault",
        name: str = "Alpha Vault",
        symbol: str = "AV"
    ):
        """
        Args:
            pool: 유동성을 배치할 풀
            factory: protocol fee 와 governance 주소 제공자
            chain: 시계와 원자적 실행 범위
            config: 초기 파라미터 (틱 간격 정렬은 여기서 검증)
            manager: 매니저 주소
            address: 볼트 주소 (풀 포지션 소유자, 토큰 잔고 보유자)

        Raises:
            InvalidConfig: threshold 가 풀 틱 간격과 맞지 않는 경우
        """
        tick_spacing = pool.tick_spacing
        check_threshold(config.base_threshold, tick_spacing)
        check_threshold(config.limit_threshold, tick_spacing)

        self.pool = pool
        self.factory = factory
        self.chain = chain
        self.address = address
        self.name = name
        self.token0 = pool.token0
        self.token1 = pool.token1
        self.shares = Token(chain, symbol, address=f"{address}:shares")

        self.state = VaultState(
            config=config.model_copy(),
            ranges=RangeSet(full=full_range(tick_spacing)),
            manager=manager,
            protocol_fee=factory.protocol_fee(),
        )
        chain.register(self.state)

        self.ledger = PositionLedger(pool, address, self.state)
        self.collector = FeeCollector(self.ledger, self.state)
        self.accounting = ShareAccounting(self.shares, self.ledger, self.collector, self.state)
        self.controller = RebalanceController(
            self.ledger, self.collector, factory, self.state, chain
        )
        self._entered = False

    def __repr__(self) -> str:
        return f"AlphaVault({self.address!r}, {self.token0.symbol}/{self.token1.symbol})"

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def config(self) -> VaultConfig:
        return self.state.config

    @property
    def ranges(self) -> RangeSet:
        return self.state.ranges

    @property
    def manager(self) -> str:
        return self.state.manager

    @property
    def pending_manager(self) -> Optional[str]:
        return self.state.pending_manager

    @property
    def protocol_fee(self) -> int:
        return self.state.protocol_fee

    @property
    def accrued_protocol_fees(self) -> Tuple[int, int]:
        return self.state.accrued_protocol_fees_0, self.state.accrued_protocol_fees_1

    def governance(self) -> str:
        return self.factory.governance()

    def total_supply(self) -> int:
        return self.shares.total_supply

    def balance_of(self, owner: str) -> int:
        return self.shares.balance_of(owner)

    def get_balance0(self) -> int:
        return self.ledger.available_balance0()

    def get_balance1(self) -> int:
        return self.ledger.available_balance1()

    def get_total_amounts(self) -> Tuple[int, int]:
        return self.ledger.total_amounts()

    def get_position_amounts(self, tick_lower: int, tick_upper: int) -> Tuple[int, int]:
        return self.ledger.position_amounts(TickRange(tick_lower, tick_upper))

    def get_twap(self) -> int:
        return self.controller.get_twap()

    def should_rebalance(self) -> bool:
        return self.controller.should_rebalance()

    def check_can_rebalance(self) -> None:
        self.controller.check_can_rebalance()

    # ------------------------------------------------------------------
    # Deposits / withdrawals
    # ------------------------------------------------------------------

    @non_reentrant
    def deposit(
        self,
        sender: str,
        amount0_desired: int,
        amount1_desired: int,
        amount0_min: int,
        amount1_min: int,
        to: str
    ) -> DepositResult:
        """토큰 쌍을 예치하고 지분 발행

        Returns:
            DepositResult(shares, amount0, amount1)

        Raises:
            ZeroInput, InvalidRecipient, ZeroCross, SlippageExceeded, SupplyCapExceeded
        """
        self._check_recipient(to)
        return self.accounting.deposit(
            sender, amount0_desired, amount1_desired, amount0_min, amount1_min, to
        )

    @non_reentrant
    def withdraw(
        self,
        sender: str,
        shares: int,
        amount0_min: int,
        amount1_min: int,
        to: str
    ) -> WithdrawResult:
        """지분을 소각하고 비례 토큰을 to 로 전송

        Raises:
            ZeroInput, InvalidRecipient, SlippageExceeded, ArithmeticOverflow
        """
        self._check_recipient(to)
        return self.accounting.withdraw(sender, shares, amount0_min, amount1_min, to)

    # ------------------------------------------------------------------
    # Rebalance
    # ------------------------------------------------------------------

    @non_reentrant
    def rebalance(self, sender: str) -> None:
        """전체 유동성 회수 후 현재 가격 기준으로 재배치

        Raises:
            NotEligible: 리밸런스 게이트 미충족
        """
        logger.debug("Rebalance requested by %s", sender)
        self.controller.rebalance()

    # ------------------------------------------------------------------
    # Governance
    # ------------------------------------------------------------------

    @non_reentrant
    def collect_protocol_fees(self, sender: str, amount0: int, amount1: int, to: str) -> None:
        """적립된 protocol fee 인출 (governance 전용)"""
        self._require(sender, self.factory.governance(), "governance")
        self._check_recipient(to)
        if amount0 < 0 or amount1 < 0:
            raise ArithmeticOverflow(f"negative collect amount: {amount0}, {amount1}")
        self.state.accrued_protocol_fees_0 = checked_sub(self.state.accrued_protocol_fees_0, amount0)
        self.state.accrued_protocol_fees_1 = checked_sub(self.state.accrued_protocol_fees_1, amount1)
        if amount0 > 0:
            self.token0.transfer(self.address, to, amount0)
        if amount1 > 0:
            self.token1.transfer(self.address, to, amount1)
        logger.info("CollectProtocol to=%s amount0=%d amount1=%d", to, amount0, amount1)

    # ------------------------------------------------------------------
    # Manager
    # ------------------------------------------------------------------

    @non_reentrant
    def sweep_foreign_token(self, sender: str, token: Token, amount: int, to: str) -> None:
        """볼트에 잘못 들어온 토큰 회수 (토큰 쌍은 불가)"""
        self._require_manager(sender)
        if token is self.token0 or token is self.token1 or token is self.shares:
            raise InvalidToken(f"cannot sweep vault token {token.symbol}")
        token.transfer(self.address, to, amount)
        logger.info("Sweep token=%s to=%s amount=%d", token.symbol, to, amount)

    @non_reentrant
    def emergency_burn(self, sender: str, tick_lower: int, tick_upper: int, liquidity: int) -> Tuple[int, int]:
        """임의 범위의 유동성을 회수해 볼트로 수령 (매니저 전용)

        수수료 분배 없이 원금과 미수령 토큰을 모두 볼트 잔고로 가져옵니다.
        """
        self._require_manager(sender)
        self.pool.burn(self.address, tick_lower, tick_upper, liquidity)
        collected = self.pool.collect(
            self.address, self.address, tick_lower, tick_upper,
            UINT128_MAX, UINT128_MAX,
        )
        logger.warning(
            "EmergencyBurn range=[%d, %d] liquidity=%d collected=%s",
            tick_lower, tick_upper, liquidity, collected,
        )
        return collected

    @non_reentrant
    def propose_manager(self, sender: str, new_manager: str) -> None:
        """매니저 이전 1단계: 후보 지정"""
        self._require_manager(sender)
        self.state.pending_manager = new_manager
        logger.info("Manager proposed: %s", new_manager)

    @non_reentrant
    def accept_manager(self, sender: str) -> None:
        """매니저 이전 2단계: 후보 본인이 수락"""
        if self.state.pending_manager is None or sender != self.state.pending_manager:
            raise Unauthorized(f"{sender} is not the pending manager")
        self.state.manager = sender
        self.state.pending_manager = None
        logger.info("Manager accepted: %s", sender)

    @non_reentrant
    def set_base_threshold(self, sender: str, threshold: int) -> None:
        self._require_manager(sender)
        check_threshold(threshold, self.pool.tick_spacing)
        self._set_config(base_threshold=threshold)

    @non_reentrant
    def set_limit_threshold(self, sender: str, threshold: int) -> None:
        self._require_manager(sender)
        check_threshold(threshold, self.pool.tick_spacing)
        self._set_config(limit_threshold=threshold)

    @non_reentrant
    def set_full_range_weight(self, sender: str, weight: int) -> None:
        self._require_manager(sender)
        self._set_config(full_range_weight=weight)

    @non_reentrant
    def set_period(self, sender: str, period: int) -> None:
        self._require_manager(sender)
        self._set_config(period=period)

    @non_reentrant
    def set_min_tick_move(self, sender: str, min_tick_move: int) -> None:
        self._require_manager(sender)
        self._set_config(min_tick_move=min_tick_move)

    @non_reentrant
    def set_max_twap_deviation(self, sender: str, max_twap_deviation: int) -> None:
        self._require_manager(sender)
        self._set_config(max_twap_deviation=max_twap_deviation)

    @non_reentrant
    def set_twap_duration(self, sender: str, twap_duration: int) -> None:
        self._require_manager(sender)
        self._set_config(twap_duration=twap_duration)

    @non_reentrant
    def set_max_total_supply(self, sender: str, max_total_supply: int) -> None:
        self._require_manager(sender)
        self._set_config(max_total_supply=max_total_supply)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _set_config(self, **values) -> None:
        try:
            for key, value in values.items():
                setattr(self.state.config, key, value)
        except ValidationError as e:
            raise InvalidConfig(str(e)) from e
        logger.info("Config updated: %s", values)

    def _check_recipient(self, to: Optional[str]) -> None:
        if not to or to == ZERO_ADDRESS or to == self.address:
            raise InvalidRecipient(f"invalid recipient: {to!r}")

    def _require(self, sender: str, expected: str, role: str) -> None:
        if sender != expected:
            raise Unauthorized(f"{sender} is not {role}")

    def _require_manager(self, sender: str) -> None:
        self._require(sender, self.state.manager, "manager")
