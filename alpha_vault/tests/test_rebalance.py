"""
Rebalance 테스트

게이트 조건, 범위 배치, limit 선택, protocol fee 재스냅샷.
"""

import logging

import pytest

from ..errors import NotEligible
from ..rebalance import RebalancePhase, twap_from_cumulatives
from ..sim import SimulatedPool
from ..types import TickRange
from ..vault import AlphaVault
from .conftest import ALICE, GOVERNANCE, KEEPER, MANAGER

PERIOD = 43200


def reason_of(vault):
    with pytest.raises(NotEligible) as exc_info:
        vault.check_can_rebalance()
    return exc_info.value.reason


class TestTwap:

    def test_truncates_toward_zero(self):
        assert twap_from_cumulatives(0, -125, 60) == -2
        assert twap_from_cumulatives(0, 125, 60) == 2

    def test_vault_twap_follows_pool(self, vault, pool, chain):
        chain.advance(60)
        pool.move_tick(600)
        chain.advance(30)
        # 지난 60초 중 30초는 0, 30초는 600
        assert vault.get_twap() == 300


class TestLayout:

    def test_first_rebalance_ranges(self, funded_vault, pool):
        ranges = funded_vault.ranges
        assert ranges.full == TickRange(-887220, 887220)
        assert ranges.base == TickRange(-3600, 3660)
        # base 에서 token0 이 먼저 소진되어 남은 token1 은 bid 로
        assert ranges.limit == TickRange(-1200, 0)

        owner = funded_vault.address
        for tick_range in ranges:
            assert pool.position(owner, tick_range.lower, tick_range.upper).liquidity > 0

    def test_full_range_weight(self, funded_vault, pool):
        owner = funded_vault.address
        full = funded_vault.ranges.full
        base = funded_vault.ranges.base
        full_liquidity = pool.position(owner, full.lower, full.upper).liquidity
        base_liquidity = pool.position(owner, base.lower, base.upper).liquidity
        assert 0 < full_liquidity < base_liquidity

    def test_zero_weight_leaves_full_range_empty(self, vault, pool, chain):
        vault.set_full_range_weight(MANAGER, 0)
        vault.deposit(ALICE, 10 ** 18, 10 ** 18, 0, 0, ALICE)
        chain.advance(60)
        vault.rebalance(KEEPER)
        full = vault.ranges.full
        assert pool.position(vault.address, full.lower, full.upper).liquidity == 0

    def test_tie_goes_to_ask(self, vault, chain, monkeypatch):
        vault.deposit(ALICE, 10 ** 18, 10 ** 18, 0, 0, ALICE)
        chain.advance(60)
        ledger = vault.ledger
        original = ledger.liquidity_for_amounts
        limit_ranges = {TickRange(-1200, 0), TickRange(60, 1260)}

        def no_limit_liquidity(tick_range, amount0, amount1):
            if tick_range in limit_ranges:
                return 0
            return original(tick_range, amount0, amount1)

        monkeypatch.setattr(ledger, "liquidity_for_amounts", no_limit_liquidity)
        vault.rebalance(KEEPER)
        assert vault.ranges.limit == TickRange(60, 1260)

    def test_rebalance_after_price_move(self, funded_vault, pool, chain):
        old_base = funded_vault.ranges.base
        chain.advance(PERIOD)
        pool.move_tick(1000)
        chain.advance(60)

        funded_vault.rebalance(KEEPER)

        assert funded_vault.ranges.base == TickRange(960 - 3600, 1020 + 3600)
        owner = funded_vault.address
        assert pool.position(owner, old_base.lower, old_base.upper).liquidity == 0
        assert funded_vault.state.clock.last_tick == 1000
        assert funded_vault.state.clock.last_timestamp == chain.timestamp

    def test_rebalance_preserves_value(self, funded_vault, pool, chain):
        before = funded_vault.get_total_amounts()
        chain.advance(PERIOD)
        funded_vault.rebalance(KEEPER)
        after = funded_vault.get_total_amounts()
        assert before[0] - 10 <= after[0] <= before[0]
        assert before[1] - 10 <= after[1] <= before[1]

    def test_phase_returns_to_idle(self, funded_vault):
        assert funded_vault.controller.phase is RebalancePhase.IDLE


class TestGate:

    def test_period(self, funded_vault, chain):
        assert not funded_vault.should_rebalance()
        assert reason_of(funded_vault) == "period"
        chain.advance(PERIOD - 1)
        assert reason_of(funded_vault) == "period"
        chain.advance(1)
        assert funded_vault.should_rebalance()

    def test_min_tick_move(self, funded_vault, chain, pool):
        funded_vault.set_min_tick_move(MANAGER, 60)
        chain.advance(PERIOD)
        assert reason_of(funded_vault) == "tick move"

        pool.move_tick(60)
        chain.advance(60)
        assert funded_vault.should_rebalance()

    def test_min_tick_move_applies_to_first_rebalance(self, vault, chain):
        vault.set_min_tick_move(MANAGER, 60)
        chain.advance(60)
        assert reason_of(vault) == "tick move"

    def test_twap_deviation(self, funded_vault, chain, pool):
        chain.advance(PERIOD)
        pool.move_tick(500)
        assert reason_of(funded_vault) == "twap deviation"

        chain.advance(60)
        assert funded_vault.should_rebalance()

    def test_price_near_boundary(self, chain, token0, token1, factory, config):
        edge = SimulatedPool(chain, token0, token1, fee=3000, tick=887272 - 3600, address="edge-pool")
        vault = AlphaVault(edge, factory, chain, config, manager=MANAGER, address="edge-vault")
        chain.advance(60)
        assert reason_of(vault) == "price near boundary"

    def test_not_eligible_leaves_state(self, funded_vault, pool):
        ranges = (funded_vault.ranges.base, funded_vault.ranges.limit)
        with pytest.raises(NotEligible):
            funded_vault.rebalance(KEEPER)
        assert (funded_vault.ranges.base, funded_vault.ranges.limit) == ranges


class TestProtocolFee:

    def test_fees_collected_on_rebalance(self, funded_vault, pool, chain):
        pool.accrue_fees(10 ** 15, 10 ** 15)
        chain.advance(PERIOD)
        funded_vault.rebalance(KEEPER)
        accrued0, accrued1 = funded_vault.accrued_protocol_fees
        assert 5 * 10 ** 13 - 10 <= accrued0 <= 5 * 10 ** 13
        assert 5 * 10 ** 13 - 10 <= accrued1 <= 5 * 10 ** 13

    def test_snapshot_refreshed_on_rebalance(self, funded_vault, factory, chain):
        factory.set_protocol_fee(GOVERNANCE, 100_000)
        assert funded_vault.protocol_fee == 50_000
        chain.advance(PERIOD)
        funded_vault.rebalance(KEEPER)
        assert funded_vault.protocol_fee == 100_000

    def test_logs(self, vault, chain, caplog):
        vault.deposit(ALICE, 10 ** 18, 10 ** 18, 0, 0, ALICE)
        chain.advance(60)
        with caplog.at_level(logging.INFO, logger="alpha_vault"):
            vault.rebalance(KEEPER)
        messages = [record.getMessage() for record in caplog.records]
        assert any(message.startswith("Snapshot") for message in messages)
        assert any(message.startswith("Rebalance") for message in messages)
