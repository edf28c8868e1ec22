"""
Fee Math 테스트

백서 Section 6.3, 6.4 기반 수수료 계산 함수들을 테스트합니다.
"""

import pytest

from ..math.fee_math import (
    fee_growth_above,
    fee_growth_below,
    fee_growth_inside,
    calculate_fee_growth_delta,
    calculate_tokens_owed,
)
from ..constants import Q128


class TestFeeGrowthAboveBelow:
    """fee_growth_above (f_a), fee_growth_below (f_b) 테스트"""

    def test_above_when_current_at_or_above(self):
        """i_c >= i 이면 f_a = f_g - f_o"""
        assert fee_growth_above(tick_idx=100, current_tick=150,
                                fee_growth_global=1000, fee_growth_outside=300) == 700
        assert fee_growth_above(tick_idx=100, current_tick=100,
                                fee_growth_global=1000, fee_growth_outside=300) == 700

    def test_above_when_current_below(self):
        assert fee_growth_above(tick_idx=100, current_tick=50,
                                fee_growth_global=1000, fee_growth_outside=300) == 300

    def test_below_when_current_at_or_above(self):
        assert fee_growth_below(tick_idx=100, current_tick=100,
                                fee_growth_global=1000, fee_growth_outside=300) == 300

    def test_below_when_current_below(self):
        assert fee_growth_below(tick_idx=100, current_tick=50,
                                fee_growth_global=1000, fee_growth_outside=300) == 700


class TestFeeGrowthInside:
    """fee_growth_inside 테스트 (f_r)

    f_r = f_g - f_b(i_l) - f_a(i_u)
    """

    def test_current_tick_in_range(self):
        # f_b = 100, f_a = 200 → f_r = 1000 - 100 - 200
        result = fee_growth_inside(
            tick_lower=100, tick_upper=200, current_tick=150,
            fee_growth_global=1000,
            fee_growth_outside_lower=100,
            fee_growth_outside_upper=200
        )
        assert result == 700

    def test_current_tick_below_range_wraps(self):
        # f_b(100) = 900, f_a(200) = 200 → -100 → 2^256 래핑
        result = fee_growth_inside(
            tick_lower=100, tick_upper=200, current_tick=50,
            fee_growth_global=1000,
            fee_growth_outside_lower=100,
            fee_growth_outside_upper=200
        )
        assert result == 2**256 - 100

    def test_current_tick_above_range(self):
        result = fee_growth_inside(
            tick_lower=100, tick_upper=200, current_tick=250,
            fee_growth_global=1000,
            fee_growth_outside_lower=100,
            fee_growth_outside_upper=200
        )
        assert result == 100


class TestTokensOwed:
    """calculate_fee_growth_delta, calculate_tokens_owed 테스트"""

    def test_normal_delta(self):
        assert calculate_fee_growth_delta(1000, 500) == 500

    def test_underflow_wraparound(self):
        assert calculate_fee_growth_delta(100, 200) == 2**256 - 100

    def test_tokens_owed(self):
        """l × Δf_r / 2^128"""
        liquidity = 10**18
        assert calculate_tokens_owed(liquidity, 5 * Q128, 2 * Q128) == 3 * 10**18

    def test_tokens_owed_rounds_down(self):
        assert calculate_tokens_owed(3, Q128 // 2, 0) == 1

    def test_tokens_owed_across_wrap(self):
        """래핑된 inside 값 사이의 증가분도 정확히 계산"""
        last = 2**256 - Q128
        current = Q128
        assert calculate_tokens_owed(7, current, last) == 14

    def test_zero_liquidity(self):
        assert calculate_tokens_owed(0, 5 * Q128, 0) == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
