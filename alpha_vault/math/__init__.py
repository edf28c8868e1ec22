"""
Math layer for Alpha Vault

정수 정밀도의 수학 함수들:
- fixed_point: 반올림 방향이 명시된 mul/div, 안전한 캐스팅
- tick_math: Tick → sqrtPriceX96 변환
- liquidity_math: 유동성 ↔ 토큰 수량
- fee_math: 틱/포지션 수수료 회계
"""

from .fixed_point import (
    mul_div,
    mul_div_rounding_up,
    div_rounding_up,
    trunc_div,
    checked_sub,
    to_uint128,
)
from .tick_math import (
    get_sqrt_ratio_at_tick,
    tick_to_price,
)
from .liquidity_math import (
    get_amount0_delta,
    get_amount1_delta,
    get_liquidity_for_amounts,
    get_amounts_for_liquidity,
)
from .fee_math import (
    fee_growth_inside,
    calculate_tokens_owed,
)
