"""
Liquidity Math - 유동성 ↔ 토큰 수량 환산

볼트의 세 포지션(full/base/limit)에 대해:
- 보유 잔고로 민트 가능한 최대 유동성 (리밸런스 배치 단계)
- 기록된 유동성을 지금 가격에서 청산하면 받을 토큰 수량 (총 보유량 계산)

핵심 공식:
    L = Δy / (√P_upper - √P_lower)          # token1 기준
    L = Δx / (1/√P_lower - 1/√P_upper)      # token0 기준

반올림: 민트 시 풀이 요구하는 수량은 올림, 청산 수량은 내림.
"""

from typing import Tuple

from ..constants import Q96
from .fixed_point import div_rounding_up, mul_div_rounding_up


def get_amount0_delta(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
    round_up: bool = True
) -> int:
    """두 가격 사이 유동성에 해당하는 token0 양

    공식: Δx = L * (√P_b - √P_a) / (√P_a * √P_b)

    Args:
        sqrt_ratio_a_x96: 하한 sqrtPriceX96
        sqrt_ratio_b_x96: 상한 sqrtPriceX96
        liquidity: 유동성
        round_up: True면 올림, False면 내림

    Returns:
        amount0 (최소 단위)
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    numerator1 = liquidity << 96
    numerator2 = sqrt_ratio_b_x96 - sqrt_ratio_a_x96

    if round_up:
        return div_rounding_up(
            mul_div_rounding_up(numerator1, numerator2, sqrt_ratio_b_x96),
            sqrt_ratio_a_x96
        )
    return (numerator1 * numerator2 // sqrt_ratio_b_x96) // sqrt_ratio_a_x96


def get_amount1_delta(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
    round_up: bool = True
) -> int:
    """두 가격 사이 유동성에 해당하는 token1 양

    공식: Δy = L * (√P_b - √P_a)
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if round_up:
        return div_rounding_up(liquidity * (sqrt_ratio_b_x96 - sqrt_ratio_a_x96), Q96)
    return liquidity * (sqrt_ratio_b_x96 - sqrt_ratio_a_x96) // Q96


def get_liquidity_for_amount0(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, amount0: int) -> int:
    """token0 양으로 얻을 수 있는 최대 유동성"""
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96
    if sqrt_ratio_b_x96 <= sqrt_ratio_a_x96:
        return 0

    intermediate = sqrt_ratio_a_x96 * sqrt_ratio_b_x96 // Q96
    return amount0 * intermediate // (sqrt_ratio_b_x96 - sqrt_ratio_a_x96)


def get_liquidity_for_amount1(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, amount1: int) -> int:
    """token1 양으로 얻을 수 있는 최대 유동성"""
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96
    if sqrt_ratio_b_x96 <= sqrt_ratio_a_x96:
        return 0

    return amount1 * Q96 // (sqrt_ratio_b_x96 - sqrt_ratio_a_x96)


def get_liquidity_for_amounts(
    sqrt_ratio_x96: int,
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    amount0: int,
    amount1: int
) -> int:
    """현재 가격에서 두 토큰 잔고로 민트 가능한 최대 유동성

    Args:
        sqrt_ratio_x96: 현재 sqrtPriceX96
        sqrt_ratio_a_x96: 하한 sqrtPriceX96
        sqrt_ratio_b_x96: 상한 sqrtPriceX96
        amount0: 사용 가능한 token0
        amount1: 사용 가능한 token1

    Returns:
        유동성 (두 제약 조건 중 작은 값)
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if sqrt_ratio_x96 <= sqrt_ratio_a_x96:
        # 가격이 범위 아래: token0만 사용
        return get_liquidity_for_amount0(sqrt_ratio_a_x96, sqrt_ratio_b_x96, amount0)

    elif sqrt_ratio_x96 < sqrt_ratio_b_x96:
        liquidity0 = get_liquidity_for_amount0(sqrt_ratio_x96, sqrt_ratio_b_x96, amount0)
        liquidity1 = get_liquidity_for_amount1(sqrt_ratio_a_x96, sqrt_ratio_x96, amount1)
        return min(liquidity0, liquidity1)

    else:
        # 가격이 범위 위: token1만 사용
        return get_liquidity_for_amount1(sqrt_ratio_a_x96, sqrt_ratio_b_x96, amount1)


def get_amounts_for_liquidity(
    sqrt_ratio_x96: int,
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
    round_up: bool = False
) -> Tuple[int, int]:
    """유동성을 현재 가격에서 토큰 수량으로 환산

    Args:
        sqrt_ratio_x96: 현재 sqrtPriceX96
        sqrt_ratio_a_x96: 하한 sqrtPriceX96
        sqrt_ratio_b_x96: 상한 sqrtPriceX96
        liquidity: 유동성
        round_up: 민트 수량 계산이면 True (풀 쪽에 유리하게 올림)

    Returns:
        (amount0, amount1) 튜플
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if sqrt_ratio_x96 <= sqrt_ratio_a_x96:
        amount0 = get_amount0_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity, round_up)
        amount1 = 0

    elif sqrt_ratio_x96 < sqrt_ratio_b_x96:
        amount0 = get_amount0_delta(sqrt_ratio_x96, sqrt_ratio_b_x96, liquidity, round_up)
        amount1 = get_amount1_delta(sqrt_ratio_a_x96, sqrt_ratio_x96, liquidity, round_up)

    else:
        amount0 = 0
        amount1 = get_amount1_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity, round_up)

    return amount0, amount1
