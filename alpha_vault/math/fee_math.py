"""
Fee Math - 틱/포지션 단위 수수료 회계

시뮬레이션 풀이 포지션별 미수령 수수료(tokensOwed)를 계산할 때 사용.
볼트 쪽 protocol fee 분배는 alpha_vault.fees 에 있습니다.

핵심 공식:
    f_a(i) = f_g - f_o(i)  if i_c >= i else f_o(i)      # 틱 i 위 수수료
    f_b(i) = f_o(i)        if i_c >= i else f_g - f_o(i) # 틱 i 아래 수수료
    f_r = f_g - f_b(i_l) - f_a(i_u)                      # 범위 내 수수료
    tokensOwed += l × (f_r(t_1) - f_r(t_0)) / 2^128
"""

from ..constants import Q128


def fee_growth_above(
    tick_idx: int,
    current_tick: int,
    fee_growth_global: int,
    fee_growth_outside: int
) -> int:
    """틱 위에서 발생한 수수료 성장률 (f_a)"""
    if current_tick >= tick_idx:
        return fee_growth_global - fee_growth_outside
    else:
        return fee_growth_outside


def fee_growth_below(
    tick_idx: int,
    current_tick: int,
    fee_growth_global: int,
    fee_growth_outside: int
) -> int:
    """틱 아래에서 발생한 수수료 성장률 (f_b)"""
    if current_tick >= tick_idx:
        return fee_growth_outside
    else:
        return fee_growth_global - fee_growth_outside


def fee_growth_inside(
    tick_lower: int,
    tick_upper: int,
    current_tick: int,
    fee_growth_global: int,
    fee_growth_outside_lower: int,
    fee_growth_outside_upper: int
) -> int:
    """범위 내 fee growth 계산 (f_r)

    Args:
        tick_lower: 하한 틱 (i_l)
        tick_upper: 상한 틱 (i_u)
        current_tick: 현재 틱 (i_c)
        fee_growth_global: 전역 fee growth (f_g)
        fee_growth_outside_lower: 하한 틱의 fee growth outside
        fee_growth_outside_upper: 상한 틱의 fee growth outside

    Returns:
        범위 내 fee growth (f_r), uint256 랩어라운드 적용
    """
    f_b = fee_growth_below(tick_lower, current_tick, fee_growth_global, fee_growth_outside_lower)
    f_a = fee_growth_above(tick_upper, current_tick, fee_growth_global, fee_growth_outside_upper)

    result = fee_growth_global - f_b - f_a

    # Python에서 음수가 될 수 있으므로 256비트 랩어라운드 시뮬레이션
    if result < 0:
        result += 2 ** 256

    return result


def calculate_fee_growth_delta(fee_growth_current: int, fee_growth_previous: int) -> int:
    """두 시점 간 fee growth 변화량 (uint256 랩어라운드)"""
    delta = fee_growth_current - fee_growth_previous
    if delta < 0:
        delta += 2 ** 256
    return delta


def calculate_tokens_owed(
    liquidity: int,
    fee_growth_inside_current: int,
    fee_growth_inside_last: int
) -> int:
    """마지막 업데이트 이후 포지션에 쌓인 수수료 (토큰 최소 단위, 내림)

    Args:
        liquidity: 포지션 유동성 (l)
        fee_growth_inside_current: 현재 범위 내 fee growth (f_r(t_1))
        fee_growth_inside_last: 마지막 업데이트 시 fee growth (f_r(t_0))
    """
    delta = calculate_fee_growth_delta(fee_growth_inside_current, fee_growth_inside_last)
    return liquidity * delta // Q128
