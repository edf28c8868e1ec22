"""
Range Geometry - 틱 정렬과 세 범위 배치

리밸런스마다 현재 틱을 기준으로 base / bid / ask 후보 범위를 계산합니다.
모든 함수는 순수 함수입니다.

배치 (tick_spacing = s):
    tick_floor = floor(tick / s) * s
    tick_ceil  = tick_floor + s
    base = [tick_floor - base_threshold, tick_ceil + base_threshold]
    bid  = [tick_floor - limit_threshold, tick_floor]
    ask  = [tick_ceil, tick_ceil + limit_threshold]

Example:
    >>> layout_ranges(12345, 60, 3600, 1200).base
    TickRange(lower=8700, upper=15960)
"""

from .constants import MIN_TICK, MAX_TICK
from .errors import InvalidConfig
from .types import RangeLayout, TickRange


def floor_tick(tick: int, tick_spacing: int) -> int:
    """틱을 tick_spacing 배수로 내림 (음의 무한대 방향)

    0 방향 절삭이 아닙니다: floor_tick(-1, 60) == -60
    """
    # Python의 floor division은 음수에서도 음의 무한대 방향
    return (tick // tick_spacing) * tick_spacing


def full_range(tick_spacing: int) -> TickRange:
    """풀 전체를 덮는 범위 (MIN_TICK/MAX_TICK을 0 방향으로 정렬)"""
    lower = -((-MIN_TICK) // tick_spacing) * tick_spacing
    upper = (MAX_TICK // tick_spacing) * tick_spacing
    return TickRange(lower, upper)


def check_threshold(threshold: int, tick_spacing: int) -> None:
    """threshold 검증

    Raises:
        InvalidConfig: threshold <= 0, > MAX_TICK, 또는 tick_spacing 배수가 아닌 경우
    """
    if threshold <= 0:
        raise InvalidConfig(f"threshold must be positive: {threshold}")
    if threshold > MAX_TICK:
        raise InvalidConfig(f"threshold exceeds MAX_TICK: {threshold}")
    if threshold % tick_spacing != 0:
        raise InvalidConfig(f"threshold {threshold} is not a multiple of tick spacing {tick_spacing}")


def layout_ranges(
    current_tick: int,
    tick_spacing: int,
    base_threshold: int,
    limit_threshold: int
) -> RangeLayout:
    """현재 틱 기준 base / bid / ask 범위 계산

    Args:
        current_tick: 풀 현재 틱
        tick_spacing: 풀 틱 간격
        base_threshold: base 범위 반폭
        limit_threshold: bid/ask 범위 폭

    Returns:
        RangeLayout(base, bid, ask)
    """
    tick_floor = floor_tick(current_tick, tick_spacing)
    tick_ceil = tick_floor + tick_spacing

    return RangeLayout(
        base=TickRange(tick_floor - base_threshold, tick_ceil + base_threshold),
        bid=TickRange(tick_floor - limit_threshold, tick_floor),
        ask=TickRange(tick_ceil, tick_ceil + limit_threshold),
    )


def near_boundary(
    tick: int,
    tick_spacing: int,
    base_threshold: int,
    limit_threshold: int
) -> bool:
    """새 범위가 MIN_TICK/MAX_TICK 밖으로 나갈 만큼 경계에 가까운지"""
    margin = max(base_threshold, limit_threshold) + tick_spacing
    return tick < MIN_TICK + margin or tick > MAX_TICK - margin
