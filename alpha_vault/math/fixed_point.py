"""
Fixed Point Math - 정수 곱셈/나눗셈과 안전한 캐스팅

Solidity uint256 연산을 Python int로 옮길 때 필요한 보조 함수들.
Python int는 오버플로우가 없으므로 mul_div는 중간값 정밀도 손실 없이 계산됩니다.
대신 unsigned 폭 제한과 뺄셈 언더플로우는 명시적으로 검사합니다.

반올림 정책:
    mul_div              → 내림 (floor)
    mul_div_rounding_up  → 올림 (ceil)
    trunc_div            → 0 방향 절삭 (Solidity int 나눗셈과 동일)
"""

from ..constants import UINT128_MAX
from ..errors import ArithmeticOverflow


def mul_div(a: int, b: int, denominator: int) -> int:
    """(a * b) / denominator 내림"""
    return (a * b) // denominator


def mul_div_rounding_up(a: int, b: int, denominator: int) -> int:
    """(a * b) / denominator 올림"""
    result = (a * b) // denominator
    if (a * b) % denominator > 0:
        result += 1
    return result


def div_rounding_up(numerator: int, denominator: int) -> int:
    """numerator / denominator 올림"""
    result = numerator // denominator
    if numerator % denominator > 0:
        result += 1
    return result


def trunc_div(numerator: int, denominator: int) -> int:
    """0 방향으로 절삭하는 정수 나눗셈

    Python의 // 는 음의 무한대 방향으로 내림하므로 음수 결과에서
    Solidity와 값이 달라집니다. 예: -125 / 60 → -2 (// 는 -3)
    """
    quotient = abs(numerator) // abs(denominator)
    if (numerator < 0) != (denominator < 0):
        return -quotient
    return quotient


def checked_sub(a: int, b: int) -> int:
    """a - b, 결과가 음수면 ArithmeticOverflow"""
    if b > a:
        raise ArithmeticOverflow(f"subtraction underflow: {a} - {b}")
    return a - b


def to_uint128(value: int) -> int:
    """uint128 범위로 좁히기

    Raises:
        ArithmeticOverflow: 값이 [0, 2^128 - 1] 범위를 벗어난 경우
    """
    if value < 0 or value > UINT128_MAX:
        raise ArithmeticOverflow(f"value does not fit in uint128: {value}")
    return value
