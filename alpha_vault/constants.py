"""
Alpha Vault 상수 정의

온체인 수준 정밀도를 위한 상수들:
- Q96: sqrt price 인코딩에 사용 (2^96)
- Q128: fee growth 인코딩에 사용 (2^128)
- FEE_SCALE: protocol fee / full range weight 스케일 (1e6 = 100%)
- TICK_SPACINGS: 각 수수료 티어별 틱 간격
"""

from typing import Dict

# Fixed-point 인코딩 상수
Q96: int = 2 ** 96
Q128: int = 2 ** 128

# 각 수수료 티어별 틱 간격
TICK_SPACINGS: Dict[int, int] = {
    100: 1,
    500: 10,
    3000: 60,
    10000: 200,
}

# 틱 범위 상수
MIN_TICK: int = -887272
MAX_TICK: int = 887272

# 비율 스케일 (protocol fee, full range weight)
# 50000 = 5%, 1000000 = 100%
FEE_SCALE: int = 1_000_000

# 정수 폭 상한
UINT128_MAX: int = 2 ** 128 - 1

ZERO_ADDRESS: str = "0x0000000000000000000000000000000000000000"
