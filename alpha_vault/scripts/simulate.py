#!/usr/bin/env python3
"""
Simulate - 랜덤 워크 가격 경로 위에서 볼트 리밸런스 시뮬레이션

Usage:
    # 기본 설정 (Settings / .env)
    alpha-vault-simulate --steps 500 --seed 7

    # YAML 설정과 CSV 출력
    alpha-vault-simulate --config vault.yaml --output result.csv
"""

import argparse
import logging
from typing import Optional

import numpy as np
import pandas as pd

from ..chain import Chain
from ..config import VaultConfig, settings
from ..constants import MIN_TICK, MAX_TICK
from ..sim import SimpleFactory, SimulatedPool
from ..tokens import Token
from ..vault import AlphaVault

logger = logging.getLogger(__name__)

START_TIMESTAMP = 1_700_000_000
POOL_RESERVE = 10 ** 30


def run_simulation(
    steps: int = 200,
    seed: int = 42,
    step_seconds: int = 3600,
    volatility: float = 60.0,
    fee_per_step: int = 10 ** 15,
    deposit_amount: int = 10 ** 18,
    config: Optional[VaultConfig] = None,
    fee: int = 3000
) -> pd.DataFrame:
    """시뮬레이션 실행

    매 스텝:
        1. 틱을 정규분포 랜덤 워크로 이동
        2. 활성 유동성에 수수료 분배
        3. 시간 진행
        4. 게이트를 통과하면 리밸런스

    Args:
        steps: 스텝 수
        seed: 난수 시드
        step_seconds: 스텝당 경과 시간
        volatility: 스텝당 틱 변화 표준편차
        fee_per_step: 스텝당 분배되는 수수료 (각 토큰)
        deposit_amount: 초기 예치 (각 토큰)
        config: 볼트 설정 (None 이면 Settings 기본값)
        fee: 풀 수수료 티어

    Returns:
        스텝별 기록 DataFrame
    """
    config = config or VaultConfig.from_settings()
    rng = np.random.default_rng(seed)

    chain = Chain(timestamp=START_TIMESTAMP)
    token0 = Token(chain, "TK0")
    token1 = Token(chain, "TK1")
    pool = SimulatedPool(chain, token0, token1, fee=fee, tick=0)
    token0.mint(pool.address, POOL_RESERVE)
    token1.mint(pool.address, POOL_RESERVE)
    factory = SimpleFactory(chain, governance="governance")
    vault = AlphaVault(pool, factory, chain, config, manager="manager")

    depositor = "depositor"
    token0.mint(depositor, deposit_amount)
    token1.mint(depositor, deposit_amount)
    vault.deposit(depositor, deposit_amount, deposit_amount, 0, 0, depositor)

    # TWAP 창이 채워진 뒤 첫 리밸런스
    chain.advance(config.twap_duration)
    vault.rebalance("keeper")

    margin = max(config.base_threshold, config.limit_threshold) + pool.tick_spacing
    lower_bound = MIN_TICK + margin
    upper_bound = MAX_TICK - margin

    records = []
    for step in range(steps):
        tick_delta = int(round(rng.normal(0.0, volatility)))
        new_tick = int(np.clip(pool.tick + tick_delta, lower_bound, upper_bound))
        pool.move_tick(new_tick)
        pool.accrue_fees(fee_per_step, fee_per_step)
        chain.advance(step_seconds)

        rebalanced = False
        if vault.should_rebalance():
            vault.rebalance("keeper")
            rebalanced = True

        total0, total1 = vault.get_total_amounts()
        accrued0, accrued1 = vault.accrued_protocol_fees
        records.append({
            "step": step,
            "timestamp": chain.timestamp,
            "tick": pool.tick,
            "twap": vault.get_twap(),
            "rebalanced": rebalanced,
            "base_lower": vault.ranges.base.lower,
            "base_upper": vault.ranges.base.upper,
            "limit_lower": vault.ranges.limit.lower,
            "limit_upper": vault.ranges.limit.upper,
            "total0": total0,
            "total1": total1,
            "accrued_protocol_fees0": accrued0,
            "accrued_protocol_fees1": accrued1,
        })

    df = pd.DataFrame(records)
    logger.info(
        "Simulation finished: %d steps, %d rebalances",
        steps, int(df["rebalanced"].sum()) if len(df) else 0,
    )
    return df


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Alpha Vault 리밸런스 시뮬레이션",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--steps", type=int, default=200, help="스텝 수")
    parser.add_argument("--seed", type=int, default=42, help="난수 시드")
    parser.add_argument("--step-seconds", type=int, default=3600, help="스텝당 경과 시간(초)")
    parser.add_argument("--volatility", type=float, default=60.0, help="스텝당 틱 변화 표준편차")
    parser.add_argument("--config", type=str, help="볼트 설정 YAML 경로")
    parser.add_argument("--output", type=str, help="결과 CSV 경로")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    config = VaultConfig.from_yaml(args.config) if args.config else None
    df = run_simulation(
        steps=args.steps,
        seed=args.seed,
        step_seconds=args.step_seconds,
        volatility=args.volatility,
        config=config,
    )

    if args.output:
        df.to_csv(args.output, index=False)
        print(f"Saved {len(df)} rows to {args.output}")
    else:
        print(df.tail(10).to_string(index=False))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
