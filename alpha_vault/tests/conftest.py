"""
공용 fixture: 체인, 토큰 쌍, 시뮬레이션 풀, 팩토리, 볼트
"""

import pytest

from ..chain import Chain
from ..config import VaultConfig
from ..sim import SimpleFactory, SimulatedPool
from ..tokens import Token
from ..vault import AlphaVault

START_TIMESTAMP = 1_700_000_000
POOL_RESERVE = 10 ** 30
USER_FUNDS = 10 ** 24

MANAGER = "manager"
GOVERNANCE = "governance"
ALICE = "alice"
BOB = "bob"
KEEPER = "keeper"


@pytest.fixture
def chain():
    return Chain(timestamp=START_TIMESTAMP)


@pytest.fixture
def token0(chain):
    return Token(chain, "TK0")


@pytest.fixture
def token1(chain):
    return Token(chain, "TK1")


@pytest.fixture
def pool(chain, token0, token1):
    pool = SimulatedPool(chain, token0, token1, fee=3000, tick=0)
    token0.mint(pool.address, POOL_RESERVE)
    token1.mint(pool.address, POOL_RESERVE)
    return pool


@pytest.fixture
def factory(chain):
    return SimpleFactory(chain, governance=GOVERNANCE, protocol_fee=50_000)


@pytest.fixture
def config():
    return VaultConfig(
        base_threshold=3600,
        limit_threshold=1200,
        full_range_weight=100_000,
        period=43200,
        min_tick_move=0,
        max_twap_deviation=100,
        twap_duration=60,
        max_total_supply=10 ** 30,
    )


@pytest.fixture
def vault(pool, factory, chain, config, token0, token1):
    for user in (ALICE, BOB):
        token0.mint(user, USER_FUNDS)
        token1.mint(user, USER_FUNDS)
    return AlphaVault(pool, factory, chain, config, manager=MANAGER)


@pytest.fixture
def funded_vault(vault, chain):
    """ALICE 가 1e18/1e18 예치 후 첫 리밸런스까지 마친 볼트"""
    vault.deposit(ALICE, 10 ** 18, 10 ** 18, 0, 0, ALICE)
    chain.advance(60)
    vault.rebalance(KEEPER)
    return vault
