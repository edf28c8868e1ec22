"""
Token - 인메모리 대체 가능 토큰 원장

풀 토큰 쌍과 볼트 지분(share)에 모두 사용됩니다.
잔고 부족은 ArithmeticOverflow (뺄셈 언더플로우) 로 실패합니다.
"""

from typing import Callable, Dict, Optional

from .chain import Chain, Stateful
from .math.fixed_point import checked_sub

TransferHook = Callable[[str, str, int], None]


class Token(Stateful):
    """ERC20 형태의 잔고 원장

    on_transfer 훅은 전송이 끝난 뒤 (sender, to, amount) 로 호출됩니다.
    수신 측 콜백이 있는 토큰을 흉내낼 때 사용합니다.
    """

    _transient = ("chain", "on_transfer")

    def __init__(
        self,
        chain: Chain,
        symbol: str,
        decimals: int = 18,
        address: Optional[str] = None
    ):
        self.chain = chain
        self.symbol = symbol
        self.decimals = decimals
        self.address = address or f"token:{symbol}"
        self.balances: Dict[str, int] = {}
        self.total_supply = 0
        self.on_transfer: Optional[TransferHook] = None
        chain.register(self)

    def __repr__(self) -> str:
        return f"Token({self.symbol!r})"

    def balance_of(self, owner: str) -> int:
        return self.balances.get(owner, 0)

    def mint(self, to: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"negative amount: {amount}")
        self.balances[to] = self.balance_of(to) + amount
        self.total_supply += amount

    def burn(self, owner: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"negative amount: {amount}")
        self.balances[owner] = checked_sub(self.balance_of(owner), amount)
        self.total_supply -= amount

    def transfer(self, sender: str, to: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"negative amount: {amount}")
        self.balances[sender] = checked_sub(self.balance_of(sender), amount)
        self.balances[to] = self.balance_of(to) + amount
        if self.on_transfer is not None:
            self.on_transfer(sender, to, amount)
