"""
Chain - 시계와 원자적 실행 범위

볼트의 모든 변경 연산은 Chain.atomic() 안에서 실행됩니다. 블록 안에서
예외가 발생하면 등록된 모든 참여자(토큰, 풀, 팩토리, 볼트 상태)가
진입 시점 상태로 복원됩니다.
"""

import copy
import logging
import time
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


class Stateful:
    """스냅샷/복원 가능한 참여자

    _transient 에 나열된 속성(다른 참여자 참조, 콜백)은 스냅샷에서 제외됩니다.
    """

    _transient: Tuple[str, ...] = ()

    def snapshot(self) -> Dict[str, Any]:
        return copy.deepcopy({
            key: value for key, value in vars(self).items()
            if key not in self._transient
        })

    def restore(self, state: Dict[str, Any]) -> None:
        self.__dict__.update(state)


class Chain:
    """단일 스레드 실행 환경

    사용법:
        chain = Chain(timestamp=1_700_000_000)
        token0 = Token(chain, "WETH")
        with chain.atomic():
            token0.transfer(alice, bob, 10)
    """

    def __init__(self, timestamp: Optional[int] = None):
        self.timestamp = int(time.time()) if timestamp is None else timestamp
        self._participants: List[Stateful] = []

    def register(self, participant: Stateful) -> None:
        if not any(p is participant for p in self._participants):
            self._participants.append(participant)

    def advance(self, seconds: int) -> int:
        """시계를 seconds 만큼 진행하고 새 timestamp 반환"""
        if seconds < 0:
            raise ValueError(f"cannot move time backwards: {seconds}")
        self.timestamp += seconds
        return self.timestamp

    @contextmanager
    def atomic(self):
        """블록 전체를 all-or-nothing 으로 실행"""
        snapshots = [(p, p.snapshot()) for p in self._participants]
        try:
            yield self
        except BaseException:
            for participant, state in snapshots:
                participant.restore(state)
            logger.debug("Rolled back %d participants", len(snapshots))
            raise
