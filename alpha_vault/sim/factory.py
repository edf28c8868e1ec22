"""
Simple Factory - governance 주소와 protocol fee 보관

볼트는 리밸런스마다 protocol_fee() 를 다시 읽어 스냅샷합니다.
"""

import logging

from ..chain import Chain, Stateful
from ..config import settings
from ..constants import FEE_SCALE
from ..errors import InvalidConfig, Unauthorized
from ..interfaces import Factory

logger = logging.getLogger(__name__)


class SimpleFactory(Stateful, Factory):
    """Governance capability

    사용법:
        factory = SimpleFactory(chain, governance="gov", protocol_fee=50_000)
        factory.set_protocol_fee("gov", 100_000)
    """

    _transient = ("chain",)

    def __init__(self, chain: Chain, governance: str, protocol_fee: int = settings.PROTOCOL_FEE):
        if not 0 <= protocol_fee <= FEE_SCALE:
            raise InvalidConfig(f"protocol fee must be within [0, {FEE_SCALE}]: {protocol_fee}")
        self.chain = chain
        self._governance = governance
        self._protocol_fee = protocol_fee
        chain.register(self)

    def protocol_fee(self) -> int:
        return self._protocol_fee

    def governance(self) -> str:
        return self._governance

    def set_protocol_fee(self, sender: str, protocol_fee: int) -> None:
        if sender != self._governance:
            raise Unauthorized(f"{sender} is not governance")
        if not 0 <= protocol_fee <= FEE_SCALE:
            raise InvalidConfig(f"protocol fee must be within [0, {FEE_SCALE}]: {protocol_fee}")
        self._protocol_fee = protocol_fee
        logger.info("Protocol fee set to %d", protocol_fee)

    def set_governance(self, sender: str, governance: str) -> None:
        if sender != self._governance:
            raise Unauthorized(f"{sender} is not governance")
        self._governance = governance
        logger.info("Governance set to %s", governance)
