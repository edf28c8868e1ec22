"""
Configuration settings for Alpha Vault

Loads environment variables (.env supported) for deployment defaults and
defines the manager-mutable VaultConfig schema.
"""
import os
from pathlib import Path
from typing import Union

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .constants import FEE_SCALE, MAX_TICK

# Load environment variables from .env file
load_dotenv()


class Settings:
    """Deployment defaults"""

    # Factory
    PROTOCOL_FEE: int = int(os.getenv("ALPHA_VAULT_PROTOCOL_FEE", 50000))

    # Vault parameters
    MAX_TOTAL_SUPPLY: int = int(os.getenv("ALPHA_VAULT_MAX_TOTAL_SUPPLY", 10 ** 31))
    BASE_THRESHOLD: int = int(os.getenv("ALPHA_VAULT_BASE_THRESHOLD", 3600))
    LIMIT_THRESHOLD: int = int(os.getenv("ALPHA_VAULT_LIMIT_THRESHOLD", 1200))
    FULL_RANGE_WEIGHT: int = int(os.getenv("ALPHA_VAULT_FULL_RANGE_WEIGHT", 100000))
    PERIOD: int = int(os.getenv("ALPHA_VAULT_PERIOD", 43200))
    MIN_TICK_MOVE: int = int(os.getenv("ALPHA_VAULT_MIN_TICK_MOVE", 0))
    MAX_TWAP_DEVIATION: int = int(os.getenv("ALPHA_VAULT_MAX_TWAP_DEVIATION", 100))
    TWAP_DURATION: int = int(os.getenv("ALPHA_VAULT_TWAP_DURATION", 60))

    # Logging
    LOG_LEVEL: str = os.getenv("ALPHA_VAULT_LOG_LEVEL", "INFO").upper()


# Create global settings instance
settings = Settings()


class VaultConfig(BaseModel):
    """Manager-mutable vault parameters

    Field bounds are enforced on construction and on every assignment.
    Tick-spacing alignment of the thresholds depends on the pool, so the
    vault checks it separately (see geometry.check_threshold).
    """
    base_threshold: int = Field(..., description="Half-width of the base range in ticks", gt=0, le=MAX_TICK)
    limit_threshold: int = Field(..., description="Width of the bid/ask range in ticks", gt=0, le=MAX_TICK)
    full_range_weight: int = Field(
        default=0, description="Share of liquidity placed in the full range (1e6 = 100%)", ge=0, le=FEE_SCALE
    )
    period: int = Field(..., description="Minimum seconds between rebalances", ge=0)
    min_tick_move: int = Field(default=0, description="Minimum tick displacement since last rebalance", ge=0)
    max_twap_deviation: int = Field(..., description="Maximum |tick - twap| allowed for rebalance", ge=0)
    twap_duration: int = Field(..., description="TWAP window in seconds", gt=0)
    max_total_supply: int = Field(..., description="Share supply cap", ge=0)

    class Config:
        validate_assignment = True
        json_schema_extra = {
            "example": {
                "base_threshold": 3600,
                "limit_threshold": 1200,
                "full_range_weight": 100000,
                "period": 43200,
                "min_tick_move": 0,
                "max_twap_deviation": 100,
                "twap_duration": 60,
                "max_total_supply": 10 ** 31,
            }
        }

    @classmethod
    def from_settings(cls, source: Settings = settings, **overrides) -> "VaultConfig":
        values = dict(
            base_threshold=source.BASE_THRESHOLD,
            limit_threshold=source.LIMIT_THRESHOLD,
            full_range_weight=source.FULL_RANGE_WEIGHT,
            period=source.PERIOD,
            min_tick_move=source.MIN_TICK_MOVE,
            max_twap_deviation=source.MAX_TWAP_DEVIATION,
            twap_duration=source.TWAP_DURATION,
            max_total_supply=source.MAX_TOTAL_SUPPLY,
        )
        values.update(overrides)
        return cls(**values)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "VaultConfig":
        """YAML 파일에서 로드 (없는 키는 Settings 기본값 사용)

        파일은 최상위 매핑이거나 `vault:` 섹션을 가질 수 있습니다.
        """
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        if "vault" in data:
            data = data["vault"]
        return cls.from_settings(**data)
