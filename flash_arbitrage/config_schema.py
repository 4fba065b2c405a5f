"""
Configuration schema validation using Pydantic
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator

from .constants import (
    DEFAULT_CALL_TIMEOUT_SEC,
    DEFAULT_CHECK_INTERVAL_SEC,
    DEFAULT_MAX_RETRIES,
    DEFAULT_MAX_SLIPPAGE_PERCENT,
    DEFAULT_MIN_PROFIT_PERCENT,
    DEFAULT_PROGRAM_ID,
    DEFAULT_RATE_LIMIT_MS,
    DEFAULT_RPC_URL,
    DEFAULT_TRANSACTION_FEE,
    ExecutionMode,
)
from .types import TokenConfig, TradingPair


class TokenModel(BaseModel):
    """Token entry in the pairs file"""

    mint: str = Field(min_length=1, description="Mint address")
    decimals: int = Field(ge=0, le=18, description="Decimal precision")
    min_size: float = Field(gt=0, description="Minimum trade size in token units")
    symbol: Optional[str] = None

    def to_token(self) -> TokenConfig:
        return TokenConfig(
            mint=self.mint,
            decimals=self.decimals,
            min_size=self.min_size,
            symbol=self.symbol,
        )


class TradingPairModel(BaseModel):
    """Pair entry; thresholds fall back to the global settings when omitted"""

    token_a: TokenModel
    token_b: TokenModel
    min_profit_percent: Optional[float] = Field(default=None, gt=0, le=100)
    max_slippage: Optional[float] = Field(default=None, gt=0, le=100)

    @model_validator(mode="after")
    def validate_distinct_tokens(self):
        if self.token_a.mint == self.token_b.mint:
            raise ValueError(f"token_a and token_b must differ ({self.token_a.mint})")
        return self

    def to_pair(self, min_profit_percent: float, max_slippage: float) -> TradingPair:
        return TradingPair(
            token_a=self.token_a.to_token(),
            token_b=self.token_b.to_token(),
            min_profit_percent=(
                self.min_profit_percent
                if self.min_profit_percent is not None
                else min_profit_percent
            ),
            max_slippage=(
                self.max_slippage if self.max_slippage is not None else max_slippage
            ),
        )


class PairsFile(BaseModel):
    """Top-level layout of the pairs YAML file"""

    pairs: List[TradingPairModel] = Field(min_length=1)


class BotSettings(BaseModel):
    """Runtime settings, normally read from the environment"""

    rpc_url: str = DEFAULT_RPC_URL
    wallet_private_key: SecretStr
    program_id: str = Field(default=DEFAULT_PROGRAM_ID, min_length=32, max_length=44)
    min_profit_percent: float = Field(default=DEFAULT_MIN_PROFIT_PERCENT, gt=0, le=100)
    max_slippage_percent: float = Field(
        default=DEFAULT_MAX_SLIPPAGE_PERCENT, gt=0, le=100
    )
    rate_limit_ms: int = Field(default=DEFAULT_RATE_LIMIT_MS, ge=0)
    check_interval_sec: float = Field(default=DEFAULT_CHECK_INTERVAL_SEC, gt=0)
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=1, le=10)
    transaction_fee: float = Field(default=DEFAULT_TRANSACTION_FEE, ge=0)
    call_timeout_sec: float = Field(default=DEFAULT_CALL_TIMEOUT_SEC, gt=0, le=300)
    trades_csv_path: Optional[str] = None
    pairs_config: Optional[str] = None
    execution_mode: ExecutionMode = ExecutionMode.PAPER
    port: int = Field(default=3000, ge=1, le=65535)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @field_validator("rpc_url")
    @classmethod
    def validate_rpc_url(cls, v):
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"rpc_url must be an http(s) URL, got {v!r}")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        return v.upper() if isinstance(v, str) else v

    @field_validator("trades_csv_path", "pairs_config", mode="before")
    @classmethod
    def empty_path_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v
