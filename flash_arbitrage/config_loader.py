"""
Configuration loading for the arbitrage bot.

Settings come from the process environment (optionally seeded from a ``.env``
file); the traded pairs come from an optional YAML file and default to
USDC/SOL. Every failure surfaces as ConfigurationError so the entry point can
exit before serving traffic.
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError as PydanticValidationError

from .config_schema import BotSettings, PairsFile
from .constants import SOL_MINT, USDC_MINT
from .exceptions import ConfigurationError
from .types import TokenConfig, TradingPair

# Environment variable -> BotSettings field
ENV_FIELDS = {
    "SOLANA_RPC_URL": "rpc_url",
    "WALLET_PRIVATE_KEY": "wallet_private_key",
    "ARBITRAGE_PROGRAM_ID": "program_id",
    "MIN_PROFIT_PERCENT": "min_profit_percent",
    "MAX_SLIPPAGE_PERCENT": "max_slippage_percent",
    "RATE_LIMIT_MS": "rate_limit_ms",
    "CHECK_INTERVAL_SEC": "check_interval_sec",
    "MAX_RETRIES": "max_retries",
    "TRANSACTION_FEE": "transaction_fee",
    "CALL_TIMEOUT_SEC": "call_timeout_sec",
    "TRADES_CSV_PATH": "trades_csv_path",
    "PAIRS_CONFIG": "pairs_config",
    "EXECUTION_MODE": "execution_mode",
    "PORT": "port",
    "LOG_LEVEL": "log_level",
}

REQUIRED_ENV = ("WALLET_PRIVATE_KEY",)


def load_settings(
    env: Optional[Mapping[str, str]] = None,
    dotenv_path: Optional[Union[str, Path]] = None,
) -> BotSettings:
    """
    Build BotSettings from environment variables.

    Args:
        env: Mapping to read instead of ``os.environ`` (no .env loading then)
        dotenv_path: Explicit .env file; by default the nearest one is used

    Raises:
        ConfigurationError: If a required variable is missing or a value is invalid
    """
    if env is None:
        load_dotenv(dotenv_path=dotenv_path, override=False)
        env = os.environ

    missing = [key for key in REQUIRED_ENV if not env.get(key)]
    if missing:
        raise ConfigurationError(
            f"{', '.join(missing)} not found in environment variables",
            details={"missing": missing},
        )

    raw: Dict[str, Any] = {
        field: env[key] for key, field in ENV_FIELDS.items() if env.get(key) not in (None, "")
    }

    try:
        return BotSettings(**raw)
    except PydanticValidationError as e:
        problems = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        ]
        raise ConfigurationError(
            f"Invalid configuration: {'; '.join(problems)}",
            details={"errors": problems},
        ) from e


def load_yaml_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """Load and parse a YAML configuration file."""
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Failed to load config {config_path}: {e}") from e

    if config_dict is None:
        raise ConfigurationError(f"Empty configuration file: {config_path}")
    if not isinstance(config_dict, dict):
        raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")

    return config_dict


def default_pairs(settings: BotSettings) -> List[TradingPair]:
    """The stock USDC/SOL pair with the global thresholds."""
    return [
        TradingPair(
            token_a=TokenConfig(mint=USDC_MINT, decimals=6, min_size=100, symbol="USDC"),
            token_b=TokenConfig(mint=SOL_MINT, decimals=9, min_size=0.1, symbol="SOL"),
            min_profit_percent=settings.min_profit_percent,
            max_slippage=settings.max_slippage_percent,
        )
    ]


def load_pairs(settings: BotSettings) -> List[TradingPair]:
    """
    Trading pairs from ``settings.pairs_config`` or the default pair.

    Raises:
        ConfigurationError: If the pairs file is missing or invalid
    """
    if not settings.pairs_config:
        return default_pairs(settings)

    config_dict = load_yaml_config(settings.pairs_config)
    try:
        pairs_file = PairsFile(**config_dict)
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Invalid pairs file {settings.pairs_config}: {e}"
        ) from e

    return [
        model.to_pair(settings.min_profit_percent, settings.max_slippage_percent)
        for model in pairs_file.pairs
    ]
