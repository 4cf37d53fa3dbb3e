"""
SimpleDao TOML Configuration Loader

Loads all sections of simpledao.toml with environment variable overrides
(dataclass + from_dict + from_file per section).

Environment variable mapping:
    [governance] quorum_percent → SIMPLEDAO_QUORUM_PERCENT
    [token] initial_mint        → SIMPLEDAO_INITIAL_MINT
    [network] name              → SIMPLEDAO_NETWORK
    [state] path                → SIMPLEDAO_STATE_PATH
    log level                   → SIMPLEDAO_LOG_LEVEL
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

try:
    import tomllib as tomli  # Python 3.11+
except ImportError:
    import tomli  # type: ignore[no-redef]

from ..constants import (
    DEFAULT_CONFIG_PATH,
    DEFAULT_DEPLOYER,
    DEFAULT_HOLDER_COUNT,
    DEFAULT_NETWORK,
    DEFAULT_STATE_PATH,
    DEV_ACCOUNTS,
    INITIAL_MINT_TOKENS,
    LOCAL_NETWORKS,
    MAX_VOTING_DAYS,
    MIN_DESCRIPTION_LENGTH,
    MIN_TITLE_LENGTH,
    MIN_VOTING_DAYS,
    QUORUM_PERCENT,
    SECONDS_PER_DAY,
    TOKEN_DECIMALS,
    TOKEN_NAME,
    TOKEN_SYMBOL,
)
from ..exceptions import ConfigurationError
from ..logger import get_logger

logger = get_logger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env_int(name: str) -> Optional[int]:
    v = os.environ.get(name)
    if not v:
        return None
    try:
        return int(v)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {v!r}")


def _require_types(section: str, expected: type, **values: Any) -> None:
    """Raise ConfigurationError for any TOML value of the wrong type."""
    for key, value in values.items():
        # bool is an int subclass; TOML true/false is never a valid number
        if isinstance(value, bool) or not isinstance(value, expected):
            raise ConfigurationError(
                f"[{section}] {key} must be {expected.__name__}, "
                f"got {type(value).__name__} {value!r}"
            )


# ---------------------------------------------------------------------------
# Section dataclasses
# ---------------------------------------------------------------------------


@dataclass
class GovernanceConfig:
    """[governance] section."""
    quorum_percent: int = QUORUM_PERCENT
    min_voting_days: int = MIN_VOTING_DAYS
    max_voting_days: int = MAX_VOTING_DAYS
    min_title_length: int = MIN_TITLE_LENGTH
    min_description_length: int = MIN_DESCRIPTION_LENGTH

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GovernanceConfig":
        return cls(
            quorum_percent=data.get("quorum_percent", QUORUM_PERCENT),
            min_voting_days=data.get("min_voting_days", MIN_VOTING_DAYS),
            max_voting_days=data.get("max_voting_days", MAX_VOTING_DAYS),
            min_title_length=data.get("min_title_length", MIN_TITLE_LENGTH),
            min_description_length=data.get("min_description_length", MIN_DESCRIPTION_LENGTH),
        )

    def apply_env(self) -> None:
        if (v := _env_int("SIMPLEDAO_QUORUM_PERCENT")) is not None:
            self.quorum_percent = v

    def to_dict(self) -> Dict[str, Any]:
        return {
            "quorum_percent": self.quorum_percent,
            "min_voting_days": self.min_voting_days,
            "max_voting_days": self.max_voting_days,
            "min_title_length": self.min_title_length,
            "min_description_length": self.min_description_length,
        }

    @property
    def min_voting_window(self) -> int:
        return self.min_voting_days * SECONDS_PER_DAY

    @property
    def max_voting_window(self) -> int:
        return self.max_voting_days * SECONDS_PER_DAY

    def validate(self) -> None:
        _require_types(
            "governance", int,
            quorum_percent=self.quorum_percent,
            min_voting_days=self.min_voting_days,
            max_voting_days=self.max_voting_days,
            min_title_length=self.min_title_length,
            min_description_length=self.min_description_length,
        )
        if not 0 < self.quorum_percent <= 100:
            raise ConfigurationError(
                f"quorum_percent must be in (0, 100], got {self.quorum_percent}"
            )
        if self.min_voting_days < 0:
            raise ConfigurationError("min_voting_days must be >= 0")
        if self.max_voting_days < self.min_voting_days:
            raise ConfigurationError("max_voting_days must be >= min_voting_days")
        if self.min_title_length < 0 or self.min_description_length < 0:
            raise ConfigurationError("Minimum lengths must be >= 0")


@dataclass
class TokenConfig:
    """[token] section."""
    name: str = TOKEN_NAME
    symbol: str = TOKEN_SYMBOL
    decimals: int = TOKEN_DECIMALS
    initial_mint: int = INITIAL_MINT_TOKENS  # whole tokens per initial holder

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenConfig":
        return cls(
            name=data.get("name", TOKEN_NAME),
            symbol=data.get("symbol", TOKEN_SYMBOL),
            decimals=data.get("decimals", TOKEN_DECIMALS),
            initial_mint=data.get("initial_mint", INITIAL_MINT_TOKENS),
        )

    def apply_env(self) -> None:
        if (v := _env_int("SIMPLEDAO_INITIAL_MINT")) is not None:
            self.initial_mint = v

    @property
    def initial_mint_amount(self) -> int:
        """Initial mint in the smallest unit."""
        return self.initial_mint * 10 ** self.decimals

    def validate(self) -> None:
        _require_types("token", str, name=self.name, symbol=self.symbol)
        _require_types(
            "token", int, decimals=self.decimals, initial_mint=self.initial_mint
        )
        if not self.name or not self.symbol:
            raise ConfigurationError("Token name and symbol are required")
        if not 0 <= self.decimals <= 18:
            raise ConfigurationError(f"decimals must be 0-18, got {self.decimals}")
        if self.initial_mint <= 0:
            raise ConfigurationError("initial_mint must be positive")


@dataclass
class NetworkConfig:
    """[network] section."""
    name: str = DEFAULT_NETWORK
    deployer: str = DEFAULT_DEPLOYER
    default_holders: List[str] = field(
        default_factory=lambda: list(DEV_ACCOUNTS[:DEFAULT_HOLDER_COUNT])
    )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NetworkConfig":
        return cls(
            name=data.get("name", DEFAULT_NETWORK),
            deployer=data.get("deployer", DEFAULT_DEPLOYER),
            default_holders=data.get(
                "default_holders",
                cls.__dataclass_fields__["default_holders"].default_factory(),
            ),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("SIMPLEDAO_NETWORK"):
            self.name = v

    @property
    def is_local(self) -> bool:
        return self.name in LOCAL_NETWORKS

    def validate(self) -> None:
        _require_types("network", str, name=self.name, deployer=self.deployer)
        if not isinstance(self.default_holders, list):
            raise ConfigurationError("[network] default_holders must be a list of addresses")
        _require_types(
            "network", str,
            **{f"default_holders[{i}]": h for i, h in enumerate(self.default_holders)},
        )


@dataclass
class StateConfig:
    """[state] section."""
    path: str = DEFAULT_STATE_PATH

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StateConfig":
        return cls(path=data.get("path", DEFAULT_STATE_PATH))

    def apply_env(self) -> None:
        if v := os.environ.get("SIMPLEDAO_STATE_PATH"):
            self.path = v

    def validate(self) -> None:
        _require_types("state", str, path=self.path)
        if not self.path:
            raise ConfigurationError("[state] path cannot be empty")


# -----------------------------------------------------------------------
# Top-level config
# -----------------------------------------------------------------------

@dataclass
class DaoConfig:
    """
    Unified SimpleDao configuration.

    Loads every section of simpledao.toml and applies environment variable
    overrides.
    """
    log_level: str = "INFO"
    governance: GovernanceConfig = field(default_factory=GovernanceConfig)
    token: TokenConfig = field(default_factory=TokenConfig)
    network: NetworkConfig = field(default_factory=NetworkConfig)
    state: StateConfig = field(default_factory=StateConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DaoConfig":
        """Create DaoConfig from a parsed TOML dict."""
        return cls(
            log_level=data.get("log_level", "INFO"),
            governance=GovernanceConfig.from_dict(data.get("governance", {})),
            token=TokenConfig.from_dict(data.get("token", {})),
            network=NetworkConfig.from_dict(data.get("network", {})),
            state=StateConfig.from_dict(data.get("state", {})),
        )

    @classmethod
    def from_file(cls, config_path: str) -> "DaoConfig":
        """
        Load configuration from a TOML file.

        A missing file yields defaults (with env overrides applied).
        """
        path = Path(config_path)
        if not path.exists():
            logger.debug("Config file not found: %s, using defaults", config_path)
            cfg = cls()
            cfg.apply_env()
            return cfg

        try:
            with open(path, "rb") as f:
                raw = tomli.load(f)
        except tomli.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML in {config_path}: {e}") from e

        try:
            cfg = cls.from_dict(raw)
        except AttributeError as e:
            # a section given as a scalar instead of a [table]
            raise ConfigurationError(f"Invalid section layout in {config_path}: {e}") from e
        cfg.apply_env()
        return cfg

    def apply_env(self) -> None:
        """Apply environment variable overrides to all sections."""
        if v := os.environ.get("SIMPLEDAO_LOG_LEVEL"):
            self.log_level = v.upper()
        self.governance.apply_env()
        self.token.apply_env()
        self.network.apply_env()
        self.state.apply_env()

    def validate(self) -> bool:
        """
        Validate all configuration sections.

        Raises:
            ConfigurationError: on invalid config
        """
        if not isinstance(self.log_level, str) or self.log_level.upper() not in _LOG_LEVELS:
            raise ConfigurationError(f"Invalid log_level: {self.log_level!r}")
        self.governance.validate()
        self.token.validate()
        self.network.validate()
        self.state.validate()
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "log_level": self.log_level,
            "governance": self.governance.to_dict(),
            "token": {
                "name": self.token.name,
                "symbol": self.token.symbol,
                "decimals": self.token.decimals,
                "initial_mint": self.token.initial_mint,
            },
            "network": {
                "name": self.network.name,
                "deployer": self.network.deployer,
                "default_holders": list(self.network.default_holders),
            },
            "state": {
                "path": self.state.path,
            },
        }


def load_config(path: Optional[str] = None) -> DaoConfig:
    """
    Load and validate configuration.

    Resolution order:
        1. Explicit *path* argument
        2. SIMPLEDAO_CONFIG env var
        3. ./simpledao.toml in current directory
        4. Defaults (with env overrides)
    """
    if path is None:
        path = os.environ.get("SIMPLEDAO_CONFIG", DEFAULT_CONFIG_PATH)

    cfg = DaoConfig.from_file(path)
    cfg.validate()
    return cfg
