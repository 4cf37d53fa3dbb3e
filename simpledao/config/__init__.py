"""
SimpleDao Configuration

Loads simpledao.toml; environment variables override TOML values.
"""

from .loader import (
    DaoConfig,
    GovernanceConfig,
    NetworkConfig,
    StateConfig,
    TokenConfig,
    load_config,
)

__all__ = [
    "DaoConfig",
    "GovernanceConfig",
    "NetworkConfig",
    "StateConfig",
    "TokenConfig",
    "load_config",
]
