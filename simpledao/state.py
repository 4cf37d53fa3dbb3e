"""
Persisted chain state.

Keeps one SimpleDao deployment (engine, token and clock offset) in a JSON
file so that CLI invocations operate on the same DAO across runs.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from .clock import Clock
from .config.loader import DaoConfig, GovernanceConfig
from .exceptions import ConfigurationError, StateFileError
from .governance.dao import SimpleDao
from .logger import get_logger
from .tokens.governance_token import GovernanceToken

logger = get_logger(__name__)

STATE_VERSION = 1


class ChainState:
    """A deployed DAO plus the clock and network it lives on."""

    def __init__(self, dao: SimpleDao, token: GovernanceToken, clock: Clock, network: str):
        self.dao = dao
        self.token = token
        self.clock = clock
        self.network = network

    @classmethod
    def deploy(
        cls,
        config: DaoConfig,
        holders: Optional[List[str]] = None,
        deployer: Optional[str] = None,
        clock: Optional[Clock] = None,
    ) -> "ChainState":
        """
        Deploy a fresh DAO.

        With no *holders* on a local network the configured development
        accounts become the initial holders.
        """
        if not holders:
            if config.network.is_local:
                holders = list(config.network.default_holders)
                logger.info(f"Using default holders: {', '.join(holders)}")
            else:
                holders = []

        clock = clock or Clock()
        dao = SimpleDao.deploy(
            deployer or config.network.deployer,
            holders,
            clock=clock,
            governance=config.governance,
            token_config=config.token,
        )
        return cls(dao, dao.gov_token, clock, config.network.name)

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": STATE_VERSION,
            "network": self.network,
            "clock": self.clock.to_dict(),
            "token": self.token.to_dict(),
            "dao": self.dao.to_dict(),
            "governance": self.dao.governance.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], config: Optional[DaoConfig] = None) -> "ChainState":
        """
        Rebuild a deployment.

        Governance rules saved with the deployment take precedence over
        *config*; only state files without them fall back to it.
        """
        config = config or DaoConfig()
        if data.get("version") != STATE_VERSION:
            raise StateFileError(f"Unsupported state version: {data.get('version')}")
        try:
            clock = Clock.from_dict(data.get("clock", {}))
            token = GovernanceToken.from_dict(data["token"])
            governance = config.governance
            if "governance" in data:
                governance = GovernanceConfig.from_dict(data["governance"])
                governance.validate()
            dao = SimpleDao.from_dict(
                data["dao"], token, clock=clock, governance=governance
            )
        except ConfigurationError as e:
            raise StateFileError(f"Corrupt governance rules: {e}") from e
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            raise StateFileError(f"Corrupt state: {e}") from e
        return cls(dao, token, clock, data.get("network", config.network.name))

    def save(self, path: str) -> None:
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        with open(p, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.debug(f"State saved to {p}")

    @classmethod
    def load(cls, path: str, config: Optional[DaoConfig] = None) -> "ChainState":
        p = Path(path)
        if not p.exists():
            raise StateFileError(f"No deployment found at {path}. Run 'simpledao deploy' first.")
        try:
            with open(p) as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StateFileError(f"State file {path} is not valid JSON: {e}") from e
        return cls.from_dict(data, config)

    def __repr__(self) -> str:
        return f"<ChainState network={self.network} dao={self.dao.address}>"
