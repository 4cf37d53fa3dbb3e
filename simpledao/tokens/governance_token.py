"""
Governance Token

ERC-20–style fungible token backing SimpleDao votes:
  - balanceOf / allowance / approve / transfer / transferFrom
  - owner-only mint
  - owner-only pause switch (holder transfers blocked while paused; the
    owner itself may still move tokens, which is how vote custody works)
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..address import normalize_address
from ..constants import TOKEN_DECIMALS, TOKEN_NAME, TOKEN_SYMBOL
from ..exceptions import SimpleDaoException
from ..logger import get_logger

logger = get_logger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  EXCEPTIONS
# ══════════════════════════════════════════════════════════════════════

class TokenError(SimpleDaoException):
    """Base exception for token operations."""


class InsufficientBalanceError(TokenError):
    """Raised when sender balance is too low."""


class InsufficientAllowanceError(TokenError):
    """Raised when spender allowance is too low."""


class EnforcedPauseError(TokenError):
    """Raised when a holder moves tokens while the token is paused."""


class ExpectedPauseError(TokenError):
    """Raised when unpausing a token that is not paused."""


class OwnableUnauthorizedAccountError(TokenError):
    """Raised when a non-owner calls an owner-only function."""


# ══════════════════════════════════════════════════════════════════════
#  EVENTS
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TransferEvent:
    """Emitted on every balance movement (sender is None for mints)."""
    sender: Optional[str]
    recipient: str
    amount: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Transfer",
            "from": self.sender,
            "to": self.recipient,
            "amount": str(self.amount),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class ApprovalEvent:
    """Emitted on every successful approve."""
    owner: str
    spender: str
    amount: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Approval",
            "owner": self.owner,
            "spender": self.spender,
            "amount": str(self.amount),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class PausedEvent:
    account: str
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {"event": "Paused", "account": self.account, "timestamp": self.timestamp}


@dataclass(frozen=True)
class UnpausedEvent:
    account: str
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {"event": "Unpaused", "account": self.account, "timestamp": self.timestamp}


# ══════════════════════════════════════════════════════════════════════
#  GOVERNANCE TOKEN
# ══════════════════════════════════════════════════════════════════════

class GovernanceToken:
    """
    Pausable, owner-mintable fungible token.

    Mirrors ERC-20 semantics:
        - balance_of(address) → int
        - transfer(sender, recipient, amount)
        - approve(owner, spender, amount)
        - transfer_from(spender, sender, recipient, amount)
        - total_supply → int

    Amounts are integers in the smallest unit (wei). Every address argument
    is normalised to its checksum form.
    """

    def __init__(
        self,
        owner: str,
        name: str = TOKEN_NAME,
        symbol: str = TOKEN_SYMBOL,
        decimals: int = TOKEN_DECIMALS,
        address: Optional[str] = None,
    ):
        """
        Args:
            owner: Account allowed to mint and pause (the DAO)
            name: Human-readable token name
            symbol: Short ticker
            decimals: Fractional digits
            address: Deployed address of the token, if known
        """
        if not name:
            raise TokenError("Token name cannot be empty")
        if not symbol:
            raise TokenError("Token symbol cannot be empty")
        if decimals < 0 or decimals > 18:
            raise TokenError(f"Decimals must be 0-18, got {decimals}")

        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self.address = normalize_address(address) if address else None
        self._owner = normalize_address(owner)
        self._total_supply = 0
        self._paused = False

        self._balances: Dict[str, int] = {}
        self._allowances: Dict[Tuple[str, str], int] = {}  # (owner, spender)
        self._events: List[Any] = []

        logger.debug(f"Token {symbol} ({name}) initialised, owner={self._owner}")

    # ── Read-only views ───────────────────────────────────────────────

    @property
    def owner(self) -> str:
        return self._owner

    @property
    def total_supply(self) -> int:
        return self._total_supply

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def events(self) -> List[Any]:
        return list(self._events)

    def balance_of(self, address: str) -> int:
        return self._balances.get(normalize_address(address), 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get(
            (normalize_address(owner), normalize_address(spender)), 0
        )

    def holders(self) -> Dict[str, int]:
        """Addresses with a non-zero balance."""
        return {a: b for a, b in self._balances.items() if b > 0}

    # ── State guards ──────────────────────────────────────────────────

    def _require_owner(self, caller: str):
        if normalize_address(caller) != self._owner:
            raise OwnableUnauthorizedAccountError(
                f"{caller} is not the owner of {self.symbol}"
            )

    def _require_not_paused(self, operator: str):
        if self._paused and operator != self._owner:
            raise EnforcedPauseError(f"Token {self.symbol} is paused")

    @staticmethod
    def _require_positive(amount: int):
        if amount <= 0:
            raise TokenError("Transfer amount must be positive")

    def _move(self, sender: str, recipient: str, amount: int):
        self._balances[sender] = self._balances.get(sender, 0) - amount
        self._balances[recipient] = self._balances.get(recipient, 0) + amount

    # ── Core ERC-20 operations ────────────────────────────────────────

    def transfer(self, sender: str, recipient: str, amount: int) -> TransferEvent:
        """Move *amount* from *sender* to *recipient*."""
        sender = normalize_address(sender)
        recipient = normalize_address(recipient)
        self._require_not_paused(sender)
        self._require_positive(amount)

        bal = self.balance_of(sender)
        if bal < amount:
            raise InsufficientBalanceError(
                f"{sender} balance {bal} < transfer amount {amount}"
            )

        self._move(sender, recipient, amount)

        event = TransferEvent(sender=sender, recipient=recipient, amount=amount)
        self._events.append(event)
        logger.debug(f"Transfer: {sender} → {recipient} {amount} wei")
        return event

    def approve(self, owner: str, spender: str, amount: int) -> ApprovalEvent:
        """Set spender allowance. Allowed while paused."""
        owner = normalize_address(owner)
        spender = normalize_address(spender)
        if amount < 0:
            raise TokenError("Allowance amount cannot be negative")

        self._allowances[(owner, spender)] = amount

        event = ApprovalEvent(owner=owner, spender=spender, amount=amount)
        self._events.append(event)
        logger.debug(f"Approve: {owner} → {spender} allowance={amount} wei")
        return event

    def transfer_from(
        self,
        spender: str,
        sender: str,
        recipient: str,
        amount: int,
    ) -> TransferEvent:
        """Transfer on behalf of *sender* using spender's allowance."""
        spender = normalize_address(spender)
        sender = normalize_address(sender)
        recipient = normalize_address(recipient)
        self._require_not_paused(spender)
        self._require_positive(amount)

        allow = self.allowance(sender, spender)
        if allow < amount:
            raise InsufficientAllowanceError(
                f"Allowance {allow} of {spender} < transfer amount {amount}"
            )

        bal = self.balance_of(sender)
        if bal < amount:
            raise InsufficientBalanceError(
                f"{sender} balance {bal} < transfer amount {amount}"
            )

        self._move(sender, recipient, amount)
        self._allowances[(sender, spender)] = allow - amount

        event = TransferEvent(sender=sender, recipient=recipient, amount=amount)
        self._events.append(event)
        logger.debug(
            f"transferFrom: spender={spender} {sender} → {recipient} {amount} wei"
        )
        return event

    # ── Owner operations ──────────────────────────────────────────────

    def mint(self, caller: str, recipient: str, amount: int) -> TransferEvent:
        """Create *amount* new tokens for *recipient* (owner only)."""
        self._require_owner(caller)
        recipient = normalize_address(recipient)
        if amount <= 0:
            raise TokenError("Mint amount must be positive")

        self._total_supply += amount
        self._balances[recipient] = self._balances.get(recipient, 0) + amount

        event = TransferEvent(sender=None, recipient=recipient, amount=amount)
        self._events.append(event)
        logger.info(f"Mint: {amount} wei {self.symbol} → {recipient}")
        return event

    def pause(self, caller: str) -> PausedEvent:
        """Block holder transfers (owner only)."""
        self._require_owner(caller)
        if self._paused:
            raise EnforcedPauseError(f"Token {self.symbol} is already paused")
        self._paused = True
        event = PausedEvent(account=self._owner)
        self._events.append(event)
        logger.info(f"Token {self.symbol} PAUSED")
        return event

    def unpause(self, caller: str) -> UnpausedEvent:
        self._require_owner(caller)
        if not self._paused:
            raise ExpectedPauseError(f"Token {self.symbol} is not paused")
        self._paused = False
        event = UnpausedEvent(account=self._owner)
        self._events.append(event)
        logger.info(f"Token {self.symbol} unpaused")
        return event

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "address": self.address,
            "owner": self._owner,
            "totalSupply": str(self._total_supply),
            "paused": self._paused,
            "balances": {a: str(b) for a, b in self._balances.items()},
            "allowances": [
                {"owner": o, "spender": s, "amount": str(a)}
                for (o, s), a in self._allowances.items()
            ],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GovernanceToken":
        """Rebuild a token from :meth:`to_dict` output (events are not kept)."""
        token = cls(
            owner=data["owner"],
            name=data.get("name", TOKEN_NAME),
            symbol=data.get("symbol", TOKEN_SYMBOL),
            decimals=data.get("decimals", TOKEN_DECIMALS),
            address=data.get("address"),
        )
        token._total_supply = int(data.get("totalSupply", "0"))
        token._paused = bool(data.get("paused", False))
        token._balances = {
            normalize_address(a): int(b) for a, b in data.get("balances", {}).items()
        }
        token._allowances = {
            (normalize_address(e["owner"]), normalize_address(e["spender"])): int(e["amount"])
            for e in data.get("allowances", [])
        }
        return token

    def __repr__(self) -> str:
        return f"<GovernanceToken {self.symbol} supply={self._total_supply} paused={self._paused}>"
