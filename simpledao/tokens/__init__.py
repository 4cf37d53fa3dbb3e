"""
SimpleDao Governance Token

Provides:
  - GovernanceToken : pausable, owner-mintable ERC-20–style token
"""

from .governance_token import (
    ApprovalEvent,
    EnforcedPauseError,
    ExpectedPauseError,
    GovernanceToken,
    InsufficientAllowanceError,
    InsufficientBalanceError,
    OwnableUnauthorizedAccountError,
    PausedEvent,
    TokenError,
    TransferEvent,
    UnpausedEvent,
)

__all__ = [
    "ApprovalEvent",
    "EnforcedPauseError",
    "ExpectedPauseError",
    "GovernanceToken",
    "InsufficientAllowanceError",
    "InsufficientBalanceError",
    "OwnableUnauthorizedAccountError",
    "PausedEvent",
    "TokenError",
    "TransferEvent",
    "UnpausedEvent",
]
