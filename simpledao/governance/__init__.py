"""
SimpleDao Governance

Provides:
  - Proposal / ProposalResult / governance errors   (proposals.py)
  - SimpleDao engine / TokenAdmin / engine events     (dao.py)
"""

from .proposals import (
    AlreadyActiveProposalError,
    CantWithdrawWhileActiveProposalError,
    EligibilityError,
    GovernanceError,
    InvalidVoteAmountError,
    NonTokenHolderError,
    NotActiveProposalCurrentlyError,
    Proposal,
    ProposalResult,
    ProposalValidationError,
    StateConflictError,
    TooLongVotingDurationError,
    TooShortDescriptionError,
    TooShortTitleError,
    TooShortVotingDurationError,
    VotingDurationNotOverYetError,
)
from .dao import (
    ProposalFinalised,
    SimpleDao,
    TokenAdmin,
    TokensWithdrawn,
    VoteCast,
)

__all__ = [
    # Proposals
    "AlreadyActiveProposalError",
    "CantWithdrawWhileActiveProposalError",
    "EligibilityError",
    "GovernanceError",
    "InvalidVoteAmountError",
    "NonTokenHolderError",
    "NotActiveProposalCurrentlyError",
    "Proposal",
    "ProposalResult",
    "ProposalValidationError",
    "StateConflictError",
    "TooLongVotingDurationError",
    "TooShortDescriptionError",
    "TooShortTitleError",
    "TooShortVotingDurationError",
    "VotingDurationNotOverYetError",
    # Engine
    "ProposalFinalised",
    "SimpleDao",
    "TokenAdmin",
    "TokensWithdrawn",
    "VoteCast",
]
