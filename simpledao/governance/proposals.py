"""
Governance Proposals

Defines the proposal outcome enum, the Proposal dataclass tracked by the
engine, the governance error taxonomy, and creation-time validation.
"""

import time
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Optional

from ..constants import (
    MAX_VOTING_WINDOW,
    MIN_DESCRIPTION_LENGTH,
    MIN_TITLE_LENGTH,
    MIN_VOTING_WINDOW,
)
from ..exceptions import SimpleDaoException


# ══════════════════════════════════════════════════════════════════════
#  EXCEPTIONS
# ══════════════════════════════════════════════════════════════════════

class GovernanceError(SimpleDaoException):
    """Base governance exception. Raised calls leave state unchanged."""


class EligibilityError(GovernanceError):
    """Caller is not allowed to perform the operation."""


class StateConflictError(GovernanceError):
    """Operation is not valid in the engine's current state."""


class ProposalValidationError(GovernanceError):
    """Proposal or vote arguments are invalid."""


class NonTokenHolderError(EligibilityError):
    """Proposal creator holds no governance tokens."""


class AlreadyActiveProposalError(StateConflictError):
    """A proposal is already active."""


class NotActiveProposalCurrentlyError(StateConflictError):
    """No proposal is active."""


class CantWithdrawWhileActiveProposalError(StateConflictError):
    """Custodied tokens are locked while a proposal is active."""


class VotingDurationNotOverYetError(StateConflictError):
    """Voting deadline has not passed yet."""


class TooShortVotingDurationError(ProposalValidationError):
    pass


class TooLongVotingDurationError(ProposalValidationError):
    pass


class TooShortTitleError(ProposalValidationError):
    pass


class TooShortDescriptionError(ProposalValidationError):
    pass


class InvalidVoteAmountError(ProposalValidationError):
    """Vote amount must be positive."""


# ══════════════════════════════════════════════════════════════════════
#  ENUMS
# ══════════════════════════════════════════════════════════════════════

class ProposalResult(IntEnum):
    """Outcome recorded at finalization."""
    PASSED = 0
    FAILED = 1
    DID_NOT_REACH_QUORUM = 2


# ══════════════════════════════════════════════════════════════════════
#  VALIDATION
# ══════════════════════════════════════════════════════════════════════

def validate_proposal_fields(
    title: str,
    description: str,
    voting_duration: int,
    now: int,
    min_voting_window: int = MIN_VOTING_WINDOW,
    max_voting_window: int = MAX_VOTING_WINDOW,
    min_title_length: int = MIN_TITLE_LENGTH,
    min_description_length: int = MIN_DESCRIPTION_LENGTH,
):
    """
    Check deadline window, title and description.

    The deadline must satisfy ``now + min <= voting_duration <= now + max``;
    title and description lengths must be strictly greater than the minimums.
    """
    if voting_duration < now + min_voting_window:
        raise TooShortVotingDurationError(
            f"Voting deadline {voting_duration} is earlier than "
            f"{now + min_voting_window} (now + {min_voting_window}s)"
        )
    if voting_duration > now + max_voting_window:
        raise TooLongVotingDurationError(
            f"Voting deadline {voting_duration} is later than "
            f"{now + max_voting_window} (now + {max_voting_window}s)"
        )
    if len(title) <= min_title_length:
        raise TooShortTitleError(
            f"Title must be longer than {min_title_length} characters"
        )
    if len(description) <= min_description_length:
        raise TooShortDescriptionError(
            f"Description must be longer than {min_description_length} characters"
        )


# ══════════════════════════════════════════════════════════════════════
#  PROPOSAL
# ══════════════════════════════════════════════════════════════════════

@dataclass
class Proposal:
    """
    A governance proposal.

    Fields:
        title:            Short title
        description:      Detailed description / rationale
        voting_duration:  Absolute voting deadline (unix seconds)
        proposer:         Address of the creator
        votes_for:        Token weight voted FOR
        votes_against:    Token weight voted AGAINST
        has_finalised:    Set once at finalization
        result:           Outcome, None until finalized
        created_at:       Chain time of creation
        finalised_at:     Chain time of finalization
    """
    title: str
    description: str
    voting_duration: int
    proposer: str = ""
    votes_for: int = 0
    votes_against: int = 0
    has_finalised: bool = False
    result: Optional[ProposalResult] = None
    created_at: int = field(default_factory=lambda: int(time.time()))
    finalised_at: Optional[int] = None

    @property
    def total_votes(self) -> int:
        return self.votes_for + self.votes_against

    def is_voting_over(self, now: int) -> bool:
        return now > self.voting_duration

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "votingDuration": self.voting_duration,
            "proposer": self.proposer,
            "votesFor": str(self.votes_for),
            "votesAgainst": str(self.votes_against),
            "hasFinalised": self.has_finalised,
            "result": self.result.name if self.result is not None else None,
            "createdAt": self.created_at,
            "finalisedAt": self.finalised_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Proposal":
        result = data.get("result")
        return cls(
            title=data["title"],
            description=data["description"],
            voting_duration=int(data["votingDuration"]),
            proposer=data.get("proposer", ""),
            votes_for=int(data.get("votesFor", "0")),
            votes_against=int(data.get("votesAgainst", "0")),
            has_finalised=bool(data.get("hasFinalised", False)),
            result=ProposalResult[result] if result is not None else None,
            created_at=int(data.get("createdAt", 0)),
            finalised_at=data.get("finalisedAt"),
        )

    def __repr__(self) -> str:
        outcome = self.result.name if self.result is not None else "ACTIVE"
        return (
            f"<Proposal '{self.title}' for={self.votes_for} "
            f"against={self.votes_against} {outcome}>"
        )
