"""
SimpleDao Proposal Engine

Implements:
  - a single active-proposal slot (EMPTY → ACTIVE → EMPTY)
  - token-weighted votes backed by custody of the voted tokens
  - quorum-gated finalization (60% of total supply by default)
  - token pause for the lifetime of the active proposal
  - withdrawal of custodied tokens once no proposal is active

Every operation checks all of its preconditions before mutating anything,
so a rejected call leaves engine and token untouched.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol

from ..address import generate_contract_address, normalize_address
from ..clock import Clock
from ..config.loader import GovernanceConfig, TokenConfig
from ..logger import get_logger
from ..tokens.governance_token import GovernanceToken
from .proposals import (
    AlreadyActiveProposalError,
    CantWithdrawWhileActiveProposalError,
    InvalidVoteAmountError,
    NonTokenHolderError,
    NotActiveProposalCurrentlyError,
    Proposal,
    ProposalResult,
    VotingDurationNotOverYetError,
    validate_proposal_fields,
)

logger = get_logger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  TOKEN CAPABILITY
# ══════════════════════════════════════════════════════════════════════

class TokenAdmin(Protocol):
    """Token interface the engine depends on. The engine must be its owner."""

    @property
    def total_supply(self) -> int: ...

    def balance_of(self, address: str) -> int: ...

    def transfer(self, sender: str, recipient: str, amount: int) -> Any: ...

    def transfer_from(self, spender: str, sender: str, recipient: str, amount: int) -> Any: ...

    def pause(self, caller: str) -> Any: ...

    def unpause(self, caller: str) -> Any: ...


# ══════════════════════════════════════════════════════════════════════
#  EVENTS
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class VoteCast:
    voter: str
    support_for: bool
    amount: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "VoteCast",
            "voter": self.voter,
            "supportFor": self.support_for,
            "amount": str(self.amount),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class ProposalFinalised:
    caller: str
    title: str
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "ProposalFinalised",
            "caller": self.caller,
            "title": self.title,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class TokensWithdrawn:
    voter: str
    amount: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "TokensWithdrawn",
            "voter": self.voter,
            "amount": str(self.amount),
            "timestamp": self.timestamp,
        }


# ══════════════════════════════════════════════════════════════════════
#  ENGINE
# ══════════════════════════════════════════════════════════════════════

class SimpleDao:
    """
    Token-custody governance engine.

    Responsibilities:
        - Hold zero or one active proposal
        - Move voted tokens into custody and tally them
        - Finalize with quorum and majority rules into an append-only history
        - Pause the token while a proposal is active
        - Return custodied tokens when no proposal is active
    """

    def __init__(
        self,
        address: str,
        token: TokenAdmin,
        clock: Optional[Callable[[], int]] = None,
        governance: Optional[GovernanceConfig] = None,
    ):
        """
        Args:
            address:    Engine address (custody account, token owner)
            token:      Governance token, owned by *address*
            clock:      Callable() → int current chain time; defaults to a Clock
            governance: Quorum / window / length rules
        """
        self.address = normalize_address(address)
        self._token = token
        self._clock = clock or Clock()
        self.governance = governance or GovernanceConfig()

        self._active: Optional[Proposal] = None
        self._past: List[Proposal] = []
        self._casted_votes: Dict[str, int] = {}
        self._events: List[Any] = []

    # ── Deployment ────────────────────────────────────────────────────

    @classmethod
    def deploy(
        cls,
        deployer: str,
        initial_holders: Iterable[str],
        *,
        initial_mint: Optional[int] = None,
        nonce: int = 0,
        clock: Optional[Callable[[], int]] = None,
        governance: Optional[GovernanceConfig] = None,
        token_config: Optional[TokenConfig] = None,
    ) -> "SimpleDao":
        """
        Deploy an engine and its governance token.

        The token is created by the engine (so the engine is its owner) and
        *initial_mint* wei is minted to every initial holder.
        """
        token_config = token_config or TokenConfig()
        if initial_mint is None:
            initial_mint = token_config.initial_mint_amount

        dao_address = generate_contract_address(deployer, nonce)
        # Contract accounts start at nonce 1
        token_address = generate_contract_address(dao_address, 1)

        token = GovernanceToken(
            owner=dao_address,
            name=token_config.name,
            symbol=token_config.symbol,
            decimals=token_config.decimals,
            address=token_address,
        )
        dao = cls(dao_address, token, clock=clock, governance=governance)

        holders = [normalize_address(h) for h in initial_holders]
        for holder in holders:
            token.mint(dao_address, holder, initial_mint)

        logger.info(
            f"SimpleDao deployed at {dao_address} by {normalize_address(deployer)}, "
            f"token {token_address}, {len(holders)} initial holders"
        )
        return dao

    # ── Read-only views ───────────────────────────────────────────────

    @property
    def gov_token(self) -> TokenAdmin:
        return self._token

    @property
    def clock(self) -> Callable[[], int]:
        return self._clock

    def now(self) -> int:
        return int(self._clock())

    @property
    def active_proposal(self) -> Optional[Proposal]:
        return self._active

    @property
    def has_active_proposal(self) -> bool:
        return self._active is not None

    def past_proposals(self, index: int) -> Proposal:
        if index < 0 or index >= len(self._past):
            raise IndexError(f"No past proposal at index {index}")
        return self._past[index]

    @property
    def past_proposal_count(self) -> int:
        return len(self._past)

    def all_past_proposals(self) -> List[Proposal]:
        return list(self._past)

    def user_to_casted_votes(self, address: str) -> int:
        return self._casted_votes.get(normalize_address(address), 0)

    @property
    def events(self) -> List[Any]:
        return list(self._events)

    # ── Proposal creation ─────────────────────────────────────────────

    def create_proposal(
        self,
        caller: str,
        title: str,
        description: str,
        voting_duration: int,
        initial_vote_amount: int,
        support_for: bool,
    ) -> Proposal:
        """
        Open a new proposal and cast the creator's initial vote.

        Args:
            caller: Creator address, must hold governance tokens
            title: Proposal title
            description: Proposal description
            voting_duration: Absolute voting deadline (unix seconds)
            initial_vote_amount: Tokens the creator votes with
            support_for: Direction of the initial vote
        """
        caller = normalize_address(caller)
        now = self.now()

        if self._active is not None:
            raise AlreadyActiveProposalError(
                f"Proposal '{self._active.title}' is still active"
            )
        if self._token.balance_of(caller) == 0:
            raise NonTokenHolderError(f"{caller} holds no governance tokens")
        rules = self.governance
        validate_proposal_fields(
            title,
            description,
            voting_duration,
            now,
            min_voting_window=rules.min_voting_window,
            max_voting_window=rules.max_voting_window,
            min_title_length=rules.min_title_length,
            min_description_length=rules.min_description_length,
        )

        proposal = Proposal(
            title=title,
            description=description,
            voting_duration=voting_duration,
            proposer=caller,
            created_at=now,
        )
        # Custody first: a failed transfer leaves the slot empty
        self._cast(proposal, caller, initial_vote_amount, support_for)
        self._active = proposal
        self._token.pause(self.address)

        logger.info(
            f"Proposal '{title}' created by {caller}, voting until {voting_duration}"
        )
        return proposal

    # ── Voting ────────────────────────────────────────────────────────

    def cast_vote(self, caller: str, amount: int, support_for: bool) -> VoteCast:
        """
        Vote on the active proposal with *amount* tokens.

        The caller must have approved the engine for at least *amount*.
        """
        caller = normalize_address(caller)
        if self._active is None:
            raise NotActiveProposalCurrentlyError("There is no active proposal")
        return self._cast(self._active, caller, amount, support_for)

    def _cast(
        self,
        proposal: Proposal,
        voter: str,
        amount: int,
        support_for: bool,
    ) -> VoteCast:
        if amount <= 0:
            raise InvalidVoteAmountError(f"Vote amount must be positive, got {amount}")

        self._token.transfer_from(self.address, voter, self.address, amount)

        if support_for:
            proposal.votes_for += amount
        else:
            proposal.votes_against += amount
        self._casted_votes[voter] = self._casted_votes.get(voter, 0) + amount

        event = VoteCast(voter=voter, support_for=support_for, amount=amount)
        self._events.append(event)
        logger.info(
            f"Vote: {voter} → {'FOR' if support_for else 'AGAINST'} "
            f"'{proposal.title}' ({amount} wei)"
        )
        return event

    # ── Finalization ──────────────────────────────────────────────────

    def compute_result(self, proposal: Proposal, total_supply: int) -> ProposalResult:
        """Quorum first, then strict FOR > AGAINST majority."""
        if proposal.total_votes * 100 < total_supply * self.governance.quorum_percent:
            return ProposalResult.DID_NOT_REACH_QUORUM
        if proposal.votes_for > proposal.votes_against:
            return ProposalResult.PASSED
        return ProposalResult.FAILED

    def finalize_proposal(self, caller: str) -> Proposal:
        """
        Close the active proposal once its deadline has passed.

        Records the outcome, moves the proposal into history, frees the slot
        and unpauses the token.
        """
        caller = normalize_address(caller)
        proposal = self._active
        if proposal is None:
            raise NotActiveProposalCurrentlyError("There is no active proposal")
        now = self.now()
        if not proposal.is_voting_over(now):
            raise VotingDurationNotOverYetError(
                f"Voting on '{proposal.title}' ends at {proposal.voting_duration} "
                f"(now {now})"
            )

        total_supply = self._token.total_supply
        self._token.unpause(self.address)

        proposal.result = self.compute_result(proposal, total_supply)
        proposal.has_finalised = True
        proposal.finalised_at = now
        self._past.append(proposal)
        self._active = None

        event = ProposalFinalised(caller=caller, title=proposal.title)
        self._events.append(event)

        if proposal.result == ProposalResult.DID_NOT_REACH_QUORUM:
            logger.warning(
                f"Proposal '{proposal.title}': DID_NOT_REACH_QUORUM "
                f"({proposal.total_votes}/{total_supply} wei voted)"
            )
        else:
            logger.info(
                f"Proposal '{proposal.title}': {proposal.result.name} "
                f"(for={proposal.votes_for}, against={proposal.votes_against})"
            )
        return proposal

    # ── Withdrawal ────────────────────────────────────────────────────

    def withdraw_tokens(self, caller: str) -> int:
        """Return all of the caller's custodied tokens. Returns the amount."""
        caller = normalize_address(caller)
        if self._active is not None:
            raise CantWithdrawWhileActiveProposalError(
                f"Cannot withdraw while '{self._active.title}' is active"
            )

        amount = self._casted_votes.get(caller, 0)
        if amount > 0:
            self._token.transfer(self.address, caller, amount)
            del self._casted_votes[caller]

        event = TokensWithdrawn(voter=caller, amount=amount)
        self._events.append(event)
        logger.info(f"Withdrawal: {caller} ← {amount} wei")
        return amount

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "activeProposal": self._active.to_dict() if self._active else None,
            "pastProposals": [p.to_dict() for p in self._past],
            "userToCastedVotes": {
                a: str(v) for a, v in self._casted_votes.items()
            },
        }

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        token: TokenAdmin,
        clock: Optional[Callable[[], int]] = None,
        governance: Optional[GovernanceConfig] = None,
    ) -> "SimpleDao":
        dao = cls(data["address"], token, clock=clock, governance=governance)
        active = data.get("activeProposal")
        dao._active = Proposal.from_dict(active) if active else None
        dao._past = [Proposal.from_dict(p) for p in data.get("pastProposals", [])]
        dao._casted_votes = {
            normalize_address(a): int(v)
            for a, v in data.get("userToCastedVotes", {}).items()
        }
        return dao

    def __repr__(self) -> str:
        state = f"'{self._active.title}'" if self._active else "EMPTY"
        return f"<SimpleDao {self.address} active={state} past={len(self._past)}>"
