"""
Governance Token Test Suite

Coverage:
  ERC-20 core : transfer, approve, transfer_from, balances, supply
  Ownership   : mint / pause / unpause restricted to the owner
  Pausing     : holder transfers blocked, owner custody moves allowed
  Addresses   : checksum normalisation, CREATE derivation
  Units       : whole tokens ↔ wei
"""

import logging
import os
import sys

import pytest

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from simpledao.address import format_address, generate_contract_address, normalize_address
from simpledao.constants import DEV_ACCOUNTS
from simpledao.exceptions import InvalidAddressError, SimpleDaoException
from simpledao.tokens import (
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
from simpledao.units import format_ether, parse_ether


# ══════════════════════════════════════════════════════════════════════
#  HELPERS
# ══════════════════════════════════════════════════════════════════════

OWNER, ALICE, BOB, CAROL = DEV_ACCOUNTS


def make_token(balances=None) -> GovernanceToken:
    token = GovernanceToken(owner=OWNER)
    for holder, amount in (balances or {ALICE: 1000}).items():
        token.mint(OWNER, holder, amount)
    return token


# ══════════════════════════════════════════════════════════════════════
#  ERC-20 CORE
# ══════════════════════════════════════════════════════════════════════


class TestTokenBasics:

    def test_metadata(self):
        token = GovernanceToken(owner=OWNER)
        assert token.name == "Governance Token"
        assert token.symbol == "GOV"
        assert token.decimals == 18
        assert token.total_supply == 0
        assert not token.paused

    def test_invalid_decimals(self):
        with pytest.raises(TokenError):
            GovernanceToken(owner=OWNER, decimals=19)

    def test_empty_symbol(self):
        with pytest.raises(TokenError):
            GovernanceToken(owner=OWNER, symbol="")

    def test_mint_increases_supply(self):
        token = make_token({ALICE: 1000, BOB: 500})
        assert token.total_supply == 1500
        assert token.balance_of(ALICE) == 1000
        assert token.holders() == {ALICE: 1000, BOB: 500}

    def test_mint_emits_transfer_from_zero(self):
        token = make_token()
        event = token.events[-1]
        assert isinstance(event, TransferEvent)
        assert event.sender is None
        assert event.to_dict()["from"] is None

    def test_transfer(self):
        token = make_token()
        event = token.transfer(ALICE, BOB, 300)
        assert token.balance_of(ALICE) == 700
        assert token.balance_of(BOB) == 300
        assert token.total_supply == 1000
        assert (event.sender, event.recipient, event.amount) == (ALICE, BOB, 300)

    def test_transfer_insufficient_balance(self):
        token = make_token()
        with pytest.raises(InsufficientBalanceError):
            token.transfer(ALICE, BOB, 1001)
        assert token.balance_of(ALICE) == 1000

    def test_transfer_zero_rejected(self):
        token = make_token()
        with pytest.raises(TokenError):
            token.transfer(ALICE, BOB, 0)

    def test_lowercase_addresses_normalised(self):
        token = make_token()
        token.transfer(ALICE.lower(), BOB.lower(), 10)
        assert token.balance_of(BOB) == 10

    def test_invalid_address(self):
        token = make_token()
        with pytest.raises(InvalidAddressError):
            token.balance_of("not-an-address")


class TestAllowances:

    def test_approve_and_transfer_from(self):
        token = make_token()
        event = token.approve(ALICE, BOB, 400)
        assert isinstance(event, ApprovalEvent)
        assert token.allowance(ALICE, BOB) == 400

        token.transfer_from(BOB, ALICE, CAROL, 150)
        assert token.balance_of(CAROL) == 150
        assert token.allowance(ALICE, BOB) == 250

    def test_allowance_checked_before_balance(self):
        token = make_token()
        with pytest.raises(InsufficientAllowanceError):
            token.transfer_from(BOB, CAROL, BOB, 10)

    def test_allowance_exceeds_balance(self):
        token = make_token()
        token.approve(ALICE, BOB, 5000)
        with pytest.raises(InsufficientBalanceError):
            token.transfer_from(BOB, ALICE, BOB, 2000)
        assert token.allowance(ALICE, BOB) == 5000

    def test_approve_replaces_allowance(self):
        token = make_token()
        token.approve(ALICE, BOB, 400)
        token.approve(ALICE, BOB, 0)
        assert token.allowance(ALICE, BOB) == 0

    def test_negative_approval_rejected(self):
        token = make_token()
        with pytest.raises(TokenError):
            token.approve(ALICE, BOB, -1)


# ══════════════════════════════════════════════════════════════════════
#  OWNERSHIP & PAUSING
# ══════════════════════════════════════════════════════════════════════


class TestOwnerOperations:

    def test_non_owner_cannot_mint(self):
        token = make_token()
        with pytest.raises(OwnableUnauthorizedAccountError):
            token.mint(ALICE, ALICE, 1)

    def test_non_owner_cannot_pause(self):
        token = make_token()
        with pytest.raises(OwnableUnauthorizedAccountError):
            token.pause(ALICE)
        assert not token.paused

    def test_token_errors_share_base(self):
        assert issubclass(OwnableUnauthorizedAccountError, TokenError)
        assert issubclass(TokenError, SimpleDaoException)


class TestPausing:

    def test_pause_blocks_holder_transfers(self):
        token = make_token()
        assert isinstance(token.pause(OWNER), PausedEvent)
        with pytest.raises(EnforcedPauseError):
            token.transfer(ALICE, BOB, 1)

    def test_pause_blocks_third_party_transfer_from(self):
        token = make_token()
        token.pause(OWNER)
        token.approve(ALICE, BOB, 100)
        with pytest.raises(EnforcedPauseError):
            token.transfer_from(BOB, ALICE, BOB, 100)
        assert token.allowance(ALICE, BOB) == 100

    def test_owner_moves_custody_while_paused(self):
        token = make_token()
        token.approve(ALICE, OWNER, 100)
        token.pause(OWNER)
        token.transfer_from(OWNER, ALICE, OWNER, 100)
        token.transfer(OWNER, ALICE, 40)
        assert token.balance_of(OWNER) == 60

    def test_minting_allowed_while_paused(self):
        token = make_token()
        token.pause(OWNER)
        token.mint(OWNER, BOB, 5)
        assert token.balance_of(BOB) == 5

    def test_double_pause(self):
        token = make_token()
        token.pause(OWNER)
        with pytest.raises(EnforcedPauseError):
            token.pause(OWNER)

    def test_unpause_requires_paused(self):
        token = make_token()
        with pytest.raises(ExpectedPauseError):
            token.unpause(OWNER)

    def test_unpause_restores_transfers(self):
        token = make_token()
        token.pause(OWNER)
        assert isinstance(token.unpause(OWNER), UnpausedEvent)
        token.transfer(ALICE, BOB, 1)
        assert token.balance_of(BOB) == 1


class TestTokenSerialization:

    def test_from_dict_restores_ledger(self):
        token = make_token({ALICE: 1000, BOB: 3})
        token.approve(ALICE, BOB, 7)
        token.pause(OWNER)

        restored = GovernanceToken.from_dict(token.to_dict())
        assert restored.owner == OWNER
        assert restored.total_supply == 1003
        assert restored.paused
        assert restored.balance_of(BOB) == 3
        assert restored.allowance(ALICE, BOB) == 7
        assert restored.events == []

    def test_restore_is_quiet_at_info(self, caplog):
        data = make_token().to_dict()
        caplog.set_level(logging.INFO)
        caplog.clear()
        GovernanceToken.from_dict(data)
        assert [r for r in caplog.records if r.levelno >= logging.INFO] == []


# ══════════════════════════════════════════════════════════════════════
#  ADDRESSES & UNITS
# ══════════════════════════════════════════════════════════════════════


class TestAddresses:

    def test_normalize_returns_checksum(self):
        assert normalize_address(ALICE.lower()) == ALICE

    def test_create_address_known_value(self):
        # First contract deployed by the default development account
        assert (
            generate_contract_address(OWNER, 0)
            == "0x5FbDB2315678afecb367f032d93F642f64180aa3"
        )

    def test_create_address_depends_on_nonce(self):
        assert generate_contract_address(OWNER, 0) != generate_contract_address(OWNER, 1)

    def test_format_short(self):
        short = format_address(ALICE, short=True)
        assert short.startswith(ALICE[:10])
        assert short.endswith(ALICE[-8:])


class TestUnits:

    def test_parse_ether(self):
        assert parse_ether("1") == 10 ** 18
        assert parse_ether("0.5") == 5 * 10 ** 17
        assert parse_ether(100) == 100 * 10 ** 18

    def test_format_ether(self):
        assert format_ether(10 ** 18) == "1"
        assert format_ether(0) == "0"
