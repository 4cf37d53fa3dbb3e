"""
Chain State & CLI Test Suite

Coverage:
  ChainState : deploy with default / explicit holders, JSON persistence,
               corrupt and missing state files
  Clock      : frozen time, forward-only travel
  CLI        : full proposal lifecycle through click commands
"""

import json
import os
import sys

import pytest
from click.testing import CliRunner

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from simpledao.cli import cli
from simpledao.clock import Clock
from simpledao.config import DaoConfig, GovernanceConfig
from simpledao.constants import DEV_ACCOUNTS, INITIAL_MINT_AMOUNT, SECONDS_PER_DAY
from simpledao.exceptions import StateFileError
from simpledao.governance import ProposalResult
from simpledao.state import ChainState
from simpledao.units import parse_ether

OWNER, USER1, USER2, USER3 = DEV_ACCOUNTS
START = 1_700_000_000


# ══════════════════════════════════════════════════════════════════════
#  CLOCK
# ══════════════════════════════════════════════════════════════════════


class TestClock:

    def test_frozen_start(self):
        clock = Clock(start=START)
        assert clock.now() == START
        assert clock() == START

    def test_increase(self):
        clock = Clock(start=START)
        assert clock.increase(60) == START + 60
        assert clock.increase_to(START + 120) == START + 120
        assert clock.offset == 120

    def test_time_only_moves_forward(self):
        clock = Clock(start=START)
        with pytest.raises(ValueError):
            clock.increase(0)
        with pytest.raises(ValueError):
            clock.increase_to(START)

    def test_from_dict(self):
        clock = Clock.from_dict(Clock(start=START, offset=5).to_dict())
        assert clock.now() == START + 5


# ══════════════════════════════════════════════════════════════════════
#  CHAIN STATE
# ══════════════════════════════════════════════════════════════════════


class TestChainState:

    def test_local_network_uses_default_holders(self):
        state = ChainState.deploy(DaoConfig(), clock=Clock(start=START))
        assert state.network == "hardhat"
        assert state.token.balance_of(DEV_ACCOUNTS[0]) == INITIAL_MINT_AMOUNT
        assert state.token.balance_of(DEV_ACCOUNTS[1]) == INITIAL_MINT_AMOUNT
        assert state.token.total_supply == 2 * INITIAL_MINT_AMOUNT

    def test_explicit_holders(self):
        state = ChainState.deploy(DaoConfig(), holders=[USER3], clock=Clock(start=START))
        assert state.token.holders() == {USER3: INITIAL_MINT_AMOUNT}

    def test_remote_network_without_holders_mints_nothing(self):
        config = DaoConfig()
        config.network.name = "sepolia"
        state = ChainState.deploy(config, clock=Clock(start=START))
        assert state.token.total_supply == 0

    def test_save_and_load(self, tmp_path):
        path = str(tmp_path / "state.json")
        state = ChainState.deploy(DaoConfig(), holders=[USER1, USER3], clock=Clock(start=START))
        dao, token = state.dao, state.token
        token.approve(USER1, dao.address, INITIAL_MINT_AMOUNT)
        token.approve(USER3, dao.address, INITIAL_MINT_AMOUNT)
        dao.create_proposal(USER1, "Persisted", "Stored across CLI runs",
                            START + 5 * SECONDS_PER_DAY, parse_ether("80"), True)
        dao.cast_vote(USER3, parse_ether("50"), False)
        state.save(path)

        loaded = ChainState.load(path, DaoConfig())
        assert loaded.dao.address == dao.address
        assert loaded.token.paused
        assert loaded.dao.active_proposal.votes_against == parse_ether("50")
        assert loaded.dao.user_to_casted_votes(USER1) == parse_ether("80")
        assert loaded.token.allowance(USER1, dao.address) == parse_ether("20")

        loaded.clock.increase(6 * SECONDS_PER_DAY)
        proposal = loaded.dao.finalize_proposal(USER2)
        assert proposal.result == ProposalResult.PASSED
        assert loaded.dao.withdraw_tokens(USER3) == parse_ether("50")

    def test_missing_file(self, tmp_path):
        with pytest.raises(StateFileError):
            ChainState.load(str(tmp_path / "absent.json"))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{not json")
        with pytest.raises(StateFileError):
            ChainState.load(str(path))

    def test_unsupported_version(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text(json.dumps({"version": 99}))
        with pytest.raises(StateFileError):
            ChainState.load(str(path))

    def test_corrupt_payload(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text(json.dumps({"version": 1, "token": {}}))
        with pytest.raises(StateFileError):
            ChainState.load(str(path))

    def test_governance_rules_saved_with_deployment(self, tmp_path):
        path = str(tmp_path / "state.json")
        deploy_config = DaoConfig()
        deploy_config.governance = GovernanceConfig(quorum_percent=5)
        state = ChainState.deploy(deploy_config, holders=[USER1, USER3], clock=Clock(start=START))
        state.token.approve(USER1, state.dao.address, INITIAL_MINT_AMOUNT)
        state.dao.create_proposal(USER1, "Low quorum", "Decided by a small turnout",
                                  START + 5 * SECONDS_PER_DAY, parse_ether("20"), True)
        state.save(path)

        # a later command runs with the default 60% quorum
        loaded = ChainState.load(path, DaoConfig())
        assert loaded.dao.governance.quorum_percent == 5
        loaded.clock.increase(6 * SECONDS_PER_DAY)
        assert loaded.dao.finalize_proposal(USER1).result == ProposalResult.PASSED

    def test_state_without_rules_uses_config(self, tmp_path):
        path = tmp_path / "state.json"
        state = ChainState.deploy(DaoConfig(), holders=[USER1], clock=Clock(start=START))
        data = state.to_dict()
        del data["governance"]
        path.write_text(json.dumps(data))

        config = DaoConfig()
        config.governance.quorum_percent = 40
        assert ChainState.load(str(path), config).dao.governance.quorum_percent == 40

    def test_corrupt_governance_rules(self, tmp_path):
        path = tmp_path / "state.json"
        data = ChainState.deploy(DaoConfig(), holders=[USER1], clock=Clock(start=START)).to_dict()
        data["governance"]["quorum_percent"] = "60"
        path.write_text(json.dumps(data))
        with pytest.raises(StateFileError):
            ChainState.load(str(path))


# ══════════════════════════════════════════════════════════════════════
#  CLI
# ══════════════════════════════════════════════════════════════════════


@pytest.fixture
def run(tmp_path, monkeypatch):
    for name in ("SIMPLEDAO_CONFIG", "SIMPLEDAO_STATE_PATH", "SIMPLEDAO_NETWORK"):
        monkeypatch.delenv(name, raising=False)
    runner = CliRunner()
    base = [
        "--config", str(tmp_path / "simpledao.toml"),
        "--state", str(tmp_path / "state.json"),
    ]

    def invoke(*args):
        return runner.invoke(cli, base + list(args), obj={})

    return invoke


class TestCli:

    def test_commands_require_deployment(self, run):
        result = run("status")
        assert result.exit_code != 0
        assert "StateFileError" in result.output

    def test_deploy(self, run):
        result = run("deploy")
        assert result.exit_code == 0, result.output
        assert "SimpleDao deployed to:" in result.output
        assert "GovernanceToken deployed to:" in result.output

        again = run("deploy")
        assert again.exit_code != 0
        assert "already exists" in again.output

        forced = run("deploy", "--force", "--holders", USER3)
        assert forced.exit_code == 0, forced.output

    def test_balance(self, run):
        run("deploy", "--holders", f"{USER1},{USER3}")
        result = run("balance", USER1)
        assert result.exit_code == 0, result.output
        assert f"Balance WEI {INITIAL_MINT_AMOUNT}" in result.output
        assert "Balance GOV 100" in result.output

    def test_mint_and_transfer(self, run):
        run("deploy", "--holders", USER1)
        assert run("mint", USER2, "50").exit_code == 0
        result = run("transfer", USER2, USER3, "20")
        assert result.exit_code == 0, result.output
        assert "Recipient balance: 20" in result.output

    def test_full_proposal_lifecycle(self, run):
        assert run("deploy", "--holders", f"{USER1},{USER3}").exit_code == 0
        assert run("approve", USER1, "100").exit_code == 0
        assert run("approve", USER3, "100").exit_code == 0

        result = run("propose", USER1, "Fund the garden",
                     "Spend treasury on the community garden",
                     "--days", "5", "--amount", "100")
        assert result.exit_code == 0, result.output
        assert "Proposal 'Fund the garden' created" in result.output

        blocked = run("transfer", USER3, USER2, "1")
        assert blocked.exit_code != 0
        assert "EnforcedPauseError" in blocked.output

        assert run("vote", USER3, "30", "--against").exit_code == 0

        early = run("finalize", USER2)
        assert early.exit_code != 0
        assert "VotingDurationNotOverYetError" in early.output

        locked = run("withdraw", USER1)
        assert "CantWithdrawWhileActiveProposalError" in locked.output

        status = run("status")
        assert "Active proposal: 'Fund the garden'" in status.output
        assert "Paused:       True" in status.output

        assert run("time-travel", "--days", "6").exit_code == 0
        final = run("finalize", USER2)
        assert final.exit_code == 0, final.output
        assert "Proposal 'Fund the garden' finalised: PASSED" in final.output

        withdrawn = run("withdraw", USER1)
        assert withdrawn.exit_code == 0, withdrawn.output
        assert "Withdrew 100 GOV" in withdrawn.output

        listing = run("proposals")
        assert "[0] Fund the garden: PASSED" in listing.output

    def test_second_proposal_rejected(self, run):
        run("deploy", "--holders", USER1)
        run("approve", USER1, "100")
        run("propose", USER1, "First", "The first proposal text", "--amount", "10")
        result = run("propose", USER1, "Second", "The second proposal text", "--amount", "10")
        assert result.exit_code != 0
        assert "AlreadyActiveProposalError" in result.output

    def test_invalid_amount(self, run):
        run("deploy")
        result = run("vote", USER1, "-5")
        assert result.exit_code != 0

    def test_bad_config_reported_without_traceback(self, tmp_path, monkeypatch):
        monkeypatch.delenv("SIMPLEDAO_CONFIG", raising=False)
        config = tmp_path / "simpledao.toml"
        config.write_text('[governance]\nquorum_percent = "60"\n')
        result = CliRunner().invoke(
            cli, ["--config", str(config), "--state", str(tmp_path / "s.json"), "status"], obj={}
        )
        assert result.exit_code == 1
        assert "quorum_percent must be int" in result.output
        assert not isinstance(result.exception, TypeError)

    def test_time_travel_requires_positive(self, run):
        run("deploy")
        assert run("time-travel").exit_code != 0
