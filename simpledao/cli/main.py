#!/usr/bin/env python3
"""
SimpleDao CLI

Command-line interface for deploying and operating a SimpleDao on a local
state file.

Usage:
    simpledao deploy [--holders A,B] [--network NAME] [--deployer ADDR]
    simpledao balance <address>
    simpledao mint <address> <amount>
    simpledao transfer <from> <to> <amount>
    simpledao approve <owner> <amount> [--spender ADDR]
    simpledao propose <caller> <title> <description> --days N --amount A [--against]
    simpledao vote <caller> <amount> [--against]
    simpledao finalize <caller>
    simpledao withdraw <caller>
    simpledao status
    simpledao proposals
    simpledao time-travel <seconds>
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional

import click

from .. import __version__
from ..address import format_address
from ..config.loader import load_config
from ..constants import SECONDS_PER_DAY
from ..exceptions import ConfigurationError, SimpleDaoException
from ..logger import set_log_level
from ..state import ChainState
from ..units import format_ether, parse_ether


def format_timestamp(ts: int) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def parse_amount(value: str) -> int:
    """Whole-token CLI argument → wei."""
    try:
        amount = parse_ether(value)
    except (ValueError, ArithmeticError):
        raise click.BadParameter(f"Invalid token amount: {value}")
    if amount <= 0:
        raise click.BadParameter("Amount must be positive")
    return amount


@contextmanager
def chain_session(ctx: click.Context, save: bool = True) -> Iterator[ChainState]:
    """Load the state file, run a command against it, save on success."""
    obj = ctx.obj
    try:
        state = ChainState.load(obj["state_path"], obj["config"])
        yield state
    except SimpleDaoException as e:
        raise click.ClickException(f"{type(e).__name__}: {e}")
    if save:
        state.save(obj["state_path"])


@click.group()
@click.version_option(version=__version__, prog_name="simpledao")
@click.option("--config", "config_path", type=click.Path(), default=None,
              help="Path to simpledao.toml")
@click.option("--state", "state_path", type=click.Path(), default=None,
              help="Path to the JSON state file (overrides config)")
@click.option("--log-level", default=None,
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                                case_sensitive=False),
              help="Logging level")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str], state_path: Optional[str],
        log_level: Optional[str]):
    """SimpleDao Command Line Interface

    Deploy a governance token and DAO, then create proposals, vote,
    finalize and withdraw.
    """
    try:
        config = load_config(config_path)
    except ConfigurationError as e:
        raise click.ClickException(str(e))

    set_log_level(log_level or config.log_level)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["state_path"] = state_path or config.state.path


# ── Deployment & token tasks ─────────────────────────────────────────

@cli.command("deploy")
@click.option("--holders", default=None,
              help="Comma-separated list of initial token holders")
@click.option("--network", default=None, help="Network name (default from config)")
@click.option("--deployer", default=None, help="Deployer address")
@click.option("--force", is_flag=True, help="Overwrite an existing deployment")
@click.pass_context
def deploy_cmd(ctx: click.Context, holders: Optional[str], network: Optional[str],
               deployer: Optional[str], force: bool):
    """Deploy SimpleDao and its Governance Token.

    Examples:

        simpledao deploy

        simpledao deploy --holders 0xabc...,0xdef... --network sepolia
    """
    config = ctx.obj["config"]
    state_path = ctx.obj["state_path"]
    if Path(state_path).exists() and not force:
        raise click.ClickException(
            f"A deployment already exists at {state_path} (use --force to replace it)"
        )
    if network:
        config.network.name = network

    holder_list = [h.strip() for h in holders.split(",") if h.strip()] if holders else []

    try:
        state = ChainState.deploy(config, holders=holder_list, deployer=deployer)
    except SimpleDaoException as e:
        raise click.ClickException(f"{type(e).__name__}: {e}")
    state.save(state_path)

    click.echo(f"Deploying contracts with account: {deployer or config.network.deployer}")
    click.echo(f"SimpleDao deployed to: {state.dao.address}")
    click.echo(f"GovernanceToken deployed to: {state.token.address}")
    for holder, balance in state.token.holders().items():
        click.echo(f"  {holder}: {format_ether(balance)} {state.token.symbol}")


@cli.command("balance")
@click.argument("address")
@click.pass_context
def balance_cmd(ctx: click.Context, address: str):
    """Print an account's token balance."""
    with chain_session(ctx, save=False) as state:
        balance = state.token.balance_of(address)
        click.echo(f"Balance WEI {balance}")
        click.echo(f"Balance {state.token.symbol} {format_ether(balance)}")


@cli.command("mint")
@click.argument("address")
@click.argument("amount")
@click.pass_context
def mint_cmd(ctx: click.Context, address: str, amount: str):
    """Mint AMOUNT tokens to ADDRESS (executed as the token owner)."""
    wei = parse_amount(amount)
    with chain_session(ctx) as state:
        before = state.token.balance_of(address)
        state.token.mint(state.token.owner, address, wei)
        after = state.token.balance_of(address)
        click.echo(f"Token balance before mint: {format_ether(before)}")
        click.echo(f"Token balance after mint: {format_ether(after)}")
        click.echo(f"Minted {amount} tokens to {address}")


@cli.command("transfer")
@click.argument("sender")
@click.argument("recipient")
@click.argument("amount")
@click.pass_context
def transfer_cmd(ctx: click.Context, sender: str, recipient: str, amount: str):
    """Transfer AMOUNT tokens from SENDER to RECIPIENT."""
    wei = parse_amount(amount)
    with chain_session(ctx) as state:
        state.token.transfer(sender, recipient, wei)
        click.echo(
            f"Transferred {amount} {state.token.symbol} "
            f"{format_address(sender, short=True)} → {format_address(recipient, short=True)}"
        )
        click.echo(f"Recipient balance: {format_ether(state.token.balance_of(recipient))}")


@cli.command("approve")
@click.argument("owner")
@click.argument("amount")
@click.option("--spender", default=None, help="Spender address (default: the DAO)")
@click.pass_context
def approve_cmd(ctx: click.Context, owner: str, amount: str, spender: Optional[str]):
    """Allow SPENDER (default: the DAO) to move AMOUNT of OWNER's tokens."""
    wei = parse_amount(amount)
    with chain_session(ctx) as state:
        spender = spender or state.dao.address
        state.token.approve(owner, spender, wei)
        click.echo(f"Approved {amount} {state.token.symbol} for {spender}")


# ── Governance ───────────────────────────────────────────────────────

@cli.command("propose")
@click.argument("caller")
@click.argument("title")
@click.argument("description")
@click.option("--days", type=int, default=5, show_default=True,
              help="Voting window in days from now")
@click.option("--deadline", type=int, default=None,
              help="Absolute voting deadline (unix seconds), overrides --days")
@click.option("--amount", required=True, help="Tokens for the initial vote")
@click.option("--against", is_flag=True, help="Initial vote is AGAINST")
@click.pass_context
def propose_cmd(ctx: click.Context, caller: str, title: str, description: str,
                days: int, deadline: Optional[int], amount: str, against: bool):
    """Create a proposal and cast CALLER's initial vote.

    CALLER must have approved the DAO for at least --amount tokens.
    """
    wei = parse_amount(amount)
    with chain_session(ctx) as state:
        voting_end = deadline if deadline is not None else state.clock.now() + days * SECONDS_PER_DAY
        proposal = state.dao.create_proposal(caller, title, description, voting_end, wei, not against)
        click.echo(f"Proposal '{proposal.title}' created")
        click.echo(f"Voting ends: {format_timestamp(proposal.voting_duration)}")


@cli.command("vote")
@click.argument("caller")
@click.argument("amount")
@click.option("--against", is_flag=True, help="Vote AGAINST (default FOR)")
@click.pass_context
def vote_cmd(ctx: click.Context, caller: str, amount: str, against: bool):
    """Vote on the active proposal with AMOUNT tokens."""
    wei = parse_amount(amount)
    with chain_session(ctx) as state:
        event = state.dao.cast_vote(caller, wei, not against)
        direction = "FOR" if event.support_for else "AGAINST"
        click.echo(f"{event.voter} voted {direction} with {amount} tokens")


@cli.command("finalize")
@click.argument("caller")
@click.pass_context
def finalize_cmd(ctx: click.Context, caller: str):
    """Finalize the active proposal after its deadline."""
    with chain_session(ctx) as state:
        proposal = state.dao.finalize_proposal(caller)
        click.echo(f"Proposal '{proposal.title}' finalised: {proposal.result.name}")


@cli.command("withdraw")
@click.argument("caller")
@click.pass_context
def withdraw_cmd(ctx: click.Context, caller: str):
    """Withdraw all of CALLER's custodied vote tokens."""
    with chain_session(ctx) as state:
        amount = state.dao.withdraw_tokens(caller)
        click.echo(f"Withdrew {format_ether(amount)} {state.token.symbol}")


# ── Queries & time ───────────────────────────────────────────────────

@cli.command("status")
@click.pass_context
def status_cmd(ctx: click.Context):
    """Show the active proposal, token state and chain time."""
    with chain_session(ctx, save=False) as state:
        dao, token = state.dao, state.token
        click.echo(f"Network:      {state.network}")
        click.echo(f"DAO:          {dao.address}")
        click.echo(f"Token:        {token.address} ({token.symbol})")
        click.echo(f"Total supply: {format_ether(token.total_supply)}")
        click.echo(f"Paused:       {token.paused}")
        click.echo(f"Chain time:   {format_timestamp(state.clock.now())}")
        proposal = dao.active_proposal
        if proposal is None:
            click.echo("Active proposal: none")
            return
        click.echo(f"Active proposal: '{proposal.title}'")
        click.echo(f"  {proposal.description}")
        click.echo(f"  Ends:    {format_timestamp(proposal.voting_duration)}")
        click.echo(f"  For:     {format_ether(proposal.votes_for)}")
        click.echo(f"  Against: {format_ether(proposal.votes_against)}")


@cli.command("proposals")
@click.pass_context
def proposals_cmd(ctx: click.Context):
    """List finalised proposals."""
    with chain_session(ctx, save=False) as state:
        past = state.dao.all_past_proposals()
        if not past:
            click.echo("No finalised proposals")
            return
        for i, p in enumerate(past):
            click.echo(
                f"[{i}] {p.title}: {p.result.name} "
                f"(for={format_ether(p.votes_for)}, against={format_ether(p.votes_against)})"
            )


@cli.command("time-travel")
@click.argument("seconds", type=int, required=False)
@click.option("--days", type=int, default=None, help="Advance by whole days instead")
@click.pass_context
def time_travel_cmd(ctx: click.Context, seconds: Optional[int], days: Optional[int]):
    """Advance chain time by SECONDS (or --days)."""
    if days is not None:
        seconds = days * SECONDS_PER_DAY
    if not seconds or seconds <= 0:
        raise click.BadParameter("Provide a positive SECONDS or --days")
    with chain_session(ctx) as state:
        now = state.clock.increase(seconds)
        click.echo(f"Chain time is now {format_timestamp(now)}")


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
