"""Command-line interface for the stablecoin engine."""
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass

from .core.dsc import PRECISION, check_all
from .integration.deploy import Deployment, deploy_network
from .integration.network_config import list_networks
from .logging_setup import configure_logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScenarioReport:
    health_factor_after_mint: int
    health_factor_after_crash: int
    health_factor_after_liquidation: int
    collateral_seized: int
    user_collateral_left: int
    user_debt_left: int
    liquidator_collateral_balance: int
    invariant_violations: tuple[str, ...]


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="dsc-engine",
        description="Overcollateralized stablecoin engine",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a networks YAML file (default: the bundled networks.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("networks", help="List configured networks")

    scenario = sub.add_parser("scenario", help="Deposit, mint, crash the price, liquidate")
    scenario.add_argument("--network", default=None, help="Network name (default: $DSC_NETWORK or anvil)")
    scenario.add_argument("--collateral", type=int, default=10, help="Whole collateral tokens deposited by the user")
    scenario.add_argument("--mint", type=int, default=100, help="Whole DSC minted by the user")
    scenario.add_argument("--crash-price", type=int, default=18, help="Collateral price in whole USD after the crash")

    return parser


def run_scenario(
    deployment: Deployment,
    *,
    collateral: int = 10,
    mint: int = 100,
    crash_price: int = 18,
) -> ScenarioReport:
    """Walk one account from deposit to liquidation on the first listed collateral."""
    chain, engine, dsc = deployment.chain, deployment.engine, deployment.dsc
    symbol = deployment.config.collateral[0].symbol
    token, feed = deployment.token(symbol), deployment.feed(symbol)
    unit = 10**token.decimals

    user = chain.new_address("user")
    liquidator = chain.new_address("liquidator")
    amount_collateral = collateral * unit
    amount_dsc = mint * PRECISION

    # The liquidator opens a position twice the user's size before the crash.
    token.mint(user, amount_collateral)
    token.mint(liquidator, 2 * amount_collateral)

    token.approve(user, engine.address, amount_collateral)
    engine.deposit_collateral_and_mint_dsc(user, token.address, amount_collateral, amount_dsc)
    hf_after_mint = engine.get_health_factor(user)

    token.approve(liquidator, engine.address, 2 * amount_collateral)
    engine.deposit_collateral_and_mint_dsc(liquidator, token.address, 2 * amount_collateral, amount_dsc)

    feed.update_answer(crash_price * 10 ** feed.decimals())
    hf_after_crash = engine.get_health_factor(user)

    dsc.approve(liquidator, engine.address, amount_dsc)
    seized = engine.liquidate(liquidator, token.address, user, amount_dsc)

    return ScenarioReport(
        health_factor_after_mint=hf_after_mint,
        health_factor_after_crash=hf_after_crash,
        health_factor_after_liquidation=engine.get_health_factor(user),
        collateral_seized=seized,
        user_collateral_left=engine.get_collateral_balance_of_user(user, token.address),
        user_debt_left=engine.get_dsc_minted(user),
        liquidator_collateral_balance=token.balance_of(liquidator),
        invariant_violations=tuple(check_all(engine)),
    )


def _fmt(value: int, decimals: int = 18, places: int = 6) -> str:
    """Fixed-point integer as a decimal string, truncated to `places`."""
    if value >= 2**255:
        return "inf"
    whole, frac = divmod(value, 10**decimals)
    if decimals >= places:
        frac //= 10 ** (decimals - places)
    else:
        frac *= 10 ** (places - decimals)
    return f"{whole:,}.{frac:0{places}d}"


def _print_report(report: ScenarioReport, decimals: int) -> None:
    print(f"health factor after mint:        {_fmt(report.health_factor_after_mint)}")
    print(f"health factor after crash:       {_fmt(report.health_factor_after_crash)}")
    print(f"health factor after liquidation: {_fmt(report.health_factor_after_liquidation)}")
    print(f"collateral seized:               {_fmt(report.collateral_seized, decimals)}")
    print(f"user collateral left:            {_fmt(report.user_collateral_left, decimals)}")
    print(f"user debt left:                  {_fmt(report.user_debt_left)}")
    print(f"liquidator wallet collateral:    {_fmt(report.liquidator_collateral_balance, decimals)}")
    if report.invariant_violations:
        print(f"INVARIANTS VIOLATED: {', '.join(report.invariant_violations)}")
    else:
        print("invariants: ok")


def main(argv: list[str] | None = None) -> int:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    configure_logging(args.log_level)

    if args.command == "networks":
        for name in list_networks(args.config):
            print(name)
        return 0

    deployment = deploy_network(args.network, args.config)
    logger.debug("running scenario on %s", deployment.config.name)
    report = run_scenario(
        deployment,
        collateral=args.collateral,
        mint=args.mint,
        crash_price=args.crash_price,
    )
    decimals = deployment.token(deployment.config.collateral[0].symbol).decimals
    _print_report(report, decimals)
    return 1 if report.invariant_violations else 0


if __name__ == "__main__":
    sys.exit(main())
