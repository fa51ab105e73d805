"""Invariant checkers for the stablecoin engine.

Each function returns True when the invariant holds, and `check_all()` returns
the list of violated invariant IDs (empty = all pass).

These are global conservation laws across every account. Per-account health is
not among them: a price move can legitimately push an account below the
minimum until it is liquidated.
"""

from __future__ import annotations

from typing import Callable

from .engine import DSCEngine


def inv_debt_matches_supply(engine: DSCEngine) -> bool:
    """Every DSC in existence is somebody's recorded debt, and vice versa."""
    return engine.get_total_dsc_minted() == engine.dsc.total_supply()


def inv_collateral_held(engine: DSCEngine) -> bool:
    """The engine holds at least as many tokens as its ledger says were deposited."""
    for token in engine.get_collateral_tokens():
        held = engine.get_collateral_token(token).balance_of(engine.address)
        if held < engine.get_total_collateral(token):
            return False
    return True


def inv_engine_holds_no_dsc(engine: DSCEngine) -> bool:
    """DSC pulled in for repayment is burned in the same transaction."""
    return engine.dsc.balance_of(engine.address) == 0


def inv_protocol_solvent(engine: DSCEngine) -> bool:
    """USD value of all deposited collateral covers all outstanding DSC.

    Reads live prices; raises if a feed is stale.
    """
    total_value = sum(
        engine.get_usd_value(token, engine.get_total_collateral(token))
        for token in engine.get_collateral_tokens()
    )
    return total_value >= engine.get_total_dsc_minted()


# ---------------------------------------------------------------------------
# Registry + check_all
# ---------------------------------------------------------------------------

INVARIANT_REGISTRY: dict[str, Callable[[DSCEngine], bool]] = {
    "inv_debt_matches_supply": inv_debt_matches_supply,
    "inv_collateral_held": inv_collateral_held,
    "inv_engine_holds_no_dsc": inv_engine_holds_no_dsc,
    "inv_protocol_solvent": inv_protocol_solvent,
}


def check_all(engine: DSCEngine) -> list[str]:
    """Return list of violated invariant IDs (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in INVARIANT_REGISTRY.items()
        if not check_fn(engine)
    ]
