#!/usr/bin/env python3
"""
Scenario simulator for the rewards engine.

Runs a YAML scenario against a fresh ledger, linear dripper and engine, then
prints a JSON report: per-step results, final global state, and delivered vs
paid totals (the difference is truncation dust still sitting in the vault).

Scenario format:

    token: DRIP
    start_block: 100
    rate_per_block: 10
    fund: 1000000              # initial dripper balance
    engine:                    # optional EngineConfig keys
      authorized: [debt-ledger]
    steps:
      - {op: set_weight, participant: alice, weight: 10}
      - {op: advance, blocks: 10}
      - {op: pending, participant: alice}
      - {op: claim, participant: alice}
      - {op: fund, amount: 500}
      - {op: set_rate, rate: 5}
      - {op: update_pool}

Example:
  python3 tools/accrual_sim.py scenario.yaml
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Mapping

import yaml

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from debt_rewards.core.accrual.errors import AccrualError
from debt_rewards.core.accrual.state import state_to_dict
from debt_rewards.integration.config import config_from_mapping
from debt_rewards.integration.dripper import LinearDripper
from debt_rewards.integration.rewards_engine import RewardsEngine
from debt_rewards.state.balances import BalanceTable
from debt_rewards.state.clock import BlockClock


class ScenarioError(Exception):
    pass


def _require_int(step: Mapping[str, Any], key: str) -> int:
    v = step.get(key)
    if not isinstance(v, int) or isinstance(v, bool) or v < 0:
        raise ScenarioError(f"step {dict(step)!r}: {key} must be a non-negative int")
    return v


def _require_str(step: Mapping[str, Any], key: str) -> str:
    v = step.get(key)
    if not isinstance(v, str) or not v:
        raise ScenarioError(f"step {dict(step)!r}: {key} must be a non-empty string")
    return v


def run_scenario(scenario: Mapping[str, Any]) -> dict[str, Any]:
    if not isinstance(scenario, Mapping):
        raise ScenarioError("scenario must be a mapping")
    token = str(scenario.get("token", "DRIP"))
    config = config_from_mapping(scenario.get("engine") or {})
    default_caller = config.authorized[0] if config.authorized else None

    ledger = BalanceTable()
    clock = BlockClock(height=int(scenario.get("start_block", 0)))
    dripper = LinearDripper(ledger, clock, token, int(scenario.get("rate_per_block", 0)))
    ledger.mint(dripper.address, token, int(scenario.get("fund", 0)))
    engine = RewardsEngine(ledger, clock, dripper, config)

    results: list[dict[str, Any]] = []
    paid_total = 0
    for step in scenario.get("steps") or []:
        if not isinstance(step, Mapping):
            raise ScenarioError(f"step must be a mapping: {step!r}")
        op = step.get("op")
        out: dict[str, Any] = {"op": op, "block": clock.height}
        try:
            if op == "advance":
                clock.advance(_require_int(step, "blocks"))
                out["block"] = clock.height
            elif op == "set_weight":
                caller = step.get("caller", default_caller)
                if not isinstance(caller, str):
                    raise ScenarioError("set_weight needs a caller (or engine.authorized)")
                paid = engine.set_weight(caller, _require_str(step, "participant"), _require_int(step, "weight"))
                paid_total += paid
                out.update(participant=step["participant"], weight=step["weight"], paid=paid)
            elif op == "claim":
                paid = engine.claim(_require_str(step, "participant"))
                paid_total += paid
                out.update(participant=step["participant"], paid=paid)
            elif op == "pending":
                participant = _require_str(step, "participant")
                out.update(participant=participant, pending=engine.pending_reward_view(participant))
            elif op == "rate":
                out["rate_per_weight_wad"] = engine.reward_rate_view()
            elif op == "fund":
                ledger.mint(dripper.address, token, _require_int(step, "amount"))
            elif op == "set_rate":
                dripper.set_rate(_require_int(step, "rate"), engine.vault.address)
            elif op == "update_pool":
                out["delivered"] = engine.update_pool().delivered
            else:
                raise ScenarioError(f"unknown op: {op!r}")
            out["ok"] = True
        except AccrualError as exc:
            out.update(ok=False, error=f"{type(exc).__name__}: {exc}")
        results.append(out)

    return {
        "steps": results,
        "state": state_to_dict(engine.state),
        "delivered_total": dripper.total_dripped,
        "paid_total": paid_total,
        "vault_balance": engine.vault.balance(),
        "violations": engine.audit(),
    }


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Run a reward accrual scenario and print a JSON report.")
    p.add_argument("scenario", type=Path, help="Path to scenario YAML")
    p.add_argument("--indent", type=int, default=2, help="JSON indent (default: 2)")
    args = p.parse_args(argv)

    try:
        scenario = yaml.safe_load(args.scenario.read_text(encoding="utf-8"))
        report = run_scenario(scenario)
    except (OSError, yaml.YAMLError, ScenarioError, TypeError, ValueError) as exc:
        print(f"accrual_sim error: {exc}", file=sys.stderr)
        return 2

    print(json.dumps(report, indent=args.indent, sort_keys=True, default=str))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
