"""
Engine configuration: frozen dataclass plus a fail-closed YAML loader.

Example `engine.yaml`:

    address: rewards-engine
    vault_address: rewards-vault
    authorized: [debt-ledger]
    max_weight: 1000000000000000000000000000000
    audit_invariants: true
    log_events: true
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Tuple, Union

import yaml

from ..core.accrual.math import require_uint

# uint128: totals stay far inside uint256, and `weight * acc` fits while the
# accumulator stays below 2**128 (about 3.4e11 reward units per weight unit).
DEFAULT_MAX_WEIGHT = 2**128 - 1


@dataclass(frozen=True)
class EngineConfig:
    # Ledger identity of the engine; the vault's owner.
    address: str = "rewards-engine"
    # Ledger identity of the custodian vault.
    vault_address: str = "rewards-vault"
    # Initial allow-list for privileged calls (set_weight, rely, deny).
    authorized: Tuple[str, ...] = ()
    # Per-participant weight bound; set_weight above it raises Overflow.
    # Operators raising it must keep `max_weight * acc_reward_per_weight` within
    # uint256 for the life of the pool, or settlements of large rows overflow.
    max_weight: int = DEFAULT_MAX_WEIGHT
    # If True, every operation re-checks the rows it touched before committing.
    audit_invariants: bool = True
    # If True, committed notifications are also written to the event log.
    log_events: bool = True

    def __post_init__(self) -> None:
        for name in ("address", "vault_address"):
            v = getattr(self, name)
            if not isinstance(v, str) or not v:
                raise ValueError(f"{name} must be a non-empty string")
        if self.address == self.vault_address:
            raise ValueError("address and vault_address must differ")
        if not isinstance(self.authorized, tuple):
            raise TypeError("authorized must be a tuple of strings")
        for who in self.authorized:
            if not isinstance(who, str) or not who:
                raise ValueError(f"authorized entries must be non-empty strings: {who!r}")
        require_uint(self.max_weight, "max_weight")
        for name in ("audit_invariants", "log_events"):
            if not isinstance(getattr(self, name), bool):
                raise TypeError(f"{name} must be a bool")


_FIELD_NAMES = frozenset(f.name for f in fields(EngineConfig))


def config_from_mapping(raw: Mapping[str, Any]) -> EngineConfig:
    """Build an `EngineConfig`, rejecting unknown keys."""
    if not isinstance(raw, Mapping):
        raise TypeError("engine config must be a mapping")
    unknown = set(raw) - _FIELD_NAMES
    if unknown:
        raise ValueError(f"unknown engine config keys: {sorted(unknown)}")
    kwargs = dict(raw)
    if "authorized" in kwargs:
        authorized = kwargs["authorized"]
        if not isinstance(authorized, (list, tuple)):
            raise TypeError("authorized must be a list")
        kwargs["authorized"] = tuple(authorized)
    return EngineConfig(**kwargs)


def load_config(path: Union[str, Path]) -> EngineConfig:
    obj = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    if obj is None:
        return EngineConfig()
    return config_from_mapping(obj)
