"""State construction and serialization for the accrual kernel.

These dicts are the persisted-state surface: one global record plus one row per
participant ever seen. The vault balance is not part of it; it lives in the
token ledger.

Round-trip property (tested): `state_from_dict(state_to_dict(s)) == s`.
"""

from __future__ import annotations

from typing import Any, Mapping

from .types import GlobalAccrualState, ParticipantState

# Auto-derived from the dataclass field definitions (single source of truth).
STATE_VAR_NAMES: tuple[str, ...] = tuple(GlobalAccrualState.__dataclass_fields__)
PARTICIPANT_VAR_NAMES: tuple[str, ...] = tuple(ParticipantState.__dataclass_fields__)


def initial_state() -> GlobalAccrualState:
    """Return the global record of a freshly constructed engine."""
    return GlobalAccrualState()


def _read_fields(d: Mapping[str, Any], names: tuple[str, ...], kind: str) -> dict[str, int]:
    unknown = set(d) - set(names)
    if unknown:
        raise KeyError(f"unknown {kind} fields: {sorted(unknown)}")
    kwargs: dict[str, int] = {}
    for name in names:
        val = d[name]
        if not isinstance(val, int) or isinstance(val, bool):
            raise TypeError(f"{kind} var {name!r} must be int, got {type(val).__name__}")
        kwargs[name] = int(val)  # normalize int subclasses
    return kwargs


def state_to_dict(state: GlobalAccrualState) -> dict[str, int]:
    return {name: getattr(state, name) for name in STATE_VAR_NAMES}


def state_from_dict(d: Mapping[str, Any]) -> GlobalAccrualState:
    """Deserialize the global record. Raises KeyError on missing or unknown fields."""
    return GlobalAccrualState(**_read_fields(d, STATE_VAR_NAMES, "state"))


def participant_to_dict(p: ParticipantState) -> dict[str, int]:
    return {name: getattr(p, name) for name in PARTICIPANT_VAR_NAMES}


def participant_from_dict(d: Mapping[str, Any]) -> ParticipantState:
    return ParticipantState(**_read_fields(d, PARTICIPANT_VAR_NAMES, "participant"))
