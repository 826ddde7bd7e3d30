"""
Participant table: participant -> ParticipantState.

Rows are created implicitly on first write and never pruned; a zero-weight row
persists harmlessly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, Mapping, Tuple

from ..core.accrual.types import ParticipantState


Participant = str

_ZERO = ParticipantState()


@dataclass
class ParticipantTable:
    """Mutable mapping with deterministic (sorted) iteration helpers."""

    _rows: Dict[Participant, ParticipantState] = field(default_factory=dict)

    def get(self, participant: Participant) -> ParticipantState:
        if not isinstance(participant, str) or not participant:
            raise ValueError(f"invalid participant id: {participant!r}")
        return self._rows.get(participant, _ZERO)

    def put(self, participant: Participant, row: ParticipantState) -> None:
        if not isinstance(participant, str) or not participant:
            raise ValueError(f"invalid participant id: {participant!r}")
        if not isinstance(row, ParticipantState):
            raise TypeError("row must be a ParticipantState")
        self._rows[participant] = row

    def items(self) -> Iterator[Tuple[Participant, ParticipantState]]:
        for participant in sorted(self._rows):
            yield participant, self._rows[participant]

    def as_mapping(self) -> Mapping[Participant, ParticipantState]:
        # Shallow copy so callers cannot mutate the table during iteration.
        return dict(self._rows)

    def __len__(self) -> int:
        return len(self._rows)
