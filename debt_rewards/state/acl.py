"""
Flat authorization allow-list.

Membership is the whole model: no roles, no hierarchy.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Set, Tuple


@dataclass
class AllowList:
    _members: Set[str] = field(default_factory=set)

    @classmethod
    def of(cls, members: Iterable[str]) -> "AllowList":
        acl = cls()
        for who in members:
            acl.grant(who)
        return acl

    def allows(self, who: str) -> bool:
        return who in self._members

    def grant(self, who: str) -> bool:
        """Add `who`; returns False if already a member."""
        if not isinstance(who, str) or not who:
            raise ValueError(f"invalid identity: {who!r}")
        if who in self._members:
            return False
        self._members.add(who)
        return True

    def revoke(self, who: str) -> bool:
        """Remove `who`; returns False if not a member."""
        if who not in self._members:
            return False
        self._members.discard(who)
        return True

    def members(self) -> Tuple[str, ...]:
        return tuple(sorted(self._members))
