"""PolicyRule and StorageRecord — the two shapes a rule takes."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PolicyRule:
    """Immutable rule as the policy engine sees it.

    Attributes:
        ptype:  Rule-set name from the model grammar (``"p"``, ``"g"``, ``"g2"`` …).
        params: Ordered rule parameters, e.g. ``("alice", "data1", "read")``.

    Rules are value objects: equal ptype and params means the same rule.
    """

    ptype: str
    params: tuple[str, ...] = ()

    @property
    def section(self) -> str:
        """Model section the rule belongs to (``"g2"`` lives in ``"g"``)."""
        return self.ptype[:1]


@dataclass(frozen=True)
class StorageRecord:
    """Fixed-width persisted form of a rule.

    ``None`` marks an absent slot.  An empty string is a present value.
    ``id`` is assigned by the store and never takes part in comparisons.
    """

    ptype: str
    v0: str | None = None
    v1: str | None = None
    v2: str | None = None
    v3: str | None = None
    v4: str | None = None
    v5: str | None = None
    id: int | None = field(default=None, compare=False)

    @property
    def slots(self) -> tuple[str | None, ...]:
        return (self.v0, self.v1, self.v2, self.v3, self.v4, self.v5)
