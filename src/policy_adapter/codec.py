"""Rule codec — maps variable-arity rules onto the six storage slots.

Encoding puts ``params[i]`` in slot ``vi`` and leaves every higher slot
absent (``None``).  Decoding collects the present slots in order and
skips holes, so a hand-edited row ``("a", None, "c")`` loads as
``("a", "c")``.
"""

from __future__ import annotations

from collections.abc import Sequence

from policy_adapter.exceptions import ArityError
from policy_adapter.rule import PolicyRule, StorageRecord

MAX_ARITY = 6
SLOT_NAMES: tuple[str, ...] = tuple(f"v{i}" for i in range(MAX_ARITY))


def encode(ptype: str, params: Sequence[str]) -> StorageRecord:
    """Return the storage record for one rule.

    Raises:
        ArityError: more than :data:`MAX_ARITY` params.
        TypeError:  a param is not a string.
    """
    if len(params) > MAX_ARITY:
        raise ArityError(ptype, len(params), MAX_ARITY)
    for value in params:
        if not isinstance(value, str):
            raise TypeError(f"Rule params must be strings, got {type(value).__name__}")
    slots = dict(zip(SLOT_NAMES, params, strict=False))
    return StorageRecord(ptype=ptype, **slots)


def decode(record: StorageRecord) -> PolicyRule:
    """Return the rule stored in *record*, skipping absent slots."""
    params = tuple(value for value in record.slots if value is not None)
    return PolicyRule(ptype=record.ptype, params=params)


def filter_slots(
    ptype: str,
    field_index: int,
    field_values: Sequence[str | None],
) -> dict[str, str]:
    """Translate a positional partial pattern into ``{slot: value}`` constraints.

    ``field_values[i]`` constrains slot ``v{field_index + i}``.  ``None``
    leaves that slot unconstrained; ``""`` must match literally and so never
    matches an absent slot.
    """
    if field_index < 0:
        raise ValueError(f"field_index must be >= 0, got {field_index}")
    if field_index + len(field_values) > MAX_ARITY:
        raise ArityError(ptype, field_index + len(field_values), MAX_ARITY)
    return {
        SLOT_NAMES[field_index + offset]: value
        for offset, value in enumerate(field_values)
        if value is not None
    }


def matches(record: StorageRecord, ptype: str, constraints: dict[str, str]) -> bool:
    """Return ``True`` if *record* has *ptype* and satisfies every slot constraint."""
    if record.ptype != ptype:
        return False
    return all(getattr(record, slot) == value for slot, value in constraints.items())
