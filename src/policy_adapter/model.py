"""PolicyModel — the in-memory rule collection an adapter loads into and saves from."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Protocol

SECTIONS: tuple[str, ...] = ("p", "g")


class RuleModel(Protocol):
    """What an adapter needs from a policy model.

    Engine models only have to provide these two methods to be loaded
    into and saved from.
    """

    def add_rule(self, section: str, ptype: str, params: Sequence[str]) -> None: ...

    def iter_rules(self, section: str) -> Iterator[tuple[str, list[str]]]: ...


class PolicyModel:
    """Default model: ``section -> ptype -> [params, ...]``.

    The access (``"p"``) and role-grouping (``"g"``) sections always
    exist.  Rules keep insertion order within a ptype, but callers should
    treat each rule-set as unordered.
    """

    def __init__(self) -> None:
        self._sections: dict[str, dict[str, list[list[str]]]] = {s: {} for s in SECTIONS}

    @property
    def sections(self) -> tuple[str, ...]:
        return tuple(self._sections)

    def add_rule(self, section: str, ptype: str, params: Sequence[str]) -> None:
        self._sections.setdefault(section, {}).setdefault(ptype, []).append(list(params))

    def iter_rules(self, section: str) -> Iterator[tuple[str, list[str]]]:
        for ptype, rules in self._sections.get(section, {}).items():
            for params in rules:
                yield ptype, list(params)

    def get_policy(self, section: str, ptype: str) -> list[list[str]]:
        """Return a copy of the rules stored under *ptype*."""
        return [list(r) for r in self._sections.get(section, {}).get(ptype, [])]

    def has_rule(self, section: str, ptype: str, params: Sequence[str]) -> bool:
        return list(params) in self._sections.get(section, {}).get(ptype, [])

    def remove_rule(self, section: str, ptype: str, params: Sequence[str]) -> bool:
        """Remove every copy of a rule.  Returns ``True`` if one was present."""
        rules = self._sections.get(section, {}).get(ptype)
        if not rules:
            return False
        kept = [r for r in rules if r != list(params)]
        removed = len(kept) != len(rules)
        rules[:] = kept
        return removed

    def clear(self) -> None:
        """Drop every rule, keeping the section layout."""
        for ptypes in self._sections.values():
            ptypes.clear()
