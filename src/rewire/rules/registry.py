"""Read-only rule tables."""
from __future__ import annotations

import functools
from typing import Iterable, Iterator

from rewire.core.config import EngineConfig
from rewire.core.errors import HostContractError
from rewire.rules.base import MigrationRule
from rewire.syntax.kinds import NodeKind


class RuleRegistry:
    """An immutable table of migration rules, indexed by id and node kind.

    Parameters
    ----------
    rules : Iterable[MigrationRule]
        Rules to register. Ids must be unique.

    Raises
    ------
    HostContractError
        On duplicate rule ids.
    """

    def __init__(self, rules: Iterable[MigrationRule] = ()) -> None:
        self._rules = tuple(rules)
        self._by_id: dict[str, MigrationRule] = {}
        by_kind: dict[NodeKind, list[MigrationRule]] = {}
        for rule in self._rules:
            if rule.id in self._by_id:
                raise HostContractError(f"Duplicate rule id: {rule.id}")
            self._by_id[rule.id] = rule
            for kind in rule.kinds:
                by_kind.setdefault(kind, []).append(rule)
        self._by_kind = {kind: tuple(rules) for kind, rules in by_kind.items()}

    def get(self, rule_id: str) -> MigrationRule | None:
        return self._by_id.get(rule_id)

    def for_kind(self, kind: NodeKind) -> tuple[MigrationRule, ...]:
        """Rules listening on ``kind``, in registration order."""
        return self._by_kind.get(kind, ())

    @property
    def ids(self) -> tuple[str, ...]:
        return tuple(rule.id for rule in self._rules)

    @property
    def fixable_ids(self) -> tuple[str, ...]:
        return tuple(rule.id for rule in self._rules if rule.fixable)

    def select(self, config: EngineConfig) -> RuleRegistry:
        """The subset of rules ``config`` turns on.

        With an empty ``select`` every rule enabled by default runs; naming a
        rule in ``select`` turns it on even if it is off by default.
        ``ignore`` wins over both.
        """
        if config is None:
            raise HostContractError("select() needs an EngineConfig")
        chosen = []
        for rule in self._rules:
            if config.select:
                wanted = rule.id in config.select
            else:
                wanted = rule.enabled_by_default
            if wanted and rule.id not in config.ignore:
                chosen.append(rule)
        return RuleRegistry(chosen)

    def __iter__(self) -> Iterator[MigrationRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._by_id

    def __repr__(self) -> str:
        return f"RuleRegistry({', '.join(self.ids)})"


@functools.lru_cache(maxsize=None)
def default_registry() -> RuleRegistry:
    """The built-in rules, built once per process."""
    from rewire.rules.aspnet import HTTP_STATUS_CODE_RESULT_RULE, PAGED_LIST_RULE

    return RuleRegistry([HTTP_STATUS_CODE_RESULT_RULE, PAGED_LIST_RULE])
