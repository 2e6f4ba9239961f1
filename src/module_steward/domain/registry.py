"""Violation to fixer dispatch, built once at startup and passed by reference."""

from typing import TYPE_CHECKING, Optional

from module_steward.domain.protocols import FixerProtocol

if TYPE_CHECKING:
    from module_steward.domain.config import ConfigurationLoader
    from module_steward.domain.entities import Violation


class FixerRegistry:
    """Priority-ordered mapping from rule ids to the fixers that handle them."""

    def __init__(self, config_loader: Optional["ConfigurationLoader"] = None) -> None:
        self._config = config_loader
        self._fixers: list[FixerProtocol] = []
        self._by_rule: dict[str, list[int]] = {}

    def register(self, fixer: FixerProtocol) -> None:
        """Associate fixer with every rule id it declares. Registration order breaks priority ties."""
        index = len(self._fixers)
        self._fixers.append(fixer)
        for rule_id in fixer.rule_ids:
            self._by_rule.setdefault(rule_id, []).append(index)

    def _priority(self, fixer: FixerProtocol) -> int:
        if self._config is not None:
            override = self._config.fixer_priorities.get(fixer.name)
            if override is not None:
                return override
        return fixer.priority

    def _enabled(self, fixer: FixerProtocol) -> bool:
        return self._config is None or self._config.is_fixer_enabled(fixer.name)

    def resolve(self, violation: "Violation") -> list[FixerProtocol]:
        """Fixers for the violation's rule id that accept it, lowest priority first."""
        candidates = [
            (self._priority(self._fixers[i]), i)
            for i in self._by_rule.get(violation.rule_id, [])
            if self._enabled(self._fixers[i]) and self._fixers[i].can_fix(violation)
        ]
        return [self._fixers[i] for _, i in sorted(candidates)]

    def rule_ids(self) -> list[str]:
        return sorted(self._by_rule)

    @property
    def fixers(self) -> list[FixerProtocol]:
        return list(self._fixers)
