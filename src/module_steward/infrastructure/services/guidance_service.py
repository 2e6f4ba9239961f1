"""GuidanceService: loads the rule registry and serves manual instructions."""

from pathlib import Path
from typing import Optional, cast

import yaml

from module_steward.domain.protocols import GuidanceServiceProtocol
from module_steward.domain.registry_types import RuleRegistryEntry


class GuidanceService(GuidanceServiceProtocol):
    """Loads rule_registry.yaml; lookups accept a rule id or its symbol."""

    def __init__(self, registry_path: Optional[str] = None) -> None:
        if registry_path is not None:
            self._path = Path(registry_path)
        else:
            _base = Path(__file__).resolve().parent.parent
            self._path = _base / "resources" / "rule_registry.yaml"
        self._registry: dict[str, RuleRegistryEntry] = {}
        self._load()

    def _load(self) -> None:
        if not self._path.exists():
            self._registry = {}
            return
        with open(self._path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
        self._registry = cast(dict[str, RuleRegistryEntry], data) if isinstance(data, dict) else {}

    def get_registry(self) -> dict[str, RuleRegistryEntry]:
        return dict(self._registry)

    def get_entry(self, rule_id: str) -> Optional[RuleRegistryEntry]:
        entry = self._registry.get(rule_id)
        if entry:
            return cast(RuleRegistryEntry, dict(entry))
        for e in self._registry.values():
            if e.get("symbol") == rule_id:
                return cast(RuleRegistryEntry, dict(e))
        return None

    def get_manual_instructions(self, rule_id: str) -> str:
        entry = self.get_entry(rule_id)
        return str(entry.get("manual_instructions", "")).strip() if entry else ""

    def get_display_name(self, rule_id: str) -> str:
        entry = self.get_entry(rule_id)
        if entry and entry.get("display_name"):
            return str(entry["display_name"])
        return rule_id

    def get_fixable_rules(self) -> list[str]:
        """Rule ids whose registry entry is marked fixable."""
        return sorted(rid for rid, e in self._registry.items() if e.get("fixable"))
