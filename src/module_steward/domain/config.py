"""Configuration for remediation settings. Immutable value object created by Infrastructure."""

from __future__ import annotations

import logging
from enum import Enum

from module_steward.domain.constants import (
    DEFAULT_LEAF_SUFFIXES,
    DEFAULT_REPORT_DIR,
    DEFAULT_STAGING_DIR,
    DEFAULT_VERIFY_COMMAND,
    DEFAULT_VERIFY_TIMEOUT,
)


class MissingToolPolicy(Enum):
    """What a verification step means when no build tool can be run."""
    PASS = "pass"
    FAIL = "fail"


class ConfigurationLoader:
    """
    Immutable configuration for remediation settings.

    Created by Infrastructure from the dict ConfigFileLoader.load_config_from_fs()
    returns. Domain does not read the filesystem.
    """

    _KNOWN_KEYS: frozenset[str] = frozenset(
        {
            "leaf_suffixes",
            "disabled_rules",
            "disabled_fixers",
            "enabled_fixers",
            "verify",
            "verify_command",
            "verify_timeout",
            "missing_tool_policy",
            "staging_dir",
            "report_dir",
            "check_root",
            "fixer_priorities",
        }
    )

    def __init__(self, config_dict: dict[str, object] | None = None) -> None:
        """Set config once at construction. No mutable state after init."""
        self._config: dict[str, object] = dict(config_dict or {})
        if self._config:
            self.validate_config(self._config)

    def validate_config(self, config: dict[str, object]) -> None:
        """Warn about unknown keys and unusable values; never raise."""
        for key in sorted(set(config) - self._KNOWN_KEYS):
            logging.warning("Configuration Warning: unknown key '%s' ignored.", key)
        policy = config.get("missing_tool_policy")
        if policy is not None and str(policy).lower() not in {p.value for p in MissingToolPolicy}:
            logging.warning(
                "Configuration Warning: missing_tool_policy '%s' is not one of pass/fail; using 'pass'.",
                policy,
            )

    @property
    def config(self) -> dict[str, object]:
        """Return the loaded configuration."""
        return self._config

    @staticmethod
    def _str_list(raw: object) -> list[str]:
        if isinstance(raw, (list, tuple)):
            return [str(x) for x in raw if isinstance(x, str)]
        if isinstance(raw, str):
            return [part.strip() for part in raw.split(",") if part.strip()]
        return []

    @property
    def leaf_suffixes(self) -> tuple[str, ...]:
        """Suffixes that mark a module as a leaf, each with its leading dash."""
        raw = self._str_list(self._config.get("leaf_suffixes"))
        if not raw:
            return DEFAULT_LEAF_SUFFIXES
        return tuple(s if s.startswith("-") else f"-{s}" for s in raw)

    @property
    def disabled_rules(self) -> frozenset[str]:
        return frozenset(self._str_list(self._config.get("disabled_rules")))

    @property
    def disabled_fixers(self) -> frozenset[str]:
        return frozenset(self._str_list(self._config.get("disabled_fixers")))

    @property
    def enabled_fixers(self) -> frozenset[str]:
        """Explicit allow-list of fixer names. Empty means all fixers."""
        return frozenset(self._str_list(self._config.get("enabled_fixers")))

    def is_rule_enabled(self, rule_id: str) -> bool:
        return rule_id not in self.disabled_rules

    def is_fixer_enabled(self, name: str) -> bool:
        if name in self.disabled_fixers:
            return False
        enabled = self.enabled_fixers
        return not enabled or name in enabled

    @property
    def verify_enabled(self) -> bool:
        return bool(self._config.get("verify", True))

    @property
    def verify_command(self) -> tuple[str, ...]:
        raw = self._config.get("verify_command")
        parts = raw.split() if isinstance(raw, str) else self._str_list(raw)
        return tuple(parts) if parts else DEFAULT_VERIFY_COMMAND

    @property
    def verify_timeout(self) -> float:
        raw = self._config.get("verify_timeout", DEFAULT_VERIFY_TIMEOUT)
        if isinstance(raw, (int, float)) and not isinstance(raw, bool) and raw > 0:
            return float(raw)
        return float(DEFAULT_VERIFY_TIMEOUT)

    @property
    def missing_tool_policy(self) -> MissingToolPolicy:
        raw = str(self._config.get("missing_tool_policy", MissingToolPolicy.PASS.value)).lower()
        try:
            return MissingToolPolicy(raw)
        except ValueError:
            return MissingToolPolicy.PASS

    @property
    def staging_dir(self) -> str:
        return str(self._config.get("staging_dir", DEFAULT_STAGING_DIR))

    @property
    def report_dir(self) -> str:
        return str(self._config.get("report_dir", DEFAULT_REPORT_DIR))

    @property
    def check_root(self) -> bool:
        """Whether the tree root must follow the pure aggregator conventions too."""
        return bool(self._config.get("check_root", False))

    @property
    def fixer_priorities(self) -> dict[str, int]:
        """Per-fixer priority overrides keyed by fixer name."""
        raw = self._config.get("fixer_priorities", {})
        if not isinstance(raw, dict):
            return {}
        return {
            str(k): int(v)
            for k, v in raw.items()
            if isinstance(v, int) and not isinstance(v, bool)
        }
