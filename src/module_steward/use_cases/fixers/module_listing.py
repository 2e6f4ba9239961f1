"""Fixers for the <modules> section and parent lookup."""

import re
from pathlib import Path, PurePosixPath
from typing import Optional

from module_steward.domain.constants import (
    COMMON_SUFFIX,
    RULE_COMMON_MODULE_ORDER,
    RULE_CUSTOM_RELATIVE_PATH,
    RULE_UNLISTED_SUBMODULES,
)
from module_steward.domain.entities import FixOutcome, HierarchyRole, Violation
from module_steward.use_cases.fixers.base import DescriptorFixer, FixerContext

_UNLISTED_MESSAGE = re.compile(r"unlisted submodules?:\s*(.+)$", re.IGNORECASE)


class ListSubmodulesFixer(DescriptorFixer):
    """Declares child directories that carry a descriptor but are missing from <modules>."""

    name = "list-submodules"
    rule_ids = frozenset({RULE_UNLISTED_SUBMODULES})
    priority = 30
    description = "Declared unlisted submodules"
    applicable_roles = frozenset({HierarchyRole.PURE_AGGREGATOR, HierarchyRole.PARENT_AGGREGATOR})

    @staticmethod
    def module_names(violation: Violation) -> list[str]:
        """Names from `expected`, falling back to the violation message."""
        raw = violation.expected
        if not raw:
            match = _UNLISTED_MESSAGE.search(violation.message)
            raw = match.group(1) if match else ""
        return [name.strip() for name in raw.split(",") if name.strip()]

    def check(
        self, violation: Violation, content: str, descriptor: Path, context: FixerContext
    ) -> Optional[FixOutcome]:
        names = self.module_names(violation)
        if not names:
            return FixOutcome.not_fixable("Violation names no submodules to declare.")
        present = [
            n for n in names
            if context.filesystem.exists(str(context.classifier.child_descriptor(descriptor.parent, n)))
        ]
        if not present:
            return FixOutcome.skipped("None of the named submodules has a descriptor")
        return None

    def produce(
        self, content: str, violation: Violation, descriptor: Path, context: FixerContext
    ) -> Optional[str]:
        names = [
            n for n in self.module_names(violation)
            if context.filesystem.exists(str(context.classifier.child_descriptor(descriptor.parent, n)))
        ]
        return context.editor.add_children(content, names)


class CommonModuleFirstFixer(DescriptorFixer):
    """Moves the *-common module to the top of <modules> so it builds first."""

    name = "common-module-first"
    rule_ids = frozenset({RULE_COMMON_MODULE_ORDER})
    priority = 20
    description = "Moved common module first in <modules>"
    applicable_roles = frozenset({HierarchyRole.PARENT_AGGREGATOR})

    def _common_child(self, violation: Violation, content: str, context: FixerContext) -> Optional[str]:
        children = context.editor.read_children(content)
        if violation.expected and violation.expected in children:
            return violation.expected
        return next((c for c in children if PurePosixPath(c).name.endswith(COMMON_SUFFIX)), None)

    def check(
        self, violation: Violation, content: str, descriptor: Path, context: FixerContext
    ) -> Optional[FixOutcome]:
        if self._common_child(violation, content, context) is None:
            return FixOutcome.skipped("No common module declared")
        return None

    def produce(
        self, content: str, violation: Violation, descriptor: Path, context: FixerContext
    ) -> Optional[str]:
        common = self._common_child(violation, content, context)
        if common is None:
            return None
        return context.editor.move_child_first(content, common)


class RelativePathFixer(DescriptorFixer):
    """Removes a custom <relativePath> so the parent is found by directory nesting."""

    name = "relative-path"
    rule_ids = frozenset({RULE_CUSTOM_RELATIVE_PATH})
    priority = 60
    description = "Removed custom <relativePath>"

    def produce(
        self, content: str, violation: Violation, descriptor: Path, context: FixerContext
    ) -> Optional[str]:
        return context.editor.remove_relative_path(content)
