"""Fixers that bring a module's role suffix in line with its classification."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from module_steward.domain.constants import (
    RULE_PARENT_AGGREGATOR_SUFFIX,
    RULE_PURE_AGGREGATOR_SUFFIX,
)
from module_steward.domain.entities import FixOutcome, HierarchyRole, Violation
from module_steward.domain.hierarchy import ModuleNaming
from module_steward.use_cases.fixers.base import DescriptorFixer, FixerContext


class _RoleSuffixFixer(DescriptorFixer, ABC):
    """Renames the module for its role; propagation and the stranding guard live in RenameModuleUseCase."""

    @abstractmethod
    def target_identity(self, identity: str) -> str: ...

    def fix(self, violation: Violation, context: FixerContext) -> FixOutcome:
        descriptor = Path(violation.location)
        content = context.filesystem.read_text_or_none(str(descriptor))
        if content is None:
            return FixOutcome.failed(f"Cannot read descriptor {descriptor}")
        identity = context.editor.read_identity(content)
        if not identity:
            return FixOutcome.not_fixable(f"{descriptor} declares no identity; rename it by hand.")
        refusal = self._role_refusal(identity, content, descriptor, context)
        if refusal is not None:
            return refusal
        return context.rename.execute(
            descriptor,
            self.target_identity(identity),
            context.ledger,
            dry_run=context.dry_run,
            verify=context.verify,
            cancellation=context.cancellation,
        )

    def _role_refusal(
        self, identity: str, content: str, descriptor: Path, context: FixerContext
    ) -> Optional[FixOutcome]:
        return None


class PureAggregatorSuffixFixer(_RoleSuffixFixer):
    """Renames a pure aggregator to <base>-aggregator, replacing a -parent suffix."""

    name = "pure-aggregator-suffix"
    rule_ids = frozenset({RULE_PURE_AGGREGATOR_SUFFIX})
    priority = 40

    def target_identity(self, identity: str) -> str:
        return ModuleNaming.aggregator_name(identity)


class ParentSuffixFixer(_RoleSuffixFixer):
    """Renames a parent aggregator to <base>-parent, replacing an -aggregator suffix."""

    name = "parent-aggregator-suffix"
    rule_ids = frozenset({RULE_PARENT_AGGREGATOR_SUFFIX})
    priority = 40

    def target_identity(self, identity: str) -> str:
        return ModuleNaming.parent_name(identity)

    def _role_refusal(
        self, identity: str, content: str, descriptor: Path, context: FixerContext
    ) -> Optional[FixOutcome]:
        role = context.classifier.classify(content, descriptor.parent)
        if role is HierarchyRole.PARENT_AGGREGATOR:
            return None
        return FixOutcome.not_fixable(
            f"'{identity}' is a {role.value} module; only parent aggregators with leaf children "
            "take the -parent suffix."
        )
