"""Shared shape of every automated repair: one descriptor, one guarded workflow invocation."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from module_steward.domain.entities import FixOutcome, HierarchyRole, Violation, WorkflowLedger
from module_steward.domain.hierarchy import HierarchyClassifier
from module_steward.domain.protocols import (
    DescriptorEditorProtocol,
    FileSystemProtocol,
    GuidanceServiceProtocol,
)
from module_steward.use_cases.mutation_workflow import (
    CancellationToken,
    ContentProducer,
    FileMutation,
    MutationWorkflowController,
    VerifyCallback,
)
from module_steward.use_cases.rename_module import RenameModuleUseCase


@dataclass(frozen=True)
class FixerContext:
    """Everything one attempt needs. Built by the orchestrator per attempt."""

    ledger: WorkflowLedger
    workflow: MutationWorkflowController
    classifier: HierarchyClassifier
    filesystem: FileSystemProtocol
    rename: RenameModuleUseCase
    dry_run: bool = False
    verify: Optional[VerifyCallback] = None
    cancellation: Optional[CancellationToken] = None
    guidance: Optional[GuidanceServiceProtocol] = None

    @property
    def editor(self) -> DescriptorEditorProtocol:
        return self.classifier.editor


class DescriptorFixer:
    """
    Base class for fixers that edit the descriptor named by violation.location.

    Subclasses set name, rule_ids and priority and implement either
    `produce` (single-file text edit) or override `fix` entirely.
    """

    name: str = "descriptor-fixer"
    rule_ids: frozenset[str] = frozenset()
    priority: int = 100
    description: str = ""
    applicable_roles: frozenset[HierarchyRole] = frozenset(
        {HierarchyRole.PURE_AGGREGATOR, HierarchyRole.PARENT_AGGREGATOR, HierarchyRole.LEAF}
    )

    def can_fix(self, violation: Violation) -> bool:
        return violation.rule_id in self.rule_ids and bool(violation.location)

    def fix(self, violation: Violation, context: FixerContext) -> FixOutcome:
        descriptor = Path(violation.location)
        content = context.filesystem.read_text_or_none(str(descriptor))
        if content is None:
            return FixOutcome.failed(f"Cannot read descriptor {descriptor}")
        role = context.classifier.classify(content, descriptor.parent)
        if role is HierarchyRole.UNKNOWN:
            return FixOutcome.not_fixable(
                f"Cannot classify {descriptor}; it declares no identity. Fix it by hand."
            )
        if role not in self.applicable_roles:
            return FixOutcome.skipped(f"{self.name} does not apply to a {role.value} module")
        precondition = self.check(violation, content, descriptor, context)
        if precondition is not None:
            return precondition
        return context.workflow.execute(
            [FileMutation(str(descriptor), self.producer(violation, descriptor, context))],
            context.ledger,
            verify=context.verify,
            dry_run=context.dry_run,
            cancellation=context.cancellation,
            description=self.describe(violation),
        )

    def check(
        self, violation: Violation, content: str, descriptor: Path, context: FixerContext
    ) -> Optional[FixOutcome]:
        """Return an outcome to stop early (Skipped/NotFixable); None to proceed."""
        return None

    def producer(self, violation: Violation, descriptor: Path, context: FixerContext) -> ContentProducer:
        def produce(current: Optional[str]) -> Optional[str]:
            if current is None:
                return None
            return self.produce(current, violation, descriptor, context)
        return produce

    def produce(
        self, content: str, violation: Violation, descriptor: Path, context: FixerContext
    ) -> Optional[str]:
        """New descriptor text; None means no applicable edit and the attempt fails."""
        return None

    def describe(self, violation: Violation) -> str:
        return self.description or f"{self.name}: {violation.rule_id}"
