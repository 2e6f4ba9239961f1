"""Use Case: remediate detected violations through the fixer registry."""

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Sequence

from module_steward.domain.entities import FixOutcome, FixStatus, Violation, WorkflowLedger
from module_steward.domain.hierarchy import HierarchyClassifier
from module_steward.domain.protocols import (
    BuildVerifierProtocol,
    FileSystemProtocol,
    GuidanceServiceProtocol,
    StagingAreaProtocol,
    TelemetryPort,
)
from module_steward.domain.registry import FixerRegistry
from module_steward.use_cases.fixers.base import FixerContext
from module_steward.use_cases.mutation_workflow import (
    CancellationToken,
    MutationWorkflowController,
    VerifyCallback,
)
from module_steward.use_cases.rename_module import RenameModuleUseCase

if TYPE_CHECKING:
    from module_steward.domain.config import ConfigurationLoader


@dataclass
class RemediationSummary:
    """Per-violation outcomes of one batch run."""

    results: list[tuple[Violation, FixOutcome]] = field(default_factory=list)
    dry_run: bool = False

    def add(self, violation: Violation, outcome: FixOutcome) -> None:
        self.results.append((violation, outcome))

    @property
    def counts(self) -> Counter[FixStatus]:
        return Counter(outcome.status for _, outcome in self.results)

    @property
    def total(self) -> int:
        return len(self.results)

    def has_failures(self) -> bool:
        return self.counts[FixStatus.FAILED] > 0

    def format(self) -> str:
        counts = self.counts
        lines = [
            "Remediation Summary",
            f"  Total:       {self.total}",
            f"  Fixed:       {counts[FixStatus.FIXED]}",
            f"  Failed:      {counts[FixStatus.FAILED]}",
            f"  Skipped:     {counts[FixStatus.SKIPPED]}",
            f"  Not Fixable: {counts[FixStatus.NOT_FIXABLE]}",
        ]
        if self.dry_run:
            lines.append(f"  Would Fix:   {counts[FixStatus.DRY_RUN]}")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, object]:
        return {
            "dry_run": self.dry_run,
            "counts": {status.value: self.counts[status] for status in FixStatus},
            "results": [
                {"violation": violation.to_dict(), "outcome": outcome.to_dict()}
                for violation, outcome in self.results
            ],
        }


class RemediateViolationsUseCase:
    """
    Ties registry, classifier, workflow and propagation together per violation.

    Candidates run in registry order. A Skipped result moves on to the next
    candidate; any other result ends the attempt, so a Failed outcome is
    surfaced immediately and never masked by a later fixer.
    """

    def __init__(
        self,
        registry: FixerRegistry,
        workflow: MutationWorkflowController,
        classifier: HierarchyClassifier,
        filesystem: FileSystemProtocol,
        rename: RenameModuleUseCase,
        staging: StagingAreaProtocol,
        telemetry: Optional[TelemetryPort] = None,
        config_loader: Optional["ConfigurationLoader"] = None,
        guidance: Optional[GuidanceServiceProtocol] = None,
        verifier: Optional[BuildVerifierProtocol] = None,
        dry_run: bool = False,
        verify: bool = True,
    ) -> None:
        self.registry = registry
        self.workflow = workflow
        self.classifier = classifier
        self.filesystem = filesystem
        self.rename = rename
        self.staging = staging
        self.telemetry = telemetry
        self.config_loader = config_loader
        self.guidance = guidance
        self.verifier = verifier
        self.dry_run = dry_run
        self.verify = verify

    def _verify_callback(self) -> Optional[VerifyCallback]:
        if not self.verify or self.verifier is None:
            return None
        if self.config_loader is not None and not self.config_loader.verify_enabled:
            return None
        return self.verifier.verify

    def execute(
        self,
        violation: Violation,
        ledger: Optional[WorkflowLedger] = None,
        cancellation: Optional[CancellationToken] = None,
    ) -> FixOutcome:
        """Run one remediation attempt with its own ledger."""
        attempt_ledger = ledger if ledger is not None else WorkflowLedger()
        if self.config_loader is not None and not self.config_loader.is_rule_enabled(violation.rule_id):
            return FixOutcome.skipped(f"Rule {violation.rule_id} disabled")

        candidates = self.registry.resolve(violation)
        if not candidates:
            return FixOutcome.not_fixable(f"No fixer registered for rule {violation.rule_id}")

        context = FixerContext(
            ledger=attempt_ledger,
            workflow=self.workflow,
            classifier=self.classifier,
            filesystem=self.filesystem,
            rename=self.rename,
            dry_run=self.dry_run,
            verify=self._verify_callback(),
            cancellation=cancellation,
            guidance=self.guidance,
        )
        outcome = FixOutcome.skipped(f"No candidate fixer applied to {violation.rule_id}")
        for fixer in candidates:
            try:
                outcome = fixer.fix(violation, context)
            except Exception as exc:
                if self.telemetry:
                    self.telemetry.error(f"rule={violation.rule_id} fixer={fixer.name} status=error reason={exc}")
                outcome = FixOutcome.failed(f"{fixer.name} raised: {exc}")
            if self.telemetry:
                self.telemetry.debug(
                    f"rule={violation.rule_id} fixer={fixer.name} status={outcome.status.value}"
                )
            if outcome.is_terminal:
                break

        problems = attempt_ledger.check_invariants(outcome.status)
        if problems and self.telemetry:
            self.telemetry.error(
                f"rule={violation.rule_id} ledger invariant breach: {'; '.join(problems)}"
            )
        return outcome

    def execute_all(
        self,
        violations: Sequence[Violation],
        cancellation: Optional[CancellationToken] = None,
    ) -> RemediationSummary:
        """Remediate serially, one fresh ledger per attempt; purge staging afterwards."""
        summary = RemediationSummary(dry_run=self.dry_run)
        for violation in violations:
            outcome = self.execute(violation, WorkflowLedger(), cancellation)
            summary.add(violation, outcome)
            if self.telemetry:
                self.telemetry.step(
                    f"rule={violation.rule_id} location={violation.location} "
                    f"status={outcome.status.value}"
                )
        if not self.dry_run:
            self.staging.purge()
        return summary
