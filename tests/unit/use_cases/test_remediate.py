"""Unit tests for RemediateViolationsUseCase and RemediationSummary."""

from pathlib import Path
from typing import Optional
from unittest.mock import MagicMock

import pytest

from module_steward.domain.config import ConfigurationLoader
from module_steward.domain.entities import FixOutcome, FixStatus, Severity, Violation
from module_steward.domain.registry import FixerRegistry
from module_steward.infrastructure.di.container import StewardContainer
from module_steward.use_cases.remediate import RemediateViolationsUseCase, RemediationSummary
from tests.pom_builders import build_billing_tree


class StubFixer:
    """Fixer double returning a canned outcome (or raising)."""

    def __init__(
        self,
        name: str,
        outcome: Optional[FixOutcome] = None,
        priority: int = 50,
        rule_ids: frozenset[str] = frozenset({"H101"}),
        error: Optional[Exception] = None,
    ) -> None:
        self.name = name
        self.priority = priority
        self.rule_ids = rule_ids
        self.outcome = outcome
        self.error = error
        self.calls = 0

    def can_fix(self, violation: Violation) -> bool:
        return violation.rule_id in self.rule_ids

    def fix(self, violation: Violation, context: object) -> FixOutcome:
        self.calls += 1
        if self.error is not None:
            raise self.error
        assert self.outcome is not None
        return self.outcome


def _violation(rule_id: str = "H101", location: str = "pom.xml") -> Violation:
    return Violation(rule_id, Severity.ERROR, "naming", location, f"{rule_id} found")


def _use_case(
    *fixers: StubFixer,
    config: Optional[dict[str, object]] = None,
    dry_run: bool = False,
    telemetry: Optional[MagicMock] = None,
) -> RemediateViolationsUseCase:
    config_loader = ConfigurationLoader(config)
    registry = FixerRegistry(config_loader)
    for fixer in fixers:
        registry.register(fixer)
    return RemediateViolationsUseCase(
        registry=registry,
        workflow=MagicMock(),
        classifier=MagicMock(),
        filesystem=MagicMock(),
        rename=MagicMock(),
        staging=MagicMock(),
        telemetry=telemetry,
        config_loader=config_loader,
        dry_run=dry_run,
    )


class TestCandidateIteration:
    def test_skipped_advances_to_next_candidate(self) -> None:
        first = StubFixer("first", FixOutcome.skipped("not mine"), priority=10)
        second = StubFixer("second", FixOutcome.fixed(["pom.xml"], []), priority=20)
        outcome = _use_case(second, first).execute(_violation())
        assert outcome.status is FixStatus.FIXED
        assert (first.calls, second.calls) == (1, 1)

    def test_failed_stops_iteration(self) -> None:
        """A failure is surfaced as-is; later candidates never run."""
        first = StubFixer("first", FixOutcome.failed("build broke"), priority=10)
        second = StubFixer("second", FixOutcome.fixed(["pom.xml"], []), priority=20)
        outcome = _use_case(first, second).execute(_violation())
        assert outcome.status is FixStatus.FAILED
        assert outcome.description == "build broke"
        assert second.calls == 0

    def test_all_skipped_is_skipped(self) -> None:
        outcome = _use_case(StubFixer("only", FixOutcome.skipped("nothing"))).execute(_violation())
        assert outcome.status is FixStatus.SKIPPED

    def test_no_candidate_is_not_fixable(self) -> None:
        outcome = _use_case(StubFixer("other", rule_ids=frozenset({"H102"}))).execute(_violation())
        assert outcome.status is FixStatus.NOT_FIXABLE
        assert "H101" in outcome.description

    def test_disabled_rule_is_skipped(self) -> None:
        fixer = StubFixer("first", FixOutcome.fixed(["pom.xml"], []))
        outcome = _use_case(fixer, config={"disabled_rules": ["H101"]}).execute(_violation())
        assert outcome.status is FixStatus.SKIPPED
        assert fixer.calls == 0

    def test_raising_fixer_becomes_failed(self) -> None:
        telemetry = MagicMock()
        fixer = StubFixer("boom", error=RuntimeError("kaput"))
        outcome = _use_case(fixer, telemetry=telemetry).execute(_violation())
        assert outcome.status is FixStatus.FAILED
        assert outcome.description == "boom raised: kaput"
        telemetry.error.assert_called_once()


class TestExecuteAll:
    def test_summary_counts_and_purge(self) -> None:
        telemetry = MagicMock()
        use_case = _use_case(
            StubFixer("fix", FixOutcome.fixed(["pom.xml"], []), rule_ids=frozenset({"H101"})),
            StubFixer("fail", FixOutcome.failed("nope"), rule_ids=frozenset({"H104"})),
            telemetry=telemetry,
        )
        summary = use_case.execute_all([_violation("H101"), _violation("H104"), _violation("H999")])
        assert summary.total == 3
        assert summary.counts[FixStatus.FIXED] == 1
        assert summary.counts[FixStatus.FAILED] == 1
        assert summary.counts[FixStatus.NOT_FIXABLE] == 1
        assert summary.has_failures()
        assert telemetry.step.call_count == 3
        use_case.staging.purge.assert_called_once()

    def test_dry_run_does_not_purge(self) -> None:
        use_case = _use_case(StubFixer("fix", FixOutcome.dry_run([])), dry_run=True)
        summary = use_case.execute_all([_violation()])
        assert summary.dry_run
        use_case.staging.purge.assert_not_called()


class TestRemediationSummary:
    def test_format_lists_every_status(self) -> None:
        summary = RemediationSummary()
        summary.add(_violation(), FixOutcome.fixed(["pom.xml"], []))
        summary.add(_violation(), FixOutcome.not_fixable("by hand"))
        text = summary.format()
        assert text.splitlines()[0] == "Remediation Summary"
        assert "Total:       2" in text
        assert "Fixed:       1" in text
        assert "Not Fixable: 1" in text
        assert "Would Fix" not in text

    def test_format_dry_run_adds_would_fix(self) -> None:
        summary = RemediationSummary(dry_run=True)
        summary.add(_violation(), FixOutcome.dry_run([]))
        assert "Would Fix:   1" in summary.format()

    def test_to_dict(self) -> None:
        summary = RemediationSummary()
        summary.add(_violation(), FixOutcome.skipped("fine"))
        data = summary.to_dict()
        assert data["counts"]["skipped"] == 1  # type: ignore[index]
        assert data["results"][0]["violation"]["rule_id"] == "H101"  # type: ignore[index]


class TestEndToEnd:
    def test_fix_batch_on_real_tree(self, container: StewardContainer, tmp_path: Path) -> None:
        """Without check_root, the root is exempt and there is nothing to remediate."""
        build_billing_tree(tmp_path)
        violations = container.get_conventions_use_case().execute(tmp_path / "pom.xml")
        summary = container.create_remediation_use_case().execute_all(violations)
        assert summary.total == len(violations) == 0
        assert not (tmp_path / ".remediation").exists()

    @pytest.mark.parametrize("dry_run", [True, False])
    def test_root_checked_rename(self, telemetry: MagicMock, tmp_path: Path, dry_run: bool) -> None:
        build_billing_tree(tmp_path)
        container = StewardContainer(
            tmp_path, config_dict={"verify": False, "check_root": True}, telemetry=telemetry
        )
        violations = container.get_conventions_use_case().execute(tmp_path / "pom.xml")
        assert [v.rule_id for v in violations] == ["H101"]
        summary = container.create_remediation_use_case(dry_run=dry_run).execute_all(violations)
        expected = FixStatus.DRY_RUN if dry_run else FixStatus.FIXED
        assert summary.counts[expected] == 1
        identity = "billing" if dry_run else "billing-aggregator"
        assert f"<artifactId>{identity}</artifactId>" in (tmp_path / "pom.xml").read_text()
