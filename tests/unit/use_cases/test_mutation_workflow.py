"""Unit tests for MutationWorkflowController."""

from pathlib import Path
from typing import Optional
from unittest.mock import MagicMock, patch

import pytest

from module_steward.domain.config import MissingToolPolicy
from module_steward.domain.entities import (
    FixStatus,
    LedgerOperation,
    VerificationResult,
    WorkflowLedger,
)
from module_steward.domain.exceptions import VerificationTimeoutError
from module_steward.infrastructure.gateways.filesystem_gateway import FileSystemGateway
from module_steward.infrastructure.gateways.staging_gateway import StagingAreaGateway
from module_steward.use_cases.mutation_workflow import (
    CancellationToken,
    FileMutation,
    MutationWorkflowController,
)

ORIGINAL = "<project>\r\n    <artifactId>billing</artifactId>\r\n</project>\r\n"


def _workflow(root: Path, telemetry: Optional[MagicMock] = None, **kwargs: object) -> MutationWorkflowController:
    fs = FileSystemGateway()
    return MutationWorkflowController(fs, StagingAreaGateway(str(root), fs), telemetry, **kwargs)  # type: ignore[arg-type]


def _rename(current: Optional[str]) -> Optional[str]:
    return None if current is None else current.replace("billing<", "billing-aggregator<")


def _setup(root: Path) -> Path:
    descriptor = root / "pom.xml"
    descriptor.write_bytes(ORIGINAL.encode())
    return descriptor


class TestCommit:
    def test_fixed_ledger_backs_up_writes_and_cleans(self, tmp_path: Path) -> None:
        """Backup then write then delete-backup/cleanup; no rollback."""
        descriptor = _setup(tmp_path)
        ledger = WorkflowLedger()
        outcome = _workflow(tmp_path).execute([FileMutation(str(descriptor), _rename)], ledger)
        assert outcome.status is FixStatus.FIXED
        assert outcome.files == ("pom.xml",)
        assert [e.operation for e in ledger.entries] == [
            LedgerOperation.BACKUP,
            LedgerOperation.WRITE,
            LedgerOperation.DELETE_BACKUP,
            LedgerOperation.CLEANUP,
        ]
        assert ledger.check_invariants(outcome.status) == []
        assert "billing-aggregator" in descriptor.read_text()
        assert not (tmp_path / ".remediation" / "staging" / "pom.xml.bak").exists()

    def test_unchanged_content_is_skipped_without_backup(self, tmp_path: Path) -> None:
        descriptor = _setup(tmp_path)
        ledger = WorkflowLedger()
        outcome = _workflow(tmp_path).execute([FileMutation(str(descriptor), lambda c: c)], ledger)
        assert outcome.status is FixStatus.SKIPPED
        assert ledger.entries == ()

    def test_chained_mutations_on_one_file(self, tmp_path: Path) -> None:
        """Two producers for the same path apply in order and write once."""
        descriptor = _setup(tmp_path)
        ledger = WorkflowLedger()
        second = FileMutation(str(descriptor), lambda c: None if c is None else c.replace("-aggregator", "-agg"))
        outcome = _workflow(tmp_path).execute([FileMutation(str(descriptor), _rename), second], ledger)
        assert outcome.status is FixStatus.FIXED
        assert "billing-agg<" in descriptor.read_text()
        assert ledger.count(LedgerOperation.WRITE) == 1

    def test_producer_without_anchor_fails_before_writing(self, tmp_path: Path) -> None:
        descriptor = _setup(tmp_path)
        ledger = WorkflowLedger()
        outcome = _workflow(tmp_path).execute([FileMutation(str(descriptor), lambda c: None)], ledger)
        assert outcome.status is FixStatus.FAILED
        assert outcome.description.startswith("Could not compute change")
        assert ledger.entries == ()
        assert descriptor.read_bytes() == ORIGINAL.encode()

    def test_backup_that_cannot_be_discarded_is_reported(self, tmp_path: Path) -> None:
        """The change stays committed; the outcome names the leftover backup and the ledger flags it."""
        descriptor = _setup(tmp_path)
        telemetry = MagicMock()
        ledger = WorkflowLedger()
        with patch.object(StagingAreaGateway, "discard", side_effect=OSError("busy")):
            outcome = _workflow(tmp_path, telemetry).execute(
                [FileMutation(str(descriptor), _rename)], ledger, description="Renamed"
            )
        assert outcome.status is FixStatus.FIXED
        assert outcome.description == "Renamed (backup kept for pom.xml)"
        assert ledger.count(LedgerOperation.CLEANUP) == 0
        assert ledger.check_invariants(outcome.status) == ["fixed attempt does not clean up every backup"]
        telemetry.warning.assert_called_once()

    def test_undecodable_descriptor_fails_before_writing(self, tmp_path: Path) -> None:
        descriptor = tmp_path / "pom.xml"
        descriptor.write_bytes(b"\xff\xfe\xfa")
        ledger = WorkflowLedger()
        outcome = _workflow(tmp_path).execute([FileMutation(str(descriptor), _rename)], ledger)
        assert outcome.status is FixStatus.FAILED
        assert "Cannot read descriptor pom.xml" in outcome.description
        assert ledger.entries == ()


class TestDryRun:
    def test_dry_run_matches_live_diff(self, tmp_path: Path) -> None:
        """Preview diffs are exactly the diffs a live run reports, and nothing is written."""
        descriptor = _setup(tmp_path)
        workflow = _workflow(tmp_path)
        ledger = WorkflowLedger()
        preview = workflow.execute([FileMutation(str(descriptor), _rename)], ledger, dry_run=True)
        assert preview.status is FixStatus.DRY_RUN
        assert descriptor.read_bytes() == ORIGINAL.encode()
        assert ledger.entries == ()
        assert not (tmp_path / ".remediation").exists()
        live = workflow.execute([FileMutation(str(descriptor), _rename)], WorkflowLedger())
        assert live.diffs == preview.diffs
        assert "--- a/pom.xml" in preview.diffs[0].diff
        assert "+    <artifactId>billing-aggregator</artifactId>" in preview.diffs[0].diff

    def test_new_file_diff_uses_dev_null(self, tmp_path: Path) -> None:
        outcome = _workflow(tmp_path).execute(
            [FileMutation(str(tmp_path / "new" / "pom.xml"), lambda c: "<project/>\n")],
            WorkflowLedger(),
            dry_run=True,
        )
        assert outcome.diffs[0].diff.startswith("--- /dev/null")


class TestRollback:
    def test_failed_verification_restores_original_bytes(self, tmp_path: Path, failing_verify: MagicMock) -> None:
        """Restored files are byte-identical, CRLF included; output is kept."""
        descriptor = _setup(tmp_path)
        ledger = WorkflowLedger()
        outcome = _workflow(tmp_path).execute(
            [FileMutation(str(descriptor), _rename)], ledger, verify=failing_verify
        )
        assert outcome.status is FixStatus.FAILED
        assert outcome.output == "BUILD FAILURE"
        assert descriptor.read_bytes() == ORIGINAL.encode()
        assert ledger.count(LedgerOperation.ROLLBACK) == 1
        assert ledger.check_invariants(outcome.status) == []
        assert not (tmp_path / ".remediation" / "staging" / "pom.xml.bak").exists()

    def test_verification_scope_is_deepest_common_module(self, tmp_path: Path, passing_verify: MagicMock) -> None:
        _setup(tmp_path)
        (tmp_path / "a" / "b").mkdir(parents=True)
        (tmp_path / "a" / "pom.xml").write_text("<project><artifactId>a</artifactId></project>")
        (tmp_path / "a" / "b" / "pom.xml").write_text("<project><artifactId>b</artifactId></project>")
        outcome = _workflow(tmp_path, verify_timeout=42).execute(
            [
                FileMutation(str(tmp_path / "a" / "pom.xml"), lambda c: (c or "") + "\n"),
                FileMutation(str(tmp_path / "a" / "b" / "pom.xml"), lambda c: (c or "") + "\n"),
            ],
            WorkflowLedger(),
            verify=passing_verify,
        )
        assert outcome.status is FixStatus.FIXED
        passing_verify.assert_called_once_with((tmp_path / "a").resolve(), 42)

    def test_timeout_rolls_back(self, tmp_path: Path) -> None:
        descriptor = _setup(tmp_path)
        verify = MagicMock(side_effect=VerificationTimeoutError(5))
        ledger = WorkflowLedger()
        outcome = _workflow(tmp_path).execute([FileMutation(str(descriptor), _rename)], ledger, verify=verify)
        assert outcome.status is FixStatus.FAILED
        assert "timed out" in outcome.description
        assert descriptor.read_bytes() == ORIGINAL.encode()

    def test_cancellation_after_writes_rolls_back(self, tmp_path: Path) -> None:
        descriptor = _setup(tmp_path)
        token = CancellationToken()
        token.cancel()
        outcome = _workflow(tmp_path).execute(
            [FileMutation(str(descriptor), _rename)], WorkflowLedger(), cancellation=token
        )
        assert outcome.status is FixStatus.FAILED
        assert "cancelled" in outcome.description
        assert descriptor.read_bytes() == ORIGINAL.encode()

    def test_created_file_is_deleted_on_rollback(self, tmp_path: Path, failing_verify: MagicMock) -> None:
        _setup(tmp_path)
        created = tmp_path / "pom-new.xml"
        ledger = WorkflowLedger()
        outcome = _workflow(tmp_path).execute(
            [FileMutation(str(created), lambda c: "<project/>\n")], ledger, verify=failing_verify
        )
        assert outcome.status is FixStatus.FAILED
        assert not created.exists()
        restores = [e for e in ledger.entries if e.operation is LedgerOperation.RESTORE]
        assert len(restores) == 1 and restores[0].created

    def test_write_error_restores_earlier_files(self, tmp_path: Path) -> None:
        """An OSError on the second write undoes the first."""
        descriptor = _setup(tmp_path)
        (tmp_path / "m").mkdir()
        second = tmp_path / "m" / "pom.xml"
        second.write_text("<project><artifactId>m</artifactId></project>")
        workflow = _workflow(tmp_path)
        real_write = workflow.filesystem.write_text
        calls = {"n": 0}

        def flaky(path: str, content: str, encoding: str = "utf-8") -> None:
            calls["n"] += 1
            if calls["n"] == 2:
                raise OSError("disk full")
            real_write(path, content, encoding)

        ledger = WorkflowLedger()
        with patch.object(workflow.filesystem, "write_text", side_effect=flaky):
            outcome = workflow.execute(
                [
                    FileMutation(str(descriptor), _rename),
                    FileMutation(str(second), lambda c: (c or "") + "\n"),
                ],
                ledger,
            )
        assert outcome.status is FixStatus.FAILED
        assert "disk full" in outcome.description
        assert descriptor.read_bytes() == ORIGINAL.encode()
        assert ledger.check_invariants(outcome.status) == []

    def test_interrupt_rolls_back_and_propagates(self, tmp_path: Path) -> None:
        descriptor = _setup(tmp_path)
        verify = MagicMock(side_effect=KeyboardInterrupt)
        with pytest.raises(KeyboardInterrupt):
            _workflow(tmp_path).execute([FileMutation(str(descriptor), _rename)], WorkflowLedger(), verify=verify)
        assert descriptor.read_bytes() == ORIGINAL.encode()


class TestMissingToolPolicy:
    def test_pass_policy_commits_with_warning(self, tmp_path: Path) -> None:
        descriptor = _setup(tmp_path)
        telemetry = MagicMock()
        verify = MagicMock(return_value=VerificationResult.unavailable())
        outcome = _workflow(tmp_path, telemetry).execute(
            [FileMutation(str(descriptor), _rename)], WorkflowLedger(), verify=verify
        )
        assert outcome.status is FixStatus.FIXED
        telemetry.warning.assert_called_once()

    def test_fail_policy_rolls_back(self, tmp_path: Path) -> None:
        descriptor = _setup(tmp_path)
        verify = MagicMock(return_value=VerificationResult.unavailable())
        outcome = _workflow(tmp_path, missing_tool_policy=MissingToolPolicy.FAIL).execute(
            [FileMutation(str(descriptor), _rename)], WorkflowLedger(), verify=verify
        )
        assert outcome.status is FixStatus.FAILED
        assert outcome.description == "Build verification tool unavailable"
        assert descriptor.read_bytes() == ORIGINAL.encode()
