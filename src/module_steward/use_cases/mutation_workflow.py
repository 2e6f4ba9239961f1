"""Use Case: guarded multi-file mutation (backup -> write -> verify -> commit or rollback)."""

import difflib
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Sequence

from module_steward.domain.config import MissingToolPolicy
from module_steward.domain.constants import DEFAULT_VERIFY_TIMEOUT, DESCRIPTOR_NAME
from module_steward.domain.entities import (
    FileDiff,
    FixOutcome,
    LedgerOperation,
    VerificationResult,
    WorkflowLedger,
)
from module_steward.domain.exceptions import (
    DescriptorReadError,
    RemediationCancelledError,
    RemediationError,
)
from module_steward.domain.protocols import (
    FileSystemProtocol,
    StagingAreaProtocol,
    TelemetryPort,
)

ContentProducer = Callable[[Optional[str]], Optional[str]]
"""Pure function from current content (None for a new file) to new content; None if it cannot apply."""

VerifyCallback = Callable[[Path, float], VerificationResult]


@dataclass(frozen=True)
class FileMutation:
    """One target file and the pure function that produces its new content."""
    path: str
    produce: ContentProducer


@dataclass(frozen=True)
class PlannedWrite:
    path: str
    relative: str
    original: Optional[str]
    updated: str

    @property
    def is_new(self) -> bool:
        return self.original is None

    @property
    def changed(self) -> bool:
        return self.original != self.updated


class CancellationToken:
    """Cooperative cancellation, checked once the writes are on disk."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()


class MutationWorkflowController:
    """
    Wraps every remediation attempt in backup, write, optional verify and
    commit-or-rollback.

    The ledger is supplied per call and never stored on the controller, so
    one controller can serve attempts on disjoint files concurrently.
    A partially applied multi-file mutation never persists: any exception
    between the first backup and the commit restores every staged file and
    deletes every file the attempt created.
    """

    def __init__(
        self,
        filesystem: FileSystemProtocol,
        staging: StagingAreaProtocol,
        telemetry: Optional[TelemetryPort] = None,
        verify_timeout: float = DEFAULT_VERIFY_TIMEOUT,
        missing_tool_policy: MissingToolPolicy = MissingToolPolicy.PASS,
        descriptor_name: str = DESCRIPTOR_NAME,
    ) -> None:
        self.filesystem = filesystem
        self.staging = staging
        self.telemetry = telemetry
        self.verify_timeout = verify_timeout
        self.missing_tool_policy = missing_tool_policy
        self.descriptor_name = descriptor_name

    def execute(
        self,
        mutations: Sequence[FileMutation],
        ledger: WorkflowLedger,
        verify: Optional[VerifyCallback] = None,
        dry_run: bool = False,
        cancellation: Optional[CancellationToken] = None,
        description: str = "",
    ) -> FixOutcome:
        """Run one guarded mutation and return exactly one outcome."""
        try:
            planned = self.plan(mutations)
        except (OSError, UnicodeDecodeError, RemediationError) as exc:
            if self.telemetry:
                self.telemetry.error(f"status=failed phase=plan reason={exc}")
            return FixOutcome.failed(f"Could not compute change: {exc}")

        changed = [p for p in planned if p.changed]
        if not changed:
            return FixOutcome.skipped("No changes required")
        diffs = [self.diff(p) for p in changed]
        if dry_run:
            return FixOutcome.dry_run(diffs, description)
        return self._apply(changed, diffs, ledger, verify, cancellation, description)

    def plan(self, mutations: Sequence[FileMutation]) -> list[PlannedWrite]:
        """Compute new content for every target; several mutations on one file chain in order."""
        order: list[str] = []
        originals: dict[str, Optional[str]] = {}
        current: dict[str, Optional[str]] = {}
        for mutation in mutations:
            key = str(Path(mutation.path).resolve())
            if key not in originals:
                order.append(key)
                originals[key] = self._read_existing(key)
                current[key] = originals[key]
            produced = mutation.produce(current[key])
            if produced is None:
                raise RemediationError(f"no applicable edit for {self.staging.relative_key(key)}")
            current[key] = produced
        return [
            PlannedWrite(key, self.staging.relative_key(key), originals[key], str(current[key]))
            for key in order
        ]

    def _read_existing(self, path: str) -> Optional[str]:
        if not self.filesystem.exists(path):
            return None
        try:
            return self.filesystem.read_text(path)
        except (OSError, UnicodeDecodeError) as exc:
            raise DescriptorReadError(self.staging.relative_key(path), str(exc)) from exc

    @staticmethod
    def diff(write: PlannedWrite) -> FileDiff:
        before = write.original.splitlines(keepends=True) if write.original is not None else []
        after = write.updated.splitlines(keepends=True)
        text = "".join(
            difflib.unified_diff(
                before,
                after,
                fromfile="/dev/null" if write.is_new else f"a/{write.relative}",
                tofile=f"b/{write.relative}",
            )
        )
        return FileDiff(path=write.relative, diff=text)

    def _apply(
        self,
        changed: list[PlannedWrite],
        diffs: list[FileDiff],
        ledger: WorkflowLedger,
        verify: Optional[VerifyCallback],
        cancellation: Optional[CancellationToken],
        description: str,
    ) -> FixOutcome:
        backed_up: list[PlannedWrite] = []
        try:
            for write in changed:
                if not write.is_new:
                    self.staging.backup(write.path)
                    ledger.record(LedgerOperation.BACKUP, write.relative)
                    backed_up.append(write)
            for write in changed:
                self.filesystem.write_text(write.path, write.updated)
                ledger.record(LedgerOperation.WRITE, write.relative, created=write.is_new)
                if self.telemetry:
                    self.telemetry.debug(f"file={write.relative} status=written")
            if cancellation is not None and cancellation.is_cancelled:
                raise RemediationCancelledError()
            if verify is not None:
                result = self._verify(verify, changed)
                if not result.passed:
                    problems = self._rollback(changed, backed_up, ledger)
                    reason = "Build verification failed" if result.tool_available else (
                        "Build verification tool unavailable"
                    )
                    return FixOutcome.failed(self._with_rollback_problems(reason, problems), result.output)
        except Exception as exc:
            problems = self._rollback(changed, backed_up, ledger)
            if self.telemetry:
                self.telemetry.error(f"status=rolled_back reason={exc}")
            return FixOutcome.failed(self._with_rollback_problems(str(exc), problems))
        except BaseException:
            self._rollback(changed, backed_up, ledger)
            raise

        kept = self._commit(backed_up, ledger)
        if self.telemetry:
            self.telemetry.step(f"status=fixed files={len(changed)} {description}".rstrip())
        if kept:
            description = f"{description} (backup kept for {', '.join(kept)})".lstrip()
        return FixOutcome.fixed([w.relative for w in changed], diffs, description)

    def _verify(self, verify: VerifyCallback, changed: list[PlannedWrite]) -> VerificationResult:
        scope = self.verification_scope([w.path for w in changed])
        result = verify(scope, self.verify_timeout)
        if result.tool_available:
            return result
        if self.missing_tool_policy is MissingToolPolicy.PASS:
            if self.telemetry:
                self.telemetry.warning(
                    f"Build verification unavailable for {scope}; committing unverified change."
                )
            return VerificationResult(passed=True, output=result.output, tool_available=False)
        return result

    def verification_scope(self, paths: list[str]) -> Path:
        """Deepest directory that contains every target and holds a descriptor."""
        common = Path(os.path.commonpath([str(Path(p).resolve().parent) for p in paths]))
        candidate = common
        while True:
            if self.filesystem.exists(str(candidate / self.descriptor_name)):
                return candidate
            if candidate.parent == candidate:
                return common
            candidate = candidate.parent

    def _rollback(
        self,
        changed: list[PlannedWrite],
        backed_up: list[PlannedWrite],
        ledger: WorkflowLedger,
    ) -> list[str]:
        """Restore staged files and delete created ones. Returns files that could not be restored."""
        ledger.record(LedgerOperation.ROLLBACK)
        problems: list[str] = []
        for write in backed_up:
            try:
                self.staging.restore(write.path)
                ledger.record(LedgerOperation.RESTORE, write.relative)
            except OSError as exc:
                problems.append(write.relative)
                if self.telemetry:
                    self.telemetry.error(f"file={write.relative} status=restore_failed reason={exc}")
        for write in changed:
            if not write.is_new:
                continue
            try:
                self.filesystem.delete_file(write.path)
                ledger.record(LedgerOperation.RESTORE, write.relative, created=True)
            except OSError as exc:
                problems.append(write.relative)
                if self.telemetry:
                    self.telemetry.error(f"file={write.relative} status=delete_failed reason={exc}")
        return problems

    @staticmethod
    def _with_rollback_problems(reason: str, problems: list[str]) -> str:
        if not problems:
            return reason
        return f"{reason} (rollback incomplete for: {', '.join(problems)})"

    def _commit(self, backed_up: list[PlannedWrite], ledger: WorkflowLedger) -> list[str]:
        """Discard backups; return the relative paths whose backup could not be removed."""
        kept: list[str] = []
        for write in backed_up:
            try:
                self.staging.discard(write.path)
            except OSError as exc:
                if self.telemetry:
                    self.telemetry.warning(f"file={write.relative} status=backup_kept reason={exc}")
                kept.append(write.relative)
                continue
            ledger.record(LedgerOperation.DELETE_BACKUP, write.relative)
            ledger.record(LedgerOperation.CLEANUP, write.relative)
