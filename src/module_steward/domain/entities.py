"""Domain entities: module nodes, violations, fix outcomes and the workflow ledger."""

import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Union


class HierarchyRole(Enum):
    """Structural role of a module in the three-tier hierarchy."""
    PURE_AGGREGATOR = "pure_aggregator"
    PARENT_AGGREGATOR = "parent_aggregator"
    LEAF = "leaf"
    UNKNOWN = "unknown"


class LayerSuffix(Enum):
    """Declared layer of a module, inferred from its name."""
    API = "api"
    CORE = "core"
    SPI = "spi"
    FACADE = "facade"
    COMMON = "common"
    NONE = "none"

    @classmethod
    def of(cls, identity: str) -> "LayerSuffix":
        """Infer the layer suffix from a module identity or directory name."""
        lowered = identity.lower()
        for layer in cls:
            if layer is cls.NONE:
                continue
            if lowered.endswith(f"-{layer.value}"):
                return layer
        if lowered.endswith("-commons"):
            return cls.COMMON
        return cls.NONE


@dataclass(frozen=True)
class ParentReference:
    """Declared parent of a module: identity plus optional relative locator."""
    identity: str
    relative_path: Optional[str] = None


@dataclass(frozen=True)
class ModuleNode:
    """Read-only view of one module, built fresh per scan."""
    identity: str
    directory: Path
    descriptor: Path
    parent: Optional[ParentReference] = None
    layer: LayerSuffix = LayerSuffix.NONE
    children: tuple[str, ...] = ()
    role: HierarchyRole = HierarchyRole.UNKNOWN

    @property
    def has_children(self) -> bool:
        return bool(self.children)


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class Violation:
    """A detected structural violation for one descriptor."""

    rule_id: str
    severity: Severity
    category: str
    location: str
    """Path of the descriptor the violation was reported against."""
    message: str
    expected: Optional[str] = None
    found: Optional[str] = None
    fix_hint: Optional[str] = None

    def to_dict(self) -> dict[str, Optional[str]]:
        """Convert to dictionary for reporters and the run record."""
        return {
            "rule_id": self.rule_id,
            "severity": self.severity.value,
            "category": self.category,
            "location": self.location,
            "message": self.message,
            "expected": self.expected,
            "found": self.found,
            "fix_hint": self.fix_hint,
        }


class FixStatus(Enum):
    """Outcome tag of one remediation attempt."""
    FIXED = "fixed"
    SKIPPED = "skipped"
    FAILED = "failed"
    NOT_FIXABLE = "not_fixable"
    DRY_RUN = "dry_run"


@dataclass(frozen=True)
class FileDiff:
    """Unified diff of one file touched (or to be touched) by a fix."""
    path: str
    diff: str


@dataclass(frozen=True)
class FixOutcome:
    """
    Result of exactly one remediation attempt.

    Build instances through the classmethods; each one fills only the
    fields that make sense for its status.
    """
    status: FixStatus
    description: str
    files: tuple[str, ...] = ()
    diffs: tuple[FileDiff, ...] = ()
    output: Optional[str] = None
    """Verification tool output, kept for diagnosis of failed attempts."""

    @classmethod
    def fixed(cls, files: list[str], diffs: list[FileDiff], description: str = "") -> "FixOutcome":
        return cls(FixStatus.FIXED, description, tuple(files), tuple(diffs))

    @classmethod
    def skipped(cls, reason: str) -> "FixOutcome":
        return cls(FixStatus.SKIPPED, reason)

    @classmethod
    def failed(cls, reason: str, output: Optional[str] = None) -> "FixOutcome":
        return cls(FixStatus.FAILED, reason, output=output)

    @classmethod
    def not_fixable(cls, guidance: str) -> "FixOutcome":
        return cls(FixStatus.NOT_FIXABLE, guidance)

    @classmethod
    def dry_run(cls, diffs: list[FileDiff], description: str = "") -> "FixOutcome":
        return cls(
            FixStatus.DRY_RUN,
            description,
            tuple(d.path for d in diffs),
            tuple(diffs),
        )

    @property
    def is_terminal(self) -> bool:
        """True when the orchestrator must stop trying further candidates."""
        return self.status is not FixStatus.SKIPPED

    def to_dict(self) -> dict[str, Union[str, list[str], None]]:
        return {
            "status": self.status.value,
            "description": self.description,
            "files": list(self.files),
            "diffs": [d.diff for d in self.diffs],
            "output": self.output,
        }


class LedgerOperation(Enum):
    BACKUP = "backup"
    WRITE = "write"
    RESTORE = "restore"
    DELETE_BACKUP = "delete_backup"
    CLEANUP = "cleanup"
    ROLLBACK = "rollback"


@dataclass(frozen=True)
class LedgerEntry:
    operation: LedgerOperation
    file: Optional[str]
    timestamp: int
    created: bool = False
    """True when the write created the file (no backup exists for it)."""


@dataclass
class WorkflowLedger:
    """
    Append-only record of one remediation attempt.

    One ledger is created per attempt and passed explicitly into every
    mutation call; it is never shared between attempts.
    """
    _entries: list[LedgerEntry] = field(default_factory=list)

    def record(self, operation: LedgerOperation, file: Optional[str] = None, created: bool = False) -> LedgerEntry:
        """Append an entry stamped with a monotonic timestamp."""
        entry = LedgerEntry(operation, file, time.monotonic_ns(), created)
        self._entries.append(entry)
        return entry

    @property
    def entries(self) -> tuple[LedgerEntry, ...]:
        return tuple(self._entries)

    def files_for(self, operation: LedgerOperation) -> list[str]:
        """Files recorded for an operation, in ledger order."""
        return [e.file for e in self._entries if e.operation is operation and e.file is not None]

    def count(self, operation: LedgerOperation) -> int:
        return sum(1 for e in self._entries if e.operation is operation)

    def check_invariants(self, status: FixStatus) -> list[str]:
        """Return the broken ledger invariants for an attempt that ended with status."""
        problems: list[str] = []
        backed_up: set[str] = set()
        for entry in self._entries:
            if entry.operation is LedgerOperation.BACKUP and entry.file:
                backed_up.add(entry.file)
            if entry.operation is LedgerOperation.WRITE and not entry.created and entry.file not in backed_up:
                problems.append(f"write without prior backup: {entry.file}")

        backups = sorted(self.files_for(LedgerOperation.BACKUP))
        if status is FixStatus.FIXED:
            if sorted(self.files_for(LedgerOperation.CLEANUP)) != backups:
                problems.append("fixed attempt does not clean up every backup")
            if self.count(LedgerOperation.ROLLBACK):
                problems.append("fixed attempt recorded a rollback")
        elif status is FixStatus.FAILED:
            restored = set(self.files_for(LedgerOperation.RESTORE))
            if not set(self.files_for(LedgerOperation.WRITE)) <= restored:
                problems.append("failed attempt does not restore every write")
            if self.count(LedgerOperation.CLEANUP):
                problems.append("failed attempt recorded a cleanup")
        return problems


@dataclass(frozen=True)
class VerificationResult:
    """Result of an out-of-process build verification."""
    passed: bool
    output: str = ""
    tool_available: bool = True

    @classmethod
    def unavailable(cls, output: str = "") -> "VerificationResult":
        return cls(passed=False, output=output, tool_available=False)

