from pathlib import Path
from typing import TYPE_CHECKING, Optional, Protocol

from module_steward.domain.registry_types import RuleRegistryEntry

if TYPE_CHECKING:
    from module_steward.domain.entities import (
        FixOutcome,
        ParentReference,
        VerificationResult,
        Violation,
    )
    from module_steward.use_cases.fixers.base import FixerContext


class TelemetryPort(Protocol):
    """Console + log sink used by use cases."""

    def step(self, message: str) -> None: ...
    def error(self, message: str) -> None: ...
    def warning(self, message: str) -> None: ...
    def debug(self, message: str) -> None: ...
    def handshake(self) -> None: ...


class DescriptorEditorProtocol(Protocol):
    """
    Narrow text-surgery seam over one build descriptor.

    Readers return None (or an empty list) when the element is absent.
    Mutators return the new content (unchanged when already compliant), or
    None when the anchor element they need is missing. Nothing raises.
    """

    def read_identity(self, content: str) -> Optional[str]: ...

    def read_parent_reference(self, content: str) -> Optional["ParentReference"]: ...

    def read_children(self, content: str) -> list[str]: ...

    def has_dependency_management(self, content: str) -> bool: ...

    def has_direct_dependencies(self, content: str) -> bool: ...

    def replace_identity(self, content: str, new_identity: str) -> Optional[str]: ...

    def replace_parent_identity(self, content: str, new_identity: str) -> Optional[str]: ...

    def insert_dependency_management_block(self, content: str) -> Optional[str]: ...

    def remove_dependency_management_block(self, content: str) -> Optional[str]: ...

    def remove_direct_dependencies(self, content: str) -> Optional[str]: ...

    def add_children(self, content: str, names: list[str]) -> Optional[str]: ...

    def move_child_first(self, content: str, name: str) -> Optional[str]: ...

    def remove_relative_path(self, content: str) -> Optional[str]: ...


class FileSystemProtocol(Protocol):
    """Text file access for descriptors, staging copies and artifacts."""

    def exists(self, path: str) -> bool: ...

    def read_text(self, path: str, encoding: str = "utf-8") -> str: ...

    def read_text_or_none(self, path: str) -> Optional[str]:
        """Read UTF-8 text; None when the file is missing or unreadable."""
        ...

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None: ...

    def append_text(self, path: str, content: str, encoding: str = "utf-8") -> None: ...

    def copy_file(self, source: str, destination: str) -> None: ...

    def move_file(self, source: str, destination: str) -> None: ...

    def delete_file(self, path: str) -> None: ...

    def make_dirs(self, path: str, exist_ok: bool = True) -> None: ...

    def list_subdirectories(self, path: str) -> list[str]: ...

    def remove_empty_dirs(self, path: str, stop_at: str) -> None:
        """Remove path and its empty ancestors up to (not including) stop_at."""
        ...

    def join_path(self, *paths: str) -> str: ...


class ArtifactStorageProtocol(Protocol):
    """Keyed storage for run records under the report directory."""

    def write_artifact(self, key: str, content: str, encoding: str = "utf-8") -> None: ...

    def read_artifact(self, key: str, encoding: str = "utf-8") -> str: ...

    def exists(self, key: str) -> bool: ...

    def append_artifact(self, key: str, content: str, encoding: str = "utf-8") -> None: ...


class StagingAreaProtocol(Protocol):
    """Backup storage keyed by a file's project-relative path."""

    def relative_key(self, file_path: str) -> str: ...

    def backup(self, file_path: str) -> str:
        """Copy file into staging; return the backup path."""
        ...

    def restore(self, file_path: str) -> None:
        """Move the staged copy back over the original."""
        ...

    def discard(self, file_path: str) -> None:
        """Delete the staged copy after a commit."""
        ...

    def has_backup(self, file_path: str) -> bool: ...

    def purge(self) -> bool:
        """Remove the staging tree if it holds no backups. True when removed."""
        ...


class BuildVerifierProtocol(Protocol):
    """Out-of-process check that a subtree still builds."""

    def verify(self, module_dir: Path, timeout: float) -> "VerificationResult": ...


class GuidanceServiceProtocol(Protocol):
    def get_entry(self, rule_id: str) -> Optional[RuleRegistryEntry]: ...

    def get_manual_instructions(self, rule_id: str) -> str: ...

    def get_display_name(self, rule_id: str) -> str: ...


class FixerProtocol(Protocol):
    """One automated repair for one or more rule ids."""

    name: str
    rule_ids: frozenset[str]
    priority: int

    def can_fix(self, violation: "Violation") -> bool: ...

    def fix(self, violation: "Violation", context: "FixerContext") -> "FixOutcome": ...
