"""Use Case: rename a module identity and propagate it to every descriptor that inherits from it."""

import re
from pathlib import Path
from typing import Optional

from module_steward.domain.constants import AGGREGATOR_SUFFIX, PARENT_SUFFIX
from module_steward.domain.entities import FixOutcome, HierarchyRole, WorkflowLedger
from module_steward.domain.hierarchy import HierarchyClassifier
from module_steward.domain.protocols import (
    DescriptorEditorProtocol,
    FileSystemProtocol,
    TelemetryPort,
)
from module_steward.use_cases.mutation_workflow import (
    CancellationToken,
    ContentProducer,
    FileMutation,
    MutationWorkflowController,
    VerifyCallback,
)

_VALID_IDENTITY = re.compile(r"^[A-Za-z0-9_.\-]+$")


class RenameModuleUseCase:
    """
    Renames one node and updates the parent reference of every descendant
    that points at the old identity, all inside a single workflow invocation.

    A rename whose new suffix would strand existing children is refused
    before anything is written.
    """

    def __init__(
        self,
        classifier: HierarchyClassifier,
        workflow: MutationWorkflowController,
        filesystem: FileSystemProtocol,
        telemetry: Optional[TelemetryPort] = None,
    ) -> None:
        self.classifier = classifier
        self.workflow = workflow
        self.filesystem = filesystem
        self.telemetry = telemetry

    @property
    def editor(self) -> DescriptorEditorProtocol:
        return self.classifier.editor

    def execute(
        self,
        descriptor_path: Path,
        new_identity: str,
        ledger: WorkflowLedger,
        dry_run: bool = False,
        verify: Optional[VerifyCallback] = None,
        cancellation: Optional[CancellationToken] = None,
        old_identity: Optional[str] = None,
    ) -> FixOutcome:
        """
        Rename the node at descriptor_path to new_identity.

        old_identity names the identity dependents may still reference. It
        defaults to the node's current identity; passing it lets a retry after
        a partial failure repair children left pointing at the old name once
        the node itself already carries new_identity.
        """
        descriptor = Path(descriptor_path)
        content = self.filesystem.read_text_or_none(str(descriptor))
        if content is None:
            return FixOutcome.failed(f"Cannot read descriptor {descriptor}")
        current_identity = self.editor.read_identity(content)
        if not current_identity:
            return FixOutcome.not_fixable(
                f"Descriptor {descriptor} declares no identity; classify it manually before renaming."
            )
        if not _VALID_IDENTITY.match(new_identity):
            return FixOutcome.not_fixable(f"'{new_identity}' is not a valid module identity.")
        if old_identity is None:
            old_identity = current_identity
        elif current_identity not in (old_identity, new_identity):
            return FixOutcome.not_fixable(
                f"{descriptor} declares '{current_identity}', neither '{old_identity}' nor '{new_identity}'."
            )

        rejection = self.check_rename(content, descriptor.parent, current_identity, new_identity)
        if rejection is not None:
            if self.telemetry:
                self.telemetry.warning(f"rename {old_identity} -> {new_identity} rejected: {rejection}")
            return FixOutcome.not_fixable(rejection)

        dependents = self.find_dependents(descriptor, content, old_identity)
        mutations = [FileMutation(str(descriptor), self._identity_producer(new_identity))]
        mutations.extend(
            FileMutation(str(path), self._parent_producer(new_identity)) for path in dependents
        )
        if self.telemetry:
            self.telemetry.step(
                f"rename {old_identity} -> {new_identity} dependents={len(dependents)}"
                f"{' (dry run)' if dry_run else ''}"
            )
        return self.workflow.execute(
            mutations,
            ledger,
            verify=verify,
            dry_run=dry_run,
            cancellation=cancellation,
            description=f"Renamed '{old_identity}' to '{new_identity}'",
        )

    def _identity_producer(self, new_identity: str) -> ContentProducer:
        def produce(current: Optional[str]) -> Optional[str]:
            if current is None:
                return None
            return self.editor.replace_identity(current, new_identity)
        return produce

    def _parent_producer(self, new_identity: str) -> ContentProducer:
        def produce(current: Optional[str]) -> Optional[str]:
            if current is None:
                return None
            return self.editor.replace_parent_identity(current, new_identity)
        return produce

    def check_rename(
        self, content: str, directory: Path, old_identity: str, new_identity: str
    ) -> Optional[str]:
        """Guidance text when the rename would strand children; None when it is legal."""
        role = self.classifier.classify(content, directory)
        if role is HierarchyRole.UNKNOWN:
            return f"Cannot classify '{old_identity}'; resolve its descriptor before renaming."
        children = self.editor.read_children(content)
        leaves = self.classifier.leaf_children(content, directory)

        if new_identity.endswith(AGGREGATOR_SUFFIX) and leaves:
            return (
                f"Cannot rename '{old_identity}' to '{new_identity}': it has leaf children "
                f"{', '.join(leaves)} that require a '{PARENT_SUFFIX}' aggregator. "
                f"Move the leaf modules under a new '{PARENT_SUFFIX}' module first, "
                f"or keep the '{PARENT_SUFFIX}' suffix."
            )
        if role is HierarchyRole.LEAF and new_identity.endswith((AGGREGATOR_SUFFIX, PARENT_SUFFIX)):
            return (
                f"Cannot rename leaf module '{old_identity}' to '{new_identity}': "
                "leaf modules cannot become aggregators."
            )
        if children and self.classifier.is_leaf_identity(new_identity):
            return (
                f"Cannot rename '{old_identity}' to '{new_identity}': a leaf-suffixed module "
                f"cannot declare children ({', '.join(children)})."
            )
        if new_identity.endswith(PARENT_SUFFIX) and children and len(leaves) < len(children):
            non_leaves = [c for c in children if c not in leaves]
            return (
                f"Cannot rename '{old_identity}' to '{new_identity}': children "
                f"{', '.join(non_leaves)} are not leaf modules and cannot sit under a "
                f"'{PARENT_SUFFIX}' aggregator."
            )
        return None

    def find_dependents(self, descriptor: Path, content: str, old_identity: str) -> list[Path]:
        """Descriptors in the node's subtree whose parent reference names old_identity."""
        dependents: list[Path] = []
        visited: set[Path] = {descriptor.resolve()}
        self._collect(descriptor.parent, content, old_identity, dependents, visited)
        return dependents

    def _collect(
        self,
        directory: Path,
        content: str,
        old_identity: str,
        dependents: list[Path],
        visited: set[Path],
    ) -> None:
        for child in self.editor.read_children(content):
            child_descriptor = self.classifier.child_descriptor(directory, child)
            key = child_descriptor.resolve()
            if key in visited:
                continue
            visited.add(key)
            child_content = self.filesystem.read_text_or_none(str(child_descriptor))
            if child_content is None:
                if self.telemetry:
                    self.telemetry.debug(f"file={child_descriptor} status=skipped reason=unreadable")
                continue
            parent = self.editor.read_parent_reference(child_content)
            if parent is not None and parent.identity == old_identity:
                dependents.append(child_descriptor)
            self._collect(child_descriptor.parent, child_content, old_identity, dependents, visited)
