"""Hierarchy classification: a module's role from its own suffix and its immediate children."""

from pathlib import Path, PurePosixPath
from typing import Optional

from module_steward.domain.constants import (
    AGGREGATOR_SUFFIX,
    DEFAULT_LEAF_SUFFIXES,
    DESCRIPTOR_NAME,
    PARENT_SUFFIX,
)
from module_steward.domain.entities import HierarchyRole, LayerSuffix, ModuleNode
from module_steward.domain.protocols import DescriptorEditorProtocol, FileSystemProtocol


class HierarchyClassifier:
    """
    Derives HierarchyRole for a descriptor.

    The role depends only on the node's own identity and its declared
    children, never on ancestors, and the same input always yields the same
    role. Missing information yields UNKNOWN instead of an error.
    """

    def __init__(
        self,
        editor: DescriptorEditorProtocol,
        filesystem: FileSystemProtocol,
        leaf_suffixes: tuple[str, ...] = DEFAULT_LEAF_SUFFIXES,
        descriptor_name: str = DESCRIPTOR_NAME,
    ) -> None:
        self.editor = editor
        self.filesystem = filesystem
        self.leaf_suffixes = tuple(s.lower() for s in leaf_suffixes)
        self.descriptor_name = descriptor_name

    def is_leaf_identity(self, identity: str) -> bool:
        lowered = identity.lower()
        return any(lowered.endswith(suffix) for suffix in self.leaf_suffixes)

    def child_directory(self, directory: Path, child: str) -> Path:
        return Path(directory) / child

    def child_descriptor(self, directory: Path, child: str) -> Path:
        return self.child_directory(directory, child) / self.descriptor_name

    def classify(self, descriptor_content: str, directory: Path) -> HierarchyRole:
        """Classify one descriptor; children are resolved relative to directory."""
        identity = self.editor.read_identity(descriptor_content)
        if not identity:
            return HierarchyRole.UNKNOWN
        children = self.editor.read_children(descriptor_content)
        if not children:
            if self.is_leaf_identity(identity):
                return HierarchyRole.LEAF
            return HierarchyRole.PURE_AGGREGATOR
        if any(self.is_leaf_child(directory, child) for child in children):
            return HierarchyRole.PARENT_AGGREGATOR
        return HierarchyRole.PURE_AGGREGATOR

    def is_leaf_child(self, directory: Path, child: str) -> bool:
        if self.is_leaf_identity(PurePosixPath(child).name):
            return True
        # Ambiguous directory name: fall back to the child's declared identity.
        content = self.filesystem.read_text_or_none(str(self.child_descriptor(directory, child)))
        if content is None:
            return False
        identity = self.editor.read_identity(content)
        return identity is not None and self.is_leaf_identity(identity)

    def leaf_children(self, descriptor_content: str, directory: Path) -> list[str]:
        """Declared children that count as leaves, in declared order."""
        return [
            child
            for child in self.editor.read_children(descriptor_content)
            if self.is_leaf_child(directory, child)
        ]

    def resolve_child_role(self, directory: Path, child: str) -> HierarchyRole:
        """Role of a declared child; an unreadable child falls back to its name suffix."""
        content = self.filesystem.read_text_or_none(str(self.child_descriptor(directory, child)))
        if content is None:
            if self.is_leaf_identity(PurePosixPath(child).name):
                return HierarchyRole.LEAF
            return HierarchyRole.UNKNOWN
        return self.classify(content, self.child_directory(directory, child))

    def read_node(self, descriptor_path: Path) -> Optional[ModuleNode]:
        """Build a ModuleNode from a descriptor on disk; None when it cannot be read."""
        content = self.filesystem.read_text_or_none(str(descriptor_path))
        if content is None:
            return None
        return self.node_from_content(content, Path(descriptor_path))

    def node_from_content(self, content: str, descriptor_path: Path) -> Optional[ModuleNode]:
        identity = self.editor.read_identity(content)
        if not identity:
            return None
        directory = descriptor_path.parent
        return ModuleNode(
            identity=identity,
            directory=directory,
            descriptor=descriptor_path,
            parent=self.editor.read_parent_reference(content),
            layer=LayerSuffix.of(identity),
            children=tuple(self.editor.read_children(content)),
            role=self.classify(content, directory),
        )


class ModuleNaming:
    """Role suffix arithmetic on module identities. No top-level functions."""

    _ROLE_SUFFIXES: tuple[str, ...] = (AGGREGATOR_SUFFIX, PARENT_SUFFIX)

    @staticmethod
    def base_name(identity: str) -> str:
        """Identity without a trailing -aggregator or -parent."""
        for suffix in ModuleNaming._ROLE_SUFFIXES:
            if identity.endswith(suffix) and len(identity) > len(suffix):
                return identity[: -len(suffix)]
        return identity

    @staticmethod
    def aggregator_name(identity: str) -> str:
        return ModuleNaming.base_name(identity) + AGGREGATOR_SUFFIX

    @staticmethod
    def parent_name(identity: str) -> str:
        return ModuleNaming.base_name(identity) + PARENT_SUFFIX

    @staticmethod
    def name_for_role(identity: str, role: HierarchyRole) -> Optional[str]:
        """Conventional identity for role; None for roles that carry no suffix."""
        if role is HierarchyRole.PURE_AGGREGATOR:
            return ModuleNaming.aggregator_name(identity)
        if role is HierarchyRole.PARENT_AGGREGATOR:
            return ModuleNaming.parent_name(identity)
        return None
