"""Depth-first walk over declared modules, shared by the validator and the convention checks."""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from module_steward.domain.entities import ModuleNode
from module_steward.domain.hierarchy import HierarchyClassifier
from module_steward.domain.protocols import FileSystemProtocol


@dataclass(frozen=True)
class VisitedModule:
    """One descriptor reached by the walk."""
    descriptor: Path
    content: str
    node: Optional[ModuleNode]
    """None when the descriptor declares no identity."""
    depth: int
    missing_children: tuple[str, ...] = ()
    """Declared children whose descriptor could not be read."""

    @property
    def is_root(self) -> bool:
        return self.depth == 0


class ModuleTreeWalker:
    """Pre-order walk from a root descriptor through every declared child."""

    def __init__(self, classifier: HierarchyClassifier, filesystem: FileSystemProtocol) -> None:
        self.classifier = classifier
        self.filesystem = filesystem

    def walk(self, root_descriptor: Path) -> Iterator[VisitedModule]:
        """Yield each readable descriptor once; unreadable children are reported on their parent."""
        visited: set[Path] = set()
        yield from self._walk(Path(root_descriptor), 0, visited)

    def _walk(self, descriptor: Path, depth: int, visited: set[Path]) -> Iterator[VisitedModule]:
        key = descriptor.resolve()
        if key in visited:
            return
        visited.add(key)
        content = self.filesystem.read_text_or_none(str(descriptor))
        if content is None:
            return
        node = self.classifier.node_from_content(content, descriptor)
        children = self.classifier.editor.read_children(content)
        readable: list[Path] = []
        missing: list[str] = []
        for child in children:
            child_descriptor = self.classifier.child_descriptor(descriptor.parent, child)
            if self.filesystem.exists(str(child_descriptor)):
                readable.append(child_descriptor)
            else:
                missing.append(child)
        yield VisitedModule(descriptor, content, node, depth, tuple(missing))
        for child_descriptor in readable:
            yield from self._walk(child_descriptor, depth + 1, visited)
