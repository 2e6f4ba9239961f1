"""POM descriptor gateway - targeted regex surgery on pom.xml text.

Implements DescriptorEditorProtocol without a full XML model: every lookup
runs against a masked copy of the document (comments and unrelated nested
blocks blanked out, offsets preserved) and every edit splices the original
text so formatting outside the touched element survives.
"""

import logging
import re
from typing import Optional

from module_steward.domain.entities import ParentReference
from module_steward.domain.protocols import DescriptorEditorProtocol

logger = logging.getLogger(__name__)

_COMMENT = re.compile(r"<!--.*?-->", re.DOTALL)
_PARENT = re.compile(r"<parent>(.*?)</parent>", re.DOTALL)
_ARTIFACT_ID = re.compile(r"<artifactId>\s*([^<]+?)\s*</artifactId>")
_RELATIVE_PATH = re.compile(r"<relativePath\s*/>|<relativePath>\s*([^<]*?)\s*</relativePath>")
_RELATIVE_PATH_LINE = re.compile(
    r"\n?[ \t]*(?:<relativePath\s*/>|<relativePath>[^<]*</relativePath>)"
)
_MODULES = re.compile(r"<modules>(.*?)</modules>", re.DOTALL)
_MODULE = re.compile(r"<module>\s*([^<]+?)\s*</module>")
_MODULE_LINE = re.compile(r"[ \t]*<module>\s*([^<]+?)\s*</module>[ \t]*\n?")
_DEPENDENCY_MANAGEMENT = re.compile(
    r"(?:\n[ \t]*)?<dependencyManagement>.*?</dependencyManagement>", re.DOTALL
)
_DEPENDENCIES = re.compile(r"(?:\n[ \t]*)?<dependencies>.*?</dependencies>", re.DOTALL)
_CLOSING_MODULES = re.compile(r"\n([ \t]*)</modules>")
_LINE_INDENT = re.compile(r"\n([ \t]*)<")

# Blocks whose nested <artifactId>/<dependencies>/<modules> never describe the module itself.
_NESTED_BLOCKS = ("parent", "dependencyManagement", "dependencies", "build", "profiles", "reporting")


class PomDescriptorGateway(DescriptorEditorProtocol):
    """Infrastructure implementation of DescriptorEditorProtocol for Maven pom.xml."""

    @staticmethod
    def _blank(text: str, start: int, end: int) -> str:
        segment = re.sub(r"[^\n]", " ", text[start:end])
        return text[:start] + segment + text[end:]

    def _mask(self, content: str, blocks: tuple[str, ...] = ()) -> str:
        """Blank out comments and the named top-level blocks, keeping offsets intact."""
        masked = content
        for match in _COMMENT.finditer(content):
            masked = self._blank(masked, match.start(), match.end())
        for tag in blocks:
            pattern = re.compile(rf"<{tag}>.*?</{tag}>", re.DOTALL)
            for match in pattern.finditer(masked):
                masked = self._blank(masked, match.start(), match.end())
        return masked

    @staticmethod
    def _indent_unit(content: str) -> str:
        """Smallest non-empty indentation used in the document; four spaces when none."""
        indents = [m.group(1) for m in _LINE_INDENT.finditer(content) if m.group(1)]
        return min(indents, key=len) if indents else "    "

    # -- readers ---------------------------------------------------------

    def _identity_match(self, content: str) -> Optional[re.Match[str]]:
        masked = self._mask(content, _NESTED_BLOCKS)
        return _ARTIFACT_ID.search(masked)

    def read_identity(self, content: str) -> Optional[str]:
        """Return the module's own artifactId (the first one outside <parent>)."""
        match = self._identity_match(content)
        if match is None:
            return None
        return content[match.start(1):match.end(1)]

    def _parent_match(self, content: str) -> Optional[re.Match[str]]:
        return _PARENT.search(self._mask(content))

    def read_parent_reference(self, content: str) -> Optional[ParentReference]:
        parent = self._parent_match(content)
        if parent is None:
            return None
        body = content[parent.start(1):parent.end(1)]
        artifact = _ARTIFACT_ID.search(body)
        if artifact is None:
            return None
        relative: Optional[str] = None
        rel_match = _RELATIVE_PATH.search(body)
        if rel_match is not None:
            relative = rel_match.group(1) or ""
        return ParentReference(identity=artifact.group(1), relative_path=relative)

    def _modules_match(self, content: str) -> Optional[re.Match[str]]:
        return _MODULES.search(self._mask(content, ("profiles", "build")))

    def read_children(self, content: str) -> list[str]:
        """Declared <module> entries of the top-level <modules> section, in order."""
        modules = self._modules_match(content)
        if modules is None:
            return []
        masked_body = modules.group(1)
        return [m.group(1) for m in _MODULE.finditer(masked_body)]

    def has_dependency_management(self, content: str) -> bool:
        masked = self._mask(content, ("profiles", "build"))
        return "<dependencyManagement>" in masked

    def has_direct_dependencies(self, content: str) -> bool:
        masked = self._mask(content, ("dependencyManagement", "build", "profiles"))
        return "<dependencies>" in masked

    # -- mutators --------------------------------------------------------

    def replace_identity(self, content: str, new_identity: str) -> Optional[str]:
        match = self._identity_match(content)
        if match is None:
            return None
        return content[:match.start(1)] + new_identity + content[match.end(1):]

    def replace_parent_identity(self, content: str, new_identity: str) -> Optional[str]:
        parent = self._parent_match(content)
        if parent is None:
            return None
        artifact = _ARTIFACT_ID.search(content, parent.start(1), parent.end(1))
        if artifact is None:
            return None
        return content[:artifact.start(1)] + new_identity + content[artifact.end(1):]

    def insert_dependency_management_block(self, content: str) -> Optional[str]:
        """Insert an empty <dependencyManagement> after </modules>, else before </project>."""
        if self.has_dependency_management(content):
            return content
        masked = self._mask(content, ("profiles", "build"))
        unit = self._indent_unit(content)
        block = "\n".join(
            [
                f"{unit}<dependencyManagement>",
                f"{unit * 2}<dependencies>",
                f"{unit * 2}</dependencies>",
                f"{unit}</dependencyManagement>",
            ]
        )
        modules_end = masked.find("</modules>")
        if modules_end != -1:
            pos = modules_end + len("</modules>")
            return content[:pos] + "\n\n" + block + content[pos:]
        project_end = masked.rfind("</project>")
        if project_end == -1:
            logger.debug("No </project> anchor; cannot insert dependencyManagement")
            return None
        return content[:project_end] + block + "\n" + content[project_end:]

    def remove_dependency_management_block(self, content: str) -> Optional[str]:
        masked = self._mask(content, ("profiles", "build"))
        match = _DEPENDENCY_MANAGEMENT.search(masked)
        if match is None:
            return content
        return content[:match.start()] + content[match.end():]

    def remove_direct_dependencies(self, content: str) -> Optional[str]:
        """Remove standalone <dependencies> blocks; the one inside <dependencyManagement> stays."""
        masked = self._mask(content, ("dependencyManagement", "build", "profiles"))
        result = content
        for match in reversed(list(_DEPENDENCIES.finditer(masked))):
            result = result[:match.start()] + result[match.end():]
        return result

    def add_children(self, content: str, names: list[str]) -> Optional[str]:
        """Append <module> entries, creating a <modules> section before </project> if needed."""
        existing = set(self.read_children(content))
        missing = [n for n in names if n not in existing]
        if not missing:
            return content
        masked = self._mask(content, ("profiles", "build"))
        modules = _MODULES.search(masked)
        unit = self._indent_unit(content)
        if modules is not None:
            body = masked[modules.start(1):modules.end(1)]
            entry_indent = re.search(r"\n([ \t]*)<module>", body)
            closing = _CLOSING_MODULES.search(masked, modules.start(1), modules.end())
            if closing is None:
                entries = "".join(f"<module>{n}</module>" for n in missing)
                pos = modules.end(1)
                return content[:pos] + entries + content[pos:]
            indent = entry_indent.group(1) if entry_indent else closing.group(1) + unit
            entries = "".join(f"\n{indent}<module>{n}</module>" for n in missing)
            return content[:closing.start()] + entries + content[closing.start():]
        project_end = masked.rfind("</project>")
        if project_end == -1:
            return None
        lines = [f"{unit}<modules>"]
        lines.extend(f"{unit * 2}<module>{n}</module>" for n in missing)
        lines.append(f"{unit}</modules>")
        return content[:project_end] + "\n".join(lines) + "\n" + content[project_end:]

    def move_child_first(self, content: str, name: str) -> Optional[str]:
        modules = self._modules_match(content)
        if modules is None:
            return None
        start, end = modules.start(1), modules.end(1)
        body = content[start:end]
        entries = list(_MODULE_LINE.finditer(modules.group(1)))
        target = next((m for m in entries if m.group(1) == name), None)
        if target is None:
            return None
        if entries[0] is target:
            return content
        first = entries[0].start()
        without = body[:target.start()] + body[target.end():]
        new_body = without[:first] + target.group(0) + without[first:]
        return content[:start] + new_body + content[end:]

    def remove_relative_path(self, content: str) -> Optional[str]:
        parent = self._parent_match(content)
        if parent is None:
            return content
        body = content[parent.start(1):parent.end(1)]
        new_body = _RELATIVE_PATH_LINE.sub("", body, count=1)
        return content[:parent.start(1)] + new_body + content[parent.end(1):]
