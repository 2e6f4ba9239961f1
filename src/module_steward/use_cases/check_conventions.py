"""Use Case: naming, dependency-management and module-listing conventions per hierarchy role."""

from collections import defaultdict
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Optional

from module_steward.domain.constants import (
    AGGREGATOR_SUFFIX,
    CATEGORY_DEPENDENCY_MANAGEMENT,
    CATEGORY_HIERARCHY,
    CATEGORY_MODULE_LISTING,
    CATEGORY_NAMING,
    CATEGORY_PARENT_INHERITANCE,
    COMMON_SUFFIX,
    DEFAULT_RELATIVE_PATH,
    PARENT_SUFFIX,
    RULE_COMMON_MODULE_ORDER,
    RULE_CUSTOM_RELATIVE_PATH,
    RULE_DUPLICATE_LAYER,
    RULE_PARENT_AGGREGATOR_SUFFIX,
    RULE_PARENT_MISSING_DEPENDENCY_MANAGEMENT,
    RULE_PURE_AGGREGATOR_DEPENDENCY_MANAGEMENT,
    RULE_PURE_AGGREGATOR_DIRECT_DEPENDENCIES,
    RULE_PURE_AGGREGATOR_SUFFIX,
    RULE_UNLISTED_SUBMODULES,
)
from module_steward.domain.entities import HierarchyRole, LayerSuffix, ModuleNode, Severity, Violation
from module_steward.domain.hierarchy import HierarchyClassifier, ModuleNaming
from module_steward.domain.protocols import DescriptorEditorProtocol, TelemetryPort
from module_steward.use_cases.tree_walk import ModuleTreeWalker, VisitedModule

if TYPE_CHECKING:
    from module_steward.domain.config import ConfigurationLoader

_IGNORED_DIRECTORIES = frozenset({"target", "build", "node_modules", "src"})


class CheckConventionsUseCase:
    """Emit the convention violations the fixer family knows how to repair."""

    def __init__(
        self,
        classifier: HierarchyClassifier,
        walker: ModuleTreeWalker,
        config_loader: Optional["ConfigurationLoader"] = None,
        telemetry: Optional[TelemetryPort] = None,
    ) -> None:
        self.classifier = classifier
        self.walker = walker
        self.config_loader = config_loader
        self.telemetry = telemetry

    @property
    def editor(self) -> DescriptorEditorProtocol:
        return self.classifier.editor

    def _root_checked(self) -> bool:
        return self.config_loader is not None and self.config_loader.check_root

    def execute(self, root_descriptor: Path) -> list[Violation]:
        violations: list[Violation] = []
        for visited in self.walker.walk(Path(root_descriptor)):
            node = visited.node
            if node is None or node.role is HierarchyRole.UNKNOWN:
                continue
            violations.extend(self._check_node(visited, node))
        if self.config_loader is not None:
            violations = [v for v in violations if self.config_loader.is_rule_enabled(v.rule_id)]
        if self.telemetry:
            self.telemetry.step(f"conventions root={root_descriptor} violations={len(violations)}")
        return violations

    def _check_node(self, visited: VisitedModule, node: ModuleNode) -> list[Violation]:
        found: list[Violation] = []
        if node.role is HierarchyRole.LEAF:
            found.extend(self._check_relative_path(visited, node))
            return found
        pure_checked = not visited.is_root or self._root_checked()
        if node.role is HierarchyRole.PURE_AGGREGATOR:
            if pure_checked and node.children:
                found.extend(self._check_pure_aggregator(visited, node))
        else:
            found.extend(self._check_parent_aggregator(visited, node))
        found.extend(self._check_unlisted(visited, node))
        found.extend(self._check_relative_path(visited, node))
        return found

    def _violation(
        self,
        rule_id: str,
        category: str,
        visited: VisitedModule,
        message: str,
        expected: Optional[str] = None,
        found: Optional[str] = None,
        fix_hint: Optional[str] = None,
        severity: Severity = Severity.ERROR,
    ) -> Violation:
        return Violation(
            rule_id=rule_id,
            severity=severity,
            category=category,
            location=str(visited.descriptor),
            message=message,
            expected=expected,
            found=found,
            fix_hint=fix_hint,
        )

    def _check_pure_aggregator(self, visited: VisitedModule, node: ModuleNode) -> list[Violation]:
        found: list[Violation] = []
        if node.children and not node.identity.endswith(AGGREGATOR_SUFFIX):
            expected = ModuleNaming.aggregator_name(node.identity)
            found.append(
                self._violation(
                    RULE_PURE_AGGREGATOR_SUFFIX,
                    CATEGORY_NAMING,
                    visited,
                    f"Pure aggregator '{node.identity}' should end with '{AGGREGATOR_SUFFIX}'.",
                    expected=expected,
                    found=node.identity,
                    fix_hint=f"Rename to '{expected}'.",
                )
            )
        if self.editor.has_dependency_management(visited.content):
            found.append(
                self._violation(
                    RULE_PURE_AGGREGATOR_DEPENDENCY_MANAGEMENT,
                    CATEGORY_DEPENDENCY_MANAGEMENT,
                    visited,
                    f"Pure aggregator '{node.identity}' must not declare <dependencyManagement>.",
                    fix_hint="Move version management into the -parent modules.",
                )
            )
        if self.editor.has_direct_dependencies(visited.content):
            found.append(
                self._violation(
                    RULE_PURE_AGGREGATOR_DIRECT_DEPENDENCIES,
                    CATEGORY_DEPENDENCY_MANAGEMENT,
                    visited,
                    f"Pure aggregator '{node.identity}' must not declare direct <dependencies>.",
                    fix_hint="Declare dependencies in the leaf modules that use them.",
                )
            )
        return found

    def _check_parent_aggregator(self, visited: VisitedModule, node: ModuleNode) -> list[Violation]:
        found: list[Violation] = []
        if not node.identity.endswith(PARENT_SUFFIX):
            expected = ModuleNaming.parent_name(node.identity)
            found.append(
                self._violation(
                    RULE_PARENT_AGGREGATOR_SUFFIX,
                    CATEGORY_NAMING,
                    visited,
                    f"Parent aggregator '{node.identity}' has leaf children and should end with '{PARENT_SUFFIX}'.",
                    expected=expected,
                    found=node.identity,
                    fix_hint=f"Rename to '{expected}'.",
                )
            )
        if not self.editor.has_dependency_management(visited.content):
            found.append(
                self._violation(
                    RULE_PARENT_MISSING_DEPENDENCY_MANAGEMENT,
                    CATEGORY_DEPENDENCY_MANAGEMENT,
                    visited,
                    f"Parent aggregator '{node.identity}' must declare <dependencyManagement>.",
                    fix_hint="Add a <dependencyManagement> block for the leaf modules.",
                )
            )
        commons = [c for c in node.children if PurePosixPath(c).name.endswith(COMMON_SUFFIX)]
        if commons and node.children[0] not in commons:
            found.append(
                self._violation(
                    RULE_COMMON_MODULE_ORDER,
                    CATEGORY_MODULE_LISTING,
                    visited,
                    f"Common module '{commons[0]}' should be listed first in '{node.identity}'.",
                    expected=commons[0],
                    found=node.children[0],
                    severity=Severity.WARNING,
                )
            )
        layers: dict[LayerSuffix, list[str]] = defaultdict(list)
        for child in node.children:
            layer = LayerSuffix.of(PurePosixPath(child).name)
            if layer is not LayerSuffix.NONE:
                layers[layer].append(child)
        for layer, children in sorted(layers.items(), key=lambda item: item[0].value):
            if len(children) > 1:
                found.append(
                    self._violation(
                        RULE_DUPLICATE_LAYER,
                        CATEGORY_HIERARCHY,
                        visited,
                        f"Parent aggregator '{node.identity}' has more than one '{layer.value}' "
                        f"module: {', '.join(children)}.",
                        found=", ".join(children),
                        severity=Severity.WARNING,
                    )
                )
        return found

    def _check_unlisted(self, visited: VisitedModule, node: ModuleNode) -> list[Violation]:
        fs = self.walker.filesystem
        directory = visited.descriptor.parent
        declared = {PurePosixPath(c).as_posix().rstrip("/") for c in node.children}
        unlisted = [
            name
            for name in fs.list_subdirectories(str(directory))
            if not name.startswith(".")
            and name not in _IGNORED_DIRECTORIES
            and name not in declared
            and fs.exists(str(self.classifier.child_descriptor(directory, name)))
        ]
        if not unlisted:
            return []
        return [
            self._violation(
                RULE_UNLISTED_SUBMODULES,
                CATEGORY_MODULE_LISTING,
                visited,
                f"Module '{node.identity}' has unlisted submodules: {', '.join(unlisted)}",
                expected=", ".join(unlisted),
                fix_hint="Declare the submodules in <modules>.",
            )
        ]

    def _check_relative_path(self, visited: VisitedModule, node: ModuleNode) -> list[Violation]:
        parent = node.parent
        if parent is None or parent.relative_path is None:
            return []
        if parent.relative_path.rstrip("/") in {DEFAULT_RELATIVE_PATH, ".."}:
            return []
        return [
            self._violation(
                RULE_CUSTOM_RELATIVE_PATH,
                CATEGORY_PARENT_INHERITANCE,
                visited,
                f"Module '{node.identity}' overrides <relativePath> with '{parent.relative_path}'.",
                expected=DEFAULT_RELATIVE_PATH,
                found=parent.relative_path,
                fix_hint="Remove <relativePath> and nest the module under its parent directory.",
                severity=Severity.WARNING,
            )
        ]
