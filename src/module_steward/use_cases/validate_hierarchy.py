"""Use Case: re-derive structural hierarchy violations across a whole module tree."""

from pathlib import Path, PurePosixPath
from typing import Optional

from module_steward.domain.constants import (
    AGGREGATOR_SUFFIX,
    CATEGORY_HIERARCHY,
    PARENT_SUFFIX,
    RULE_LEAF_HAS_CHILDREN,
    RULE_MISSING_CHILD_DESCRIPTOR,
    RULE_PARENT_AGGREGATOR_NON_LEAF_CHILD,
    RULE_PURE_AGGREGATOR_LEAF_CHILD,
)
from module_steward.domain.entities import HierarchyRole, Severity, Violation
from module_steward.domain.hierarchy import HierarchyClassifier
from module_steward.domain.protocols import TelemetryPort
from module_steward.use_cases.tree_walk import ModuleTreeWalker, VisitedModule


class ValidateHierarchyUseCase:
    """
    Read-only, depth-first hierarchy validation.

    Every declared child is visited whatever was found at its parent, so one
    broken level never hides violations further down.
    """

    def __init__(
        self,
        classifier: HierarchyClassifier,
        walker: ModuleTreeWalker,
        telemetry: Optional[TelemetryPort] = None,
    ) -> None:
        self.classifier = classifier
        self.walker = walker
        self.telemetry = telemetry

    def execute(self, root_descriptor: Path) -> list[Violation]:
        root = Path(root_descriptor)
        violations: list[Violation] = []
        if self.walker.filesystem.read_text_or_none(str(root)) is None:
            violations.append(
                Violation(
                    rule_id=RULE_MISSING_CHILD_DESCRIPTOR,
                    severity=Severity.ERROR,
                    category=CATEGORY_HIERARCHY,
                    location=str(root),
                    message=f"Root descriptor {root} is missing or unreadable.",
                )
            )
            return violations
        for visited in self.walker.walk(root):
            violations.extend(self._check(visited))
        if self.telemetry:
            self.telemetry.step(f"hierarchy root={root} violations={len(violations)}")
        return violations

    def _check(self, visited: VisitedModule) -> list[Violation]:
        found: list[Violation] = [self._missing_child(visited, c) for c in visited.missing_children]
        node = visited.node
        if node is None or node.role is HierarchyRole.UNKNOWN:
            return found
        location = str(visited.descriptor)
        directory = visited.descriptor.parent

        if self.classifier.is_leaf_identity(node.identity):
            if node.children:
                found.append(
                    Violation(
                        rule_id=RULE_LEAF_HAS_CHILDREN,
                        severity=Severity.ERROR,
                        category=CATEGORY_HIERARCHY,
                        location=location,
                        message=(
                            f"Leaf module '{node.identity}' declares children "
                            f"{', '.join(node.children)}. Leaf modules cannot have submodules."
                        ),
                        found=", ".join(node.children),
                        fix_hint="Move the submodules under a -parent aggregator.",
                    )
                )
            return found

        declared_pure = node.identity.endswith(AGGREGATOR_SUFFIX)
        if node.role is HierarchyRole.PURE_AGGREGATOR or declared_pure:
            for child in node.children:
                if self.classifier.is_leaf_child(directory, child):
                    found.append(
                        Violation(
                            rule_id=RULE_PURE_AGGREGATOR_LEAF_CHILD,
                            severity=Severity.ERROR,
                            category=CATEGORY_HIERARCHY,
                            location=location,
                            message=(
                                f"Pure aggregator '{node.identity}' has direct leaf child '{child}'. "
                                f"Leaf modules belong under a parent aggregator ({PARENT_SUFFIX})."
                            ),
                            found=child,
                            fix_hint=f"Introduce a {PARENT_SUFFIX} module between '{node.identity}' and '{child}'.",
                        )
                    )
            return found

        for child in node.children:
            if child in visited.missing_children:
                continue
            role = self.classifier.resolve_child_role(directory, child)
            if role is not HierarchyRole.LEAF:
                found.append(
                    Violation(
                        rule_id=RULE_PARENT_AGGREGATOR_NON_LEAF_CHILD,
                        severity=Severity.ERROR,
                        category=CATEGORY_HIERARCHY,
                        location=location,
                        message=(
                            f"Parent aggregator '{node.identity}' has non-leaf child '{child}' "
                            f"({role.value}). Parent aggregators should only contain leaf modules."
                        ),
                        expected=HierarchyRole.LEAF.value,
                        found=role.value,
                        fix_hint=f"Move '{child}' under a {AGGREGATOR_SUFFIX} module.",
                    )
                )
        return found

    @staticmethod
    def _missing_child(visited: VisitedModule, child: str) -> Violation:
        owner = visited.node.identity if visited.node else PurePosixPath(visited.descriptor.parent).name
        return Violation(
            rule_id=RULE_MISSING_CHILD_DESCRIPTOR,
            severity=Severity.WARNING,
            category=CATEGORY_HIERARCHY,
            location=str(visited.descriptor),
            message=f"Module '{owner}' declares child '{child}' but no descriptor was found for it.",
            found=child,
            fix_hint="Create the child module or remove the <module> entry.",
        )
