"""Fixers for dependency-version management placement."""

from pathlib import Path
from typing import Optional

from module_steward.domain.constants import (
    RULE_PARENT_MISSING_DEPENDENCY_MANAGEMENT,
    RULE_PURE_AGGREGATOR_DEPENDENCY_MANAGEMENT,
    RULE_PURE_AGGREGATOR_DIRECT_DEPENDENCIES,
)
from module_steward.domain.entities import HierarchyRole, Violation
from module_steward.use_cases.fixers.base import DescriptorFixer, FixerContext


class AddDependencyManagementFixer(DescriptorFixer):
    """Inserts an empty <dependencyManagement> block into a parent aggregator."""

    name = "add-dependency-management"
    rule_ids = frozenset({RULE_PARENT_MISSING_DEPENDENCY_MANAGEMENT})
    priority = 50
    description = "Added <dependencyManagement> to parent aggregator"
    applicable_roles = frozenset({HierarchyRole.PARENT_AGGREGATOR})

    def produce(
        self, content: str, violation: Violation, descriptor: Path, context: FixerContext
    ) -> Optional[str]:
        return context.editor.insert_dependency_management_block(content)


class RemoveDirectDependenciesFixer(DescriptorFixer):
    """Drops standalone <dependencies> from a pure aggregator, keeping managed versions intact."""

    name = "remove-direct-dependencies"
    rule_ids = frozenset({RULE_PURE_AGGREGATOR_DIRECT_DEPENDENCIES})
    priority = 80
    description = "Removed direct <dependencies> from pure aggregator"
    applicable_roles = frozenset({HierarchyRole.PURE_AGGREGATOR})

    def produce(
        self, content: str, violation: Violation, descriptor: Path, context: FixerContext
    ) -> Optional[str]:
        return context.editor.remove_direct_dependencies(content)


class RemoveDependencyManagementFixer(DescriptorFixer):
    """Drops <dependencyManagement> from a pure aggregator."""

    name = "remove-dependency-management"
    rule_ids = frozenset({RULE_PURE_AGGREGATOR_DEPENDENCY_MANAGEMENT})
    priority = 90
    description = "Removed <dependencyManagement> from pure aggregator"
    applicable_roles = frozenset({HierarchyRole.PURE_AGGREGATOR})

    def produce(
        self, content: str, violation: Violation, descriptor: Path, context: FixerContext
    ) -> Optional[str]:
        return context.editor.remove_dependency_management_block(content)
