"""Default fixer set, registered at startup."""

from typing import TYPE_CHECKING, Optional

from module_steward.domain.registry import FixerRegistry
from module_steward.use_cases.fixers.base import DescriptorFixer
from module_steward.use_cases.fixers.dependency_management import (
    AddDependencyManagementFixer,
    RemoveDependencyManagementFixer,
    RemoveDirectDependenciesFixer,
)
from module_steward.use_cases.fixers.guidance import HierarchyGuidanceFixer
from module_steward.use_cases.fixers.module_listing import (
    CommonModuleFirstFixer,
    ListSubmodulesFixer,
    RelativePathFixer,
)
from module_steward.use_cases.fixers.rename_fixers import (
    ParentSuffixFixer,
    PureAggregatorSuffixFixer,
)

if TYPE_CHECKING:
    from module_steward.domain.config import ConfigurationLoader


class FixerCatalog:
    """Builds the registry from the built-in fixers. No top-level functions."""

    @staticmethod
    def default_fixers() -> list[DescriptorFixer]:
        return [
            CommonModuleFirstFixer(),
            ListSubmodulesFixer(),
            PureAggregatorSuffixFixer(),
            ParentSuffixFixer(),
            AddDependencyManagementFixer(),
            RelativePathFixer(),
            RemoveDirectDependenciesFixer(),
            RemoveDependencyManagementFixer(),
            HierarchyGuidanceFixer(),
        ]

    @staticmethod
    def build_registry(config_loader: Optional["ConfigurationLoader"] = None) -> FixerRegistry:
        registry = FixerRegistry(config_loader)
        for fixer in FixerCatalog.default_fixers():
            registry.register(fixer)
        return registry
