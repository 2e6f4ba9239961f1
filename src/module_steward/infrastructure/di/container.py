from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, cast

from module_steward.domain.config import ConfigurationLoader
from module_steward.domain.hierarchy import HierarchyClassifier
from module_steward.infrastructure.config_file_loader import ConfigFileLoader
from module_steward.infrastructure.gateways.artifact_storage_gateway import LocalArtifactStorage
from module_steward.infrastructure.gateways.filesystem_gateway import FileSystemGateway
from module_steward.infrastructure.gateways.pom_descriptor_gateway import PomDescriptorGateway
from module_steward.infrastructure.gateways.staging_gateway import StagingAreaGateway
from module_steward.infrastructure.services.build_verifier import MavenBuildVerifier
from module_steward.infrastructure.services.guidance_service import GuidanceService
from module_steward.infrastructure.services.remediation_trail import RemediationTrailService
from module_steward.interface.reporters import TerminalReporter
from module_steward.interface.telemetry import ProjectTelemetry
from module_steward.use_cases.check_conventions import CheckConventionsUseCase
from module_steward.use_cases.fixers.catalog import FixerCatalog
from module_steward.use_cases.mutation_workflow import MutationWorkflowController
from module_steward.use_cases.remediate import RemediateViolationsUseCase
from module_steward.use_cases.rename_module import RenameModuleUseCase
from module_steward.use_cases.tree_walk import ModuleTreeWalker
from module_steward.use_cases.validate_hierarchy import ValidateHierarchyUseCase

if TYPE_CHECKING:
    from module_steward.domain.protocols import (
        BuildVerifierProtocol,
        FileSystemProtocol,
        StagingAreaProtocol,
        TelemetryPort,
    )
    from module_steward.domain.registry import FixerRegistry


class StewardContainer:
    """
    Dependency Injection Container for one project root.

    Configuration is read walking up from the root; staging and report
    directories are resolved against it.
    """

    def __init__(
        self,
        project_root: Path,
        config_dict: Optional[dict[str, object]] = None,
        telemetry: Optional["TelemetryPort"] = None,
    ) -> None:
        self.project_root = Path(project_root).resolve()
        self._singletons: dict[str, Any] = {}
        self._register_defaults(config_dict, telemetry)

    def _register_defaults(
        self, config_dict: Optional[dict[str, object]], telemetry: Optional["TelemetryPort"]
    ) -> None:
        """Register default implementations for protocols."""
        if config_dict is None:
            config_dict = ConfigFileLoader.load_config_from_fs(self.project_root)
        config_loader = ConfigurationLoader(config_dict)
        self.register_singleton("ConfigurationLoader", config_loader)

        if telemetry is None:
            telemetry = ProjectTelemetry("STEWARD", "cyan", "Module Steward Online")
        self.register_singleton("TelemetryPort", telemetry)

        filesystem = FileSystemGateway()
        self.register_singleton("FileSystemGateway", filesystem)
        editor = PomDescriptorGateway()
        self.register_singleton("DescriptorEditor", editor)
        guidance = GuidanceService()
        self.register_singleton("GuidanceService", guidance)

        staging = StagingAreaGateway(
            str(self.project_root), filesystem, config_loader.staging_dir
        )
        self.register_singleton("StagingArea", staging)
        artifact_storage = LocalArtifactStorage(str(self.project_root / config_loader.report_dir), filesystem)
        self.register_singleton("ArtifactStorage", artifact_storage)
        self.register_singleton("RemediationTrailService", RemediationTrailService(artifact_storage, telemetry))
        self.register_singleton("BuildVerifier", MavenBuildVerifier(config_loader.verify_command))

        classifier = HierarchyClassifier(editor, filesystem, config_loader.leaf_suffixes)
        self.register_singleton("HierarchyClassifier", classifier)
        walker = ModuleTreeWalker(classifier, filesystem)
        self.register_singleton("ModuleTreeWalker", walker)
        self.register_singleton("FixerRegistry", FixerCatalog.build_registry(config_loader))

        workflow = MutationWorkflowController(
            filesystem,
            staging,
            telemetry,
            verify_timeout=config_loader.verify_timeout,
            missing_tool_policy=config_loader.missing_tool_policy,
        )
        self.register_singleton("MutationWorkflowController", workflow)
        self.register_singleton("RenameModuleUseCase", RenameModuleUseCase(classifier, workflow, filesystem, telemetry))
        self.register_singleton("ValidateHierarchyUseCase", ValidateHierarchyUseCase(classifier, walker, telemetry))
        self.register_singleton(
            "CheckConventionsUseCase", CheckConventionsUseCase(classifier, walker, config_loader, telemetry)
        )
        self.register_singleton("TerminalReporter", TerminalReporter(guidance=guidance))

    def register_singleton(self, key: str, instance: object) -> None:
        self._singletons[key] = instance

    def get(self, key: str) -> Any:
        if key in self._singletons:
            return self._singletons[key]
        raise ValueError(f"Dependency '{key}' not registered.")

    def get_config_loader(self) -> ConfigurationLoader:
        return cast(ConfigurationLoader, self.get("ConfigurationLoader"))

    def get_telemetry_port(self) -> "TelemetryPort":
        return cast("TelemetryPort", self.get("TelemetryPort"))

    def get_filesystem_gateway(self) -> "FileSystemProtocol":
        return cast("FileSystemProtocol", self.get("FileSystemGateway"))

    def get_staging_area(self) -> "StagingAreaProtocol":
        return cast("StagingAreaProtocol", self.get("StagingArea"))

    def get_build_verifier(self) -> "BuildVerifierProtocol":
        return cast("BuildVerifierProtocol", self.get("BuildVerifier"))

    def get_guidance_service(self) -> GuidanceService:
        return cast(GuidanceService, self.get("GuidanceService"))

    def get_classifier(self) -> HierarchyClassifier:
        return cast(HierarchyClassifier, self.get("HierarchyClassifier"))

    def get_walker(self) -> ModuleTreeWalker:
        return cast(ModuleTreeWalker, self.get("ModuleTreeWalker"))

    def get_fixer_registry(self) -> "FixerRegistry":
        return cast("FixerRegistry", self.get("FixerRegistry"))

    def get_workflow(self) -> MutationWorkflowController:
        return cast(MutationWorkflowController, self.get("MutationWorkflowController"))

    def get_rename_use_case(self) -> RenameModuleUseCase:
        return cast(RenameModuleUseCase, self.get("RenameModuleUseCase"))

    def get_validate_use_case(self) -> ValidateHierarchyUseCase:
        return cast(ValidateHierarchyUseCase, self.get("ValidateHierarchyUseCase"))

    def get_conventions_use_case(self) -> CheckConventionsUseCase:
        return cast(CheckConventionsUseCase, self.get("CheckConventionsUseCase"))

    def get_remediation_trail(self) -> RemediationTrailService:
        return cast(RemediationTrailService, self.get("RemediationTrailService"))

    def get_reporter(self) -> TerminalReporter:
        return cast(TerminalReporter, self.get("TerminalReporter"))

    def create_remediation_use_case(self, dry_run: bool = False, verify: bool = True) -> RemediateViolationsUseCase:
        """Fresh orchestrator per run; dry-run and verify are per-invocation flags."""
        return RemediateViolationsUseCase(
            registry=self.get_fixer_registry(),
            workflow=self.get_workflow(),
            classifier=self.get_classifier(),
            filesystem=self.get_filesystem_gateway(),
            rename=self.get_rename_use_case(),
            staging=self.get_staging_area(),
            telemetry=self.get_telemetry_port(),
            config_loader=self.get_config_loader(),
            guidance=self.get_guidance_service(),
            verifier=self.get_build_verifier(),
            dry_run=dry_run,
            verify=verify,
        )
