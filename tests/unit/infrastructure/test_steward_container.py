from pathlib import Path
from unittest.mock import MagicMock

import pytest

from module_steward.domain.config import MissingToolPolicy
from module_steward.infrastructure.di.container import StewardContainer
from module_steward.interface.telemetry import ProjectTelemetry


class TestStewardContainer:
    def test_default_telemetry(self, tmp_path: Path) -> None:
        container = StewardContainer(tmp_path, config_dict={})
        telemetry = container.get("TelemetryPort")
        assert isinstance(telemetry, ProjectTelemetry)
        assert telemetry.project_name == "STEWARD"

    def test_register_and_get_singleton(self, tmp_path: Path) -> None:
        container = StewardContainer(tmp_path, config_dict={}, telemetry=MagicMock())
        mock_dep = {"foo": "bar"}
        container.register_singleton("MockDep", mock_dep)
        assert container.get("MockDep") is mock_dep

    def test_get_missing_dependency_raises_error(self, tmp_path: Path) -> None:
        container = StewardContainer(tmp_path, config_dict={}, telemetry=MagicMock())
        with pytest.raises(ValueError, match=r"Dependency 'Missing' not registered\."):
            container.get("Missing")

    def test_config_read_from_project_root(self, tmp_path: Path) -> None:
        (tmp_path / "steward.yaml").write_text(
            "verify_timeout: 42\nmissing_tool_policy: fail\ndisabled_fixers: [relative-path]\n"
        )
        container = StewardContainer(tmp_path, telemetry=MagicMock())
        workflow = container.get_workflow()
        assert workflow.verify_timeout == 42.0
        assert workflow.missing_tool_policy is MissingToolPolicy.FAIL
        names = [f.name for f in container.get_fixer_registry().fixers]
        assert "relative-path" in names
        assert not container.get_config_loader().is_fixer_enabled("relative-path")

    def test_remediation_use_case_is_fresh_per_call(self, container: StewardContainer) -> None:
        first = container.create_remediation_use_case(dry_run=True)
        second = container.create_remediation_use_case(verify=False)
        assert first is not second
        assert first.dry_run and not second.verify
        assert first.registry is second.registry

    def test_reporter_has_guidance(self, container: StewardContainer) -> None:
        assert container.get_reporter()._guidance is container.get_guidance_service()
