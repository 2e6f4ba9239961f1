"""Unit tests for LocalArtifactStorage and RemediationTrailService."""

import json
from pathlib import Path
from unittest.mock import MagicMock

from module_steward.domain.entities import FixOutcome, Severity, Violation
from module_steward.infrastructure.gateways.artifact_storage_gateway import LocalArtifactStorage
from module_steward.infrastructure.gateways.filesystem_gateway import FileSystemGateway
from module_steward.infrastructure.services.remediation_trail import RemediationTrailService
from module_steward.use_cases.remediate import RemediationSummary


def _violation() -> Violation:
    return Violation("H101", Severity.ERROR, "naming", "pom.xml", "rename me", expected="x-aggregator")


class TestLocalArtifactStorage:
    def test_write_read_append(self, tmp_path: Path) -> None:
        storage = LocalArtifactStorage(str(tmp_path / "reports"), FileSystemGateway())
        storage.write_artifact("fix/last_run.json", "{}")
        assert storage.exists("fix/last_run.json")
        assert storage.read_artifact("fix/last_run.json") == "{}"
        storage.append_artifact("history.ndjson", "a\n")
        storage.append_artifact("history.ndjson", "b\n")
        assert storage.read_artifact("history.ndjson") == "a\nb\n"


class TestRemediationTrailService:
    def test_save_remediation(self, tmp_path: Path) -> None:
        """last_run.json holds the full summary; history gets one line."""
        storage = LocalArtifactStorage(str(tmp_path), FileSystemGateway())
        telemetry = MagicMock()
        trail = RemediationTrailService(storage, telemetry)
        summary = RemediationSummary()
        summary.add(_violation(), FixOutcome.fixed(["pom.xml"], [], "Renamed"))
        key = trail.save_remediation("/proj/pom.xml", summary)
        assert key == "fix/last_run.json"
        record = json.loads((tmp_path / "fix" / "last_run.json").read_text())
        assert record["command"] == "fix"
        assert record["counts"]["fixed"] == 1
        assert record["results"][0]["violation"]["rule_id"] == "H101"
        history = (tmp_path / "history.ndjson").read_text().splitlines()
        assert len(history) == 1
        assert json.loads(history[0])["root"] == "/proj/pom.xml"
        telemetry.step.assert_called_once()

    def test_save_validation_counts_by_rule(self, tmp_path: Path) -> None:
        storage = LocalArtifactStorage(str(tmp_path), FileSystemGateway())
        trail = RemediationTrailService(storage)
        trail.save_validation("/proj/pom.xml", [_violation(), _violation()], source=None)
        record = json.loads((tmp_path / "last_run.json").read_text())
        assert record["counts"] == {"H101": 2}
        assert len(record["violations"]) == 2
