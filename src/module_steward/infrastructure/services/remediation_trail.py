"""Service for persisting validation and remediation run records."""

import json
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional, Sequence

from module_steward.domain.entities import Violation
from module_steward.domain.protocols import ArtifactStorageProtocol, TelemetryPort

if TYPE_CHECKING:
    from module_steward.use_cases.remediate import RemediationSummary

LAST_RUN_KEY: str = "last_run.json"
HISTORY_KEY: str = "history.ndjson"


class RemediationTrailService:
    """
    Saves the latest run to last_run.json and appends one summary line per run
    to history.ndjson. Keys are optionally grouped by the producing command.
    """

    def __init__(self, artifact_storage: ArtifactStorageProtocol, telemetry: Optional[TelemetryPort] = None) -> None:
        self.artifact_storage = artifact_storage
        self.telemetry = telemetry

    @staticmethod
    def _timestamp() -> str:
        return datetime.now(timezone.utc).isoformat(timespec="seconds")

    @staticmethod
    def _key(name: str, source: Optional[str]) -> str:
        return f"{source}/{name}" if source else name

    def _persist(self, record: dict[str, object], source: Optional[str]) -> str:
        key = self._key(LAST_RUN_KEY, source)
        self.artifact_storage.write_artifact(key, json.dumps(record, indent=2))
        history_line = {k: v for k, v in record.items() if k in ("timestamp", "command", "root", "counts")}
        self.artifact_storage.append_artifact(HISTORY_KEY, json.dumps(history_line) + "\n")
        if self.telemetry:
            self.telemetry.step(f"Run record persisted to: {key}")
        return key

    def save_validation(
        self, root: str, violations: Sequence[Violation], source: Optional[str] = "validate"
    ) -> str:
        counts: dict[str, int] = {}
        for v in violations:
            counts[v.rule_id] = counts.get(v.rule_id, 0) + 1
        record: dict[str, object] = {
            "timestamp": self._timestamp(),
            "command": "validate",
            "root": root,
            "counts": counts,
            "violations": [v.to_dict() for v in violations],
        }
        return self._persist(record, source)

    def save_remediation(
        self, root: str, summary: "RemediationSummary", source: Optional[str] = "fix"
    ) -> str:
        data = summary.to_dict()
        record: dict[str, object] = {
            "timestamp": self._timestamp(),
            "command": "fix",
            "root": root,
            **data,
        }
        return self._persist(record, source)
