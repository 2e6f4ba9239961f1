"""Terminal reporters for violations, fix outcomes and classifications."""

import json
from typing import TYPE_CHECKING, Optional, Sequence

from rich.console import Console
from rich.table import Table

from module_steward.domain.entities import FixOutcome, FixStatus, ModuleNode, Severity, Violation
from module_steward.domain.protocols import GuidanceServiceProtocol

if TYPE_CHECKING:
    from module_steward.use_cases.remediate import RemediationSummary

_SEVERITY_STYLE: dict[Severity, str] = {
    Severity.ERROR: "bold red",
    Severity.WARNING: "yellow",
    Severity.INFO: "cyan",
}

_STATUS_STYLE: dict[FixStatus, str] = {
    FixStatus.FIXED: "green",
    FixStatus.FAILED: "bold red",
    FixStatus.SKIPPED: "dim",
    FixStatus.NOT_FIXABLE: "yellow",
    FixStatus.DRY_RUN: "cyan",
}


class TerminalReporter:
    """Renders rich tables, or JSON when format == "json"."""

    def __init__(
        self,
        console: Optional[Console] = None,
        guidance: Optional[GuidanceServiceProtocol] = None,
    ) -> None:
        self.console = console or Console()
        self._guidance = guidance

    def _rule_label(self, rule_id: str) -> str:
        if self._guidance is None:
            return rule_id
        name = self._guidance.get_display_name(rule_id)
        return rule_id if name == rule_id else f"{rule_id} {name}"

    def report_violations(self, violations: Sequence[Violation], format: str = "terminal") -> None:
        if format == "json":
            self.console.print_json(json.dumps([v.to_dict() for v in violations]))
            return
        if not violations:
            self.console.print("[green]No hierarchy violations found.[/]")
            return
        table = Table(title=f"Hierarchy Violations ({len(violations)})", show_lines=False)
        table.add_column("Rule", style="bold")
        table.add_column("Severity")
        table.add_column("Location", overflow="fold")
        table.add_column("Message", overflow="fold")
        for v in violations:
            style = _SEVERITY_STYLE.get(v.severity, "")
            table.add_row(
                self._rule_label(v.rule_id),
                f"[{style}]{v.severity.value}[/]",
                v.location,
                v.message,
            )
        self.console.print(table)

    def report_outcome(self, outcome: FixOutcome, show_diffs: bool = True) -> None:
        """One outcome, e.g. from a direct rename."""
        style = _STATUS_STYLE.get(outcome.status, "")
        self.console.print(f"[{style}]{outcome.status.value}[/] {outcome.description}")
        if show_diffs:
            for d in outcome.diffs:
                self.console.print(d.diff, markup=False, highlight=False)
        if outcome.output:
            self.console.print(outcome.output, markup=False, highlight=False)

    def report_summary(
        self, summary: "RemediationSummary", format: str = "terminal", show_diffs: bool = False
    ) -> None:
        if format == "json":
            self.console.print_json(json.dumps(summary.to_dict()))
            return
        if summary.results:
            table = Table(title="Remediation Results")
            table.add_column("Rule", style="bold")
            table.add_column("Status")
            table.add_column("Location", overflow="fold")
            table.add_column("Detail", overflow="fold")
            for violation, outcome in summary.results:
                style = _STATUS_STYLE.get(outcome.status, "")
                table.add_row(
                    violation.rule_id,
                    f"[{style}]{outcome.status.value}[/]",
                    violation.location,
                    outcome.description,
                )
            self.console.print(table)
        if show_diffs:
            for _, outcome in summary.results:
                for d in outcome.diffs:
                    self.console.print(d.diff, markup=False, highlight=False)
        self.console.print(summary.format(), markup=False, highlight=False)

    def report_classification(self, nodes: Sequence[ModuleNode], format: str = "terminal") -> None:
        if format == "json":
            rows = [
                {
                    "identity": n.identity,
                    "descriptor": str(n.descriptor),
                    "role": n.role.value,
                    "layer": n.layer.value,
                    "children": list(n.children),
                }
                for n in nodes
            ]
            self.console.print_json(json.dumps(rows))
            return
        table = Table(title="Module Classification")
        table.add_column("Module", style="bold")
        table.add_column("Role")
        table.add_column("Layer")
        table.add_column("Children", justify="right")
        for n in nodes:
            table.add_row(n.identity, n.role.value, n.layer.value, str(len(n.children)))
        self.console.print(table)
