"""CLI entry points for Module Steward - Thin Controller using Typer."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional

import typer

from module_steward.domain.constants import DESCRIPTOR_NAME, STEWARD_BANNER
from module_steward.domain.entities import FixStatus, Violation, WorkflowLedger
from module_steward.domain.protocols import TelemetryPort

if TYPE_CHECKING:
    from module_steward.infrastructure.di.container import StewardContainer


@dataclass(frozen=True)
class CLIDependencies:
    """Explicit dependencies for the CLI, injected at the composition root."""

    telemetry: TelemetryPort
    container_factory: Callable[[Path], "StewardContainer"]
    """Builds the per-project container for the resolved project root."""


class CLIAppFactory:
    """Creates the Typer app. No top-level functions."""

    @staticmethod
    def resolve_descriptor(path: Optional[Path]) -> Path:
        """Accept a module directory or a pom.xml; default to ./pom.xml."""
        target = Path(path) if path is not None else Path.cwd()
        if target.is_dir():
            target = target / DESCRIPTOR_NAME
        if not target.is_file():
            typer.echo(f"No {DESCRIPTOR_NAME} found at {target}", err=True)
            raise typer.Exit(code=2)
        return target.resolve()

    @staticmethod
    def collect_violations(container: "StewardContainer", descriptor: Path) -> list[Violation]:
        """Structural violations first, then convention violations."""
        violations = container.get_validate_use_case().execute(descriptor)
        violations.extend(container.get_conventions_use_case().execute(descriptor))
        return violations

    @staticmethod
    def create_app(deps: CLIDependencies) -> typer.Typer:
        """Create the Typer app with explicitly injected dependencies."""
        app = typer.Typer(
            name="steward",
            help="Module Steward: validate and remediate multi-module build hierarchies.",
            add_completion=False,
        )

        @app.callback()
        def main_options(
            verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output"),
        ) -> None:
            logging.basicConfig(
                level=logging.DEBUG if verbose else logging.WARNING,
                format="%(levelname)s %(name)s: %(message)s",
            )

        def _session_start(project_root: Path) -> "StewardContainer":
            """Print banner, handshake, then build the container for this root."""
            typer.echo(STEWARD_BANNER, err=True)
            deps.telemetry.handshake()
            return deps.container_factory(project_root)

        @app.command()
        def validate(
            path: Optional[Path] = typer.Argument(None, help="Root module directory or pom.xml"),  # noqa: B008
            format: str = typer.Option("terminal", "--format", help="terminal or json"),
        ) -> None:
            """Validate the hierarchy and conventions; exit 1 on violations."""
            descriptor = CLIAppFactory.resolve_descriptor(path)
            container = _session_start(descriptor.parent)
            violations = CLIAppFactory.collect_violations(container, descriptor)
            container.get_reporter().report_violations(violations, format=format)
            container.get_remediation_trail().save_validation(str(descriptor), violations)
            if violations:
                raise typer.Exit(code=1)

        @app.command()
        def fix(
            path: Optional[Path] = typer.Argument(None, help="Root module directory or pom.xml"),  # noqa: B008
            dry_run: bool = typer.Option(False, "--dry-run", help="Show diffs without writing"),
            no_verify: bool = typer.Option(False, "--no-verify", help="Skip build verification"),
            rule: Optional[list[str]] = typer.Option(None, "--rule", help="Only remediate these rule ids"),  # noqa: B008
            format: str = typer.Option("terminal", "--format", help="terminal or json"),
        ) -> None:
            """Validate, remediate each violation, print the summary and save the run record."""
            descriptor = CLIAppFactory.resolve_descriptor(path)
            container = _session_start(descriptor.parent)
            violations = CLIAppFactory.collect_violations(container, descriptor)
            if rule:
                wanted = set(rule)
                violations = [v for v in violations if v.rule_id in wanted]
            deps.telemetry.step(f"Remediating {len(violations)} violation(s)")
            use_case = container.create_remediation_use_case(dry_run=dry_run, verify=not no_verify)
            summary = use_case.execute_all(violations)
            container.get_reporter().report_summary(summary, format=format, show_diffs=dry_run)
            if not dry_run:
                container.get_remediation_trail().save_remediation(str(descriptor), summary)
            if summary.has_failures():
                raise typer.Exit(code=1)

        @app.command()
        def rename(
            descriptor: Path = typer.Argument(..., help="pom.xml of the module to rename"),  # noqa: B008
            new_identity: str = typer.Argument(..., help="New artifactId"),
            old_identity: Optional[str] = typer.Option(
                None, "--from", help="Identity children may still reference, to finish an interrupted rename"
            ),
            dry_run: bool = typer.Option(False, "--dry-run", help="Show diffs without writing"),
            no_verify: bool = typer.Option(False, "--no-verify", help="Skip build verification"),
        ) -> None:
            """Rename one module and update every child that inherits from it."""
            target = CLIAppFactory.resolve_descriptor(descriptor)
            container = _session_start(target.parent)
            config_loader = container.get_config_loader()
            verify = None
            if not no_verify and config_loader.verify_enabled:
                verify = container.get_build_verifier().verify
            outcome = container.get_rename_use_case().execute(
                target, new_identity, WorkflowLedger(), dry_run=dry_run, verify=verify, old_identity=old_identity
            )
            container.get_reporter().report_outcome(outcome)
            if not dry_run:
                container.get_staging_area().purge()
            if outcome.status in (FixStatus.FAILED, FixStatus.NOT_FIXABLE):
                raise typer.Exit(code=1)

        @app.command()
        def classify(
            path: Optional[Path] = typer.Argument(None, help="Root module directory or pom.xml"),  # noqa: B008
            format: str = typer.Option("terminal", "--format", help="terminal or json"),
        ) -> None:
            """Print the hierarchy role of every module in the tree."""
            descriptor = CLIAppFactory.resolve_descriptor(path)
            container = _session_start(descriptor.parent)
            nodes = [m.node for m in container.get_walker().walk(descriptor) if m.node is not None]
            container.get_reporter().report_classification(nodes, format=format)

        return app
