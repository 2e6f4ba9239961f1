"""Package entry point - composition root. Wire dependencies and run the CLI app."""

from functools import partial

from module_steward.infrastructure.di.container import StewardContainer
from module_steward.interface.cli import CLIAppFactory, CLIDependencies
from module_steward.interface.telemetry import ProjectTelemetry


def main() -> None:
    """Entry point: wire dependencies at composition root, create app, run."""
    telemetry = ProjectTelemetry("STEWARD", "cyan", "Module Steward Online")
    deps = CLIDependencies(
        telemetry=telemetry,
        container_factory=partial(StewardContainer, telemetry=telemetry),
    )
    app = CLIAppFactory.create_app(deps)
    app()


if __name__ == "__main__":
    main()
