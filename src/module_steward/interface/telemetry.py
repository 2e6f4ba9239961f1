"""ProjectTelemetry: themed console output mirrored to the log."""

import logging

from rich.console import Console

from module_steward.domain.protocols import TelemetryPort


class ProjectTelemetry(TelemetryPort):
    """
    Console sink for use-case progress. Every message is also sent to the
    project logger; debug messages go only to the logger.
    """

    def __init__(self, project_name: str, color: str, welcome_msg: str, quiet: bool = False) -> None:
        self.project_name = project_name
        self.color = color
        self.welcome_msg = welcome_msg
        self.quiet = quiet
        self.console = Console(stderr=True, highlight=False)
        self.logger = logging.getLogger(project_name.lower())

    def _prefix(self) -> str:
        return f"[bold {self.color}]\\[{self.project_name}][/]"

    def handshake(self) -> None:
        if not self.quiet:
            self.console.print(f"{self._prefix()} {self.welcome_msg}")
        self.logger.info(self.welcome_msg)

    def step(self, message: str) -> None:
        if not self.quiet:
            self.console.print(f"{self._prefix()} {message}", markup=True, highlight=False)
        self.logger.info(message)

    def warning(self, message: str) -> None:
        self.console.print(f"{self._prefix()} [yellow]WARNING[/] {message}")
        self.logger.warning(message)

    def error(self, message: str) -> None:
        self.console.print(f"{self._prefix()} [bold red]ERROR[/] {message}")
        self.logger.error(message)

    def debug(self, message: str) -> None:
        self.logger.debug(message)
