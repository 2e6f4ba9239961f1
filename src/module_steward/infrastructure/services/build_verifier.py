"""MavenBuildVerifier: runs the build tool over a module subtree."""

import logging
import subprocess
from pathlib import Path
from typing import Optional, Sequence

from module_steward.domain.constants import DEFAULT_VERIFY_COMMAND, DESCRIPTOR_NAME
from module_steward.domain.entities import VerificationResult
from module_steward.domain.exceptions import VerificationTimeoutError
from module_steward.domain.protocols import BuildVerifierProtocol

logger = logging.getLogger(__name__)


class MavenBuildVerifier(BuildVerifierProtocol):
    """
    Runs the configured command against <module_dir>/pom.xml.

    A project-local ./mvnw wrapper replaces a bare "mvn" when one sits in the
    module directory or any ancestor. A missing executable yields an
    unavailable result; the caller's missing-tool policy decides what that means.
    """

    def __init__(self, command: Optional[Sequence[str]] = None, prefer_wrapper: bool = True) -> None:
        self.command: tuple[str, ...] = tuple(command) if command else DEFAULT_VERIFY_COMMAND
        self.prefer_wrapper = prefer_wrapper

    @staticmethod
    def find_wrapper(module_dir: Path) -> Optional[Path]:
        for directory in (module_dir, *module_dir.parents):
            candidate = directory / "mvnw"
            if candidate.is_file():
                return candidate
        return None

    def build_command(self, module_dir: Path) -> list[str]:
        cmd = list(self.command)
        if self.prefer_wrapper and cmd and cmd[0] == "mvn":
            wrapper = self.find_wrapper(module_dir)
            if wrapper is not None:
                cmd[0] = str(wrapper)
        return cmd + ["-f", str(module_dir / DESCRIPTOR_NAME)]

    def verify(self, module_dir: Path, timeout: float) -> VerificationResult:
        cmd = self.build_command(module_dir)
        logger.debug("verify: %s (cwd=%s, timeout=%s)", " ".join(cmd), module_dir, timeout)
        try:
            result = subprocess.run(
                cmd,
                cwd=str(module_dir),
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False,
            )
        except FileNotFoundError:
            logger.warning("Build tool '%s' not found; verification unavailable.", cmd[0])
            return VerificationResult.unavailable()
        except subprocess.TimeoutExpired as exc:
            raise VerificationTimeoutError(timeout) from exc
        output = (result.stdout or "") + (result.stderr or "")
        return VerificationResult(passed=result.returncode == 0, output=output.strip())
