"""Shared fixtures: a telemetry mock and a container wired to a temporary project root.

Run pytest from the project root; pyproject.toml puts src/ and the root on
the import path so tests can import both module_steward and tests.pom_builders.
"""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from module_steward.domain.entities import VerificationResult
from module_steward.infrastructure.di.container import StewardContainer


@pytest.fixture
def telemetry() -> MagicMock:
    return MagicMock()


@pytest.fixture
def container(tmp_path: Path, telemetry: MagicMock) -> StewardContainer:
    """Real gateways rooted at tmp_path; build verification disabled."""
    return StewardContainer(tmp_path, config_dict={"verify": False}, telemetry=telemetry)


@pytest.fixture
def passing_verify() -> MagicMock:
    return MagicMock(return_value=VerificationResult(passed=True, output="BUILD SUCCESS"))


@pytest.fixture
def failing_verify() -> MagicMock:
    return MagicMock(return_value=VerificationResult(passed=False, output="BUILD FAILURE"))
