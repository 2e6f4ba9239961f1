"""Domain exceptions raised inside a mutation and converted to outcomes at the workflow boundary."""


class RemediationError(Exception):
    """Base class for remediation failures."""


class DescriptorReadError(RemediationError):
    """A build descriptor could not be read or decoded."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot read descriptor {path}: {reason}")
        self.path = path


class VerificationTimeoutError(RemediationError):
    """Build verification exceeded its timeout."""

    def __init__(self, timeout: float) -> None:
        super().__init__(f"Build verification timed out after {timeout}s")
        self.timeout = timeout


class RemediationCancelledError(RemediationError):
    """The attempt was cancelled after its writes; rollback must follow."""

    def __init__(self) -> None:
        super().__init__("Remediation cancelled")
