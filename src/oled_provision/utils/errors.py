"""Error taxonomy shared by every provisioning step."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence


class ProvisionError(RuntimeError):
    """Base class for failures that terminate a provisioning run."""


class ValidationError(ProvisionError):
    """Raised when operator input or configuration is malformed."""


class PreconditionError(ProvisionError):
    """Raised when the system is not in a state the run can proceed from."""


class ScriptNotFoundError(PreconditionError):
    """Raised when a service entry-point script is missing on disk."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        super().__init__(
            f"Python script {self.path} not found. Make sure the script exists and try again."
        )


class ExternalToolError(ProvisionError):
    """Raised when an external command exits with a non-zero status.

    Attributes:
        argv: Command line that was executed.
        returncode: Exit status reported by the process.
        stderr: Captured standard error, passed through untouched.
    """

    def __init__(self, argv: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.argv = tuple(str(arg) for arg in argv)
        self.returncode = int(returncode)
        self.stderr = stderr or ""
        message = f"Command '{' '.join(self.argv)}' failed with exit code {self.returncode}"
        detail = self.stderr.strip()
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
