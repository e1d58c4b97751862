from __future__ import annotations


class SetupError(Exception):
    """Base error for the client contract setup step.

    ``remedy`` is the user-facing action that fixes the problem, usually the
    earlier installer step to re-run.
    """

    def __init__(self, message: str, remedy: str | None = None):
        super().__init__(message)
        self.remedy = remedy


class PrerequisiteMissing(SetupError):
    """Required upstream state (file, key, tool) is absent."""


class ValidationFailed(SetupError):
    """User-supplied input has the wrong format."""


class ToolInvocationFailed(SetupError):
    """An external command returned non-zero."""

    def __init__(self, cmd: list[str], returncode: int, remedy: str | None = None):
        super().__init__(f"Command failed with exit code {returncode}: {' '.join(cmd)}", remedy)
        self.cmd = list(cmd)
        self.returncode = returncode


class VerificationFailed(SetupError):
    """A patched file does not contain the expected literal."""


class PlaceholderDeclined(SetupError):
    """The operator refused to continue with a placeholder job id."""
