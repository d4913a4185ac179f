"""
Error taxonomy for tidygate.

Every error aborts the run. Checks turn the runtime errors into a failed
verdict carrying the message; ConfigurationError is raised while loading
configuration, before any analysis starts.
"""

from __future__ import annotations


class TidygateError(RuntimeError):
    """Base class for all tidygate failures."""


class ConfigurationError(TidygateError):
    """Unknown fixer, check or option, or an option of the wrong type."""


class ReconstructionError(TidygateError):
    """A git query exited non-zero."""

    def __init__(self, message: str, stderr: str = ""):
        """
        Args:
            message: What was being attempted.
            stderr: git's diagnostic output, reported verbatim.
        """
        super().__init__(f"{message}:\n{stderr}" if stderr else message)
        self.stderr = stderr


class FixerInvocationError(TidygateError):
    """A formatter could not be started or exited with a failure code."""

    def __init__(self, fixer: str, output: str = ""):
        message = f"Failed to run the {fixer} fixer on the committed file"
        super().__init__(f"{message}:\n{output}" if output else message)
        self.fixer = fixer
        self.output = output


class PatternEngineError(TidygateError):
    """The tag pattern could not be compiled. Distinct from "no match"."""
