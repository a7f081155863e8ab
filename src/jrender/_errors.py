"""Jrender error hierarchy.

All jrender-specific errors inherit from JrenderError for easy catching.
"""


class JrenderError(Exception):
    """Base error for all jrender operations."""


class ConfigError(JrenderError):
    """Invalid or unreadable configuration."""


class ToolUnavailable(JrenderError):
    """A required external tool is missing; the feature set is disabled."""


class InvalidInput(JrenderError):
    """The target is not something jrender can operate on."""


class ExecutionFailure(JrenderError):
    """An external process exited with a non-zero code or could not start.

    The message is the process's error text, verbatim.

    Attributes:
        program: Name of the program that failed.
        returncode: Exit code, or None if the process never started.

    """

    def __init__(self, message: str, *, program: str = "", returncode: int | None = None) -> None:
        super().__init__(message)
        self.program = program
        self.returncode = returncode


class ParseFailure(JrenderError):
    """Evaluator output was not parseable as structured data."""


class CleanupFailure(JrenderError):
    """A comparison checkout could not be fully removed (logged, never raised)."""
