# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Custom exceptions for the workflow runner.

All exceptions inherit from WorkflowRunnerError for consistent error handling.
"""

from dataclasses import dataclass
from typing import Optional, List


class WorkflowRunnerError(Exception):
    """Base exception for all workflow runner errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        """
        Initialize workflow runner error.

        Args:
            message: Human-readable error message
            details: Additional error details
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert error to dictionary for machine-readable output."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }


class ToolCallError(WorkflowRunnerError):
    """Remote tool call could not be completed (transport or remote-side failure)."""

    def __init__(self, message: str, tool_name: Optional[str] = None, details: Optional[dict] = None):
        """
        Initialize tool call error.

        Args:
            message: Error message
            tool_name: Name of the remote tool being invoked
            details: Additional error details
        """
        super().__init__(message, details=details)
        self.tool_name = tool_name


@dataclass(frozen=True)
class FieldViolation:
    """A single violated field: dotted path plus the expected constraint."""
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path or '<root>'}: {self.message}"


class ContractValidationError(WorkflowRunnerError):
    """Payload did not conform to its expected contract shape."""

    def __init__(self, shape: str, violations: List[FieldViolation], details: Optional[dict] = None):
        """
        Initialize contract validation error.

        Args:
            shape: Name of the shape the payload was validated against
            violations: Every violated field, not just the first
            details: Additional error details
        """
        self.shape = shape
        self.violations = list(violations)
        summary = "; ".join(str(v) for v in self.violations)
        super().__init__(
            f"Payload does not match {shape} ({len(self.violations)} violation(s)): {summary}",
            details=details
        )

    @property
    def fields(self) -> List[str]:
        """Paths of all violated fields."""
        return [v.path for v in self.violations]

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["shape"] = self.shape
        data["violations"] = [{"path": v.path, "message": v.message} for v in self.violations]
        return data


class ConfigurationError(WorkflowRunnerError):
    """Configuration error."""

    def __init__(self, message: str, config_file: Optional[str] = None, details: Optional[dict] = None):
        """
        Initialize configuration error.

        Args:
            message: Configuration error message
            config_file: Configuration file path
            details: Additional error details
        """
        super().__init__(message, details=details)
        self.config_file = config_file


# Error Message Utilities

def sanitize_error_for_user(error: Exception, include_type: bool = True) -> str:
    """
    Sanitize error messages for terminal display.

    Args:
        error: The exception to sanitize
        include_type: Whether to include exception type

    Returns:
        Single-line error message, truncated to 500 characters
    """
    error_msg = " ".join(str(error).split())

    if len(error_msg) > 500:
        error_msg = error_msg[:500] + "..."

    if include_type:
        return f"{error.__class__.__name__}: {error_msg}"

    return error_msg
