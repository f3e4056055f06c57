# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Core utilities shared across the workflow runner.

This package contains:
- config: Configuration management
- errors: Custom exceptions
- logging: Structured logging
"""

from workflow_runner.core.config import get_config, Config
from workflow_runner.core.errors import (
    WorkflowRunnerError,
    ToolCallError,
    ContractValidationError,
    FieldViolation,
    ConfigurationError,
)
from workflow_runner.core.logging import get_logger, log_event

__all__ = [
    "get_config",
    "Config",
    "WorkflowRunnerError",
    "ToolCallError",
    "ContractValidationError",
    "FieldViolation",
    "ConfigurationError",
    "get_logger",
    "log_event",
]
