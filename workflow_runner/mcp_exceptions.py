# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
MCP Protocol Exception Classes

All of them are transport failures from the pipeline's point of view.
"""

from workflow_runner.core.errors import ToolCallError


class MCPInitializationError(ToolCallError):
    """Raised when MCP initialization fails"""
    pass


class MCPSessionExpiredError(ToolCallError):
    """Raised when MCP session has expired (HTTP 404)"""
    pass


class MCPProtocolError(ToolCallError):
    """Raised when MCP protocol violation occurs"""
    pass
