# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
MCP Session Data Structure
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Any, Optional


@dataclass
class MCPSession:
    """An initialized connection to the workflow MCP server"""
    endpoint: str
    protocol_version: str
    session_id: Optional[str]
    server_capabilities: Dict[str, Any]
    client_capabilities: Dict[str, Any]
    initialized_at: datetime
    server_info: Optional[Dict[str, Any]] = None

    @property
    def server_name(self) -> str:
        return (self.server_info or {}).get("name", "unknown")
