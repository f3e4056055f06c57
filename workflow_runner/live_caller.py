# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Live ToolCaller - bridges the pipeline to a running workflow MCP server.
"""

import json
import logging
import os
from typing import Any, Dict, Iterable, List, Optional

from workflow_runner.core.config import Config, get_config
from workflow_runner.core.errors import ToolCallError
from workflow_runner.mcp_session_manager import MCPSessionManager

logger = logging.getLogger(__name__)

REQUIRED_TOOLS = ("list_workflows", "run_graph_workflow", "query_trace")


def is_live_mode() -> bool:
    """True when NEXUS_LIVE is set to the string 'true'"""
    return os.getenv("NEXUS_LIVE", "").strip().lower() == "true"


def unwrap_tool_result(tool_name: str, result: Dict[str, Any]) -> Any:
    """
    Turn an MCP CallToolResult into the tool's JSON payload.

    structuredContent wins when present; otherwise the first text content
    item must hold JSON.
    """
    if result.get("isError"):
        raise ToolCallError(
            f"{tool_name} reported an error: {_content_text(result) or 'no details'}",
            tool_name=tool_name,
        )

    if result.get("structuredContent") is not None:
        return result["structuredContent"]

    text = _content_text(result)
    if text is None:
        raise ToolCallError(f"{tool_name} returned no text content", tool_name=tool_name)

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ToolCallError(f"{tool_name} returned non-JSON text: {e}", tool_name=tool_name)


def _content_text(result: Dict[str, Any]) -> Optional[str]:
    content = result.get("content")
    if not isinstance(content, list):
        return None
    for item in content:
        if isinstance(item, dict) and item.get("type") == "text" and isinstance(item.get("text"), str):
            return item["text"]
    return None


class LiveToolCaller:
    """ToolCaller over the MCP Streamable HTTP transport"""

    def __init__(
        self,
        endpoint: Optional[str] = None,
        session_manager: Optional[MCPSessionManager] = None,
        config: Optional[Config] = None
    ):
        config = config or get_config()
        self.endpoint = endpoint or config.mcp_endpoint
        self.session_manager = session_manager or MCPSessionManager(config)

    async def call(self, tool_name: str, arguments: Dict[str, Any]) -> Any:
        logger.debug(f"Calling {tool_name} on {self.endpoint}")
        result = await self.session_manager.call_tool(self.endpoint, tool_name, arguments)
        return unwrap_tool_result(tool_name, result)

    async def list_tools(self) -> List[str]:
        """Names of the tools the server advertises"""
        tools = await self.session_manager.list_tools(self.endpoint)
        return [tool.get("name") for tool in tools if isinstance(tool, dict)]

    async def verify_tools(self, required: Iterable[str] = REQUIRED_TOOLS) -> None:
        """Fail fast if the server is missing any tool the pipeline drives"""
        available = set(await self.list_tools())
        missing = [name for name in required if name not in available]
        if missing:
            raise ToolCallError(
                f"MCP server at {self.endpoint} is missing tools: {', '.join(missing)}",
                details={"available": sorted(available)},
            )

    async def close(self) -> None:
        await self.session_manager.close()

    async def __aenter__(self) -> "LiveToolCaller":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
