# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
JSON-RPC 2.0 Message Builders for the MCP tool-call protocol
"""

from typing import Dict, Any

from workflow_runner.mcp_exceptions import MCPProtocolError

JSONRPC_VERSION = "2.0"

# The runner only calls tools; it offers nothing back to the server.
CLIENT_CAPABILITIES: Dict[str, Any] = {}


def build_initialize_request(request_id: int, protocol_version: str, client_info: Dict[str, Any]) -> Dict:
    """Build JSON-RPC initialize request"""
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "method": "initialize",
        "params": {
            "protocolVersion": protocol_version,
            "capabilities": dict(CLIENT_CAPABILITIES),
            "clientInfo": client_info
        }
    }


def build_initialized_notification() -> Dict:
    """Build JSON-RPC initialized notification"""
    return {
        "jsonrpc": JSONRPC_VERSION,
        "method": "notifications/initialized"
    }


def build_list_tools_request(request_id: int) -> Dict:
    """Build JSON-RPC tools/list request"""
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "method": "tools/list"
    }


def build_call_tool_request(request_id: int, tool_name: str, arguments: Dict) -> Dict:
    """Build JSON-RPC tools/call request"""
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "method": "tools/call",
        "params": {
            "name": tool_name,
            "arguments": arguments
        }
    }


def build_cancel_notification(request_id: int, reason: str = "Request timed out") -> Dict:
    """Build JSON-RPC cancellation notification"""
    return {
        "jsonrpc": JSONRPC_VERSION,
        "method": "notifications/cancelled",
        "params": {
            "requestId": request_id,
            "reason": reason
        }
    }


def extract_result(message: Dict, method: str) -> Dict:
    """
    Return the `result` member of a JSON-RPC response.

    Raises MCPProtocolError for error responses, for messages that are not
    responses at all, and for results that are not JSON objects.
    """
    if not isinstance(message, dict):
        raise MCPProtocolError(f"{method}: response is not a JSON object")

    if "error" in message:
        error = message["error"] or {}
        code = error.get("code") if isinstance(error, dict) else None
        text = error.get("message", "Unknown error") if isinstance(error, dict) else str(error)
        raise MCPProtocolError(f"{method} error ({code}): {text}", details={"error": error})

    if "result" not in message:
        raise MCPProtocolError(f"{method}: response has neither result nor error")

    result = message["result"]
    if result is None:
        return {}
    if not isinstance(result, dict):
        raise MCPProtocolError(f"{method}: result is not a JSON object")
    return result
