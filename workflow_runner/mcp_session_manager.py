# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
MCP Session Manager
Manages MCP initialization, sessions, and JSON-RPC communication over
Streamable HTTP. One attempt per call; an expired session is dropped so the
next call re-initializes.
"""

import asyncio
import json
import logging
from datetime import datetime
from typing import Dict, Optional, Callable, List

import aiohttp

from workflow_runner import __version__
from workflow_runner.core.config import Config, get_config
from workflow_runner.mcp_session import MCPSession
from workflow_runner.mcp_exceptions import MCPInitializationError, MCPSessionExpiredError, MCPProtocolError
from workflow_runner.mcp_jsonrpc import (
    build_initialize_request,
    build_initialized_notification,
    build_list_tools_request,
    build_call_tool_request,
    build_cancel_notification,
    extract_result,
)

logger = logging.getLogger(__name__)


class MCPSessionManager:
    """Manages MCP initialization and sessions"""

    def __init__(
        self,
        config: Optional[Config] = None,
        notification_handler: Optional[Callable[[Dict], None]] = None
    ):
        config = config or get_config()
        self.sessions: Dict[str, MCPSession] = {}
        self.init_locks: Dict[str, asyncio.Lock] = {}
        self.request_locks: Dict[str, asyncio.Lock] = {}
        self.request_id_counter = 0
        self.protocol_version = config.protocol_version
        self.client_info = {
            "name": "workflow-runner",
            "version": __version__,
        }

        # Timeouts (seconds)
        self.timeout_init = config.timeout_init
        self.timeout_list = config.timeout_list
        self.timeout_call = config.timeout_call

        # Last SSE event id seen, kept for diagnostics
        self.last_event_id: Optional[str] = None

        # HTTP session pooling
        self._http_session: Optional[aiohttp.ClientSession] = None

        self.notification_handler = notification_handler or self._default_notification_handler

    def _default_notification_handler(self, notification: Dict) -> None:
        """Default handler for server notifications"""
        method = notification.get("method", "unknown")
        params = notification.get("params", {})
        logger.info(f"Server notification: {method} - {params}")

    def _next_request_id(self) -> int:
        """Generate next request ID"""
        self.request_id_counter += 1
        return self.request_id_counter

    async def _get_http_session(self) -> aiohttp.ClientSession:
        """Get or create persistent HTTP session"""
        if self._http_session is None or self._http_session.closed:
            self._http_session = aiohttp.ClientSession()
        return self._http_session

    async def close(self):
        """Clean up resources"""
        if self._http_session and not self._http_session.closed:
            await self._http_session.close()
        self.sessions.clear()

    def _build_headers(self, session: Optional[MCPSession] = None) -> Dict[str, str]:
        """Build HTTP headers for MCP requests"""
        headers = {
            "Accept": "application/json, text/event-stream",
            "Content-Type": "application/json",
        }
        if session:
            headers["MCP-Protocol-Version"] = session.protocol_version
            if session.session_id:
                headers["MCP-Session-Id"] = session.session_id
        return headers

    async def initialize(self, endpoint: str) -> MCPSession:
        """Perform 3-step MCP initialization handshake"""
        logger.info(f"Initializing MCP session for {endpoint}")

        request_id = self._next_request_id()
        init_request = build_initialize_request(request_id, self.protocol_version, self.client_info)

        http_session = await self._get_http_session()

        try:
            async with http_session.post(
                endpoint,
                json=init_request,
                headers=self._build_headers(),
                timeout=aiohttp.ClientTimeout(total=self.timeout_init)
            ) as response:
                if response.status != 200:
                    raise MCPInitializationError(f"Initialize failed with status {response.status}")

                message = await self._handle_response(response)
                try:
                    init_result = extract_result(message, "initialize")
                except MCPProtocolError as e:
                    raise MCPInitializationError(e.message, details=e.details)

                session = MCPSession(
                    endpoint=endpoint,
                    protocol_version=init_result.get("protocolVersion") or self.protocol_version,
                    session_id=response.headers.get("MCP-Session-Id"),
                    server_capabilities=init_result.get("capabilities", {}),
                    client_capabilities=init_request["params"]["capabilities"],
                    initialized_at=datetime.now(),
                    server_info=init_result.get("serverInfo"),
                )

            async with http_session.post(
                endpoint,
                json=build_initialized_notification(),
                headers=self._build_headers(session),
                timeout=aiohttp.ClientTimeout(total=self.timeout_init)
            ) as notif_response:
                if notif_response.status not in (200, 202):
                    logger.warning(f"Initialized notification returned {notif_response.status}")

        except asyncio.TimeoutError:
            raise MCPInitializationError(f"Initialize timeout for {endpoint}")
        except aiohttp.ClientError as e:
            raise MCPInitializationError(f"Initialize failed: {e}")

        self.sessions[endpoint] = session
        logger.info(f"MCP session initialized for {endpoint} ({session.server_name})")
        return session

    async def get_or_initialize(self, endpoint: str) -> MCPSession:
        """Get cached session or initialize new one"""
        # Fast path
        if endpoint in self.sessions:
            return self.sessions[endpoint]

        # Slow path with lock
        if endpoint not in self.init_locks:
            self.init_locks[endpoint] = asyncio.Lock()

        async with self.init_locks[endpoint]:
            # Double-check
            if endpoint in self.sessions:
                return self.sessions[endpoint]

            return await self.initialize(endpoint)

    async def list_tools(self, endpoint: str) -> List[Dict]:
        """List tools using JSON-RPC tools/list"""
        result = await self._request(
            endpoint,
            lambda request_id: build_list_tools_request(request_id),
            "tools/list",
            self.timeout_list,
        )
        tools = result.get("tools", [])
        if not isinstance(tools, list):
            raise MCPProtocolError("tools/list: tools is not a list")
        return tools

    async def call_tool(self, endpoint: str, tool_name: str, arguments: Dict) -> Dict:
        """Call tool using JSON-RPC tools/call; returns the raw MCP tool result"""
        # Serialize requests per endpoint
        if endpoint not in self.request_locks:
            self.request_locks[endpoint] = asyncio.Lock()

        async with self.request_locks[endpoint]:
            return await self._request(
                endpoint,
                lambda request_id: build_call_tool_request(request_id, tool_name, arguments),
                f"tools/call {tool_name}",
                self.timeout_call,
                tool_name=tool_name,
            )

    async def _request(
        self,
        endpoint: str,
        build: Callable[[int], Dict],
        method: str,
        timeout: float,
        tool_name: Optional[str] = None,
    ) -> Dict:
        """Send one JSON-RPC request and return its result (single attempt)"""
        session = await self.get_or_initialize(endpoint)
        request_id = self._next_request_id()
        headers = self._build_headers(session)
        http_session = await self._get_http_session()

        try:
            async with http_session.post(
                endpoint,
                json=build(request_id),
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=timeout)
            ) as response:
                if response.status == 404:
                    logger.warning(f"Session expired for {endpoint}; it will be re-initialized on the next call")
                    self.sessions.pop(endpoint, None)
                    raise MCPSessionExpiredError(f"{method}: MCP session expired", tool_name=tool_name)

                if response.status >= 400:
                    raise MCPProtocolError(f"{method} failed with HTTP {response.status}", tool_name=tool_name)

                message = await self._handle_response(response)

        except asyncio.TimeoutError:
            await self._send_cancel(endpoint, request_id, headers)
            raise MCPProtocolError(f"{method} timed out after {timeout}s", tool_name=tool_name)
        except aiohttp.ClientError as e:
            raise MCPProtocolError(f"{method} failed: {e}", tool_name=tool_name)

        try:
            return extract_result(message, method)
        except MCPProtocolError as e:
            e.tool_name = tool_name
            raise

    async def _send_cancel(self, endpoint: str, request_id: int, headers: Dict[str, str]) -> None:
        """Tell the server to stop working on a request we gave up on"""
        try:
            http_session = await self._get_http_session()
            async with http_session.post(
                endpoint,
                json=build_cancel_notification(request_id),
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=5)
            ):
                pass
            logger.info(f"Sent cancellation notification for request {request_id}")
        except (aiohttp.ClientError, asyncio.TimeoutError) as cancel_error:
            logger.warning(f"Failed to send cancellation: {cancel_error}")

    async def _handle_response(self, response: aiohttp.ClientResponse) -> Dict:
        """Handle both JSON and SSE responses"""
        content_type = response.headers.get("Content-Type", "")

        if "text/event-stream" in content_type:
            return self._read_sse_stream(await response.text())

        try:
            return await response.json(content_type=None)
        except (json.JSONDecodeError, aiohttp.ContentTypeError) as e:
            raise MCPProtocolError(f"Response is not valid JSON: {e}")

    def _read_sse_stream(self, text: str) -> Dict:
        """Return the first JSON-RPC response in an SSE body, dispatching notifications"""
        event_id = None
        data_buffer: List[str] = []

        # A trailing blank line flushes the last event
        for line in text.split('\n') + ['']:
            line = line.rstrip('\r')

            if not line:
                if data_buffer:
                    data = '\n'.join(data_buffer)
                    data_buffer = []
                    try:
                        parsed = json.loads(data)
                    except json.JSONDecodeError as e:
                        logger.warning(f"Failed to parse SSE data: {e}")
                        continue

                    if not isinstance(parsed, dict):
                        logger.warning(f"Ignoring non-object SSE data: {data[:100]}")
                        continue

                    if "result" in parsed or "error" in parsed:
                        if event_id:
                            self.last_event_id = event_id
                        return parsed

                    if "method" in parsed:
                        self.notification_handler(parsed)
                continue

            if line.startswith('id:'):
                event_id = line[3:].strip()
            elif line.startswith('data:'):
                data_buffer.append(line[5:].strip())

        raise MCPProtocolError("SSE stream ended without JSON-RPC response")
