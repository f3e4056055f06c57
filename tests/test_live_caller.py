# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""Unit tests for the live MCP tool caller"""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from workflow_runner.core.config import Config
from workflow_runner.core.errors import ToolCallError
from workflow_runner.fixtures import MOCK_LIST_WORKFLOWS
from workflow_runner.live_caller import LiveToolCaller, is_live_mode, unwrap_tool_result
from workflow_runner.runner_pipeline import list_templates


def text_result(payload):
    return {"content": [{"type": "text", "text": json.dumps(payload)}]}


@pytest.fixture
def session_manager():
    manager = MagicMock()
    manager.call_tool = AsyncMock()
    manager.list_tools = AsyncMock()
    manager.close = AsyncMock()
    return manager


@pytest.fixture
def caller(session_manager):
    return LiveToolCaller(
        endpoint="http://nexus:3100/mcp",
        session_manager=session_manager,
        config=Config(),
    )


# ============================================================================
# Live mode switch
# ============================================================================

@pytest.mark.parametrize("value", ["true", "TRUE", " true "])
def test_live_mode_enabled(monkeypatch, value):
    monkeypatch.setenv("NEXUS_LIVE", value)

    assert is_live_mode()


@pytest.mark.parametrize("value", ["", "1", "yes", "false"])
def test_live_mode_disabled(monkeypatch, value):
    monkeypatch.setenv("NEXUS_LIVE", value)

    assert not is_live_mode()


def test_live_mode_unset():
    assert not is_live_mode()


# ============================================================================
# Result unwrapping
# ============================================================================

def test_unwrap_prefers_structured_content():
    result = {
        "structuredContent": {"count": 1},
        "content": [{"type": "text", "text": "ignored"}],
    }

    assert unwrap_tool_result("list_workflows", result) == {"count": 1}


def test_unwrap_parses_text_content():
    result = {"content": [
        {"type": "image", "data": "..."},
        {"type": "text", "text": '[{"name": "echo"}]'},
    ]}

    assert unwrap_tool_result("run_graph_workflow", result) == [{"name": "echo"}]


def test_unwrap_raises_on_tool_error():
    result = {"isError": True, "content": [{"type": "text", "text": "workflow not found"}]}

    with pytest.raises(ToolCallError, match="workflow not found") as exc_info:
        unwrap_tool_result("run_graph_workflow", result)

    assert exc_info.value.tool_name == "run_graph_workflow"


def test_unwrap_raises_without_text():
    with pytest.raises(ToolCallError, match="no text content"):
        unwrap_tool_result("query_trace", {"content": []})


def test_unwrap_raises_on_non_json_text():
    with pytest.raises(ToolCallError, match="non-JSON"):
        unwrap_tool_result("query_trace", {"content": [{"type": "text", "text": "Run not found"}]})


# ============================================================================
# LiveToolCaller
# ============================================================================

def test_endpoint_defaults_to_config(session_manager):
    caller = LiveToolCaller(session_manager=session_manager, config=Config(mcp_endpoint="http://x/mcp"))

    assert caller.endpoint == "http://x/mcp"


@pytest.mark.asyncio
async def test_call_unwraps_result(caller, session_manager):
    session_manager.call_tool.return_value = text_result({"runId": "r1"})

    result = await caller.call("query_trace", {"runId": "r1"})

    assert result == {"runId": "r1"}
    session_manager.call_tool.assert_awaited_once_with("http://nexus:3100/mcp", "query_trace", {"runId": "r1"})


@pytest.mark.asyncio
async def test_caller_drives_pipeline_step(caller, session_manager):
    """Test a pipeline step accepts the live caller"""
    session_manager.call_tool.return_value = text_result(MOCK_LIST_WORKFLOWS)

    response = await list_templates(caller)

    assert response.count == 9


@pytest.mark.asyncio
async def test_verify_tools_passes(caller, session_manager):
    session_manager.list_tools.return_value = [
        {"name": "list_workflows"},
        {"name": "run_graph_workflow"},
        {"name": "query_trace"},
        {"name": "get_workflow"},
    ]

    await caller.verify_tools()


@pytest.mark.asyncio
async def test_verify_tools_reports_missing(caller, session_manager):
    session_manager.list_tools.return_value = [{"name": "list_workflows"}]

    with pytest.raises(ToolCallError, match="run_graph_workflow, query_trace") as exc_info:
        await caller.verify_tools()

    assert exc_info.value.details["available"] == ["list_workflows"]


@pytest.mark.asyncio
async def test_context_manager_closes(caller, session_manager):
    async with caller as entered:
        assert entered is caller

    session_manager.close.assert_awaited_once()


@pytest.mark.parametrize("result", [
    {"content": "not a list"},
    {"content": [{"type": "text", "text": 42}]},
])
def test_unwrap_malformed_content_raises_tool_error(result):
    with pytest.raises(ToolCallError, match="no text content"):
        unwrap_tool_result("list_workflows", result)
