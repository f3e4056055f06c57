# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Deterministic tool responses and a fixture-backed ToolCaller.

Payloads are kept in wire form (camelCase dicts) exactly as an MCP server
would return them, so they go through the same validation as live data.
"""

import copy
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from workflow_runner.core.errors import ToolCallError

logger = logging.getLogger(__name__)


# ============================================================================
# list_workflows
# ============================================================================

EXPECTED_TEMPLATE_NAMES = (
    "bug-fix",
    "code-review",
    "documentation-update",
    "feature-implementation",
    "refactoring",
    "research-review",
    "security-audit",
    "standards-review",
    "test-generation",
)

MOCK_LIST_WORKFLOWS: Dict[str, Any] = {
    "workflows": [{"name": name, "version": "1.0.0"} for name in EXPECTED_TEMPLATE_NAMES],
    "count": 9,
}


# ============================================================================
# Graph workflow list
# ============================================================================

MOCK_GRAPH_LIST: List[Dict[str, Any]] = [
    {
        "name": "echo",
        "description": "Simple input echo (demo)",
        "inputFields": ["input"],
        "nodeCount": 1,
        "hasConditionalEdges": False,
    },
    {
        "name": "pipeline",
        "description": "Two-step validate-process pipeline (demo)",
        "inputFields": ["input"],
        "nodeCount": 2,
        "hasConditionalEdges": False,
    },
    {
        "name": "code-review",
        "description": "Complexity-based code review",
        "inputFields": ["code"],
        "nodeCount": 4,
        "hasConditionalEdges": True,
    },
    {
        "name": "security-scan",
        "description": "Multi-step security analysis",
        "inputFields": ["code"],
        "nodeCount": 4,
        "hasConditionalEdges": True,
    },
    {
        "name": "security-audit",
        "description": "Multi-CLI security audit",
        "inputFields": ["code"],
        "nodeCount": 4,
        "hasConditionalEdges": False,
    },
    {
        "name": "test-generation",
        "description": "Multi-CLI test generation",
        "inputFields": ["code"],
        "nodeCount": 4,
        "hasConditionalEdges": False,
    },
    {
        "name": "documentation",
        "description": "Multi-CLI documentation",
        "inputFields": ["topic", "code"],
        "nodeCount": 4,
        "hasConditionalEdges": False,
    },
]


# ============================================================================
# run_graph_workflow
# ============================================================================

MOCK_ECHO_RESULT: Dict[str, Any] = {
    "workflow": "echo",
    "status": "completed",
    "finalState": {"input": "hello", "output": "echo: hello"},
    "stepsExecuted": 1,
    "nodesExecuted": 1,
    "durationMs": 1,
    "events": [
        {"type": "node_started", "nodeId": "echo", "detail": "Starting echo"},
        {"type": "node_completed", "nodeId": "echo", "detail": "echo in 0ms"},
        {"type": "state_updated", "detail": "output"},
        {"type": "step_completed", "detail": "1 nodes"},
        {"type": "execution_complete", "detail": "1 steps, 1ms"},
    ],
    "checkpointCount": 1,
}

MOCK_PIPELINE_RESULT: Dict[str, Any] = {
    "workflow": "pipeline",
    "status": "completed",
    "finalState": {
        "input": "test data",
        "steps": ["validated: test data", "processed 1 inputs"],
        "output": "done: test data",
    },
    "stepsExecuted": 2,
    "nodesExecuted": 2,
    "durationMs": 1,
    "events": [
        {"type": "node_started", "nodeId": "validate"},
        {"type": "node_completed", "nodeId": "validate"},
        {"type": "step_completed", "detail": "1 nodes"},
        {"type": "node_started", "nodeId": "process"},
        {"type": "node_completed", "nodeId": "process"},
        {"type": "step_completed", "detail": "1 nodes"},
        {"type": "execution_complete", "detail": "2 steps, 1ms"},
    ],
    "checkpointCount": 2,
}

MOCK_CODE_REVIEW_RESULT: Dict[str, Any] = {
    "workflow": "code-review",
    "status": "completed",
    "finalState": {
        "code": "function add(a, b) { return a + b; }",
        "complexity": 1,
        "review": "Quick review: simple function",
        "output": "Review complete: low complexity",
    },
    "stepsExecuted": 3,
    "nodesExecuted": 3,
    "durationMs": 2,
    "events": [
        {"type": "node_started", "nodeId": "analyze"},
        {"type": "node_completed", "nodeId": "analyze"},
        {"type": "node_started", "nodeId": "quick-review"},
        {"type": "node_completed", "nodeId": "quick-review"},
        {"type": "node_started", "nodeId": "report"},
        {"type": "node_completed", "nodeId": "report"},
        {"type": "execution_complete", "detail": "3 steps"},
    ],
    "checkpointCount": 3,
}

MOCK_FAILED_RESULT: Dict[str, Any] = {
    "workflow": "security-scan",
    "status": "failed",
    "finalState": {"code": "", "error": "No code provided"},
    "stepsExecuted": 1,
    "nodesExecuted": 1,
    "durationMs": 0,
    "events": [
        {"type": "node_started", "nodeId": "scan-imports"},
        {"type": "node_completed", "nodeId": "scan-imports"},
        {"type": "execution_complete", "detail": "failed"},
    ],
    "checkpointCount": 1,
    "error": "Empty code input",
}


# ============================================================================
# query_trace
# ============================================================================

MOCK_TRACE_RESPONSE: Dict[str, Any] = {
    "runId": "wf-run-001",
    "events": [
        {"eventType": "workflow.started", "workflow": "echo", "timestamp": "2026-02-14T12:00:00Z"},
        {"eventType": "node.executed", "nodeId": "echo", "durationMs": 1},
        {"eventType": "workflow.completed", "status": "completed"},
    ],
    "totalEvents": 3,
    "truncated": False,
    "source": "disk",
}

MOCK_TRACE_NOT_FOUND: Dict[str, Any] = {
    "runId": "nonexistent",
    "events": [],
    "totalEvents": 0,
    "truncated": False,
    "source": "not_found",
}


DEFAULT_GRAPH_RESULTS: Dict[str, Dict[str, Any]] = {
    "echo": MOCK_ECHO_RESULT,
    "pipeline": MOCK_PIPELINE_RESULT,
    "code-review": MOCK_CODE_REVIEW_RESULT,
}


def simulated_result(info: Mapping[str, Any]) -> Dict[str, Any]:
    """Build a completed run for a listed workflow that has no canned result"""
    name = info["name"]
    node_count = info.get("nodeCount", 1)
    events = []
    for index in range(node_count):
        node_id = f"{name}-node-{index + 1}"
        events.append({"type": "node_started", "nodeId": node_id})
        events.append({"type": "node_completed", "nodeId": node_id})
    events.append({"type": "execution_complete", "detail": f"{node_count} steps"})
    return {
        "workflow": name,
        "status": "completed",
        "finalState": {"output": f"simulated: {name}"},
        "stepsExecuted": node_count,
        "nodesExecuted": node_count,
        "durationMs": 0,
        "events": events,
        "checkpointCount": node_count,
    }


class FixtureToolCaller:
    """
    ToolCaller backed by the canned responses above.

    Every call is recorded in `calls` as (tool_name, arguments). Failures can
    be scripted per tool (`failures`) or per graph workflow
    (`workflow_failures`); the scripted exception is raised instead of
    returning a payload.
    """

    def __init__(
        self,
        templates: Optional[Dict[str, Any]] = None,
        graph_list: Optional[List[Dict[str, Any]]] = None,
        graph_results: Optional[Dict[str, Any]] = None,
        trace_responses: Optional[Dict[str, Any]] = None,
        failures: Optional[Dict[str, BaseException]] = None,
        workflow_failures: Optional[Dict[str, BaseException]] = None,
    ):
        self.templates = MOCK_LIST_WORKFLOWS if templates is None else templates
        self.graph_list = MOCK_GRAPH_LIST if graph_list is None else graph_list
        self.graph_results = DEFAULT_GRAPH_RESULTS if graph_results is None else graph_results
        self.trace_responses = (
            {MOCK_TRACE_RESPONSE["runId"]: MOCK_TRACE_RESPONSE}
            if trace_responses is None else trace_responses
        )
        self.failures = failures or {}
        self.workflow_failures = workflow_failures or {}
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    async def call(self, tool_name: str, arguments: Dict[str, Any]) -> Any:
        self.calls.append((tool_name, dict(arguments)))
        logger.debug(f"Fixture call: {tool_name} {arguments}")

        if tool_name in self.failures:
            raise self.failures[tool_name]

        if tool_name == "list_workflows":
            return copy.deepcopy(self.templates)

        if tool_name == "run_graph_workflow":
            workflow = arguments.get("workflow")
            if workflow == "list":
                return copy.deepcopy(self.graph_list)
            if workflow in self.workflow_failures:
                raise self.workflow_failures[workflow]
            if workflow in self.graph_results:
                return copy.deepcopy(self.graph_results[workflow])
            for info in self.graph_list:
                if isinstance(info, dict) and info.get("name") == workflow:
                    return simulated_result(info)
            raise ToolCallError(f"Unknown graph workflow: {workflow}", tool_name=tool_name)

        if tool_name == "query_trace":
            run_id = arguments.get("runId")
            if run_id in self.trace_responses:
                return copy.deepcopy(self.trace_responses[run_id])
            return {**copy.deepcopy(MOCK_TRACE_NOT_FOUND), "runId": run_id}

        raise ToolCallError(f"No fixture for tool: {tool_name}", tool_name=tool_name)

    def calls_to(self, tool_name: str) -> List[Dict[str, Any]]:
        """Arguments of every recorded call to one tool, in order"""
        return [args for name, args in self.calls if name == tool_name]
