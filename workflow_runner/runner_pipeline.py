# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Workflow Runner Pipeline

Chains list_workflows -> run_graph_workflow -> query_trace to exercise every
workflow the server advertises and validate what comes back.

Calls are issued strictly one at a time. Discovery failures propagate;
per-workflow execution and trace failures are absorbed into the report.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

from workflow_runner.contracts import (
    GraphWorkflowInfo,
    ListWorkflowsInput,
    ListWorkflowsResponse,
    QueryTraceInput,
    QueryTraceResponse,
    RunGraphResponse,
    RunnerConfig,
    RunnerReport,
    Shape,
    WorkflowRunResult,
    parse,
)
from workflow_runner.core.logging import log_event

logger = logging.getLogger(__name__)


# ============================================================================
# Tool caller abstraction
# ============================================================================

class ToolCaller(Protocol):
    """Anything that can invoke a remote tool by name and await its JSON result"""

    async def call(self, tool_name: str, arguments: Dict[str, Any]) -> Any:
        ...


LIST_WORKFLOWS_TOOL = "list_workflows"
RUN_GRAPH_TOOL = "run_graph_workflow"
QUERY_TRACE_TOOL = "query_trace"

# Magic value of the remote protocol: run_graph_workflow with this workflow
# name lists graph workflows instead of running one called "list".
GRAPH_LIST_SENTINEL = "list"

EXECUTION_FAILED_MESSAGE = "Execution failed"


# ============================================================================
# Default graph workflow inputs
# ============================================================================

DEFAULT_GRAPH_INPUTS: Mapping[str, Dict[str, Any]] = {
    "echo": {"input": "workflow-runner test"},
    "pipeline": {"input": "validation test data"},
    "code-review": {"code": "function add(a: number, b: number): number { return a + b; }"},
    "security-scan": {"code": 'import fs from "fs"; fs.readFileSync("/etc/passwd");'},
    "security-audit": {"code": "const password = process.env.DB_PASSWORD;"},
    "test-generation": {"code": "export function sum(a: number, b: number): number { return a + b; }"},
    "documentation": {"topic": "API design", "code": 'app.get("/users", getUsers);'},
}


def resolve_graph_inputs(
    name: str,
    overrides: Optional[Mapping[str, Dict[str, Any]]] = None
) -> Dict[str, Any]:
    """Caller override, then built-in default, then an empty argument bag"""
    if overrides and name in overrides:
        return dict(overrides[name])
    return dict(DEFAULT_GRAPH_INPUTS.get(name, {}))


# ============================================================================
# Individual steps
# ============================================================================

async def list_templates(caller: ToolCaller) -> ListWorkflowsResponse:
    """Step 1: List all workflow templates."""
    arguments = ListWorkflowsInput(format="names").model_dump(by_alias=True, exclude_none=True)
    raw = await caller.call(LIST_WORKFLOWS_TOOL, arguments)
    return parse(raw, Shape.LIST_WORKFLOWS_RESPONSE)


async def list_graph_workflows(caller: ToolCaller) -> List[GraphWorkflowInfo]:
    """Step 2: List all graph workflows."""
    raw = await caller.call(RUN_GRAPH_TOOL, {"workflow": GRAPH_LIST_SENTINEL})
    return parse(raw, Shape.GRAPH_WORKFLOW_LIST)


async def execute_graph(
    caller: ToolCaller,
    name: str,
    inputs: Dict[str, Any]
) -> RunGraphResponse:
    """
    Step 3: Execute a single graph workflow with checkpointing enabled.

    The request is validated before it is sent, so a malformed workflow name
    fails locally with ContractValidationError.
    """
    request = parse(
        {"workflow": name, "inputs": inputs, "enableCheckpointing": True},
        Shape.RUN_GRAPH_INPUT,
    )
    raw = await caller.call(RUN_GRAPH_TOOL, request.model_dump(by_alias=True, exclude_none=True))
    return parse(raw, Shape.RUN_GRAPH_RESPONSE)


async def query_trace(
    caller: ToolCaller,
    run_id: str,
    event_type: Optional[str] = None,
    limit: Optional[int] = None
) -> QueryTraceResponse:
    """Step 4: Query traces for a run."""
    request: QueryTraceInput = parse(
        {"runId": run_id, "eventType": event_type, "limit": limit},
        Shape.QUERY_TRACE_INPUT,
    )
    raw = await caller.call(QUERY_TRACE_TOOL, request.model_dump(by_alias=True, exclude_none=True))
    return parse(raw, Shape.QUERY_TRACE_RESPONSE)


# ============================================================================
# Analysis helpers
# ============================================================================

def to_run_result(info: GraphWorkflowInfo, response: RunGraphResponse) -> WorkflowRunResult:
    """Convert a graph execution to a WorkflowRunResult."""
    return WorkflowRunResult(
        name=response.workflow,
        status=response.status,
        steps_executed=response.steps_executed,
        nodes_executed=response.nodes_executed,
        duration_ms=response.duration_ms,
        checkpoints=response.checkpoint_count,
        event_count=len(response.events),
        has_conditional_edges=info.has_conditional_edges,
        error=response.error,
    )


def to_error_result(name: str, error: str) -> WorkflowRunResult:
    """Create an error result for an execution that failed locally."""
    return WorkflowRunResult(
        name=name,
        status="error",
        steps_executed=0,
        nodes_executed=0,
        duration_ms=0,
        checkpoints=0,
        event_count=0,
        has_conditional_edges=False,
        error=error,
    )


@dataclass(frozen=True)
class ResultCounts:
    passed: int
    failed: int


def count_results(results: Sequence[WorkflowRunResult]) -> ResultCounts:
    """Count passed/failed results."""
    passed = sum(1 for r in results if r.status == "completed")
    return ResultCounts(passed=passed, failed=len(results) - passed)


# ============================================================================
# Full pipeline
# ============================================================================

async def _run_graph_workflows(
    caller: ToolCaller,
    infos: Sequence[GraphWorkflowInfo],
    overrides: Optional[Mapping[str, Dict[str, Any]]]
) -> List[WorkflowRunResult]:
    results: List[WorkflowRunResult] = []
    for info in infos:
        inputs = resolve_graph_inputs(info.name, overrides)
        try:
            response = await execute_graph(caller, info.name, inputs)
        except Exception as e:
            # Isolated: one broken workflow never stops the rest
            log_event(
                logger, "graph_workflow_error", level="WARNING",
                workflow=info.name, error=f"{e.__class__.__name__}: {e}",
            )
            results.append(to_error_result(info.name, EXECUTION_FAILED_MESSAGE))
            continue

        result = to_run_result(info, response)
        log_event(
            logger, "graph_workflow_finished",
            workflow=result.name, status=result.status,
            steps=result.steps_executed, duration_ms=result.duration_ms,
        )
        results.append(result)
    return results


async def _query_trace_safely(caller: ToolCaller, config: RunnerConfig) -> Optional[QueryTraceResponse]:
    try:
        trace = await query_trace(
            caller,
            config.trace_run_id,
            event_type=config.trace_event_type,
            limit=config.trace_limit,
        )
    except Exception as e:
        log_event(
            logger, "trace_query_error", level="WARNING",
            run_id=config.trace_run_id, error=f"{e.__class__.__name__}: {e}",
        )
        return None

    log_event(logger, "trace_query_finished", run_id=trace.run_id, source=trace.source, total_events=trace.total_events)
    return trace


async def run_workflow_pipeline(
    caller: ToolCaller,
    config: Optional[RunnerConfig] = None
) -> RunnerReport:
    """Run the complete workflow runner pipeline."""
    config = config or RunnerConfig()

    # Step 1: Discover templates
    templates = await list_templates(caller)
    log_event(logger, "templates_discovered", count=templates.count)

    # Step 2: Discover and execute graph workflows
    graph_infos = await list_graph_workflows(caller)
    log_event(logger, "graph_workflows_discovered", count=len(graph_infos))

    graph_results: List[WorkflowRunResult] = []
    if config.run_graph_workflows:
        graph_results = await _run_graph_workflows(caller, graph_infos, config.graph_inputs)
    else:
        logger.info("Graph workflow execution disabled; skipping")

    # Step 3: Query traces (if configured)
    trace_result: Optional[QueryTraceResponse] = None
    if config.trace_run_id is not None:
        trace_result = await _query_trace_safely(caller, config)

    counts = count_results(graph_results)
    log_event(logger, "pipeline_finished", passed=counts.passed, failed=counts.failed)

    return RunnerReport(
        template_count=templates.count,
        graph_workflow_count=len(graph_infos),
        graph_results=graph_results,
        passed=counts.passed,
        failed=counts.failed,
        trace_result=trace_result,
    )
