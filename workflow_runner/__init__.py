# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
workflow-runner - end-to-end exerciser for workflow MCP tools

Chains: list_workflows -> run_graph_workflow -> query_trace
"""

__version__ = "1.0.0"

from workflow_runner.contracts import (
    GraphExecutionEvent,
    GraphWorkflowInfo,
    ListWorkflowsInput,
    ListWorkflowsResponse,
    QueryTraceInput,
    QueryTraceResponse,
    RunGraphInput,
    RunGraphResponse,
    RunnerConfig,
    RunnerReport,
    Shape,
    Validation,
    WorkflowRunResult,
    WorkflowTemplateInfo,
    parse,
    validate,
)
from workflow_runner.core.errors import ContractValidationError, ToolCallError, WorkflowRunnerError
from workflow_runner.reporter import ReportFormat, generate_report
from workflow_runner.runner_pipeline import (
    ToolCaller,
    count_results,
    execute_graph,
    list_graph_workflows,
    list_templates,
    query_trace,
    run_workflow_pipeline,
    to_error_result,
    to_run_result,
)

__all__ = [
    "__version__",
    "GraphExecutionEvent",
    "GraphWorkflowInfo",
    "ListWorkflowsInput",
    "ListWorkflowsResponse",
    "QueryTraceInput",
    "QueryTraceResponse",
    "RunGraphInput",
    "RunGraphResponse",
    "RunnerConfig",
    "RunnerReport",
    "Shape",
    "Validation",
    "WorkflowRunResult",
    "WorkflowTemplateInfo",
    "parse",
    "validate",
    "ContractValidationError",
    "ToolCallError",
    "WorkflowRunnerError",
    "ReportFormat",
    "generate_report",
    "ToolCaller",
    "count_results",
    "execute_graph",
    "list_graph_workflows",
    "list_templates",
    "query_trace",
    "run_workflow_pipeline",
    "to_error_result",
    "to_run_result",
]
