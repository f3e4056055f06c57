# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Workflow Runner Contracts

Pydantic models for the workflow MCP tools (list_workflows,
run_graph_workflow, query_trace) plus the runner's own report types.

Wire names are camelCase; Python attributes are snake_case. Models accept
either on input and `model_dump(by_alias=True)` reproduces the wire form.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeFloat,
    NonNegativeInt,
    TypeAdapter,
    ValidationError,
    model_validator,
)
from pydantic.alias_generators import to_camel

from workflow_runner.core.errors import ContractValidationError, FieldViolation


class ContractModel(BaseModel):
    """Base for every contract: strict types, camelCase aliases, immutable"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        strict=True,
        frozen=True,
    )


# ============================================================================
# list_workflows
# ============================================================================

class ListWorkflowsInput(ContractModel):
    category: Optional[str] = None
    format: Optional[Literal["full", "names"]] = None


class WorkflowTemplateInfo(ContractModel):
    """Static template descriptor (no executable graph)"""
    name: str
    version: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None


class ListWorkflowsResponse(ContractModel):
    workflows: List[WorkflowTemplateInfo]
    count: Union[NonNegativeInt, NonNegativeFloat]
    categories: Optional[List[str]] = None


# ============================================================================
# run_graph_workflow
# ============================================================================

class RunGraphInput(ContractModel):
    workflow: str = Field(min_length=1, max_length=100)
    inputs: Optional[Dict[str, Any]] = None
    enable_checkpointing: Optional[bool] = None
    enable_audit_trail: Optional[bool] = None


class GraphExecutionEvent(ContractModel):
    """One entry of an execution trace, in emission order"""
    type: str
    node_id: Optional[str] = None
    detail: Optional[str] = None


class RunGraphResponse(ContractModel):
    """
    Result of executing one graph workflow.

    `error` is optional regardless of `status`; a failed run without an
    error message (or a completed run carrying one) is still valid.
    """
    workflow: str
    status: Literal["completed", "failed"]
    final_state: Dict[str, Any]
    steps_executed: NonNegativeInt
    nodes_executed: NonNegativeInt
    duration_ms: Union[NonNegativeInt, NonNegativeFloat]
    events: List[GraphExecutionEvent]
    checkpoint_count: NonNegativeInt
    error: Optional[str] = None


# ============================================================================
# Graph workflow listing (run_graph_workflow with workflow="list")
# ============================================================================

class GraphWorkflowInfo(ContractModel):
    """Executable graph workflow as advertised by the listing call"""
    name: str
    description: str
    input_fields: List[str]
    node_count: NonNegativeInt
    has_conditional_edges: bool


# ============================================================================
# query_trace
# ============================================================================

class QueryTraceInput(ContractModel):
    run_id: str = Field(min_length=1)
    event_type: Optional[str] = None
    limit: Optional[int] = Field(default=None, ge=1, le=500)


class QueryTraceResponse(ContractModel):
    run_id: str
    events: List[Dict[str, Any]]
    total_events: NonNegativeInt
    truncated: bool
    source: Literal["disk", "not_found"]


# ============================================================================
# Runner types
# ============================================================================

class WorkflowRunResult(ContractModel):
    """
    Normalized outcome of one graph workflow.

    status "error" is local only: the call or its validation failed before a
    remote status could be read.
    """
    name: str
    status: Literal["completed", "failed", "error"]
    steps_executed: NonNegativeInt
    nodes_executed: NonNegativeInt
    duration_ms: Union[NonNegativeInt, NonNegativeFloat]
    checkpoints: NonNegativeInt
    event_count: NonNegativeInt
    has_conditional_edges: bool
    error: Optional[str] = None


class RunnerReport(ContractModel):
    """Aggregate produced once per pipeline run"""
    template_count: Union[NonNegativeInt, NonNegativeFloat]
    graph_workflow_count: NonNegativeInt
    graph_results: List[WorkflowRunResult]
    passed: NonNegativeInt
    failed: NonNegativeInt
    trace_result: Optional[QueryTraceResponse] = None

    @model_validator(mode="after")
    def _check_totals(self) -> "RunnerReport":
        if self.passed + self.failed != len(self.graph_results):
            raise ValueError(
                f"passed ({self.passed}) + failed ({self.failed}) must equal "
                f"the number of graph results ({len(self.graph_results)})"
            )
        return self


class RunnerConfig(ContractModel):
    """Caller-supplied pipeline options; every field is optional"""
    run_graph_workflows: bool = True
    trace_run_id: Optional[str] = None
    graph_inputs: Optional[Dict[str, Dict[str, Any]]] = None
    trace_event_type: Optional[str] = None
    trace_limit: Optional[int] = None


# ============================================================================
# Validation
# ============================================================================

class Shape(str, Enum):
    """Every payload shape the runner validates"""
    LIST_WORKFLOWS_INPUT = "list_workflows.input"
    LIST_WORKFLOWS_RESPONSE = "list_workflows.response"
    RUN_GRAPH_INPUT = "run_graph_workflow.input"
    RUN_GRAPH_RESPONSE = "run_graph_workflow.response"
    GRAPH_WORKFLOW_LIST = "run_graph_workflow.list"
    QUERY_TRACE_INPUT = "query_trace.input"
    QUERY_TRACE_RESPONSE = "query_trace.response"


_ADAPTERS: Dict[Shape, TypeAdapter] = {
    Shape.LIST_WORKFLOWS_INPUT: TypeAdapter(ListWorkflowsInput),
    Shape.LIST_WORKFLOWS_RESPONSE: TypeAdapter(ListWorkflowsResponse),
    Shape.RUN_GRAPH_INPUT: TypeAdapter(RunGraphInput),
    Shape.RUN_GRAPH_RESPONSE: TypeAdapter(RunGraphResponse),
    Shape.GRAPH_WORKFLOW_LIST: TypeAdapter(List[GraphWorkflowInfo]),
    Shape.QUERY_TRACE_INPUT: TypeAdapter(QueryTraceInput),
    Shape.QUERY_TRACE_RESPONSE: TypeAdapter(QueryTraceResponse),
}


@dataclass(frozen=True)
class Validation:
    """Tagged validation outcome: exactly one of `value` / `failure` is meaningful"""
    shape: Shape
    value: Any = None
    failure: Optional[ContractValidationError] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    def unwrap(self) -> Any:
        """Return the typed value or raise the ContractValidationError"""
        if self.failure is not None:
            raise self.failure
        return self.value


def _to_violations(error: ValidationError) -> List[FieldViolation]:
    return [
        FieldViolation(
            path=".".join(str(part) for part in err["loc"]),
            message=err["msg"],
        )
        for err in error.errors()
    ]


def validate(payload: Any, shape: Shape) -> Validation:
    """
    Validate an untyped payload against a known shape.

    Never raises for bad payloads; every violated field is collected into
    the returned failure.
    """
    try:
        value = _ADAPTERS[shape].validate_python(payload)
    except ValidationError as e:
        return Validation(
            shape=shape,
            failure=ContractValidationError(shape.value, _to_violations(e)),
        )
    return Validation(shape=shape, value=value)


def parse(payload: Any, shape: Shape) -> Any:
    """Validate and return the typed value, raising ContractValidationError on failure"""
    return validate(payload, shape).unwrap()
