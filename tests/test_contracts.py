# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""Unit tests for workflow tool contracts"""

import pytest
from pydantic import ValidationError

from workflow_runner.contracts import (
    GraphWorkflowInfo,
    RunnerReport,
    Shape,
    WorkflowRunResult,
    parse,
    validate,
)
from workflow_runner.core.errors import ContractValidationError
from workflow_runner.fixtures import (
    MOCK_CODE_REVIEW_RESULT,
    MOCK_ECHO_RESULT,
    MOCK_FAILED_RESULT,
    MOCK_GRAPH_LIST,
    MOCK_LIST_WORKFLOWS,
    MOCK_PIPELINE_RESULT,
    MOCK_TRACE_NOT_FOUND,
    MOCK_TRACE_RESPONSE,
)


# ============================================================================
# list_workflows
# ============================================================================

def test_list_input_accepts_empty():
    assert validate({}, Shape.LIST_WORKFLOWS_INPUT).ok


@pytest.mark.parametrize("fmt", ["full", "names"])
def test_list_input_accepts_format(fmt):
    result = validate({"format": fmt}, Shape.LIST_WORKFLOWS_INPUT)

    assert result.ok
    assert result.value.format == fmt


def test_list_input_rejects_unknown_format():
    result = validate({"format": "xml"}, Shape.LIST_WORKFLOWS_INPUT)

    assert not result.ok
    assert result.failure.fields == ["format"]


def test_list_response_validates_templates():
    response = parse(MOCK_LIST_WORKFLOWS, Shape.LIST_WORKFLOWS_RESPONSE)

    assert response.count == 9
    assert len(response.workflows) == response.count
    assert response.workflows[0].name == "bug-fix"
    assert response.workflows[0].version == "1.0.0"


# ============================================================================
# run_graph_workflow
# ============================================================================

def test_run_graph_input_accepts_valid_input():
    request = parse(
        {"workflow": "echo", "inputs": {"input": "hi"}, "enableCheckpointing": True},
        Shape.RUN_GRAPH_INPUT,
    )

    assert request.workflow == "echo"
    assert request.enable_checkpointing is True
    assert request.enable_audit_trail is None


def test_run_graph_input_rejects_empty_workflow_name():
    result = validate({"workflow": ""}, Shape.RUN_GRAPH_INPUT)

    assert not result.ok
    assert "workflow" in result.failure.fields


def test_run_graph_input_accepts_100_char_name():
    assert validate({"workflow": "a" * 100}, Shape.RUN_GRAPH_INPUT).ok


def test_run_graph_input_rejects_101_char_name():
    assert not validate({"workflow": "a" * 101}, Shape.RUN_GRAPH_INPUT).ok


@pytest.mark.parametrize("payload", [
    MOCK_ECHO_RESULT,
    MOCK_PIPELINE_RESULT,
    MOCK_CODE_REVIEW_RESULT,
    MOCK_FAILED_RESULT,
])
def test_run_graph_response_validates_fixtures(payload):
    response = parse(payload, Shape.RUN_GRAPH_RESPONSE)

    assert response.workflow == payload["workflow"]
    assert len(response.events) == len(payload["events"])


def test_run_graph_response_keeps_event_order():
    response = parse(MOCK_PIPELINE_RESULT, Shape.RUN_GRAPH_RESPONSE)

    assert [e.node_id for e in response.events[:2]] == ["validate", "validate"]
    assert response.events[-1].type == "execution_complete"


def test_run_graph_response_rejects_pending_status():
    result = validate({**MOCK_ECHO_RESULT, "status": "pending"}, Shape.RUN_GRAPH_RESPONSE)

    assert not result.ok
    assert result.failure.fields == ["status"]


def test_run_graph_response_error_not_tied_to_status():
    failed_without_error = {k: v for k, v in MOCK_FAILED_RESULT.items() if k != "error"}
    completed_with_error = {**MOCK_ECHO_RESULT, "error": "stray message"}

    assert validate(failed_without_error, Shape.RUN_GRAPH_RESPONSE).ok
    assert validate(completed_with_error, Shape.RUN_GRAPH_RESPONSE).ok


def test_run_graph_response_reports_every_violation():
    payload = {**MOCK_ECHO_RESULT, "status": "running", "stepsExecuted": "1"}
    del payload["finalState"]

    result = validate(payload, Shape.RUN_GRAPH_RESPONSE)

    assert not result.ok
    assert set(result.failure.fields) == {"status", "stepsExecuted", "finalState"}
    assert len(result.failure.violations) == 3


def test_run_graph_response_reports_nested_event_path():
    payload = {**MOCK_ECHO_RESULT, "events": [{"nodeId": "echo"}]}

    result = validate(payload, Shape.RUN_GRAPH_RESPONSE)

    assert result.failure.fields == ["events.0.type"]


# ============================================================================
# Graph workflow list
# ============================================================================

def test_graph_list_validates():
    infos = parse(MOCK_GRAPH_LIST, Shape.GRAPH_WORKFLOW_LIST)

    assert len(infos) == 7
    assert infos[0].name == "echo"
    assert infos[-1].input_fields == ["topic", "code"]


def test_graph_list_conditional_edge_flags():
    infos = parse(MOCK_GRAPH_LIST, Shape.GRAPH_WORKFLOW_LIST)
    conditional = [i.name for i in infos if i.has_conditional_edges]

    assert conditional == ["code-review", "security-scan"]


@pytest.mark.parametrize("field,value", [
    ("nodeCount", "4"),
    ("hasConditionalEdges", 1),
    ("inputFields", "code"),
    ("inputFields", [1, 2]),
])
def test_graph_list_rejects_wrong_types(field, value):
    entry = {**MOCK_GRAPH_LIST[0], field: value}

    result = validate([entry], Shape.GRAPH_WORKFLOW_LIST)

    assert not result.ok
    assert all(path.startswith(f"0.{field}") for path in result.failure.fields)


def test_graph_list_rejects_non_list():
    assert not validate({"workflows": MOCK_GRAPH_LIST}, Shape.GRAPH_WORKFLOW_LIST).ok


def test_graph_info_dumps_wire_names():
    info = GraphWorkflowInfo.model_validate(MOCK_GRAPH_LIST[2])

    assert info.model_dump(by_alias=True) == MOCK_GRAPH_LIST[2]


# ============================================================================
# query_trace
# ============================================================================

def test_trace_input_accepts_valid_input():
    request = parse({"runId": "run-1", "eventType": "node.executed"}, Shape.QUERY_TRACE_INPUT)

    assert request.run_id == "run-1"
    assert request.limit is None


def test_trace_input_rejects_empty_run_id():
    result = validate({"runId": ""}, Shape.QUERY_TRACE_INPUT)

    assert result.failure.fields == ["runId"]


@pytest.mark.parametrize("limit", [1, 250, 500])
def test_trace_input_accepts_limit_in_range(limit):
    assert validate({"runId": "run-1", "limit": limit}, Shape.QUERY_TRACE_INPUT).ok


@pytest.mark.parametrize("limit", [0, 501, 10.5])
def test_trace_input_rejects_limit_out_of_range(limit):
    result = validate({"runId": "run-1", "limit": limit}, Shape.QUERY_TRACE_INPUT)

    assert not result.ok
    assert result.failure.fields == ["limit"]


def test_trace_response_validates():
    trace = parse(MOCK_TRACE_RESPONSE, Shape.QUERY_TRACE_RESPONSE)

    assert trace.source == "disk"
    assert trace.total_events == 3
    assert trace.events[0]["eventType"] == "workflow.started"


def test_trace_response_validates_not_found():
    trace = parse(MOCK_TRACE_NOT_FOUND, Shape.QUERY_TRACE_RESPONSE)

    assert trace.source == "not_found"
    assert trace.events == []


def test_trace_response_rejects_unknown_source():
    result = validate({**MOCK_TRACE_RESPONSE, "source": "memory"}, Shape.QUERY_TRACE_RESPONSE)

    assert result.failure.fields == ["source"]


# ============================================================================
# Validation result
# ============================================================================

def test_validation_unwrap_returns_value():
    result = validate(MOCK_TRACE_RESPONSE, Shape.QUERY_TRACE_RESPONSE)

    assert result.failure is None
    assert result.unwrap() is result.value


def test_validation_unwrap_raises_failure():
    result = validate({"runId": ""}, Shape.QUERY_TRACE_INPUT)

    with pytest.raises(ContractValidationError) as exc_info:
        result.unwrap()

    assert exc_info.value is result.failure
    assert exc_info.value.shape == "query_trace.input"
    assert exc_info.value.to_dict()["violations"][0]["path"] == "runId"


def test_validate_never_raises_for_garbage():
    result = validate(None, Shape.LIST_WORKFLOWS_RESPONSE)

    assert not result.ok
    assert result.value is None


# ============================================================================
# Runner types
# ============================================================================

def test_runner_report_enforces_totals():
    with pytest.raises(ValidationError, match="must equal"):
        RunnerReport(
            template_count=1,
            graph_workflow_count=0,
            graph_results=[],
            passed=1,
            failed=0,
        )


def test_workflow_run_result_is_immutable():
    result = WorkflowRunResult(
        name="echo",
        status="completed",
        steps_executed=1,
        nodes_executed=1,
        duration_ms=1,
        checkpoints=1,
        event_count=5,
        has_conditional_edges=False,
    )

    with pytest.raises(ValidationError):
        result.status = "failed"
