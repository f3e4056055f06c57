# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Runner report formatter.
"""

import json
from enum import Enum
from typing import List, Union

from workflow_runner.contracts import RunnerReport, WorkflowRunResult


class ReportFormat(str, Enum):
    MARKDOWN = "markdown"
    JSON = "json"
    TEXT = "text"


def generate_report(
    report: RunnerReport,
    format: Union[ReportFormat, str] = ReportFormat.MARKDOWN
) -> str:
    """Render a report; only the JSON form keeps failed and error apart."""
    fmt = ReportFormat(format)
    if fmt is ReportFormat.JSON:
        return json.dumps(report.model_dump(by_alias=True, mode="json"), indent=2)
    if fmt is ReportFormat.TEXT:
        return _generate_text_report(report)
    return _generate_markdown_report(report)


def _status_label(result: WorkflowRunResult) -> str:
    return "PASS" if result.status == "completed" else "FAIL"


def _generate_markdown_report(report: RunnerReport) -> str:
    lines: List[str] = ["# Workflow Runner Report", ""]

    lines.append(f"**Templates:** {report.template_count}")
    lines.append(f"**Graph Workflows:** {report.graph_workflow_count}")
    lines.append(f"**Results:** {report.passed} passed, {report.failed} failed")
    lines.append("")

    if report.graph_results:
        lines.extend(["## Graph Workflow Results", ""])
        lines.append("| Workflow | Status | Steps | Nodes | Events | Checkpoints |")
        lines.append("|----------|--------|-------|-------|--------|-------------|")
        for r in report.graph_results:
            lines.append(
                f"| {r.name} | {_status_label(r)} | {r.steps_executed} | "
                f"{r.nodes_executed} | {r.event_count} | {r.checkpoints} |"
            )
        lines.append("")

    failures = [r for r in report.graph_results if r.status != "completed"]
    if failures:
        lines.extend(["## Failures", ""])
        for r in failures:
            lines.append(f"- **{r.name}**: {r.error if r.error is not None else r.status}")
        lines.append("")

    if report.trace_result is not None:
        trace = report.trace_result
        lines.extend(["## Trace Data", ""])
        lines.append(f"- Run ID: {trace.run_id}")
        lines.append(f"- Events: {trace.total_events}")
        lines.append(f"- Source: {trace.source}")
        lines.append("")

    return "\n".join(lines)


def _generate_text_report(report: RunnerReport) -> str:
    lines = [f"Workflow Runner: {report.passed}/{len(report.graph_results)} passed"]
    for r in report.graph_results:
        lines.append(f"[{_status_label(r)}] {r.name} ({r.steps_executed} steps, {r.duration_ms}ms)")
    return "\n".join(lines)
