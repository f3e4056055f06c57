# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Workflow runner command line.

Runs the pipeline against a live MCP server when NEXUS_LIVE=true, otherwise
against the bundled fixtures, and prints the report.

Exit codes: 0 all graph workflows passed, 1 some failed, 2 pipeline aborted.
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from workflow_runner.contracts import RunnerConfig
from workflow_runner.core.config import Config, get_config, load_config
from workflow_runner.core.errors import ConfigurationError, WorkflowRunnerError, sanitize_error_for_user
from workflow_runner.core.logging import get_logger
from workflow_runner.fixtures import FixtureToolCaller
from workflow_runner.live_caller import LiveToolCaller, is_live_mode
from workflow_runner.reporter import ReportFormat, generate_report
from workflow_runner.runner_pipeline import run_workflow_pipeline

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_ABORTED = 2

TRACE_LIMIT_MIN = 1
TRACE_LIMIT_MAX = 500


def trace_limit(value: str) -> int:
    """argparse type for --trace-limit: an integer in the range query_trace accepts"""
    try:
        limit = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}")
    if not TRACE_LIMIT_MIN <= limit <= TRACE_LIMIT_MAX:
        raise argparse.ArgumentTypeError(
            f"must be between {TRACE_LIMIT_MIN} and {TRACE_LIMIT_MAX}, got {limit}"
        )
    return limit


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workflow-runner",
        description="Exercise workflow MCP tools end to end and report the results",
    )
    parser.add_argument(
        "--format",
        choices=[f.value for f in ReportFormat],
        help="Report format (default: from config, else markdown)",
    )
    parser.add_argument(
        "--trace-run-id",
        help="Also query the execution trace of this run id",
    )
    parser.add_argument(
        "--trace-event-type",
        help="Only return trace events of this type",
    )
    parser.add_argument(
        "--trace-limit",
        type=trace_limit,
        help="Maximum number of trace events (1-500)",
    )
    parser.add_argument(
        "--no-graph",
        action="store_true",
        help="Discover graph workflows without executing them",
    )
    parser.add_argument(
        "--inputs",
        type=Path,
        help="YAML or JSON file mapping workflow name to its input arguments",
    )
    parser.add_argument(
        "--endpoint",
        help="MCP endpoint URL for live mode (default: from config)",
    )
    parser.add_argument(
        "--config",
        help="Path to the runner YAML config",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Write the report to this file instead of stdout",
    )
    return parser


def load_graph_inputs(path: Path) -> Dict[str, Dict[str, Any]]:
    """Read per-workflow input overrides; JSON is valid YAML so one loader covers both"""
    try:
        data = yaml.safe_load(path.read_text())
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read inputs file: {e}", config_file=str(path))

    if not isinstance(data, dict) or not all(isinstance(v, dict) for v in data.values()):
        raise ConfigurationError(
            "Inputs file must map workflow names to argument mappings",
            config_file=str(path)
        )
    return data


def build_runner_config(args: argparse.Namespace, config: Config) -> RunnerConfig:
    try:
        base = config.to_runner_config()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid runner options: {e}")
    graph_inputs = dict(base.graph_inputs or {})
    if args.inputs:
        graph_inputs.update(load_graph_inputs(args.inputs))

    try:
        return RunnerConfig(
            run_graph_workflows=base.run_graph_workflows and not args.no_graph,
            trace_run_id=args.trace_run_id or base.trace_run_id,
            graph_inputs=graph_inputs or None,
            trace_event_type=args.trace_event_type,
            trace_limit=args.trace_limit,
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid runner options: {e}", config_file=str(args.inputs) if args.inputs else None)


async def run(args: argparse.Namespace, config: Config) -> int:
    logger = get_logger("workflow_runner", log_level=config.log_level, log_format=config.log_format)

    try:
        report_format = ReportFormat(args.format or config.report_format)
    except ValueError:
        print(f"Unknown report format: {config.report_format}", file=sys.stderr)
        return EXIT_ABORTED

    try:
        runner_config = build_runner_config(args, config)
    except ConfigurationError as e:
        print(sanitize_error_for_user(e), file=sys.stderr)
        return EXIT_ABORTED

    live = is_live_mode()
    if live:
        caller = LiveToolCaller(endpoint=args.endpoint, config=config)
        logger.info(f"Running workflow pipeline against live MCP server at {caller.endpoint}")
    else:
        caller = FixtureToolCaller()
        logger.info("NEXUS_LIVE is not 'true'; running workflow pipeline against fixtures")

    try:
        if live:
            await caller.verify_tools()
        report = await run_workflow_pipeline(caller, runner_config)
    except WorkflowRunnerError as e:
        logger.error(f"Pipeline aborted: {e}")
        print(sanitize_error_for_user(e), file=sys.stderr)
        return EXIT_ABORTED
    finally:
        if live:
            await caller.close()

    rendered = generate_report(report, report_format)
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(rendered + "\n")
        logger.info(f"Report written to {args.output}")
    else:
        print(rendered)

    return EXIT_OK if report.failed == 0 else EXIT_FAILURES


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = load_config(args.config) if args.config else get_config()
    except ConfigurationError as e:
        print(sanitize_error_for_user(e), file=sys.stderr)
        return EXIT_ABORTED
    return asyncio.run(run(args, config))


if __name__ == "__main__":
    sys.exit(main())
