# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Workflow runner configuration.

YAML holds the defaults; a handful of env vars override it so the same
config file works for simulated and live runs.
"""

import os
import yaml
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional

from workflow_runner.core.errors import ConfigurationError

if TYPE_CHECKING:
    from workflow_runner.contracts import RunnerConfig


DEFAULT_CONFIG_PATH = "configs/workflow_runner.yaml"


# =============================================================================
# CONFIGURATION DATACLASS
# =============================================================================

@dataclass(frozen=True)
class Config:
    """
    Immutable runner configuration.
    """

    # -- Live bridge --
    mcp_endpoint: str = "http://localhost:3100/mcp"
    protocol_version: str = "2025-11-25"
    timeout_init: float = 30.0
    timeout_list: float = 10.0
    timeout_call: float = 300.0

    # -- Pipeline --
    run_graph_workflows: bool = True
    trace_run_id: Optional[str] = None
    graph_inputs: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    # -- Output --
    report_format: str = "markdown"
    log_level: str = "INFO"
    log_format: str = "json"

    def to_runner_config(self) -> "RunnerConfig":
        """Build the pipeline's RunnerConfig from this configuration."""
        from workflow_runner.contracts import RunnerConfig
        return RunnerConfig(
            run_graph_workflows=self.run_graph_workflows,
            trace_run_id=self.trace_run_id,
            graph_inputs=self.graph_inputs or None,
        )


# =============================================================================
# LOADER
# =============================================================================

def _seconds(value: Any, name: str, path: str) -> float:
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a number of seconds, got {value!r}", config_file=path)
    if seconds <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value!r}", config_file=path)
    return seconds


def load_config(path: str = DEFAULT_CONFIG_PATH) -> Config:
    """
    Load configuration from YAML, then apply env var overrides.
    Returns defaults (plus overrides) if the file doesn't exist.
    """
    y: Dict[str, Any] = {}
    if Path(path).exists():
        with open(path) as f:
            try:
                y = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in config: {e}", config_file=path)
        if not isinstance(y, dict):
            raise ConfigurationError("Config root must be a mapping", config_file=path)

    # Helper to safely navigate nested dicts
    def get(d: dict, *keys, default=None):
        for k in keys:
            if not isinstance(d, dict):
                return default
            d = d.get(k, {})
        return d if d != {} else default

    graph_inputs = get(y, "pipeline", "graph_inputs") or {}
    if not isinstance(graph_inputs, dict):
        raise ConfigurationError("pipeline.graph_inputs must be a mapping", config_file=path)
    for name, arguments in graph_inputs.items():
        if not isinstance(name, str) or not isinstance(arguments, dict):
            raise ConfigurationError(
                f"pipeline.graph_inputs.{name} must map to an argument mapping",
                config_file=path
            )

    trace_run_id = os.getenv("TRACE_RUN_ID") or get(y, "pipeline", "trace_run_id")
    if trace_run_id is not None and not isinstance(trace_run_id, str):
        raise ConfigurationError("pipeline.trace_run_id must be a string", config_file=path)

    defaults = Config()
    return Config(
        # Live bridge
        mcp_endpoint=os.getenv("NEXUS_MCP_URL") or get(y, "mcp", "endpoint") or defaults.mcp_endpoint,
        protocol_version=get(y, "mcp", "protocol_version") or defaults.protocol_version,
        timeout_init=_seconds(get(y, "mcp", "timeouts", "init") or defaults.timeout_init, "mcp.timeouts.init", path),
        timeout_list=_seconds(get(y, "mcp", "timeouts", "list") or defaults.timeout_list, "mcp.timeouts.list", path),
        timeout_call=_seconds(
            os.getenv("MCP_TIMEOUT_CALL") or get(y, "mcp", "timeouts", "call") or defaults.timeout_call,
            "mcp.timeouts.call", path
        ),

        # Pipeline
        run_graph_workflows=get(y, "pipeline", "run_graph_workflows", default=defaults.run_graph_workflows) is not False,
        trace_run_id=trace_run_id,
        graph_inputs=graph_inputs,

        # Output
        report_format=get(y, "report", "format") or defaults.report_format,
        log_level=os.getenv("LOG_LEVEL") or get(y, "logging", "level") or defaults.log_level,
        log_format=get(y, "logging", "format") or defaults.log_format,
    )


# =============================================================================
# GLOBAL INSTANCE
# =============================================================================

_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create global config instance."""
    global _config
    if _config is None:
        config_path = os.getenv("WORKFLOW_RUNNER_CONFIG", DEFAULT_CONFIG_PATH)
        _config = load_config(config_path)
    return _config


def reload_config() -> Config:
    """Force reload configuration."""
    global _config
    _config = None
    return get_config()
