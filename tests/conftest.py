# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Shared fixtures for workflow runner tests
"""

import logging

import pytest

from workflow_runner.contracts import Shape, parse
from workflow_runner.core import config as config_module
from workflow_runner.fixtures import FixtureToolCaller, MOCK_GRAPH_LIST


@pytest.fixture
def fixture_caller():
    """Fixture-backed caller with default canned responses"""
    return FixtureToolCaller()


@pytest.fixture
def graph_infos():
    """Typed graph workflow list"""
    return parse(MOCK_GRAPH_LIST, Shape.GRAPH_WORKFLOW_LIST)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep tests away from any real config file and env overrides"""
    for var in ("NEXUS_LIVE", "NEXUS_MCP_URL", "MCP_TIMEOUT_CALL", "TRACE_RUN_ID", "LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("WORKFLOW_RUNNER_CONFIG", str(tmp_path / "missing.yaml"))
    monkeypatch.setattr(config_module, "_config", None)
    yield
    config_module._config = None
    logging.getLogger("workflow_runner").handlers = []
