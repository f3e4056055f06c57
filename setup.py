# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Setup configuration for the workflow MCP end-to-end runner
"""

from setuptools import setup, find_packages

setup(
    name="workflow-runner",
    version="1.0.0",
    description="End-to-end exerciser for workflow orchestration MCP tools",
    author="Jason Cafarelli",
    packages=find_packages(include=["workflow_runner", "workflow_runner.*"]),
    python_requires=">=3.9",
    install_requires=[
        "aiohttp>=3.9.0",
        "pydantic>=2.5.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.23.0",
        ]
    },
    entry_points={
        "console_scripts": [
            "workflow-runner=workflow_runner.cli:main",
        ]
    },
)
