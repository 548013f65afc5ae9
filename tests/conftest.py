# -*- coding: utf-8 -*-
"""Pytest configuration for rtrvr-core tests."""

import logging
import os
import sys

import pytest

pytest_plugins = ["pytest_asyncio"]

# Add project root and src to Python path for all tests
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
src_path = os.path.join(project_root, "src")
sys.path.insert(0, src_path)
sys.path.insert(0, project_root)


@pytest.fixture(scope="session")
def project_root_path():
    """Provide project root path to tests."""
    return project_root


@pytest.fixture(autouse=True)
def _isolate_rtrvr_env(monkeypatch):
    """Keep developer RTRVR_* variables from leaking into settings tests."""
    for name in list(os.environ):
        if name.startswith("RTRVR_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def debug_logs(caplog):
    """Capture rtrvr_core log records at DEBUG level."""
    caplog.set_level(logging.DEBUG, logger="rtrvr_core")
    return caplog
