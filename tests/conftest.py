# conftest.py
from __future__ import annotations

import os
import uuid

import pytest
from prometheus_client import CollectorRegistry

from topoactions.actions.manager import ActionLogManager
from topoactions.core.config import ActionsConfig
from topoactions.core.log import bind_context, configure_from_env, enable_stdout_logging, get_logger, log_context
from topoactions.core.time import ManualClock
from topoactions.observability.metrics import ActionMetrics
from tests.helpers import START_MS, InMemTopo, WildcardInMemTopo


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests of pure functions and small components")


def pytest_addoption(parser):
    parser.addoption(
        "--log-json",
        action="store_true",
        default=False,
        help="Emit topoactions logs in JSON format during tests",
    )


@pytest.fixture(scope="session", autouse=True)
def _configure_logging(request):
    configure_from_env()
    prefer_json = request.config.getoption("--log-json")
    if os.getenv("TOPOACTIONS_LOG_STDOUT", "").lower() not in ("1", "true", "yes", "on"):
        enable_stdout_logging(
            level="DEBUG",
            json_output=prefer_json,
            pretty=not prefer_json,
            route_errors_to_stderr=True,
        )
    bind_context(role="pytest")


@pytest.fixture(scope="session")
def session_run_id():
    return uuid.uuid4().hex[:8]


@pytest.fixture(autouse=True)
def _test_log_context(request, session_run_id):
    log = get_logger("test")
    with log_context(test=request.node.name, test_run=session_run_id):
        log.debug("pytest.test.start", event="pytest.test.start")
        yield


# ───────────────────────── store / manager ─────────────────────────


@pytest.fixture
def clock():
    return ManualClock(START_MS)


@pytest.fixture
def topo(clock):
    return InMemTopo(clock)


@pytest.fixture
def wild_topo(clock):
    return WildcardInMemTopo(clock)


@pytest.fixture
def metrics():
    """Fresh metrics on an isolated registry (the global one rejects duplicates)."""
    return ActionMetrics.create(CollectorRegistry())


@pytest.fixture
def cfg():
    return ActionsConfig()


@pytest.fixture
def manager(topo, cfg, clock, metrics):
    return ActionLogManager(store=topo, cfg=cfg, clock=clock, metrics=metrics)
