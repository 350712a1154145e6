"""Pytest configuration and fixtures for linearity tests."""

import sys
import tempfile
from pathlib import Path

import pytest

from fakes import FakeGateway, diverged_repository, make_pr
from linearity.core.config import Config, MergeSettings, Runtime, State
from linearity.core.log import ConsoleSink, setup_logger


@pytest.fixture(autouse=True, scope="session")
def configure_logging():
    """Console-only logging at debug level, nothing sent anywhere."""
    test_log_root = Path(tempfile.gettempdir()) / "linearity-tests"
    setup_logger(
        log_root=test_log_root,
        run_name="test",
        console=ConsoleSink(level="debug"),
    )


@pytest.fixture
def repo():
    """Diverged main/feature graph with feature checked out."""
    return diverged_repository()


@pytest.fixture
def pr():
    return make_pr()


@pytest.fixture
def gateway(pr, repo):
    return FakeGateway(pr, repository=repo)


@pytest.fixture
def sleeps():
    """Pauses requested by cleanup, in seconds."""
    return []


@pytest.fixture
def make_state(monkeypatch, sleeps):
    """Build a State wired to fake ports.

    sys.argv is replaced so the YAML source sees no --include from
    pytest's own command line.
    """
    monkeypatch.setattr(sys, "argv", ["linearity"])

    def _make(repository, gateway, command="update", **merge):
        state = State(
            config=Config(merge=MergeSettings(**merge)),
            runtime=Runtime(
                repository=repository,
                gateway=gateway,
                sleep=sleeps.append,
            ),
        )
        state.runtime.run.command = command
        return state

    return _make


@pytest.fixture
def restore_logging():
    """Put the console-only test logger back after a test replaced it."""
    yield
    setup_logger(
        log_root=Path(tempfile.gettempdir()) / "linearity-tests",
        run_name="test",
        console=ConsoleSink(level="debug"),
    )
