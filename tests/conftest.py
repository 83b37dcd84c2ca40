"""Shared pytest fixtures for the txgraph test-suite."""
from __future__ import annotations

import os
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import config
import txgraph_logging
from txgraph.address import raw_number_to_address


@pytest.fixture(scope="session", autouse=True)
def test_environment() -> Iterator[None]:
    """Ensure tests run with the dedicated 'test' configuration and logging."""
    original_env = os.environ.get("TXGRAPH_ENV")
    os.environ["TXGRAPH_ENV"] = "test"

    config.reload_settings(env="test")
    txgraph_logging.configure(config.settings.logging, force=True)

    yield

    if original_env is None:
        os.environ.pop("TXGRAPH_ENV", None)
        config.reload_settings(env="development")
    else:
        os.environ["TXGRAPH_ENV"] = original_env
        config.reload_settings(env=original_env)


@pytest.fixture()
def addresses():
    """Three distinct workchain-0 addresses: (alice, bob, carol)."""
    return tuple(raw_number_to_address(n) for n in (0xA11CE, 0xB0B, 0xCA401))
