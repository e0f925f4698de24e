"""Pytest configuration and fixtures for the test suite."""

import sys
from pathlib import Path

import numpy as np
import pytest

# Ensure project root is in path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from streamgraph.config import Settings
from streamgraph.host import Host, RecordingReceiver

from tests.fixtures import CollectingParent


@pytest.fixture
def ramp() -> tuple[np.ndarray, float]:
    """Generate a ramp signal rising by 10 every 10 ms.
    
    Returns:
        Tuple of (samples, rate): 50 samples 0, 10, ..., 490 at 100 Hz,
        covering 0 to 500 ms.
    """
    return np.arange(50, dtype=np.float64) * 10.0, 100.0


@pytest.fixture
def settings() -> Settings:
    """Settings independent of the environment."""
    return Settings(_env_file=None, block_size=256, max_frames=256)


@pytest.fixture
def host(settings: Settings) -> Host:
    """Host with a fresh recording receiver."""
    with Host(settings=settings) as h:
        yield h


@pytest.fixture
def receiver() -> RecordingReceiver:
    """Standalone recording receiver."""
    return RecordingReceiver()


@pytest.fixture
def parent() -> CollectingParent:
    """Diagnostics parent recording errors and warnings."""
    return CollectingParent()


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow"
    )
