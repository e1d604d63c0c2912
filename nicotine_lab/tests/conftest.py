import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import numpy as np
import pytest

from nicotine_lab.api import configure_services
from nicotine_lab.engine import ParameterSet
from nicotine_lab.simulation import SimulationDriver


@pytest.fixture()
def params() -> ParameterSet:
    return ParameterSet()


@pytest.fixture()
def driver(params: ParameterSet) -> SimulationDriver:
    """Fresh single-puff session with a seeded puff sampler."""

    return SimulationDriver(params, rng=np.random.default_rng(1234))


@pytest.fixture()
def api_driver() -> SimulationDriver:
    """Install a fresh, seeded driver behind the HTTP routes."""

    session = SimulationDriver(rng=np.random.default_rng(99))
    configure_services(driver=session)
    return session
