from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from netviz.api.app import app
from netviz.config.settings import Settings
from netviz.services import data_loader
from netviz.viz.transitions import ManualClock, TransitionScheduler
import netviz.viz  # noqa: F401 ensures controllers registered

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture(scope="session")
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        internet_use_csv=FIXTURES / "internet-use-sample.csv",
        gapminder_csv=FIXTURES / "gapminder_internet.csv",
    )


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def scheduler(clock) -> TransitionScheduler:
    return TransitionScheduler(clock=clock)


@pytest.fixture
def internet_use(settings):
    return data_loader.load_internet_use(settings.internet_use_csv, settings).records


@pytest.fixture
def gapminder(settings):
    return data_loader.load_gapminder(settings.gapminder_csv, settings).records
