import pytest

from keypad.config import Settings
from keypad.engine import Engine


@pytest.fixture
def settings() -> Settings:
    return Settings(check_invariants=True)


@pytest.fixture
def engine(settings: Settings) -> Engine:
    return Engine(settings=settings)
