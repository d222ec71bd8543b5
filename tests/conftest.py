import pytest

from helpers import FakeStorage
from pipebot.infrastructure.stats import StatsRecorder


@pytest.fixture
def stats():
    return StatsRecorder()


@pytest.fixture
def storage():
    return FakeStorage()
