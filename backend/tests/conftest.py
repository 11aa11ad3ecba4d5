import pytest

from config import VerificationSettings
from state.ledger import ChallengeLedger
from trace_factory import HOOK, HOUSE, make_template


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ledger(clock):
    return ChallengeLedger(ttl_seconds=60, clock=clock)


@pytest.fixture
def settings():
    return VerificationSettings()


@pytest.fixture
def house():
    return make_template("House", HOUSE)


@pytest.fixture
def hook():
    return make_template("Hook", HOOK)
