import pytest

from context_engine.tests.fakes import FakeGateway


@pytest.fixture
def fake_gateway():
    return FakeGateway()
