import pytest

from fakes import FakeModerator, FakeReader


@pytest.fixture
def reader():
    return FakeReader()


@pytest.fixture
def moderator():
    return FakeModerator()
