import pytest

from helpers import TestRunner


@pytest.fixture
def runner():
    """TestRunner whose recorded failures fail the pytest test."""
    test_runner = TestRunner()
    yield test_runner
    assert test_runner.failed == 0, "\n".join(test_runner.errors)
