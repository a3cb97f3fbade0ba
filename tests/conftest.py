import pytest

from helpers import flat_candles


@pytest.fixture
def flat_series():
    return flat_candles()
