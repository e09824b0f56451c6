from __future__ import annotations

import pytest
from reference_data import OBSERVATIONS


@pytest.fixture
def observations() -> tuple[float, ...]:
    return OBSERVATIONS
