from collections.abc import Callable
from datetime import datetime

import pytest

from tests.fakes import FIXED_NOW, InMemoryRecordStore


@pytest.fixture()
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture()
def fixed_now() -> Callable[[], datetime]:
    return lambda: FIXED_NOW
