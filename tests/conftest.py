from __future__ import annotations

import os

import pytest
from dotenv import load_dotenv

from tests.fakes import FakeDB

# Load .env once for tests
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
load_dotenv(os.path.join(ROOT, ".env"))


@pytest.fixture
def fake_db() -> FakeDB:
    return FakeDB()
