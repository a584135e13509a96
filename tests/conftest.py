import pytest

from finai.ledger import Ledger
from finai.storage import JsonStore


@pytest.fixture
def store(tmp_path):
    return JsonStore(tmp_path / "store.json")


@pytest.fixture
def ledger():
    return Ledger()
