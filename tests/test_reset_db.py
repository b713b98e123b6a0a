# tests/test_reset_db.py
from unittest.mock import MagicMock

import pytest

from sweetshop import reset_db
from sweetshop.errors import StoreUnavailable


@pytest.fixture
def stores(monkeypatch):
    inventory, users, client = MagicMock(), MagicMock(), MagicMock()
    monkeypatch.setattr(reset_db, "STORE_BACKEND", "mongo")
    monkeypatch.setattr(reset_db, "build_stores", lambda backend: (inventory, users, client))
    return inventory, users, client


def test_refuses_memory_backend(monkeypatch):
    monkeypatch.setattr(reset_db, "STORE_BACKEND", "memory")
    assert reset_db.main(["--yes"]) == 1


def test_needs_confirmation(stores):
    inventory, users, _ = stores
    assert reset_db.main([]) == 1
    inventory.clear.assert_not_called()
    users.clear.assert_not_called()


def test_clears_both_stores_and_closes_client(stores):
    inventory, users, client = stores
    assert reset_db.main(["--yes"]) == 0
    inventory.clear.assert_called_once_with()
    users.clear.assert_called_once_with()
    client.close.assert_called_once_with()


def test_keep_users(stores):
    inventory, users, _ = stores
    assert reset_db.main(["--yes", "--keep-users"]) == 0
    inventory.clear.assert_called_once_with()
    users.clear.assert_not_called()


def test_store_error_reports_and_closes(stores):
    inventory, _, client = stores
    inventory.clear.side_effect = StoreUnavailable()
    assert reset_db.main(["--yes"]) == 1
    client.close.assert_called_once_with()
