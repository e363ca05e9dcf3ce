from unittest.mock import MagicMock

import pytest


@pytest.fixture
def collections():
    """Mock collections keyed by name, created on first access."""
    return {}


@pytest.fixture
def mock_db(collections):
    """Create a mock MongoDB database."""
    db = MagicMock()
    db.name = "tutoring_test"

    def get_collection(name):
        if name not in collections:
            collection = MagicMock()
            collection.update_one.return_value = MagicMock(modified_count=1)
            collections[name] = collection
        return collections[name]

    db.__getitem__ = MagicMock(side_effect=get_collection)
    return db


@pytest.fixture
def users(mock_db):
    return mock_db["users"]


@pytest.fixture
def mock_client(mock_db, monkeypatch):
    """Patch MongoClient in a migration module and return the mock client."""

    def patch(module):
        client = MagicMock()
        client.get_default_database.return_value = mock_db
        monkeypatch.setattr(module, "MongoClient", MagicMock(return_value=client))
        return client

    return patch
