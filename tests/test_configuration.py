"""Tests for the database name each migration connects to."""

import importlib

import pytest

import migrate_activated_to_approval
import migrate_approval_shift
import migrate_degree_universities

MIGRATIONS = [
    migrate_activated_to_approval,
    migrate_approval_shift,
    migrate_degree_universities,
]


@pytest.fixture
def reload_after(monkeypatch):
    """Reload migration modules after the test so environment changes don't leak."""
    reloaded = []
    yield reloaded
    monkeypatch.undo()
    for module in reloaded:
        importlib.reload(module)


@pytest.fixture
def connected_main(mock_client, mock_db, users, reload_after):
    """Reload a migration under the current environment and run main() against mocks."""

    def connect(module, uri):
        module = importlib.reload(module)
        reload_after.append(module)
        client = mock_client(module)
        mock_db["migrations"].find_one.return_value = None
        users.find.return_value = []
        users.count_documents.return_value = 0
        module.main(["script", uri])
        return module, client

    return connect


@pytest.mark.parametrize("module", MIGRATIONS)
def test_database_defaults_to_tutoring(module, connected_main, monkeypatch):
    monkeypatch.delenv("DATABASE_NAME", raising=False)

    module, client = connected_main(module, "mongodb://localhost:27017")

    assert module.DATABASE_NAME == "tutoring"
    client.get_default_database.assert_called_once_with("tutoring")


@pytest.mark.parametrize("module", MIGRATIONS)
def test_database_name_from_environment(module, connected_main, monkeypatch):
    monkeypatch.setenv("DATABASE_NAME", "tutoring_staging")

    module, client = connected_main(module, "mongodb://localhost:27017")

    client.get_default_database.assert_called_once_with("tutoring_staging")


@pytest.mark.parametrize("module", MIGRATIONS)
def test_uri_is_passed_to_client(module, connected_main, monkeypatch):
    monkeypatch.delenv("DATABASE_NAME", raising=False)

    module, _ = connected_main(module, "mongodb://localhost:27017/tutoring_prod")

    module.MongoClient.assert_called_once_with("mongodb://localhost:27017/tutoring_prod")
