"""Shared pytest fixtures for all tests."""

import os

import pytest

from cli.config import Config
from gridstore.database import DocumentStore
from gridstore.gridfs import GridFS


@pytest.fixture
def db_path(tmp_path):
    """
    Path for a temporary test database.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        String path to a not-yet-created SQLite file
    """
    return str(tmp_path / 'data' / 'test.db')


@pytest.fixture
def document_store(db_path):
    """
    Open document store backed by a temporary database.
    """
    with DocumentStore(db_path) as store:
        yield store


@pytest.fixture
def grid(document_store):
    """
    GridFS over the default 'fs' namespace of the temporary store.
    """
    return GridFS(document_store, 'fs')


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Returns:
        Path to temporary .gridfiles directory
    """
    config_dir = tmp_path / '.gridfiles'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir, db_path, monkeypatch):
    """
    Config instance with a temp config file pointing at the test database.
    """
    for name in ('FILES_DATABASE_PATH', 'FILES_NAMESPACE', 'LOG_LEVEL'):
        monkeypatch.delenv(name, raising=False)
    config = Config(temp_config_dir / 'config.json')
    config.data['database_path'] = db_path
    config.save()
    return config


@pytest.fixture
def sample_file(tmp_path):
    """
    Create a sample binary file for upload tests.

    Returns:
        Path to a 10000-byte file with non-repeating content
    """
    file_path = tmp_path / 'sample.bin'
    file_path.write_bytes(os.urandom(10000))
    return file_path


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """
    Run the test from inside a scratch directory, for commands that default
    the local path to the stored filename.
    """
    work = tmp_path / 'work'
    work.mkdir()
    monkeypatch.chdir(work)
    return work
