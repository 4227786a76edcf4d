"""Tests for CLI configuration module."""

import json

import pytest

from cli.config import Config, default_config_path
from common.constants import DEFAULT_CHUNK_SIZE


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ('FILES_DATABASE_PATH', 'FILES_NAMESPACE', 'LOG_LEVEL', 'FILES_CONFIG_PATH'):
        monkeypatch.delenv(name, raising=False)


def test_config_creates_default_file(tmp_path):
    """Test that config file is created with defaults if missing."""
    config_path = tmp_path / '.gridfiles' / 'config.json'
    config = Config(config_path)

    assert config_path.exists()
    assert config.data['namespace'] == 'fs'
    assert config.data['default_chunk_size'] == DEFAULT_CHUNK_SIZE
    assert config.data['log_level'] == 'WARNING'
    assert config.data['database_path'].endswith('gridstore.db')


def test_config_loads_existing_file(tmp_path):
    """Test loading existing config file."""
    config_path = tmp_path / '.gridfiles' / 'config.json'
    config_path.parent.mkdir(parents=True)
    with open(config_path, 'w') as f:
        json.dump({'namespace': 'photos', 'database_path': '/srv/files.db'}, f)

    config = Config(config_path)

    assert config.get_namespace() == 'photos'
    assert config.get_database_path() == '/srv/files.db'
    assert config.get_default_chunk_size() == DEFAULT_CHUNK_SIZE


def test_environment_overrides_file(temp_config, monkeypatch):
    """Test that environment variables win over file values."""
    monkeypatch.setenv('FILES_DATABASE_PATH', '/env/db.sqlite')
    monkeypatch.setenv('FILES_NAMESPACE', 'envns')
    monkeypatch.setenv('LOG_LEVEL', 'DEBUG')

    assert temp_config.get_database_path() == '/env/db.sqlite'
    assert temp_config.get_namespace() == 'envns'
    assert temp_config.get_log_level() == 'DEBUG'


def test_config_save_round_trip(temp_config):
    """Test saving a changed value."""
    temp_config.data['default_chunk_size'] = 1024
    temp_config.save()

    with open(temp_config.config_path, 'r') as f:
        assert json.load(f)['default_chunk_size'] == 1024
    assert Config(temp_config.config_path).get_default_chunk_size() == 1024


def test_non_integer_chunk_size_falls_back(temp_config):
    temp_config.data['default_chunk_size'] = 'big'

    assert temp_config.get_default_chunk_size() == DEFAULT_CHUNK_SIZE


def test_config_handles_corrupted_file(tmp_path):
    """Test recovery from corrupted config file."""
    config_path = tmp_path / '.gridfiles' / 'config.json'
    config_path.parent.mkdir(parents=True)
    with open(config_path, 'w') as f:
        f.write('{ invalid json content')

    config = Config(config_path)

    assert config.data['namespace'] == 'fs'
    assert config_path.with_suffix('.json.bak').exists()


def test_config_rejects_non_object_root(tmp_path):
    config_path = tmp_path / 'config.json'
    config_path.write_text('[1, 2, 3]')

    assert Config(config_path).get_namespace() == 'fs'


def test_default_config_path_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv('FILES_CONFIG_PATH', str(tmp_path / 'custom.json'))

    assert default_config_path() == tmp_path / 'custom.json'
