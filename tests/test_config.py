'''
Tests for tradejournal.config.Settings and the open_services bundle.
'''

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

import pytest

from conftest import make_position
from tradejournal.config import Settings
from tradejournal.infrastructure.migrations import SCHEMA_VERSION
from tradejournal.services import open_services

_ENV_VARS = (
    'TRADEJOURNAL_DB_PATH',
    'TRADEJOURNAL_LOG_LEVEL',
    'TRADEJOURNAL_PRICE_CHANGE_THRESHOLD',
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:

    # setenv first so teardown also removes values written by load_dotenv
    for name in _ENV_VARS:
        monkeypatch.setenv(name, '')
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_defaults(clean_env: Path) -> None:
    settings = Settings.from_env(str(clean_env / 'missing.env'))
    assert settings.db_path == 'tradejournal.db'
    assert settings.log_level == 'INFO'
    assert settings.price_change_threshold_percent == Decimal('20')


def test_environment_overrides(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv('TRADEJOURNAL_DB_PATH', ':memory:')
    monkeypatch.setenv('TRADEJOURNAL_LOG_LEVEL', 'DEBUG')
    monkeypatch.setenv('TRADEJOURNAL_PRICE_CHANGE_THRESHOLD', '12.5')
    settings = Settings.from_env(str(clean_env / 'missing.env'))
    assert settings.db_path == ':memory:'
    assert settings.log_level == 'DEBUG'
    assert settings.price_change_threshold_percent == Decimal('12.5')


def test_dotenv_file(clean_env: Path) -> None:
    env_file = clean_env / '.env'
    env_file.write_text("TRADEJOURNAL_DB_PATH='journal.db'\nTRADEJOURNAL_LOG_LEVEL='WARNING'\n")
    settings = Settings.from_env(str(env_file))
    assert settings.db_path == 'journal.db'
    assert settings.log_level == 'WARNING'


def test_invalid_threshold(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv('TRADEJOURNAL_PRICE_CHANGE_THRESHOLD', 'lots')
    with pytest.raises(ValueError, match='must be a number'):
        Settings.from_env(str(clean_env / 'missing.env'))


def test_settings_validation() -> None:
    with pytest.raises(ValueError, match='log_level must be one of'):
        Settings(log_level='VERBOSE')
    with pytest.raises(ValueError, match='db_path must be a non-empty string'):
        Settings(db_path='')
    with pytest.raises(ValueError, match='price_change_threshold_percent must be positive'):
        Settings(price_change_threshold_percent=Decimal('0'))


@pytest.mark.asyncio
async def test_open_services_persists(tmp_path: Path) -> None:
    settings = Settings(db_path=str(tmp_path / 'journal.db'))

    async with open_services(settings) as services:
        assert await services.store.schema_version() == SCHEMA_VERSION
        await services.positions.create(make_position())

    async with open_services(settings) as services:
        loaded = await services.positions.get_by_id('pos-1')
        assert loaded == make_position()
