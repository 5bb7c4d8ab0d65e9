"""
Configuration tests
"""
import pytest
from pydantic import ValidationError

from config import Settings


def test_defaults(monkeypatch):
    for name in ("COOK_DB_PATH", "COOK_STORE", "COOK_DEBUG", "COOK_TICK_SECONDS"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings()
    assert settings.store == "sqlite"
    assert settings.db_path == "cooking.db"
    assert settings.tick_seconds == 1
    assert settings.debug is False


def test_from_environment(monkeypatch):
    monkeypatch.setenv("COOK_STORE", "memory")
    monkeypatch.setenv("COOK_DEBUG", "yes")
    monkeypatch.setenv("COOK_TICK_SECONDS", "5")

    settings = Settings()
    assert settings.store == "memory"
    assert settings.debug is True
    assert settings.tick_seconds == 5


@pytest.mark.parametrize("name,value", [
    ("COOK_TICK_SECONDS", "soon"),
    ("COOK_STORE", "postgres"),
])
def test_invalid_environment(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValidationError):
        Settings()
