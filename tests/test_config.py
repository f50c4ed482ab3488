import pytest
from pydantic import ValidationError

from tradejournal.core.config import Settings
from tradejournal.core.models import UserRole


def test_default_role_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEFAULT_ROLE", "partner")
    assert Settings(_env_file=None).default_role is UserRole.PARTNER


def test_default_role_defaults_to_trader(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DEFAULT_ROLE", raising=False)
    assert Settings(_env_file=None).default_role is UserRole.TRADER


def test_invalid_default_role_fails_at_startup() -> None:
    with pytest.raises(ValidationError):
        Settings(default_role="admin", _env_file=None)
