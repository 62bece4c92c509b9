import pytest

from campus.config import Settings


def test_dev_defaults(monkeypatch):
    monkeypatch.delenv("ENV", raising=False)
    monkeypatch.delenv("ACCESS_TOKEN_EXPIRE_MINUTES", raising=False)
    monkeypatch.delenv("REFRESH_TOKEN_EXPIRE_DAYS", raising=False)
    s = Settings()
    assert s.ENV == "dev"
    assert s.ACCESS_TOKEN_EXPIRE_MINUTES == 15
    assert s.REFRESH_TOKEN_EXPIRE_DAYS == 7


def test_default_secrets_rejected_outside_dev(monkeypatch):
    monkeypatch.setenv("ENV", "prod")
    monkeypatch.delenv("JWT_ACCESS_SECRET", raising=False)
    monkeypatch.delenv("ALLOW_INSECURE_JWT", raising=False)
    with pytest.raises(RuntimeError):
        Settings()


def test_secrets_must_differ(monkeypatch):
    monkeypatch.setenv("JWT_ACCESS_SECRET", "same")
    monkeypatch.setenv("JWT_REFRESH_SECRET", "same")
    with pytest.raises(RuntimeError):
        Settings()


def test_lifetimes_must_be_positive(monkeypatch):
    monkeypatch.setenv("ACCESS_TOKEN_EXPIRE_MINUTES", "0")
    with pytest.raises(RuntimeError):
        Settings()
