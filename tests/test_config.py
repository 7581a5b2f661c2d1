import pytest

from app.core.config import AppConfig


@pytest.fixture(autouse=True)
def no_dotenv(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)


def test_cors_origins_default_allows_all(monkeypatch):
    monkeypatch.delenv("CORS_ORIGINS", raising=False)
    assert AppConfig().cors_origins == ["*"]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("http://localhost:3000", ["http://localhost:3000"]),
        ("http://localhost:3000, https://momentum.example", ["http://localhost:3000", "https://momentum.example"]),
        ('["http://localhost:3000", "https://momentum.example"]', ["http://localhost:3000", "https://momentum.example"]),
    ],
)
def test_cors_origins_from_env(monkeypatch, raw, expected):
    monkeypatch.setenv("CORS_ORIGINS", raw)
    assert AppConfig().cors_origins == expected


def test_app_env(monkeypatch):
    monkeypatch.delenv("APP_ENV", raising=False)
    assert AppConfig().env == "development"
    monkeypatch.setenv("APP_ENV", "production")
    assert AppConfig().env == "production"
