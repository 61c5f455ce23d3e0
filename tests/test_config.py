import pytest

from config import Settings


def test_from_env_reports_missing_variables():
    with pytest.raises(RuntimeError) as excinfo:
        Settings.from_env({})
    assert str(excinfo.value) == "Missing required environment variables: MONGO_URI, JWT_SECRET"


def test_from_env_defaults():
    settings = Settings.from_env({"MONGO_URI": "mongodb://db:27017", "JWT_SECRET": "s" * 32})

    assert settings.env == "development"
    assert settings.port == 5001
    assert settings.mongo_db_name == "leopay"
    assert settings.jwt_expire == "7d"
    assert settings.token_lifetime_days == 30
    assert settings.admin_email == "admin@leopay.mockello.com"
    assert settings.cors_origins() == ["http://localhost:5173"]
    assert not settings.is_production


def test_from_env_overrides():
    settings = Settings.from_env({
        "MONGO_URI": "mongodb://db:27017",
        "JWT_SECRET": "secret",
        "APP_ENV": "production",
        "PORT": "8080",
        "LOG_LEVEL": "debug",
        "CORS_ORIGIN": "https://leopay.mockello.com, https://earn.example.com",
    })

    assert settings.is_production
    assert settings.port == 8080
    assert settings.log_level == "DEBUG"
    assert settings.cors_origins() == ["https://leopay.mockello.com", "https://earn.example.com"]


def test_wildcard_cors_origin():
    settings = Settings(mongo_uri="mongodb://db", jwt_secret="x", cors_origin="*")
    assert settings.cors_origins() == ["*"]
