import os

import pytest

from hybridserve import env_utils
from hybridserve.env_utils import load_env
from hybridserve.settings import Settings, load_settings


def test_defaults():
    s = Settings()

    assert s.ENV == "development"
    assert s.PORT == 5000
    assert s.HOST == "0.0.0.0"
    assert s.API_PREFIX == "/api"
    assert s.ROUTES == "hybridserve.routes:register_routes"
    assert not s.is_production
    assert not s.is_serverless


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("ENV", "production")
    monkeypatch.setenv("PUBLIC_DIR", "/srv/www")

    s = load_settings()

    assert s.PORT == 8080
    assert s.is_production
    assert s.PUBLIC_DIR == "/srv/www"


@pytest.mark.parametrize(
    "env, expected",
    [("production", True), ("prod", True), (" Production ", True), ("staging", False), ("", False)],
)
def test_is_production(env, expected):
    assert Settings(ENV=env).is_production is expected


@pytest.mark.parametrize(
    "marker, expected",
    [(None, False), ("", False), ("1", True), ("true", True), ("0", False), ("false", False)],
)
def test_is_serverless(marker, expected):
    assert Settings(VERCEL=marker).is_serverless is expected


@pytest.fixture
def env_dir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(env_utils, "_loaded_once", False)
    keys = ("HS_ONLY_IN_FILE", "HS_IN_BOTH", "HS_LOCAL_ONLY")
    for key in keys:
        monkeypatch.delenv(key, raising=False)
    yield tmp_path
    # load_env writes os.environ directly
    for key in keys:
        os.environ.pop(key, None)


def test_load_env_fills_missing_keys_without_clobbering(env_dir, monkeypatch):
    (env_dir / ".env").write_text("HS_ONLY_IN_FILE=from-file\nHS_IN_BOTH=from-file\n")
    (env_dir / ".env.local").write_text("HS_LOCAL_ONLY=local\nHS_ONLY_IN_FILE=local\n")
    monkeypatch.setenv("HS_IN_BOTH", "from-process")

    filled = load_env()

    assert filled == 2
    assert os.environ["HS_ONLY_IN_FILE"] == "from-file"
    assert os.environ["HS_IN_BOTH"] == "from-process"
    assert os.environ["HS_LOCAL_ONLY"] == "local"


def test_load_env_runs_once_unless_forced(env_dir):
    (env_dir / ".env").write_text("HS_ONLY_IN_FILE=first\n")
    assert load_env() == 1

    os.environ.pop("HS_ONLY_IN_FILE")
    assert load_env() == 0
    assert "HS_ONLY_IN_FILE" not in os.environ

    assert load_env(force=True) == 1
    assert os.environ["HS_ONLY_IN_FILE"] == "first"
