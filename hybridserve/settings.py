from pydantic_settings import BaseSettings, SettingsConfigDict

PRODUCTION_ENVS = frozenset({"production", "prod"})
_FALSY = frozenset({"0", "false", "no", "off"})


class Settings(BaseSettings):
    """Process configuration read from the environment.

    Field names map to environment variables case-insensitively, so ``port``
    reads ``PORT`` and ``vercel`` reads the serverless platform marker.
    """

    model_config = SettingsConfigDict(case_sensitive=False, extra="ignore")

    # Asset strategy selector: production serves compiled assets
    ENV: str = "development"

    HOST: str = "0.0.0.0"
    PORT: int = 5000

    # Set by the serverless platform; when present no socket is bound
    VERCEL: str | None = None

    PUBLIC_DIR: str = "dist/public"
    DEV_SERVER_URL: str = "http://127.0.0.1:5173"

    API_PREFIX: str = "/api"
    ROUTES: str = "hybridserve.routes:register_routes"

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"

    @property
    def is_production(self) -> bool:
        return self.ENV.strip().lower() in PRODUCTION_ENVS

    @property
    def is_serverless(self) -> bool:
        # Any non-empty marker counts unless explicitly falsy
        value = (self.VERCEL or "").strip().lower()
        return bool(value) and value not in _FALSY


def load_settings() -> Settings:
    """Return a fresh ``Settings`` snapshot of the current environment."""
    return Settings()


__all__ = ["Settings", "load_settings", "PRODUCTION_ENVS"]
