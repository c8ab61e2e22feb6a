from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="WINE_",
        case_sensitive=False,
    )

    # ── Database ────────────────────────────────────────────────
    # Default to local SQLite for dev; use PostgreSQL in Docker/production
    database_url: str = "sqlite+aiosqlite:///./wine.db"

    # ── API ────────────────────────────────────────────────────
    api_host: str = "0.0.0.0"
    api_port: int = 8082
    log_json: bool = False
    log_level: str = "INFO"

    # ── Commerce rules ──────────────────────────────────────────
    cart_limit: int = 10
    random_products_limit: int = 8
    low_stock_threshold: int = 10
    top_products_limit: int = 10

    # ── Catalog cache ───────────────────────────────────────────
    catalog_cache_ttl_seconds: float = 300.0

    # ── Keycloak (user profiles) ────────────────────────────────
    keycloak_url: str = ""
    keycloak_realm: str = "wine"
    keycloak_client_id: str = "admin-cli"
    keycloak_client_secret: str = ""


# Singleton
_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
