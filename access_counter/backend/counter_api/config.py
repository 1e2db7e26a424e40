from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ---- App ----
    app_env: str = "local"  # local|dev|prod
    service_name: str = "APIContagem"
    service_version: str = "1.0.0"

    # ---- CORS (used by main.py) ----
    cors_allow_origins: list[str] | str = ["*"]
    allow_public_cors: bool = True

    # ---- Relational stores ----
    # Backend A (ascending counter) and backend B (descending counter).
    postgres_database_url: str = "sqlite:///./contagem_postgres.db"
    mysql_database_url: str = "sqlite:///./contagem_mysql.db"
    db_pool_timeout_seconds: int = 10
    auto_create_tables: bool = True

    # ---- Redis (distributed counter) ----
    redis_url: str = "redis://localhost:6379/0"
    redis_counter_key: str = "APIContagem"
    redis_socket_timeout_seconds: float = 5.0

    # ---- Instance metadata overrides ----
    counter_location: str | None = None
    counter_kernel: str | None = None
    counter_framework: str | None = None

    # ---- Tracing ----
    tracing_enabled: bool = True
    otlp_endpoint: str | None = None  # e.g. http://otel-collector:4317
    otlp_console_exporter: bool = False
    tracing_instrument_libraries: bool = True
    clock_utc_offset_hours: int = -3

    def model_post_init(self, __context) -> None:
        env = (self.app_env or "local").strip().lower()
        is_prod = env in ("prod", "production")

        # Wildcard CORS in prod only when the API is deliberately public
        if is_prod and not self.allow_public_cors:
            origins = self.cors_allow_origins
            if origins == "*" or origins == ["*"] or (isinstance(origins, str) and "*" in origins):
                raise ValueError("SECURITY: cors_allow_origins wildcard requires allow_public_cors=True in prod")


settings = Settings()
