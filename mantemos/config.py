from pydantic_settings import BaseSettings
from pydantic import Field
from typing import List


class Settings(BaseSettings):
    # Core
    environment: str = Field(default="dev")
    app_name: str = Field(default="MantemOS API")
    tz_default: str = Field(default="America/Sao_Paulo", alias="TZ_DEFAULT")

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Storage
    storage_provider: str = Field(default="local", alias="STORAGE_PROVIDER", description="local | memory")
    data_dir: str = Field(default="var/storage", alias="DATA_DIR")

    # Auth
    jwt_secret: str = Field(default="change-me", alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256")
    jwt_ttl_seconds: int = Field(default=60 * 60 * 12, alias="JWT_TTL")  # 12 hours
    admin_passwords_csv: str = Field(default="admin", alias="ADMIN_PASSWORDS")

    # Orders
    order_id_strategy: str = Field(default="head", alias="ORDER_ID_STRATEGY", description="head | max")

    # Cloud mirror sync
    sync_push_latency_ms: int = Field(default=800, alias="SYNC_PUSH_LATENCY_MS")
    sync_pull_latency_ms: int = Field(default=1000, alias="SYNC_PULL_LATENCY_MS")
    sync_max_retries: int = Field(default=3, alias="SYNC_MAX_RETRIES")
    sync_retry_backoff_ms: int = Field(default=200, alias="SYNC_RETRY_BACKOFF_MS")

    # Rate limit
    rate_limit: str = Field(default="100/minute", alias="RATE_LIMIT")

    # Metrics
    enable_metrics: bool = Field(default=True, alias="ENABLE_METRICS")

    @property
    def admin_passwords(self) -> List[str]:
        return [p.strip().lower() for p in self.admin_passwords_csv.split(",") if p.strip()]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        populate_by_name = True


settings = Settings()
