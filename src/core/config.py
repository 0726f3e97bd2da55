from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    log_level: str = "info"

    serve_addr: str = "127.0.0.1:6100"
    scrape_timeout_ms: int = 30000

    fetch_timeout_ms: int = 20000
    fetch_max_bytes: int = 0
    fetch_user_agent: str = "gluestick/1.0"
    fetch_pool_max_connections: int = 100
    fetch_pool_max_keepalive: int = 20

    metrics_enabled: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
