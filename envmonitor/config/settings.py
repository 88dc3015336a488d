from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./data/environments.db"
    db_echo: bool = False
    seed_demo_data: bool = True  # Insert the demo environments when the table is empty

    # Dashboard client
    dashboard_api_url: str = "http://localhost:3000"
    dashboard_timeout_s: float = 10.0

    # App
    app_name: str = "env-monitor-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:4200,http://127.0.0.1:4200,http://localhost:3000"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    rate_limit_enabled: bool = True

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
