from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///./jobmatch.db"

    # Airtable (job source)
    airtable_token: Optional[str] = None
    airtable_base_id: Optional[str] = None
    airtable_table_name: str = "Jobs"
    airtable_rate_limit_delay_ms: int = 200  # Airtable allows ~5 requests/second
    airtable_timeout_s: int = 30
    # Webhook cell values are keyed by field id, e.g. {"fldAbc123": "Title"}
    airtable_field_map: dict[str, str] = {}

    # Sync triggers
    cron_secret: Optional[str] = None

    # Email
    email_mode: str = "dev"  # dev | prod
    sendgrid_api_key: Optional[str] = None
    from_email: str = "notifications@jobmatchai.com"
    app_url: str = "http://localhost:3000"

    # App
    debug: bool = False
    allowed_origins: str = ""


settings = Settings()
