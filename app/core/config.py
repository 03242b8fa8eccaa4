from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
import json


class Settings(BaseSettings):
    # Application Settings
    app_name: str = Field(default="Visitor Kiosk API", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    ENVIRONMENT: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")

    # Server Configuration
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000, alias="PORT")

    # Database Configuration
    DB_HOST: str = Field(default="localhost", alias="DB_HOST")
    DB_PORT: int = Field(default=5432, alias="DB_PORT")
    DB_NAME: str = Field(default="visitor_kiosk", alias="DB_NAME")
    DB_USER: str = Field(default="visitor_kiosk", alias="DB_USER")
    DB_PASSWORD: str = Field(default="visitor_kiosk", alias="DB_PASSWORD")
    database_url: str = Field(default="sqlite:///./visitor_kiosk.db", alias="DATABASE_URL")

    # CORS Configuration
    API_CORS_ORIGINS: Optional[str] = Field(default=None, alias="API_CORS_ORIGINS")
    cors_origins: List[str] = Field(default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:5173"])

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s", alias="LOG_FORMAT")

    # Notification Feed
    api_base_url: str = Field(default="http://localhost:8000", alias="API_BASE_URL")
    notification_poll_interval_seconds: float = Field(default=3.0, alias="NOTIFICATION_POLL_INTERVAL_SECONDS")
    notification_poll_timeout_seconds: float = Field(default=5.0, alias="NOTIFICATION_POLL_TIMEOUT_SECONDS")
    notification_alert_dismiss_seconds: float = Field(default=8.0, alias="NOTIFICATION_ALERT_DISMISS_SECONDS")
    notification_mark_read_delay_seconds: float = Field(default=1.0, alias="NOTIFICATION_MARK_READ_DELAY_SECONDS")
    notification_max_client_items: int = Field(default=50, alias="NOTIFICATION_MAX_CLIENT_ITEMS")
    notification_strict_visibility: bool = Field(default=False, alias="NOTIFICATION_STRICT_VISIBILITY")

    # Email Configuration
    email_enabled: bool = Field(default=False, alias="EMAIL_ENABLED")
    smtp_server: str = Field(default="smtp.gmail.com", alias="SMTP_SERVER")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    smtp_username: str = Field(default="", alias="SMTP_USERNAME")
    smtp_password: str = Field(default="", alias="SMTP_PASSWORD")
    email_from: str = Field(default="noreply@visitor-kiosk.local", alias="EMAIL_FROM")

    # Host Alert Webhook (WhatsApp relay etc.)
    visitor_alert_webhook_url: Optional[str] = Field(default=None, alias="VISITOR_ALERT_WEBHOOK_URL")
    visitor_alert_webhook_timeout_seconds: float = Field(default=5.0, alias="VISITOR_ALERT_WEBHOOK_TIMEOUT_SECONDS")

    # Frontend/Portal URL used in host alerts
    portal_url: str = Field(default="http://localhost:3000", alias="PORTAL_URL")

    # Pagination
    default_page_size: int = Field(default=50, alias="DEFAULT_PAGE_SIZE")
    max_page_size: int = Field(default=200, alias="MAX_PAGE_SIZE")

    @field_validator('cors_origins', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            if v.strip() == "*":
                return ["*"]
            try:
                return json.loads(v)
            except ValueError:
                return [origin.strip() for origin in v.split(',') if origin.strip()]
        return v

    @property
    def DATABASE_URL(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+psycopg2://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def database_echo(self) -> bool:
        return self.debug and self.is_development

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = Settings()
