from pydantic import Field, AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Read env from process + optionally from .env
    model_config = SettingsConfigDict(
        env_file=(".env",),
        extra="ignore",
        case_sensitive=False,
    )

    # App
    ENVIRONMENT: str = Field(default="local", validation_alias=AliasChoices("ENVIRONMENT", "environment"))
    APP_NAME: str = Field(default="gstkit", validation_alias=AliasChoices("APP_NAME", "app_name"))
    LOG_LEVEL: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level"))

    # Key-value store
    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        validation_alias=AliasChoices("REDIS_URL", "redis_url"),
    )
    STORE_KEY_PREFIX: str = Field(default="gstkit:", validation_alias=AliasChoices("STORE_KEY_PREFIX", "store_key_prefix"))

    # Calculator defaults
    DEFAULT_CURRENCY: str = Field(default="INR", validation_alias=AliasChoices("DEFAULT_CURRENCY", "default_currency"))
    DEFAULT_GST_RATE: float = Field(default=18, validation_alias=AliasChoices("DEFAULT_GST_RATE", "default_gst_rate"))

    # History caps
    HISTORY_LIMIT: int = Field(default=50, validation_alias=AliasChoices("HISTORY_LIMIT", "history_limit"))
    MARGIN_HISTORY_LIMIT: int = Field(default=100, validation_alias=AliasChoices("MARGIN_HISTORY_LIMIT", "margin_history_limit"))
    FILING_HISTORY_LIMIT: int = Field(default=50, validation_alias=AliasChoices("FILING_HISTORY_LIMIT", "filing_history_limit"))

    # Notifications
    NOTIFICATION_ENABLED: bool = Field(default=True, validation_alias=AliasChoices("NOTIFICATION_ENABLED", "notification_enabled"))
    NOTIFICATION_PERMISSION_GRANTED: bool = Field(
        default=True,
        validation_alias=AliasChoices("NOTIFICATION_PERMISSION_GRANTED", "notification_permission_granted"),
    )
    NOTIFICATION_HOUR: int = Field(default=9, validation_alias=AliasChoices("NOTIFICATION_HOUR", "notification_hour"))
    NOTIFICATION_POLL_INTERVAL_SECONDS: int = Field(
        default=60,
        validation_alias=AliasChoices("NOTIFICATION_POLL_INTERVAL_SECONDS", "notification_poll_interval_seconds"),
    )


settings = Settings()
