from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    STORE_PROVIDER: str = "memory"  # "memory" | "json"
    STORE_PATH: str = "./data/store.json"
    # Only applied by the JSON loader to business records without a timezone.
    DEFAULT_TIMEZONE: str | None = None

    SLOT_INCREMENT_MINUTES: int = 30
    MAX_SUGGESTIONS: int = 3
    PUBLIC_SLOT_INTERVAL_MINUTES: int = 15
    DEFAULT_DURATION_MINUTES: int = 60
    DEFAULT_TABLE_DURATION_MINUTES: int = 90

    NOTIFICATIONS_ENABLED: bool = False
    EVOLUTION_API_URL: str | None = None
    EVOLUTION_API_KEY: str | None = None


settings = Settings()
