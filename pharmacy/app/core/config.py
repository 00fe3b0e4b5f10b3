from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str

    # CORS origins for the front end
    CORS_ORIGINS: list[str] = ["http://localhost:5173"]

    LOG_LEVEL: str = "INFO"

    # Reports
    REPORT_TITLE: str = "Hospital Pharmacy"
    LEDGER_DEFAULT_WINDOW_DAYS: int = 30
    EXPIRY_ALERT_DAYS: int = 90


settings = Settings()  # type: ignore[call-arg]
