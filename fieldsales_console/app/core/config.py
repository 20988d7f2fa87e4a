from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="FIELDSALES_", extra="ignore")

    APP_NAME: str = "fieldsales-console"
    PAGE_SIZE: int = 10
    TOP_N: int = 3
    RECENT_ORDERS_LIMIT: int = 5
    RECENT_ACTIVITY_LIMIT: int = 5
    DASHBOARD_MONTHS: int = 6
    DEFAULT_CURRENCY: str = "INR"
    DEFAULT_COUNTRY: str = "India"
    DEFAULT_ID_TYPE: str = "Aadhar"
    MIN_PASSWORD_LENGTH: int = 6
    EXPORTS_DIR: str = "./exports"
    LOG_LEVEL: str = "INFO"


settings = Settings()
