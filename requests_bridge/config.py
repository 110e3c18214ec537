# requests_bridge/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    APP_NAME: str = "Requests Bridge"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 8097

    # Logging
    LOG_LEVEL: str = "INFO"


settings = Settings()
