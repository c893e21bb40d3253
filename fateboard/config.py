"""
Server settings.

Values come from the environment (prefix FATEBOARD_) or a local .env file,
e.g. FATEBOARD_PORT=9000 or FATEBOARD_LOG_LEVEL=DEBUG.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 8765
    log_level: str = "INFO"

    # Room buffers
    log_limit: int = 25
    chat_limit: int = 100
    chat_max_len: int = 300

    model_config = SettingsConfigDict(
        env_prefix="FATEBOARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
