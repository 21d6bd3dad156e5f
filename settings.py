from pydantic_settings import BaseSettings, SettingsConfigDict

from infobus.api.models import DEFAULT_TIMEOUT_MS, ApiConfig


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Infobus Demo"
    debug: bool = False
    log_level: str = "INFO"
    # CORS: "*" for dev; in production set to comma-separated origins
    cors_origins: str = "*"

    infobus_base_url: str = "https://api.infobus.example.com"
    infobus_api_key: str = ""  # Sent as Authorization: Bearer <key> when set
    infobus_timeout_ms: int = DEFAULT_TIMEOUT_MS

    def api_config(self) -> ApiConfig:
        return ApiConfig(
            base_url=self.infobus_base_url,
            api_key=self.infobus_api_key or None,
            timeout_ms=self.infobus_timeout_ms,
        )


def get_settings() -> Settings:
    return Settings()
