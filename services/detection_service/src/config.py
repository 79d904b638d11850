from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", frozen=True)

    # Core
    service_name: str = "detection-service"
    environment: str = "local"
    log_level: str = "INFO"
    use_cloud_trace: bool = False

    # Secrets (absence is a server misconfiguration, checked per request)
    gemini_api_key: Optional[str] = None
    submission_api_key: Optional[str] = None

    # Model
    detection_model: str = "gemini-3-pro-preview"
    detection_thinking_budget: int = 2048
    detection_temperature: float = 0.0
    gemini_timeout_s: float = 120.0

    # Request defaults
    default_mime_type: str = "audio/*"
    default_language: str = "English"

    def missing_secrets(self) -> list[str]:
        missing = []
        if not self.gemini_api_key:
            missing.append("GEMINI_API_KEY")
        if not self.submission_api_key:
            missing.append("SUBMISSION_API_KEY")
        return missing

@lru_cache
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
