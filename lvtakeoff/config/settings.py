from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    vision_provider: str = "gemini"

    gemini_api_key: str = ""
    gemini_model_name: str = "gemini-2.0-flash"
    gemini_api_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_upload_base_url: str = "https://generativelanguage.googleapis.com/upload/v1beta"
    gemini_max_output_tokens: int = Field(default=16384, gt=0)

    openai_api_key: str = ""
    openai_model_name: str = "gpt-4o"
    openai_base_url: str = ""

    request_timeout_seconds: int = Field(default=120, gt=0)
    upload_poll_interval_seconds: float = Field(default=1.0, ge=0)
    upload_poll_max_attempts: int = Field(default=60, ge=1)
    upload_chunk_size_bytes: int = Field(default=8 * 1024 * 1024, gt=0)
    inline_pdf_max_bytes: int = Field(default=0, ge=0)

    analysis_temperature: float = Field(default=0.1, ge=0, le=2)
    quick_analysis_temperature: float = Field(default=0.2, ge=0, le=2)
    high_severity_percent: float = Field(default=20.0, ge=0)
    medium_severity_percent: float = Field(default=10.0, ge=0)
    prefer_overcount: bool = True

    max_workers: int = Field(default=1, ge=1)

    def api_key_for_provider(self) -> str:
        """Return the credential used by the configured vision provider."""
        provider = self.vision_provider.lower()
        if provider == "gemini":
            return self.gemini_api_key
        if provider in ("openai", "openai_compatible"):
            return self.openai_api_key
        return ""
