from typing import Literal, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Loan Insight API"
    debug: bool = False

    database_url: str = "sqlite+aiosqlite:///./loan_insight.db"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"

    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"

    # Completion capability (document structuring + analyst insights)
    completion_provider: Literal["gemini", "groq"] = "gemini"
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-1.5-flash"
    groq_api_key: Optional[str] = None
    groq_model: str = "llama-3.1-8b-instant"
    completion_timeout_seconds: Optional[float] = None

    # Speech capability
    elevenlabs_api_key: Optional[str] = None
    elevenlabs_voice_id: str = "21m00Tcm4TlvDq8ikWAM"
    elevenlabs_model_id: str = "eleven_monolingual_v1"
    speech_timeout_seconds: float = 60.0

    normalizer_max_input_chars: int = 150_000
    strict_ai_validation: bool = False

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
