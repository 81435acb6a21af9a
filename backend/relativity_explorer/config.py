from pydantic_settings import BaseSettings
from functools import lru_cache
from pathlib import Path

# Get the directory where this config file lives, then go up to backend/
ENV_FILE = Path(__file__).resolve().parent.parent / ".env"


class Settings(BaseSettings):
    # AI tutor (Gemini)
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash-preview-09-2025"

    # Paths
    output_dir: str = "./output"

    # CORS
    frontend_url: str = "http://localhost:5173"

    # Logging
    log_level: str = "INFO"

    # Playback
    frame_interval_seconds: float = 1 / 60  # one display refresh at 60 Hz
    max_sessions: int = 1000

    @property
    def use_tutor(self) -> bool:
        return bool(self.gemini_api_key and self.gemini_api_key != "your-gemini-api-key")

    class Config:
        env_file = ENV_FILE
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
