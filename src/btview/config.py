"""Application configuration using Pydantic Settings."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from BTVIEW_* environment variables or a .env file."""

    model_config = SettingsConfigDict(
        env_prefix="BTVIEW_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Display preferences
    show_program_path: bool = False
    highlight_base_name: bool = True
    show_thread_names: bool = False

    # External tools
    eu_stack_path: str = "eu-stack"
    cxxfilt_path: str = "c++filt"

    # Logging; the terminal belongs to the TUI, so only log to a file
    log_level: str = "WARNING"
    log_file: Path | None = None


# Global settings instance
settings = Settings()
