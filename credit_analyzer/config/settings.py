from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    host: str = "0.0.0.0"
    port: int = 3001

    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "qwen2.5vl:7b"

    inference_max_retries: int = 3
    inference_retry_delay_seconds: float = 2.0
    inference_connect_timeout_seconds: float = 5.0
    inference_image_timeout_seconds: float = 120.0
    inference_report_timeout_seconds: float = 180.0

    pdf_engine: str = "pymupdf"
    pdf_render_dpi: int = 200

    uploads_dir: Path = Path("uploads")
    temp_dir: Path = Path("temp")
    max_upload_files: int = 10
    max_upload_size_bytes: int = 50 * 1024 * 1024
    cleanup_delay_seconds: float = 5.0
