from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "conformity"
    db_username: str = "conformity"
    db_password: str = "secret"
    db_pool_max_size: int = 10

    files_root: str = "/app/files"

    max_job_attempts: int = 3
    job_poll_interval_seconds: int = 5
    job_backoff_base_seconds: float = 2.0
    worker_concurrency: int = 2
    worker_max_jobs_per_second: float = 5.0
    job_stale_after_seconds: int = 900

    pdf_engine: str = "pdfplumber"

    llm_provider: str = "example"
    llm_api_key: str = ""
    llm_model_name: str = ""
    llm_base_url: str = ""
    llm_timeout_seconds: int = 30
    llm_temperature: float = 0.0

    ocr_enabled: bool = True
    ocr_model_name: str = ""
    ocr_timeout_seconds: int = 120
    ocr_render_dpi: int = 150
    recovery_min_chars: int = 100

    regulatory_catalog_path: str = "dataset/regulatory_catalog.json"
    custom_category_fallback: bool = True
