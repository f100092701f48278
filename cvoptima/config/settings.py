from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "localhost"
    db_port: int = 5432
    db_database: str = "cvoptima"
    db_username: str = "cvoptima"
    db_password: str = "secret"

    max_upload_bytes: int = 10 * 1024 * 1024
    preview_chars: int = 500

    pdf_engine: str = "pdfplumber"

    storage_backend: str = "local"
    storage_root: str = "/app/files"
    storage_bucket: str = "resumes"
    storage_public_base_url: str = ""

    s3_endpoint_url: str = ""
    s3_access_key: str = ""
    s3_secret_key: str = ""
    s3_region: str = ""
