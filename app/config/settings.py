from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"
    debug_mode: bool = False

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "listo"
    db_username: str = "listo"
    db_password: str = "secret"
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10

    gcp_project_id: str = ""
    storage_bucket: str = "listo-c6a60.firebasestorage.app"

    upload_ocr_engine: str = "vision"
    scan_ocr_engine: str = "ocr_space"
    ocr_space_api_key: str = ""
    ocr_space_base_url: str = "https://api.ocr.space/parse/image"
    ocr_space_language: str = "eng"
    ocr_space_engine: int = 2
    ocr_timeout_seconds: int = 30
    max_file_size_bytes: int = 20 * 1024 * 1024

    translation_location: str = "global"
    translation_source_language: str = "en"
    translation_target_language: str = "es"
    translation_max_chunk_size: int = 100_000
    translation_timeout_seconds: int = 60

    download_timeout_seconds: int = 30
    allowed_download_hosts: list[str] = [
        "firebasestorage.googleapis.com",
        "storage.googleapis.com",
    ]

    api_host: str = "0.0.0.0"
    api_port: int = 8080
    firebase_project_id: str = ""
