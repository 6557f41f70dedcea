from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./data/db.sqlite3"
    api_key: str = ""  # empty = no auth check (local dev)
    secret_key: str = "change-me"
    data_dir: str = "./data"
    storage_bucket: str = "wedding-photos"
    max_photo_size_bytes: int = 15 * 1024 * 1024  # 15MB
    allowed_photo_extensions: list[str] = ["jpg", "jpeg", "png", "gif", "webp"]
    default_photo_quota: int = 20
    photo_restore_cap: int | None = None  # None = default_photo_quota
    access_token_ttl_seconds: int = 7 * 24 * 3600
    signed_url_ttl_seconds: int = 3600
    public_base_url: str = "http://localhost:8000"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:8000"]
    seed_demo_data: bool = True
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
