from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Library Shop API"
    app_version: str = "0.1.0"
    app_description: str = "CRUD API for managing the book catalog of the library shop."
    books_table_name: str | None = None
    stage: str = "dev"
    database_url: str = "sqlite:///./library_shop.db"
    log_level: str = "INFO"
    log_format: str = "json"
    log_service_name: str = "library-shop-api"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = Settings()
