from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    STORE_PROVIDER: str = "memory"  # "memory" | "supabase"
    SUPABASE_URL: str | None = None
    SUPABASE_KEY: str | None = None
    HTTP_TIMEOUT_SECONDS: float = 10.0

    GEOCODER_BASE_URL: str = "https://nominatim.openstreetmap.org"
    GEOCODER_USER_AGENT: str = "Marketplace/1.0"
    NEAREST_AREA_MAX_KM: float = 25.0

    CATALOG_DEFAULT_LIMIT: int = 50
    CATALOG_MAX_LIMIT: int = 200


settings = Settings()
