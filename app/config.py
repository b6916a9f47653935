from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # --- DB ---
    DATABASE_URL: str = "sqlite:///./schedule.db"

    # --- Google sign-in ---
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CERTS_URL: str = "https://www.googleapis.com/oauth2/v3/certs"
    JWKS_CACHE_TTL: int = 300

    # --- HTTP ---
    ALLOWED_ORIGIN: str = "http://localhost:3000"
    PORT: int = 5000

    # list endpoint cache, seconds (0 disables)
    COURSE_LIST_CACHE_TTL: int = 60

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True
    )

settings = Settings()
