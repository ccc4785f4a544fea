from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="FAMILYLIST_", env_file=".env", extra="ignore")
    DATABASE_URL: str = "sqlite:///./familylist.db"

    HOST: str = "0.0.0.0"
    PORT: int = 3001
    CORS_ORIGINS: list[str] = ["*"]
    STATIC_DIR: str = "public"

    # live updates
    HEARTBEAT_SECONDS: float = 25.0
    CHANNEL_QUEUE_SIZE: int = 100

    BCRYPT_ROUNDS: int = 12
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"


settings = Settings()
