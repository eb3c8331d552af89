from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    db_host: str = "localhost"
    db_port: int = 54377
    db_user: str = "postgres"
    db_password: str = "postgres"
    db_name: str = "tokenpulse"
    redis_url: str = "redis://localhost:6379/0"
    debug: bool = True
    cors_origins: list[str] = ["*"]

    volume_threshold_usd: float = 5e8  # trailing 48h volume needed to count as active
    history_points: int = 48
    active_ttl_seconds: int = 3600
    records_ttl_seconds: int = 172800
    metadata_batch_size: int = 80  # keeps IN (...) under driver parameter limits
    refresh_interval_seconds: int = 3600

    @property
    def database_url(self) -> str:
        return f"postgresql+asyncpg://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    class Config:
        env_file = ".env"


settings = Settings()
