from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str
    jwt_secret: str
    jwt_algorithm: str = "HS256"

    # Edit coordination
    lease_ttl_seconds: int = 300
    max_versions_per_note: int = 50

    db_echo: bool = False
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    model_config = {"env_file": ".env", "extra": "ignore"}

settings = Settings()
