from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """modelboard configuration"""

    # Service
    SERVICE_NAME: str = "modelboard"
    SERVICE_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # Board storage
    BOARD_TYPE: str = "local"  # "local", "memory", "s3" or "sql"
    BOARD_PATH: str = "./board"

    # S3 board
    S3_BUCKET: str = ""
    S3_PREFIX: str = "modelboard/"
    S3_REGION: str = "us-east-1"

    # SQL board
    DATABASE_URL: str = "sqlite:///./modelboard.db"

    # Prediction endpoint client
    PREDICT_TIMEOUT: float = 5.0
    PREDICT_API_KEY: str = ""

    # Monitoring
    METRICS_PERIOD: str = "week"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
