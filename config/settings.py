from dotenv import load_dotenv
from typing import List
from pydantic_settings import BaseSettings

load_dotenv()  # loads .env from current working directory

class Settings(BaseSettings):
    MONGODB_URI: str = "mongodb://localhost:27017"
    DB_NAME: str = "umwero"
    TEMPLATES_PATH: str = "templates.json"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    # Stroke scoring
    RESAMPLE_POINTS: int = 64
    PASSING_THRESHOLD: float = 60.0
    GOOD_THRESHOLD: float = 75.0
    EXCELLENT_THRESHOLD: float = 90.0
    FLAG_THRESHOLD: float = 60.0
    MAX_DEVIATION: float = 1.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
