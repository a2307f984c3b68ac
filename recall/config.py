from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    data_file: str = "flashcards.csv"
    session_cap: int = 15  # micro-learning session size
    default_owner: str = "local"
    cors_origins: List[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
    ]

    model_config = {"env_prefix": "RECALL_"}


settings = Settings()
