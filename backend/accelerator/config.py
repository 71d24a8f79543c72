from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    data_dir: Path = Path("data") / "runtime"
    content_dir: Path = Path("data") / "static"
    store_backend: Literal["json", "sqlite", "memory"] = "json"
    quiz_filename: str = "quiz-state.json"
    progress_filename: str = "progress.json"
    sqlite_filename: str = "accelerator.db"
    lesson_files: list[str] = [
        "lesson-content.json",
        "lessons-6-10.json",
        "lessons-11-15.json",
        "lessons-16-20.json",
    ]
    environment: Literal["development", "production"] = "development"
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "info"

    model_config = {"env_prefix": "ACCELERATOR_"}

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


settings = Settings()
