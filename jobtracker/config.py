from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Paths
    base_dir: Path = Path(__file__).resolve().parent.parent
    data_dir: Path = base_dir / "data"
    db_path: Path = data_dir / "tracker.duckdb"

    # Server
    host: str = "127.0.0.1"
    port: int = 8765

    # Persistence
    storage_key: str = "jobApplications"
    debounce_seconds: float = 0.5  # quiet period after the last mutation before saving
    save_failure_message: str = (
        "Could not save your applications. Export to CSV to keep a backup."
    )

    # CSV import/export
    csv_dialect: Literal["standard", "legacy"] = "standard"

    model_config = {"env_prefix": "JOBTRACKER_"}


settings = Settings()
