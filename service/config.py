from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

from character_creation.context import EthnicityMode, RaceMode


class Settings(BaseSettings):
    """Runtime configuration for the character generator."""

    model_config = SettingsConfigDict(env_prefix="CHARGEN_")

    repo_root: Path = Path(__file__).resolve().parent.parent
    data_dir: str = "data"
    darkdawn_dir: str = "data/darkdawn"
    schemas_dir: str = "schemas"
    default_books: List[str] = []
    ethnicity_mode: EthnicityMode = EthnicityMode.STANDARD
    race_mode: RaceMode = RaceMode.NORMAL
    max_draw_attempts: int = 1000
    validate_output: bool = True
    log_level: str = "INFO"

    @property
    def data_path(self) -> Path:
        return self.repo_root / self.data_dir

    @property
    def darkdawn_path(self) -> Path:
        return self.repo_root / self.darkdawn_dir

    @property
    def schemas_path(self) -> Path:
        return self.repo_root / self.schemas_dir


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
