import re
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def session_folder(phone: str) -> str:
    """Session folder name derived from the digits of a phone number."""
    digits = re.sub(r"\D", "", phone)
    return f"phone-{digits or 'default'}"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", frozen=True)

    app_id: int
    app_hash: str = Field(min_length=1)
    work_chat: int

    phone: str = ""
    log_level: str = "INFO"

    session_root: Path = Path("session")
    downloads_dir: Path = Path("downloads")
    ogg_dir: Path = Path("ogg_files")

    ffmpeg_binary: str = "ffmpeg"
    ffmpeg_timeout_seconds: int = Field(default=300, gt=0)

    flood_sleep_threshold: int = 60
    catch_up: bool = True
    keep_artifacts: bool = True

    log_file_max_bytes: int = 1024 * 1024
    log_file_backup_count: int = 3

    @property
    def session_dir(self) -> Path:
        return self.session_root / session_folder(self.phone)

    @property
    def log_file(self) -> Path:
        return self.session_dir / "bot.log"
