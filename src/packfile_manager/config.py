import os
import sys
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from packfile_manager.archive.formats import PFHVersion


def _default_data_dir() -> Path:
    if env := os.environ.get("PFM_DATA_DIR"):
        return Path(env)
    if sys.platform == "win32":
        base = Path(os.environ.get("LOCALAPPDATA", Path.home() / "AppData" / "Local"))
    else:
        base = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))
    return base / "packfile-manager"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PFM_",
        extra="ignore",
    )

    data_dir: Path = Path("")
    schema_dir: Path = Path("")
    allow_editing_of_ca_packfiles: bool = False
    sort_entries_on_save: bool = True
    default_pfh_version: PFHVersion = PFHVersion.PFH5
    host: str = "127.0.0.1"
    port: int = 8426

    @model_validator(mode="after")
    def _resolve_data_paths(self) -> "Settings":
        if self.data_dir == Path(""):
            self.data_dir = _default_data_dir()
        if self.schema_dir == Path(""):
            self.schema_dir = self.data_dir / "schemas"
        return self


settings = Settings()
