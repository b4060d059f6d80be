"""RCE runtime configuration definitions."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).resolve().parents[3]


class Settings(BaseSettings):
    """Application settings loaded from env and .env files."""

    app_name: str = "rce-python-engine"
    environment: str = Field(default="dev", pattern="^(dev|test|prod)$")
    db_url: str = "sqlite:///./rce_history.db"
    snapshot_schema_path: str = "docs/contracts/snapshot.schema.json"

    default_wake_time: str = Field(default="07:30", pattern=r"^\d{2}:\d{2}$")
    default_bed_time: str = Field(default="23:00", pattern=r"^\d{2}:\d{2}$")
    stimulant_cutoff_hour: int = Field(default=16, ge=0, le=23)
    recovery_floor: float = Field(default=40.0, ge=0.0, le=100.0)
    override_threshold: float = Field(default=90.0, ge=0.0, le=100.0)
    constraint_penalty: float = Field(default=50.0, ge=0.0, le=100.0)
    max_upcoming: int = Field(default=3, ge=1, le=3)
    max_workers: int = Field(default=0, ge=0)
    enable_annotator: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_prefix="RCE_")

    @field_validator("snapshot_schema_path")
    @classmethod
    def _resolve_schema_path(cls, value: str) -> str:
        path = Path(value).expanduser()
        if path.is_absolute() or path.exists():
            return str(path)
        return str(_PROJECT_ROOT / path)
