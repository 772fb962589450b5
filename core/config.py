"""Configuration loading and validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Same pattern the registry enforces on adapter names.
ADAPTER_NAME_PATTERN = r"^[a-z][a-z0-9]*(_[a-z0-9]+)*$"


class ConfigValidationError(Exception):
    """Raised when a settings or manifest file fails validation."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        super().__init__(message)
        self.errors = errors or []


class AdapterEntry(BaseModel):
    """One adapter declared in the manifest."""

    name: str = Field(..., pattern=ADAPTER_NAME_PATTERN)
    support_type: str = Field(default="core", pattern=r"^[a-z]+$")
    factory: str = Field(..., pattern=r"^[\w.]+:[\w.]+$")  # "package.module:ClassName"
    enabled: bool = True


class AdapterManifest(BaseModel):
    """Declarative list of the content adapters available to this deployment."""

    adapters: list[AdapterEntry] = Field(default_factory=list)

    def enabled(self) -> list[AdapterEntry]:
        return [entry for entry in self.adapters if entry.enabled]


class Settings(BaseSettings):
    """Application settings from environment."""

    model_config = SettingsConfigDict(
        env_prefix="CONTENT_SYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Deletion queue storage
    database_url: str = "sqlite:///./data/content_sync.db"

    # Adapters
    adapter_manifest: str = "configs/adapters.yaml"
    annotation_max_workers: int = Field(default=4, ge=1)

    # Runtime
    verbose: int = 0
    log_level: str = "INFO"
    log_json: bool = False

    @field_validator("verbose", mode="before")
    @classmethod
    def _coerce_verbose(cls, v: Any) -> int:
        if isinstance(v, bool):
            return 2 if v else 0
        if isinstance(v, str):
            low = v.strip().lower()
            try:
                return int(low)
            except ValueError:
                pass
            if low in ("true", "yes"):
                return 2
            return 0
        return int(v)

    @field_validator("database_url")
    @classmethod
    def _require_sqlite(cls, v: str) -> str:
        if not v.startswith("sqlite:///"):
            raise ValueError("only sqlite:/// database URLs are supported")
        return v

    @property
    def deletion_queue_path(self) -> Path:
        """Filesystem path of the SQLite database behind the deletion queue."""
        return Path(self.database_url.removeprefix("sqlite:///"))


def load_adapter_manifest(path: Path) -> AdapterManifest:
    """Load the adapter manifest from a YAML file.

    A missing file yields an empty manifest.
    """
    if not path.exists():
        return AdapterManifest()

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    try:
        return AdapterManifest(**data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid adapter manifest: {path}", errors=e.errors()) from e


def load_config(
    manifest_path: Path | None = None,
    settings: Settings | None = None,
) -> tuple[Settings, AdapterManifest]:
    """Load all configuration.

    Returns:
        Tuple of (Settings, AdapterManifest)
    """
    try:
        settings = settings or Settings()
    except ValidationError as e:
        raise ConfigValidationError("Invalid settings", errors=e.errors()) from e
    manifest_path = manifest_path or Path(settings.adapter_manifest)
    manifest = load_adapter_manifest(manifest_path)

    return settings, manifest


def snapshot_config(settings: Settings, manifest: AdapterManifest) -> dict[str, Any]:
    """Create a serializable snapshot of the current configuration."""
    return {
        "settings": settings.model_dump(mode="json"),
        "adapters": manifest.model_dump(mode="json"),
    }
