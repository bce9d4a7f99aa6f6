from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field


def project_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _resolve_path(root: Path, value: str | Path) -> Path:
    path = Path(value)
    return path if path.is_absolute() else (root / path)


class AppSection(BaseModel):
    name: str = "trafdat"
    timezone: str = "America/Chicago"


class ArchiveSection(BaseModel):
    base_path: Path = Path("data/traffic")
    district: str = "tms"
    max_filename_length: int = 24


class CorsSection(BaseModel):
    allow_origins: list[str] = Field(default_factory=lambda: ["*"])


class ApiCacheSection(BaseModel):
    enabled: bool = True
    ttl_seconds: float = 300.0
    max_body_bytes: int = 1_000_000
    include_paths: list[str] = Field(default_factory=lambda: ["/"])


class ApiSection(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    cors: CorsSection = Field(default_factory=CorsSection)
    cache: ApiCacheSection = Field(default_factory=ApiCacheSection)


class AppConfig(BaseModel):
    app: AppSection = Field(default_factory=AppSection)
    archive: ArchiveSection = Field(default_factory=ArchiveSection)
    api: ApiSection = Field(default_factory=ApiSection)

    def resolve_paths(self, root: Optional[Path] = None) -> "AppConfig":
        repo_root = project_root() if root is None else root
        updated_archive = self.archive.model_copy(
            update={"base_path": _resolve_path(repo_root, self.archive.base_path)}
        )
        return self.model_copy(update={"archive": updated_archive})


def _maybe_load_dotenv() -> None:
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return

    load_dotenv()


def load_config(config_path: str | Path | None = None) -> AppConfig:
    _maybe_load_dotenv()

    root = project_root()
    candidate = config_path or os.getenv("TRAFDAT_CONFIG", "configs/config.yaml")
    path = _resolve_path(root, candidate)
    if not path.exists():
        path = root / "configs/config.example.yaml"

    data: dict[str, Any] = {}
    if path.exists():
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return AppConfig.model_validate(data).resolve_paths(root)


_CONFIG: AppConfig | None = None


def get_config() -> AppConfig:
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = load_config()
    return _CONFIG
