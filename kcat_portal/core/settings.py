"""Configuration management for the kcat portal client."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Shipped as package data so installed console scripts find it too.
CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"
SETTINGS_FILE = CONFIG_DIR / "settings.yaml"


class EnzymeApiSettings(BaseModel):
    base_url: str = Field(default="http://localhost:8080/api")


class UniKPSettings(BaseModel):
    base_url: str = Field(default="http://localhost:3501")
    predict_path: str = Field(default="/predict_kcat")


class DLTKcatSettings(BaseModel):
    base_url: str = Field(default="http://localhost:3502")
    predict_path: str = Field(default="/predict")


class PubChemSettings(BaseModel):
    base_url: str = Field(default="https://pubchem.ncbi.nlm.nih.gov/rest/pug")


class ServiceSettings(BaseModel):
    enzyme_api: EnzymeApiSettings = EnzymeApiSettings()
    unikp: UniKPSettings = UniKPSettings()
    dltkcat: DLTKcatSettings = DLTKcatSettings()
    pubchem: PubChemSettings = PubChemSettings()


class HttpSettings(BaseModel):
    timeout_seconds: float = Field(default=30.0)


class AuthSettings(BaseModel):
    expired_redirect_delay_seconds: float = Field(default=2.0)
    login_path: str = Field(default="/login")


class SessionSettings(BaseModel):
    path: Optional[str] = Field(default="~/.kcat_portal/session.json")


class AppSettings(BaseModel):
    name: str = Field(default="kcat-portal")
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")


class Settings(BaseModel):
    app: AppSettings = AppSettings()
    services: ServiceSettings = ServiceSettings()
    http: HttpSettings = HttpSettings()
    auth: AuthSettings = AuthSettings()
    session: SessionSettings = SessionSettings()
    raw: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def load(cls, path: Path = SETTINGS_FILE) -> "Settings":
        load_dotenv()
        data = _load_yaml(path)
        merged = _interpolate_env(data)
        return cls(
            app=AppSettings(**merged.get("app", {})),
            services=ServiceSettings(**merged.get("services", {})),
            http=HttpSettings(**merged.get("http", {})),
            auth=AuthSettings(**merged.get("auth", {})),
            session=SessionSettings(**merged.get("session", {})),
            raw=merged,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.load()


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    return yaml.safe_load(path.read_text()) or {}


def _interpolate_env(data: Dict[str, Any]) -> Dict[str, Any]:
    def resolve(value: Any) -> Any:
        if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
            expression = value[2:-1]
            env_key = expression
            default = ""
            if ":-" in expression:
                env_key, default = expression.split(":-", 1)
            elif "-" in expression:
                env_key, default = expression.split("-", 1)
            env_key = env_key.strip()
            return os.getenv(env_key, default)
        if isinstance(value, dict):
            return {k: resolve(v) for k, v in value.items()}
        if isinstance(value, list):
            return [resolve(v) for v in value]
        return value

    return {key: resolve(val) for key, val in data.items()}


__all__ = ["Settings", "get_settings"]
