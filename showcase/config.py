"""Configuration loading for showcase (.showcase.yml, .env and environment)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

import yaml
from dotenv import load_dotenv

CONFIG_FILENAME = ".showcase.yml"
MAX_REPOS = 5


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class LLMConfig:
    """Chat-completion endpoint settings."""

    api_key: Optional[str] = None
    base_url: str = "https://api.cerebras.ai/v1"
    model: str = "zai-glm-4.7"
    max_tokens: int = 8192
    temperature: float = 0.7
    request_timeout: float = 120.0


@dataclass
class GenerationOptions:
    """Per-run switches consumed by the orchestrator."""

    iterations: int = 3
    skip_refresh: bool = False
    skip_push: bool = False

    def __post_init__(self) -> None:
        if self.iterations < 1:
            raise ValueError("iterations must be at least 1")


@dataclass
class Settings:
    """Effective settings for a showcase workspace."""

    root: Path
    llm: LLMConfig = field(default_factory=LLMConfig)
    generation: GenerationOptions = field(default_factory=GenerationOptions)
    output_dir: Path = Path("repos")
    checkout_dir: Path = Path("tmp/repos")
    job_retention_seconds: float = 30 * 60

    @property
    def output_path(self) -> Path:
        return self._resolve(self.output_dir)

    @property
    def checkout_path(self) -> Path:
        return self._resolve(self.checkout_dir)

    @property
    def manifest_path(self) -> Path:
        return self.output_path / "manifest.json"

    def _resolve(self, path: Path) -> Path:
        return path if path.is_absolute() else (self.root / path)


_API_KEY_ENV = ("SHOWCASE_API_KEY", "CEREBRAS_API_KEY")
_MODEL_ENV = ("SHOWCASE_MODEL",)
_BASE_URL_ENV = ("SHOWCASE_BASE_URL",)


def load_settings(
    root: Path | str = ".",
    *,
    env: Mapping[str, str] | None = None,
    load_env_file: bool = True,
) -> Settings:
    """Load settings from ``.showcase.yml`` and the environment under ``root``."""
    root_path = Path(root).expanduser().resolve()
    if load_env_file:
        load_dotenv(root_path / ".env", override=False)
    environ: Mapping[str, str] = os.environ if env is None else env

    data = _read_config(root_path / CONFIG_FILENAME)

    llm = LLMConfig()
    llm_data = _as_dict(data.get("llm"))
    if llm_data:
        llm.api_key = _as_str(llm_data.get("api_key")) or llm.api_key
        llm.base_url = _as_str(llm_data.get("base_url")) or llm.base_url
        llm.model = _as_str(llm_data.get("model")) or llm.model
        llm.max_tokens = _as_int(llm_data.get("max_tokens")) or llm.max_tokens
        temperature = _as_float(llm_data.get("temperature"))
        if temperature is not None:
            llm.temperature = temperature
        llm.request_timeout = _as_float(llm_data.get("request_timeout")) or llm.request_timeout

    llm.api_key = _first_env_value(environ, _API_KEY_ENV) or llm.api_key
    llm.model = _first_env_value(environ, _MODEL_ENV) or llm.model
    llm.base_url = (_first_env_value(environ, _BASE_URL_ENV) or llm.base_url).rstrip("/")

    generation_data = _as_dict(data.get("generation"))
    iterations = _as_int(generation_data.get("iterations"))
    if iterations is not None and iterations < 1:
        raise ConfigError("generation.iterations must be at least 1")
    generation = GenerationOptions(
        iterations=iterations or 3,
        skip_refresh=_as_bool(generation_data.get("skip_refresh")) or False,
        skip_push=_as_bool(generation_data.get("skip_push")) or False,
    )
    if _as_bool(environ.get("NO_PUSH")):
        generation.skip_push = True

    paths_data = _as_dict(data.get("paths"))
    output_dir = _as_str(paths_data.get("output_dir")) or "repos"
    checkout_dir = _as_str(paths_data.get("checkout_dir")) or "tmp/repos"

    service_data = _as_dict(data.get("service"))
    retention = _as_float(service_data.get("job_retention_seconds"))

    return Settings(
        root=root_path,
        llm=llm,
        generation=generation,
        output_dir=Path(output_dir),
        checkout_dir=Path(checkout_dir),
        job_retention_seconds=retention if retention is not None else 30 * 60,
    )


def _read_config(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _first_env_value(environ: Mapping[str, str], keys: Sequence[str]) -> str | None:
    for key in keys:
        value = environ.get(key)
        if value:
            return value
    return None


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0", ""}:
            return False
    return None


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "GenerationOptions",
    "LLMConfig",
    "MAX_REPOS",
    "Settings",
    "load_settings",
]
