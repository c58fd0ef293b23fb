from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .exceptions import ConfigurationError
from .hashers import MAX_ITERATIONS


LOG_LEVEL_ENV = "DJAUTH_LOG_LEVEL"
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class HasherConfig:
	iterations: Optional[int] = None


@dataclass
class AppConfig:
	log_level: str = "WARNING"


@dataclass
class Config:
	hasher: HasherConfig = field(default_factory=HasherConfig)
	app: AppConfig = field(default_factory=AppConfig)


def _load_json(path: Path) -> dict:
	with path.open("r", encoding="utf-8") as f:
		return json.load(f)


def _section(data: dict, name: str) -> dict:
	section = data.get(name)
	if section is None:
		return {}
	if not isinstance(section, dict):
		raise ConfigurationError(f"{name} must be a JSON object, got {section!r}")
	return section


def _parse_iterations(raw) -> Optional[int]:
	if raw is None:
		return None
	if isinstance(raw, bool) or not isinstance(raw, int):
		raise ConfigurationError(f"hasher.iterations must be an integer, got {raw!r}")
	if raw < 0 or raw > MAX_ITERATIONS:
		raise ConfigurationError(f"hasher.iterations out of range: {raw}")
	return raw


def _parse_log_level(raw) -> str:
	level = str(raw).upper()
	if level not in _LOG_LEVELS:
		raise ConfigurationError(f"unknown log level: {raw!r}")
	return level


def load_config(config_path: str = "djauth.json") -> Config:
	path = Path(config_path)
	try:
		data = _load_json(path)
	except json.JSONDecodeError as e:
		raise ConfigurationError(f"invalid JSON in {path.as_posix()}: {e}") from e

	if not isinstance(data, dict):
		raise ConfigurationError(f"{path.as_posix()} must contain a JSON object")
	hasher_data = _section(data, "hasher")
	app_data = _section(data, "app")

	hasher = HasherConfig(
		iterations=_parse_iterations(hasher_data.get("iterations")),
	)
	app = AppConfig(
		log_level=_parse_log_level(os.environ.get(LOG_LEVEL_ENV) or app_data.get("log_level", "WARNING")),
	)
	return Config(hasher=hasher, app=app)


def try_load_config(config_path: str = "djauth.json") -> Optional[Config]:
	path = Path(config_path)
	if not path.exists():
		return None
	return load_config(config_path)


def default_config() -> Config:
	config = Config()
	if os.environ.get(LOG_LEVEL_ENV):
		config.app.log_level = _parse_log_level(os.environ[LOG_LEVEL_ENV])
	return config


def configure_logging(level: str) -> None:
	logging.basicConfig(
		level=getattr(logging, _parse_log_level(level)),
		format="%(asctime)s %(levelname)s %(name)s: %(message)s",
	)
