#!/usr/bin/env python3
"""
Configuration management for mintterm.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger("mintterm.config")

DEFAULT_CONFIG = {
    "prompt": {
        "color": True,
        "default_user": "user",
        "banner": True,
    },
    "follow": {
        "poll_interval_ms": 200,
        "replay_bytes": 4096,
    },
    "runner": {
        "command_log": "",
        "shell": "",
    },
    "log": {
        "level": "WARNING",
        "format": "%(asctime)s - %(levelname)s - %(message)s",
    },
    "paths": {
        "config_dir": "~/.config/mintterm",
    },
}


@dataclass
class PromptConfig:
    color: bool = True
    default_user: str = "user"
    banner: bool = True


@dataclass
class FollowConfig:
    poll_interval_ms: int = 200
    replay_bytes: int = 4096

    @property
    def poll_interval(self) -> float:
        return self.poll_interval_ms / 1000.0


@dataclass
class RunnerConfig:
    command_log: str = ""  # empty disables the JSONL audit log
    shell: str = ""  # empty means /bin/sh (POSIX) or cmd.exe (Windows)


@dataclass
class LogConfig:
    level: str = "WARNING"
    format: str = "%(asctime)s - %(levelname)s - %(message)s"


@dataclass
class PathsConfig:
    config_dir: str = "~/.config/mintterm"


@dataclass
class Config:
    prompt: PromptConfig
    follow: FollowConfig
    runner: RunnerConfig
    log: LogConfig
    paths: PathsConfig

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Config:
        return cls(
            prompt=PromptConfig(**data.get("prompt", {})),
            follow=FollowConfig(**data.get("follow", {})),
            runner=RunnerConfig(**data.get("runner", {})),
            log=LogConfig(**data.get("log", {})),
            paths=PathsConfig(**data.get("paths", {})),
        )


class ConfigManager:
    def __init__(self, config_file: Optional[Path] = None):
        if config_file is None:
            config_dir = Path(os.path.expanduser(DEFAULT_CONFIG["paths"]["config_dir"]))
            config_file = config_dir / "config.json"
        self.config_file = Path(config_file)
        self._config: Optional[Config] = None

    @property
    def config(self) -> Config:
        if self._config is None:
            self._config = self._load_config()
        return self._config

    def _load_config(self) -> Config:
        if self.config_file.exists():
            try:
                with open(self.config_file, "r", encoding="utf-8") as f:
                    data = json.load(f)
                merged = self._deep_merge(DEFAULT_CONFIG, data)
                return Config.from_dict(merged)
            except Exception as e:
                logger.warning("Failed to load config %s: %s; using defaults", self.config_file, e)
        return Config.from_dict(DEFAULT_CONFIG)

    def _deep_merge(self, base: Dict[str, Any], update: Dict[str, Any]) -> Dict[str, Any]:
        result = base.copy()
        for key, value in update.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result


# Global singleton
_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_file: Optional[Path] = None) -> ConfigManager:
    global _config_manager
    if _config_manager is None or (
        config_file is not None and Path(config_file) != _config_manager.config_file
    ):
        _config_manager = ConfigManager(config_file)
    return _config_manager