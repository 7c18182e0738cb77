"""Configuration management for the motion logger."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, List, Optional

import yaml

from .events import AuthorizationStatus, ReferenceFrame

SOURCE_KINDS = ("simulated", "witmotion")


@dataclass
class LogConfig:
    """Location of the record log."""

    dir: str = "./Documents"
    file_name: str = "log.txt"


@dataclass
class MotionConfig:
    """Device-motion subscription parameters."""

    update_interval_sec: float = 1.0 / 3.0
    reference_frame: str = ReferenceFrame.X_MAGNETIC_NORTH_Z_VERTICAL.value


@dataclass
class SourceConfig:
    """Which sensor source to use, and how the simulated one behaves."""

    kind: str = "simulated"
    authorization: str = AuthorizationStatus.AUTHORIZED.value
    activity_available: bool = True
    step_counting_available: bool = True
    pedometer_event_available: bool = True
    motion_available: bool = True
    seed: Optional[int] = None


@dataclass
class WitMotionConfig:
    """Configuration for a WT901BLE IMU connection."""

    mac: str = ""
    adapter: str = "hci0"
    notify_uuid: str = "0000ffe4-0000-1000-8000-00805f9a34fb"
    reconnect_initial_sec: float = 0.5
    reconnect_max_sec: float = 10.0
    reconnect_jitter_sec: float = 0.5


@dataclass
class AppConfig:
    """Main application configuration."""

    log: LogConfig = None
    motion: MotionConfig = None
    source: SourceConfig = None
    witmotion: WitMotionConfig = None
    status_interval_sec: float = 30.0

    def __post_init__(self) -> None:
        if self.log is None:
            self.log = LogConfig()
        if self.motion is None:
            self.motion = MotionConfig()
        if self.source is None:
            self.source = SourceConfig()
        if self.witmotion is None:
            self.witmotion = WitMotionConfig()


def load_config(config_path: str) -> AppConfig:
    """Load configuration from YAML file with environment variable support."""
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with config_file.open("r", encoding="utf-8") as f:
        raw_config = yaml.safe_load(f)

    if not raw_config:
        raise ValueError(f"Empty or invalid configuration file: {config_path}")
    if not isinstance(raw_config, dict):
        raise ValueError(f"Configuration must be a mapping: {config_path}")

    _substitute_env_vars(raw_config)

    config = AppConfig()

    if "log" in raw_config:
        config.log = LogConfig(**raw_config["log"])

    if "motion" in raw_config:
        config.motion = MotionConfig(**raw_config["motion"])

    if "source" in raw_config:
        config.source = SourceConfig(**raw_config["source"])

    if "witmotion" in raw_config:
        config.witmotion = WitMotionConfig(**raw_config["witmotion"])

    if "status_interval_sec" in raw_config:
        config.status_interval_sec = float(raw_config["status_interval_sec"])

    return config


def _substitute_env_vars(data: Any) -> None:
    """Recursively replace ``${VAR}`` string values with the environment value."""
    if isinstance(data, dict):
        for key, value in data.items():
            if _is_placeholder(value):
                data[key] = os.getenv(value[2:-1], value)
            else:
                _substitute_env_vars(value)
    elif isinstance(data, list):
        for index, item in enumerate(data):
            if _is_placeholder(item):
                data[index] = os.getenv(item[2:-1], item)
            else:
                _substitute_env_vars(item)


def _is_placeholder(value: Any) -> bool:
    return isinstance(value, str) and value.startswith("${") and value.endswith("}")


def validate_config(config: AppConfig) -> List[str]:
    """Validate configuration and return list of validation errors."""
    errors = []

    for section in ("log", "motion", "source", "witmotion"):
        values = getattr(config, section)
        for field in fields(values):
            value = getattr(values, field.name)
            if _is_placeholder(value):
                errors.append(f"{section}.{field.name} references an unset environment variable: {value}")

    if not config.log.file_name:
        errors.append("log.file_name is required")
    elif Path(config.log.file_name).name != config.log.file_name:
        errors.append(f"log.file_name must be a bare file name: {config.log.file_name}")

    try:
        interval = float(config.motion.update_interval_sec)
    except (TypeError, ValueError):
        interval = 0.0
    if interval <= 0:
        errors.append("motion.update_interval_sec must be positive")

    frames = {frame.value for frame in ReferenceFrame}
    if config.motion.reference_frame not in frames:
        errors.append(f"Unknown motion.reference_frame: {config.motion.reference_frame}")

    if config.source.kind not in SOURCE_KINDS:
        errors.append(f"Unknown source.kind: {config.source.kind}")

    statuses = {status.value for status in AuthorizationStatus}
    if config.source.authorization not in statuses:
        errors.append(f"Unknown source.authorization: {config.source.authorization}")

    if config.source.kind == "witmotion" and not config.witmotion.mac:
        errors.append("witmotion.mac is required for the witmotion source")

    if config.witmotion.reconnect_initial_sec <= 0:
        errors.append("witmotion.reconnect_initial_sec must be positive")
    if config.witmotion.reconnect_max_sec < config.witmotion.reconnect_initial_sec:
        errors.append("witmotion.reconnect_max_sec must not be less than reconnect_initial_sec")

    if config.status_interval_sec <= 0:
        errors.append("status_interval_sec must be positive")

    if not _is_placeholder(config.log.dir):
        log_dir = Path(config.log.dir)
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            errors.append(f"Cannot create directory log.dir: {config.log.dir} - {e}")

    return errors
