"""Resolver Config Module

Define resolver configuration data class, JSON load logic and logging setup.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from typing import Any, Mapping

from .introspection import DEFAULT_HOOK_METHOD

logger = logging.getLogger(__name__)

MAX_CONFIG_SIZE = 1024 * 1024  # 1MB config file size limit

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass
class ResolverConfig:
    """Resolver configuration data class.

    Attributes:
        hook_method: Name of the injection hook method.
        thread_safe: Guard bindings and singleton cache with a re-entrant lock.
        log_level: Level applied by configure_logging.
        log_json: Emit JSON log lines (requires python-json-logger).
        enable_metrics: Export Prometheus metrics.
        enable_tracing: Emit an OpenTelemetry span per top-level resolve.
        service_name: Service name reported to the tracer.
    """

    hook_method: str = DEFAULT_HOOK_METHOD
    thread_safe: bool = True
    log_level: str = "INFO"
    log_json: bool = False
    enable_metrics: bool = False
    enable_tracing: bool = False
    service_name: str = "simple-container"

    def validate(self) -> None:
        """Validate and fix configuration values."""
        if not isinstance(self.hook_method, str) or not self.hook_method.isidentifier():
            logger.warning("Invalid hook_method %r, using default", self.hook_method)
            self.hook_method = DEFAULT_HOOK_METHOD

        level = str(self.log_level).upper()
        if level not in _VALID_LEVELS:
            logger.warning("Invalid log_level %r, using INFO", self.log_level)
            level = "INFO"
        self.log_level = level

        for name in ("thread_safe", "log_json", "enable_metrics", "enable_tracing"):
            value = getattr(self, name)
            if not isinstance(value, bool):
                default = ResolverConfig.__dataclass_fields__[name].default
                logger.warning("Invalid %s %r, using %s", name, value, default)
                setattr(self, name, default)

        if not isinstance(self.service_name, str) or not self.service_name:
            self.service_name = "simple-container"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ResolverConfig:
        """Build configuration from a mapping, ignoring unknown keys."""
        cfg = cls()
        for key in cls.__dataclass_fields__:
            if key in data:
                setattr(cfg, key, data[key])
        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            logger.warning("Ignoring unknown config keys: %s", ", ".join(sorted(unknown)))
        cfg.validate()
        return cfg

    @classmethod
    def load(cls, config_file: str) -> ResolverConfig:
        """Load configuration from a JSON file.

        A missing, oversized or unreadable file yields the defaults.

        Args:
            config_file: Configuration file path.

        Returns:
            Loaded configuration object.
        """
        if not os.path.exists(config_file):
            return cls()

        file_size = os.path.getsize(config_file)
        if file_size > MAX_CONFIG_SIZE:
            logger.warning(
                "Config file too large: %d bytes (max: %d), using defaults",
                file_size,
                MAX_CONFIG_SIZE,
            )
            return cls()

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("Failed to load config from %s: %s", config_file, e)
            return cls()

        if not isinstance(data, dict):
            logger.error("Config root in %s must be an object", config_file)
            return cls()
        return cls.from_dict(data)

    def save(self, config_file: str) -> None:
        """Save configuration to file."""
        with open(config_file, "w", encoding="utf-8") as f:
            json.dump(asdict(self), f, ensure_ascii=False, indent=2)


def configure_logging(config: ResolverConfig) -> None:
    """Install a root stream handler according to the configuration.

    The library never calls this implicitly; applications opt in.
    """
    level = getattr(logging, str(config.log_level).upper(), logging.INFO)
    handler = logging.StreamHandler()

    # 结构化 JSON 日志（可选依赖）
    if config.log_json:
        try:
            from pythonjsonlogger.json import JsonFormatter  # type: ignore

            handler.setFormatter(JsonFormatter("%(asctime)s %(name)s %(levelname)s %(message)s"))
            logging.basicConfig(level=level, handlers=[handler], force=True)
            return
        except ImportError:
            logger.warning("python-json-logger not available, using plain log format")

    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.basicConfig(level=level, handlers=[handler], force=True)
